# src/spatialio/raster/layer.py

"""
This module defines the handles the access engine operates on.

A Dataset wraps an open rasterio dataset without owning it: the caller opens
and closes the underlying file, and must keep it open for the duration of
every call issued against the Dataset or its bands. Each access re-checks that
the underlying dataset is still open.
"""

import logging
from typing import Any, List, Tuple

import numpy as np

from spatialio.exceptions import InvalidBandError, InvalidDatasetError
from .dtypes import PixelType
from .resources import BlockStructure, analyze_structure

log = logging.getLogger(__name__)

__all__ = [
    "Dataset",
    "RasterBand",
    "require_band",
    "require_dataset"
]

class Dataset:
    """
    Non-owning handle over an open multi-band raster.

    Attributes:
        source: The underlying rasterio dataset (DatasetReader or DatasetWriter).
    """

    def __init__(self, source: Any):
        """
        Args:
            source: An open rasterio dataset.

        Raises:
            InvalidDatasetError: If `source` is None or does not look like a raster dataset.
        """
        if source is None:
            raise InvalidDatasetError("Cannot build a Dataset from None")

        for attr in ("width", "height", "count", "dtypes", "block_shapes", "closed"):
            if not hasattr(source, attr):
                raise InvalidDatasetError(
                    f"Expected an open rasterio dataset, got {type(source).__name__} (missing '{attr}')"
                )
        self._source = source

    @property
    def closed(self) -> bool:
        return bool(self._source.closed)

    @property
    def source(self) -> Any:
        """The live rasterio dataset; raises if it has been closed."""
        if self.closed:
            raise InvalidDatasetError(f"Dataset {self.name} has been closed")
        return self._source

    @property
    def name(self) -> str:
        return str(getattr(self._source, "name", "<dataset>"))

    @property
    def mode(self) -> str:
        return getattr(self.source, "mode", "r")

    @property
    def writable(self) -> bool:
        return self.mode != "r"

    @property
    def width(self) -> int:
        return self.source.width

    @property
    def height(self) -> int:
        return self.source.height

    @property
    def count(self) -> int:
        return self.source.count

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Returns (Bands, Height, Width)."""
        return self.count, self.height, self.width

    def band(self, index: int) -> 'RasterBand':
        """
        Retrieve a band by 1-based index.

        Raises:
            InvalidBandError: If the index is outside 1..count.
        """
        return RasterBand(self, index)

    def bands(self) -> List['RasterBand']:
        return [RasterBand(self, i) for i in range(1, self.count + 1)]

    def __repr__(self) -> str:
        if self.closed:
            return f"<Dataset {self.name} (closed)>"
        return f"<Dataset {self.name} shape={self.shape} mode={self.mode}>"

class RasterBand:
    """
    One channel of pixel data within a Dataset.

    Attributes:
        dataset: The owning Dataset handle.
        index: 1-based band index within the dataset.
    """

    def __init__(self, dataset: Dataset, index: int):
        if not isinstance(dataset, Dataset):
            raise InvalidBandError(f"RasterBand requires a Dataset, got {type(dataset).__name__}")

        count = dataset.count
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise InvalidBandError(f"Band index must be an integer, got {index!r}")
        if not (1 <= index <= count):
            raise InvalidBandError(f"Band index {index} out of range (1-{count}) for {dataset.name}")

        self.dataset = dataset
        self.index = int(index)

    @property
    def source(self) -> Any:
        if self.dataset.closed:
            raise InvalidBandError(f"Band {self.index} belongs to a closed dataset ({self.dataset.name})")
        return self.dataset.source

    @property
    def width(self) -> int:
        return self.source.width

    @property
    def height(self) -> int:
        return self.source.height

    @property
    def pixel_type(self) -> PixelType:
        return PixelType.from_dtype(self.source.dtypes[self.index - 1])

    @property
    def dtype(self) -> np.dtype:
        """Native pixel type as a NumPy dtype."""
        return self.pixel_type.dtype

    @property
    def block_size(self) -> Tuple[int, int]:
        """Native (block_width, block_height)."""
        block_h, block_w = self.source.block_shapes[self.index - 1]
        return int(block_w), int(block_h)

    @property
    def structure(self) -> BlockStructure:
        return analyze_structure(self.width, self.block_size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterBand):
            return NotImplemented
        return self.dataset is other.dataset and self.index == other.index

    def __hash__(self) -> int:
        return hash((id(self.dataset), self.index))

    def __repr__(self) -> str:
        if self.dataset.closed:
            return f"<RasterBand {self.index} of {self.dataset.name} (closed)>"
        return (f"<RasterBand {self.index} {self.width}x{self.height} "
                f"dtype={self.dtype} block={self.block_size}>")

def require_band(band: Any) -> RasterBand:
    """
    Validate a band handle supplied by a caller.

    Raises:
        InvalidBandError: If the handle is None, not a RasterBand, or its dataset is closed.
    """
    if band is None:
        raise InvalidBandError("Can't access an invalid (None) raster band")
    if not isinstance(band, RasterBand):
        raise InvalidBandError(f"Expected a RasterBand, got {type(band).__name__}")
    if band.dataset.closed:
        raise InvalidBandError(f"Band {band.index} belongs to a closed dataset ({band.dataset.name})")
    return band

def require_dataset(dataset: Any) -> Dataset:
    """
    Validate a dataset handle supplied by a caller.

    Raises:
        InvalidDatasetError: If the handle is None, not a Dataset, or closed.
    """
    if dataset is None:
        raise InvalidDatasetError("Can't access an invalid (None) dataset")
    if not isinstance(dataset, Dataset):
        raise InvalidDatasetError(f"Expected a Dataset, got {type(dataset).__name__}")
    if dataset.closed:
        raise InvalidDatasetError(f"Dataset {dataset.name} has been closed")
    return dataset
