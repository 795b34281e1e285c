# src/spatialio/raster/io.py

"""
This module provides the fetch/update family built on windowed RasterIO, and a
context manager that opens a raster file as a Dataset handle.

Every function here is a fixed-parameter specialization of raster_io() or
dataset_raster_io(). The only behaviour added is region derivation and, for
fetch(), default buffer allocation.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import rasterio
from rasterio.errors import RasterioIOError

from spatialio.config import RasterIOOptions
from spatialio.exceptions import InvalidWindowError, RasterIOError, ShapeMismatchError
from .engine import dataset_raster_io, raster_io
from .layer import Dataset, RasterBand, require_band, require_dataset
from .resources import check_allocation
from .window import AccessMode, BufferLayout, RangeLike, Region

log = logging.getLogger(__name__)

__all__ = [
    "open_raster",
    "fetch",
    "fetch_into",
    "update"
]

Source = Union[RasterBand, Dataset]
BandSelection = Optional[Union[int, Sequence[int]]]

@contextmanager
def open_raster(
    path: Union[str, Path],
    mode: str = "r",
    driver: Optional[str] = None,
    **profile
) -> Iterator[Dataset]:
    """
    Open a raster file and yield a Dataset handle over it.

    The file is closed when the context exits; the Dataset and its bands must
    not be used afterwards.

    Args:
        path: Path to raster file. All supported GDAL formats are accepted.
        mode: 'r' (read), 'r+' (update) or 'w' (create).
        driver: Optional GDAL driver name. Files created with mode 'w' default to GTiff.
        **profile: Creation options for mode 'w' (width, height, count, dtype, ...).

    Raises:
        FileNotFoundError: If reading a file that does not exist.
        RasterIOError: If the file cannot be opened.
    """
    path = Path(path)

    if mode in ("r", "r+") and not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    if mode == "w":
        path.parent.mkdir(parents=True, exist_ok=True)
        driver = driver or "GTiff"

    log.debug(f"Opening raster {path.name} (mode={mode})")

    try:
        src = rasterio.open(path, mode, driver=driver, **profile)
    except RasterioIOError as e:
        raise RasterIOError(f"Failed to open raster {path}: {e}", operation="open") from e

    with src:
        yield Dataset(src)

def _resolve_region(
    region: Optional[Region],
    rows: Optional[RangeLike],
    cols: Optional[RangeLike],
    width: int,
    height: int
) -> Optional[Region]:
    """Derive the transfer region from either a Region or row/column ranges."""
    if region is not None:
        if rows is not None or cols is not None:
            raise InvalidWindowError("Pass either 'region' or 'rows'/'cols', not both")
        return region

    if rows is None and cols is None:
        return None

    return Region.from_ranges(
        rows if rows is not None else range(height),
        cols if cols is not None else range(width)
    )

def _resolve_target(source: Source, bands: BandSelection) -> Tuple[Optional[RasterBand], Optional[Dataset], List[int]]:
    """
    Decide whether a call is band-level (2D buffer) or dataset-level (3D buffer).

    Returns:
        (band, dataset, indices): exactly one of band/dataset is set.
    """
    if isinstance(source, RasterBand):
        if bands is not None:
            raise ShapeMismatchError("'bands' cannot be combined with a RasterBand source")
        return require_band(source), None, [source.index]

    dataset = require_dataset(source)

    if bands is None:
        return None, dataset, list(range(1, dataset.count + 1))

    if isinstance(bands, (int, np.integer)):
        return dataset.band(int(bands)), None, [int(bands)]

    indices = [int(b) for b in bands]
    if not indices:
        raise ShapeMismatchError("Band selection is empty")
    return None, dataset, indices

def _dispatch(
    band: Optional[RasterBand],
    dataset: Optional[Dataset],
    indices: List[int],
    buffer: np.ndarray,
    region: Optional[Region],
    access: AccessMode,
    layout: Optional[BufferLayout],
    buffer_shape: Optional[Tuple[int, int]],
    options: Optional[RasterIOOptions]
) -> np.ndarray:
    if band is not None:
        return raster_io(band, buffer, region, access, layout, buffer_shape, options)

    if buffer.ndim == 2 and layout is None and buffer_shape is None and len(indices) == 1:
        # a single selected band may use a 2D buffer
        return raster_io(dataset.band(indices[0]), buffer, region, access, None, None, options)

    return dataset_raster_io(dataset, buffer, indices, region, access, layout, buffer_shape, options)

def fetch(
    source: Source,
    bands: BandSelection = None,
    region: Optional[Region] = None,
    rows: Optional[RangeLike] = None,
    cols: Optional[RangeLike] = None,
    buffer_shape: Optional[Tuple[int, int]] = None,
    dtype: Optional[Union[str, np.dtype]] = None,
    options: Optional[RasterIOOptions] = None
) -> np.ndarray:
    """
    Read pixels into a newly allocated buffer.

    The buffer takes the native pixel type of the first selected band and the
    extent of the region, so no resampling or conversion happens unless
    `buffer_shape` or `dtype` ask for it.

    Args:
        source: A RasterBand, or a Dataset.
        bands: For a Dataset source: None for every band (3D result), an int
            for one band (2D result), or a sequence of indices (3D result,
            repeats allowed).
        region: Region to read. Defaults to the full extent.
        rows: Alternative to `region`: line selection as a range or an inclusive pair.
        cols: Alternative to `region`: pixel selection as a range or an inclusive pair.
        buffer_shape: Optional (width, height) of the result, resampling the region.
        dtype: Optional result dtype, converting from the native type.
        options: Resampling kernel and progress callback.

    Returns:
        np.ndarray: (height, width) for a single band, (bands, height, width) otherwise.

    Raises:
        MemoryError: If a full-extent buffer would not fit in available memory.
    """
    band, dataset, indices = _resolve_target(source, bands)
    handle = band if band is not None else dataset

    resolved = _resolve_region(region, rows, cols, handle.width, handle.height)
    extent = resolved or Region.full(handle.width, handle.height)

    if buffer_shape is None:
        buf_width, buf_height = extent.x_size, extent.y_size
    else:
        buf_width, buf_height = buffer_shape

    if dtype is None:
        first = band if band is not None else dataset.band(indices[0])
        dtype = first.dtype

    shape = (buf_height, buf_width) if band is not None else (len(indices), buf_height, buf_width)

    if resolved is None:
        # only full-extent reads are guarded
        check_allocation(shape, dtype)

    log.debug(f"Fetching {shape} {np.dtype(dtype)} from {handle!r} at {extent}")

    buffer = np.empty(shape, dtype=dtype)
    return _dispatch(band, dataset, indices, buffer, resolved, AccessMode.READ, None, None, options)

def fetch_into(
    source: Source,
    buffer: np.ndarray,
    bands: BandSelection = None,
    region: Optional[Region] = None,
    rows: Optional[RangeLike] = None,
    cols: Optional[RangeLike] = None,
    layout: Optional[BufferLayout] = None,
    buffer_shape: Optional[Tuple[int, int]] = None,
    options: Optional[RasterIOOptions] = None
) -> np.ndarray:
    """
    Read pixels into a caller-supplied buffer.

    Same band selection and region rules as fetch(); the buffer's own shape and
    dtype drive resampling and conversion.

    Returns:
        np.ndarray: The caller's buffer.
    """
    band, dataset, indices = _resolve_target(source, bands)
    handle = band if band is not None else dataset
    resolved = _resolve_region(region, rows, cols, handle.width, handle.height)
    return _dispatch(band, dataset, indices, buffer, resolved, AccessMode.READ, layout, buffer_shape, options)

def update(
    source: Source,
    buffer: np.ndarray,
    bands: BandSelection = None,
    region: Optional[Region] = None,
    rows: Optional[RangeLike] = None,
    cols: Optional[RangeLike] = None,
    layout: Optional[BufferLayout] = None,
    buffer_shape: Optional[Tuple[int, int]] = None,
    options: Optional[RasterIOOptions] = None
):
    """
    Write pixels from a caller-supplied buffer.

    Same band selection and region rules as fetch(). The buffer is converted to
    each band's native type and replicated or decimated onto the region when
    its shape differs.

    Args:
        source: A RasterBand, or a Dataset opened for writing.
        buffer: (height, width) for one band, (bands, height, width) for several.
        bands: Target band(s), as in fetch().
        region: Region to write. Defaults to the full extent.
        rows: Alternative to `region`: line selection as a range or an inclusive pair.
        cols: Alternative to `region`: pixel selection as a range or an inclusive pair.
        layout: Optional byte strides of the buffer.
        buffer_shape: Optional (width, height) of the buffer image.
        options: Progress callback.
    """
    band, dataset, indices = _resolve_target(source, bands)
    handle = band if band is not None else dataset
    resolved = _resolve_region(region, rows, cols, handle.width, handle.height)
    _dispatch(band, dataset, indices, buffer, resolved, AccessMode.WRITE, layout, buffer_shape, options)
