# src/spatialio/raster/resampling.py

"""
This module defines the resampling kernels available to windowed transfers.

Read-side interpolation is delegated to the storage engine (GDAL through
rasterio). Write-side replication and decimation scatter the buffer onto the
destination region with nearest-neighbour index mapping, which is what GDAL
itself applies on write.
"""

import logging
from enum import Enum
from typing import Tuple, Union

import numpy as np
from rasterio.enums import Resampling

log = logging.getLogger(__name__)

__all__ = [
    "ResamplingKernel",
    "nearest_indices",
    "scatter_nearest"
]

class ResamplingKernel(Enum):
    """
    Kernels used when the buffer shape differs from the region shape.

    Options:
        NEAREST: Nearest neighbour (default).
        BILINEAR: Bilinear interpolation.
        CUBIC: Cubic convolution.
        CUBIC_SPLINE: Cubic B-spline.
        LANCZOS: Lanczos windowed sinc.
        AVERAGE: Average of contributing pixels.
        MODE: Most frequent contributing value.
    """
    NEAREST = "nearest"
    BILINEAR = "bilinear"
    CUBIC = "cubic"
    CUBIC_SPLINE = "cubic_spline"
    LANCZOS = "lanczos"
    AVERAGE = "average"
    MODE = "mode"

    @property
    def rasterio(self) -> Resampling:
        """Matching rasterio Resampling member."""
        return Resampling[self.value]

    @classmethod
    def parse(cls, value: Union['ResamplingKernel', str]) -> 'ResamplingKernel':
        """
        Accept a kernel, its name, or the GDAL spelling ('CUBICSPLINE').

        Raises:
            ValueError: If the name does not match a kernel.
        """
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower().replace("-", "_")
        if key == "cubicspline":
            key = "cubic_spline"

        try:
            return cls(key)
        except ValueError:
            valid = [k.value for k in cls]
            raise ValueError(f"Invalid resampling kernel '{value}'. Must be one of: {valid}")

def nearest_indices(source_length: int, target_length: int) -> np.ndarray:
    """
    For each of `target_length` cells, the index of the nearest of `source_length` cells.

    Cell centres are matched, so decimating 4 -> 2 picks cells 1 and 3, and
    replicating 2 -> 4 yields [0, 0, 1, 1].
    """
    centres = (np.arange(target_length) + 0.5) * (source_length / target_length)
    return np.minimum(centres.astype(np.intp), source_length - 1)

def scatter_nearest(data: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
    """
    Resample the last two axes of `data` to `shape` with nearest-neighbour mapping.

    Args:
        data: Array of shape (..., height, width).
        shape: Target (height, width).

    Returns:
        np.ndarray: New array of shape (..., shape[0], shape[1]).
    """
    height, width = data.shape[-2:]
    if (height, width) == tuple(shape):
        return data

    rows = nearest_indices(height, shape[0])
    cols = nearest_indices(width, shape[1])
    return data[..., rows[:, np.newaxis], cols[np.newaxis, :]]
