# src/spatialio/raster/dtypes.py

"""
This module maps native pixel type tags to NumPy dtypes and performs the
element-type conversion applied by windowed transfers.

The storage engine reports pixel types as strings ('uint8', 'float32', ...).
They are translated to a NumPy dtype once, at the API boundary; every transfer
below that point is a single dtype-generic NumPy code path.
"""

import logging
from enum import Enum
from typing import Union

import numpy as np

log = logging.getLogger(__name__)

__all__ = [
    "PixelType",
    "coerce"
]

DTypeLike = Union[str, np.dtype, type]

class PixelType(Enum):
    """
    Native pixel types a raster band may carry.

    Values follow the rasterio/NumPy dtype names.
    """
    UINT8 = "uint8"
    INT8 = "int8"
    UINT16 = "uint16"
    INT16 = "int16"
    UINT32 = "uint32"
    INT32 = "int32"
    UINT64 = "uint64"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"

    @property
    def dtype(self) -> np.dtype:
        return _DTYPE_TABLE[self]

    @property
    def itemsize(self) -> int:
        return self.dtype.itemsize

    @classmethod
    def from_dtype(cls, dtype: DTypeLike) -> 'PixelType':
        """
        Look up the PixelType for a dtype or dtype name.

        Raises:
            ValueError: If the dtype is not a supported pixel type.
        """
        try:
            return _TYPE_LOOKUP[np.dtype(dtype)]
        except (KeyError, TypeError) as e:
            valid = [t.value for t in cls]
            raise ValueError(f"Unsupported pixel type '{dtype}'. Must be one of: {valid}") from e

_DTYPE_TABLE = {pixel_type: np.dtype(pixel_type.value) for pixel_type in PixelType}
_TYPE_LOOKUP = {dtype: pixel_type for pixel_type, dtype in _DTYPE_TABLE.items()}

def coerce(data: np.ndarray, dtype: DTypeLike) -> np.ndarray:
    """
    Convert pixel words to `dtype`.

    Conversion follows NumPy's unsafe casting: floats are truncated toward zero,
    integers wrap on overflow and complex values lose their imaginary part when
    the target is real. No range validation is performed.

    Returns the input unchanged when it already has the target dtype.
    """
    dtype = np.dtype(dtype)
    if data.dtype == dtype:
        return data

    if np.iscomplexobj(data) and dtype.kind != "c":
        data = data.real

    with np.errstate(invalid="ignore", over="ignore"):
        return data.astype(dtype, casting="unsafe", copy=False)
