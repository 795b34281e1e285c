# src/spatialio/raster/window.py

"""
This module defines the geometry of a transfer: the source region, the access
direction and the byte layout of the caller's buffer.

Nothing here touches the storage engine. Region validation and stride
defaulting are pure functions of their inputs.
"""

import logging
import operator
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from rasterio.windows import Window

from spatialio.exceptions import InvalidWindowError, ShapeMismatchError

log = logging.getLogger(__name__)

__all__ = [
    "AccessMode",
    "Region",
    "BufferLayout",
    "ResolvedLayout"
]

RangeLike = Union[range, Sequence[int]]

class AccessMode(Enum):
    """Direction of data flow between a Region and a buffer."""
    READ = "read"
    WRITE = "write"

def _resolve_range(value: RangeLike, axis: str) -> Tuple[int, int]:
    """
    Normalize a row/column selection to an inclusive (first, last) pair.

    Accepts a unit-step `range` (exclusive stop) or a two-item inclusive pair.
    """
    if isinstance(value, range):
        if value.step != 1:
            raise InvalidWindowError(f"{axis} range must have a step of 1, got {value.step}")
        if len(value) == 0:
            raise InvalidWindowError(f"Empty {axis} range: {value}")
        return value.start, value.stop - 1

    try:
        first, last = (int(v) for v in value)
    except (TypeError, ValueError) as e:
        raise InvalidWindowError(
            f"{axis} must be a range or an inclusive (first, last) pair, got {value!r}"
        ) from e

    if last < first:
        raise InvalidWindowError(f"Inverted {axis} range: ({first}, {last})")
    return first, last

@dataclass(frozen=True)
class Region:
    """
    A rectangle in band pixel coordinates.

    Attributes:
        x_offset: Column of the top-left pixel (0 is the left edge).
        y_offset: Row of the top-left pixel (0 is the top edge).
        x_size: Width of the region in pixels.
        y_size: Height of the region in lines.
    """
    x_offset: int
    y_offset: int
    x_size: int
    y_size: int

    @classmethod
    def full(cls, width: int, height: int) -> 'Region':
        """Region covering an entire width x height extent."""
        return cls(0, 0, width, height)

    @classmethod
    def from_ranges(cls, rows: RangeLike, cols: RangeLike) -> 'Region':
        """
        Build a region from row and column selections.

        Args:
            rows: Either a `range` of line indices or an inclusive (first, last) pair.
            cols: Either a `range` of pixel indices or an inclusive (first, last) pair.

        Raises:
            InvalidWindowError: If either selection is empty or inverted.
        """
        row_first, row_last = _resolve_range(rows, "rows")
        col_first, col_last = _resolve_range(cols, "cols")
        return cls(
            x_offset=col_first,
            y_offset=row_first,
            x_size=col_last - col_first + 1,
            y_size=row_last - row_first + 1
        )

    @classmethod
    def from_window(cls, window: Window) -> 'Region':
        """Convert a rasterio Window, rounding fractional offsets and lengths."""
        window = window.round_offsets().round_lengths()
        return cls(int(window.col_off), int(window.row_off), int(window.width), int(window.height))

    @property
    def shape(self) -> Tuple[int, int]:
        """Returns (y_size, x_size), the NumPy shape of the region."""
        return self.y_size, self.x_size

    def to_window(self) -> Window:
        return Window(self.x_offset, self.y_offset, self.x_size, self.y_size)

    def validate(self, width: int, height: int) -> 'Region':
        """
        Check the region against a width x height extent.

        Returns:
            Region: self, so calls can be chained.

        Raises:
            InvalidWindowError: If the region has non-integer fields, is empty or
                reaches outside the extent.
        """
        try:
            for value in (self.x_offset, self.y_offset, self.x_size, self.y_size):
                operator.index(value)
        except TypeError as e:
            raise InvalidWindowError(f"Region fields must be integers, got {self!r}") from e

        if self.x_size < 1 or self.y_size < 1:
            raise InvalidWindowError(f"Empty region {self}: sizes must be >= 1")

        if self.x_offset < 0 or self.y_offset < 0:
            raise InvalidWindowError(f"Negative offset in region {self}")

        if self.x_offset + self.x_size > width or self.y_offset + self.y_size > height:
            raise InvalidWindowError(
                f"Region {self} exceeds raster extent ({width}x{height})"
            )
        return self

    def __str__(self) -> str:
        return f"({self.x_offset}, {self.y_offset}, {self.x_size}x{self.y_size})"

@dataclass(frozen=True)
class ResolvedLayout:
    """Byte strides of a buffer after defaults have been applied."""
    pixel_space: int
    line_space: int
    band_space: int

    def extent(self, buffer_shape: Tuple[int, int], planes: int, itemsize: int) -> int:
        """Number of bytes spanned from the first to the last word addressed."""
        buf_width, buf_height = buffer_shape
        return (
            (planes - 1) * self.band_space
            + (buf_height - 1) * self.line_space
            + (buf_width - 1) * self.pixel_space
            + itemsize
        )

@dataclass(frozen=True)
class BufferLayout:
    """
    Byte layout of a caller buffer.

    Unset spacings (None or 0) take their defaults:
        pixel_space = itemsize
        line_space  = pixel_space * buffer width
        band_space  = line_space * buffer height

    With every field at its default the buffer is used through its own NumPy
    strides. Setting any spacing or a non-zero offset addresses the buffer as
    raw memory, which lets several bands share one interleaved array.

    Attributes:
        pixel_space: Bytes between consecutive pixels of a line.
        line_space: Bytes between consecutive lines.
        band_space: Bytes between consecutive band planes.
        offset: Byte offset of the first word inside the buffer.
    """
    pixel_space: Optional[int] = None
    line_space: Optional[int] = None
    band_space: Optional[int] = None
    offset: int = 0

    @property
    def is_default(self) -> bool:
        return not (self.pixel_space or self.line_space or self.band_space or self.offset)

    def resolve(self, itemsize: int, buffer_shape: Tuple[int, int]) -> ResolvedLayout:
        """Apply the stride defaults for a buffer of `itemsize` words."""
        for name in ("pixel_space", "line_space", "band_space", "offset"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ShapeMismatchError(f"{name} must not be negative, got {value}")

        buf_width, buf_height = buffer_shape
        pixel_space = self.pixel_space or itemsize
        line_space = self.line_space or pixel_space * buf_width
        band_space = self.band_space or line_space * buf_height
        return ResolvedLayout(pixel_space, line_space, band_space)

    def view(self, buffer: np.ndarray, buffer_shape: Tuple[int, int], planes: int) -> np.ndarray:
        """
        Expose the buffer as a (planes, height, width) array sharing its memory.

        Args:
            buffer: Caller-owned array.
            buffer_shape: (width, height) of each buffer plane.
            planes: Number of band planes addressed by the transfer.

        Raises:
            ShapeMismatchError: If the plane count disagrees with the buffer, or the
                strides would address memory beyond the buffer's capacity.
        """
        buf_width, buf_height = buffer_shape

        if self.is_default and buffer.shape[-2:] == (buf_height, buf_width):
            if buffer.ndim == 2 and planes == 1:
                return buffer[np.newaxis, :, :]
            if buffer.ndim == 3:
                if buffer.shape[0] != planes:
                    raise ShapeMismatchError(
                        f"Buffer holds {buffer.shape[0]} planes but {planes} bands were selected"
                    )
                return buffer
            if buffer.ndim == 2:
                raise ShapeMismatchError(
                    f"2D buffer cannot hold {planes} bands; pass a (bands, height, width) array"
                )

        strides = self.resolve(buffer.dtype.itemsize, buffer_shape)
        required = self.offset + strides.extent(buffer_shape, planes, buffer.dtype.itemsize)

        if required > buffer.nbytes:
            raise ShapeMismatchError(
                f"Buffer of {buffer.nbytes} bytes is too small: layout {strides} "
                f"for {planes}x{buf_height}x{buf_width} words needs {required} bytes"
            )

        if not buffer.flags.c_contiguous:
            raise ShapeMismatchError("Explicit buffer spacing requires a C-contiguous buffer")

        log.debug(f"Strided buffer view: offset={self.offset} strides={strides}")

        return np.ndarray(
            shape=(planes, buf_height, buf_width),
            dtype=buffer.dtype,
            buffer=buffer,
            offset=self.offset,
            strides=(strides.band_space, strides.line_space, strides.pixel_space)
        )
