# src/spatialio/raster/blocks.py

"""
This module provides natural block I/O, the zero-resampling, zero-conversion
fast path that moves one native tile of a band at a time.

Blocks are addressed by zero-based (block_x, block_y) indices into the band's
block grid. Edge blocks are always exchanged at their full nominal size: the
cells that fall outside the raster are padding and are neither read nor written.
"""

import logging
import math
import operator
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from spatialio.exceptions import InvalidBlockIndexError, RasterIOError, ShapeMismatchError
from .layer import RasterBand, require_band
from .window import Region

log = logging.getLogger(__name__)

__all__ = [
    "BlockGrid",
    "read_block",
    "write_block",
    "iter_blocks",
    "is_block_aligned"
]

@dataclass(frozen=True)
class BlockGrid:
    """
    The tiling of a band into native blocks.

    Args:
        width: Band width in pixels.
        height: Band height in lines.
        block_width: Native block width.
        block_height: Native block height.
    """
    width: int
    height: int
    block_width: int
    block_height: int

    @classmethod
    def of(cls, band: RasterBand) -> 'BlockGrid':
        block_w, block_h = band.block_size
        return cls(band.width, band.height, block_w, block_h)

    @property
    def columns(self) -> int:
        return math.ceil(self.width / self.block_width)

    @property
    def rows(self) -> int:
        return math.ceil(self.height / self.block_height)

    @property
    def shape(self) -> Tuple[int, int]:
        """Returns (rows, columns) of the grid."""
        return self.rows, self.columns

    @property
    def block_shape(self) -> Tuple[int, int]:
        """Returns (block_height, block_width), the NumPy shape of one block."""
        return self.block_height, self.block_width

    def check(self, block_x: int, block_y: int) -> Tuple[int, int]:
        """
        Validate block coordinates.

        Raises:
            InvalidBlockIndexError: If the coordinates fall outside the grid.
        """
        try:
            block_x, block_y = operator.index(block_x), operator.index(block_y)
        except TypeError as e:
            raise InvalidBlockIndexError(f"Block indices must be integers, got ({block_x!r}, {block_y!r})") from e

        if not (0 <= block_x < self.columns and 0 <= block_y < self.rows):
            raise InvalidBlockIndexError(
                f"Block ({block_x}, {block_y}) outside the {self.columns}x{self.rows} block grid"
            )
        return block_x, block_y

    def region(self, block_x: int, block_y: int) -> Region:
        """The in-raster part of a block (smaller than nominal at the right/bottom edge)."""
        block_x, block_y = self.check(block_x, block_y)
        x_off = block_x * self.block_width
        y_off = block_y * self.block_height
        return Region(
            x_offset=x_off,
            y_offset=y_off,
            x_size=min(self.block_width, self.width - x_off),
            y_size=min(self.block_height, self.height - y_off)
        )

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        """Yields (block_x, block_y) in row-major order."""
        for block_y in range(self.rows):
            for block_x in range(self.columns):
                yield block_x, block_y

    def __len__(self) -> int:
        return self.rows * self.columns

def _check_block_buffer(buffer: np.ndarray, grid: BlockGrid, dtype: np.dtype):
    if not isinstance(buffer, np.ndarray):
        raise ShapeMismatchError(f"Block buffer must be a numpy.ndarray, got {type(buffer).__name__}")
    if buffer.shape != grid.block_shape:
        raise ShapeMismatchError(
            f"Block buffer shape {buffer.shape} does not match block shape {grid.block_shape}"
        )
    if buffer.dtype != dtype:
        raise ShapeMismatchError(
            f"Block buffer dtype {buffer.dtype} does not match native type {dtype}; "
            "use raster_io() for converted access"
        )

def read_block(
    band: RasterBand,
    block_x: int,
    block_y: int,
    buffer: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Read a block of image data efficiently.

    Accesses a natural block of the band without resampling or data type
    conversion. For generalized access use raster_io().

    Args:
        band: The band to read.
        block_x: Horizontal block index (0 is the leftmost block).
        block_y: Vertical block index (0 is the topmost block).
        buffer: Optional (block_height, block_width) array of the band's native
            dtype. A zero-filled one is allocated when omitted.

    Returns:
        np.ndarray: The block buffer. Cells beyond the raster edge are padding.

    Raises:
        InvalidBlockIndexError: If the block is outside the grid.
        ShapeMismatchError: If the buffer has the wrong shape or dtype.
        RasterIOError: If the storage engine fails.
    """
    band = require_band(band)
    grid = BlockGrid.of(band)
    region = grid.region(block_x, block_y)

    if buffer is None:
        buffer = np.zeros(grid.block_shape, dtype=band.dtype)
    else:
        _check_block_buffer(buffer, grid, band.dtype)

    log.debug(f"ReadBlock ({block_x}, {block_y}) of band {band.index}: {region}")

    try:
        data = band.source.read(band.index, window=region.to_window())
    except Exception as e:
        raise RasterIOError(
            f"Failed to read block at ({block_x}, {block_y}) of band {band.index}: {e}",
            operation="ReadBlock",
            band=band.index,
            location=(block_x, block_y)
        ) from e

    buffer[:region.y_size, :region.x_size] = data
    return buffer

def write_block(band: RasterBand, block_x: int, block_y: int, buffer: np.ndarray):
    """
    Write a block of image data efficiently.

    Accesses a natural block of the band without resampling or data type
    conversion. Only the in-raster part of an edge block is written.

    Args:
        band: The band to write.
        block_x: Horizontal block index (0 is the leftmost block).
        block_y: Vertical block index (0 is the topmost block).
        buffer: (block_height, block_width) array of the band's native dtype.

    Raises:
        InvalidBlockIndexError: If the block is outside the grid.
        ShapeMismatchError: If the buffer has the wrong shape or dtype.
        RasterIOError: If the storage engine fails or the dataset is read-only.
    """
    band = require_band(band)
    grid = BlockGrid.of(band)
    region = grid.region(block_x, block_y)
    _check_block_buffer(buffer, grid, band.dtype)

    if not band.dataset.writable:
        raise RasterIOError(
            f"Failed to write block at ({block_x}, {block_y}): {band.dataset.name} is opened read-only",
            operation="WriteBlock",
            band=band.index,
            location=(block_x, block_y)
        )

    log.debug(f"WriteBlock ({block_x}, {block_y}) of band {band.index}: {region}")

    data = np.ascontiguousarray(buffer[:region.y_size, :region.x_size])
    try:
        band.source.write(data, band.index, window=region.to_window())
    except Exception as e:
        raise RasterIOError(
            f"Failed to write block at ({block_x}, {block_y}) of band {band.index}: {e}",
            operation="WriteBlock",
            band=band.index,
            location=(block_x, block_y)
        ) from e

def iter_blocks(band: RasterBand) -> Iterator[Tuple[Tuple[int, int], Region]]:
    """
    Generator over the band's block grid.

    Yields:
        ((block_x, block_y), Region): Block indices and the in-raster region they cover.
    """
    grid = BlockGrid.of(require_band(band))
    log.debug(f"Iterating {len(grid)} blocks of band {band.index} ({grid.columns}x{grid.rows})")
    for block_x, block_y in grid:
        yield (block_x, block_y), grid.region(block_x, block_y)

def is_block_aligned(band: RasterBand, region: Region) -> bool:
    """
    True if `region` starts on a block boundary and ends on one (or on the raster edge).

    Aligned regions read without resampling take the fastest RasterIO path.
    """
    grid = BlockGrid.of(require_band(band))
    region.validate(grid.width, grid.height)

    right = region.x_offset + region.x_size
    bottom = region.y_offset + region.y_size

    return (
        region.x_offset % grid.block_width == 0
        and region.y_offset % grid.block_height == 0
        and (right % grid.block_width == 0 or right == grid.width)
        and (bottom % grid.block_height == 0 or bottom == grid.height)
    )
