# src/spatialio/raster/resources.py

"""
This module performs static analysis on raster bands and system hardware.

It checks two key aspects:
- Memory safety of default-allocated buffers (Memory Estimation)
- Internal block/tile structure of a band (Block Structure Analysis)
"""

import logging
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
import psutil

log = logging.getLogger(__name__)

__all__ = [
    "BlockStructure",
    "MemoryEstimate",
    "analyze_structure",
    "estimate_memory",
    "check_allocation"
]

DEFAULT_SAFETY_FACTOR = 1.5
MIN_FREE_GB = 0.5

@dataclass(frozen=True)
class BlockStructure:
    """
    Analysis of a band's internal storage layout.

    Args:
        is_tiled: True if the band has native tiles (not full-width strips)
        is_striped: True if the band is structured as strips (full-width blocks)
        block_shape: Tuple of (block_height, block_width) in pixels
    """
    is_tiled: bool
    is_striped: bool
    block_shape: Tuple[int, int]

@dataclass(frozen=True)
class MemoryEstimate:
    """
    Estimation of memory requirements and safety for allocating a buffer.

    Args:
        total_required_bytes: Bytes required by the buffer (with overhead)
        available_system_bytes: Currently available system memory in bytes
        is_safe: Boolean indicating if the allocation is considered safe
        reason: Explanation for the safety assessment
    """
    total_required_bytes: int
    available_system_bytes: int
    is_safe: bool
    reason: str

def analyze_structure(width: int, block_size: Tuple[int, int]) -> BlockStructure:
    """
    Determines if a band is physically tiled or striped.

    Args:
        width: Band width in pixels.
        block_size: Native (block_width, block_height) of the band.

    Returns:
        BlockStructure: Contains flags for tiled/striped and block shape.
    """
    block_w, block_h = block_size

    # Striped when blocks span the full width or are single scanlines
    is_striped = (block_w == width) or (block_h == 1)

    return BlockStructure(
        is_tiled=not is_striped,
        is_striped=is_striped,
        block_shape=(block_h, block_w)
    )

def estimate_memory(
    shape: Tuple[int, ...],
    dtype: Union[str, np.dtype],
    safety_factor: float = DEFAULT_SAFETY_FACTOR,
    min_free_gb: float = MIN_FREE_GB
) -> MemoryEstimate:
    """
    Checks if a buffer of `shape` and `dtype` fits in RAM safely.

    Args:
        shape: Buffer shape in words.
        dtype: Buffer element type.
        safety_factor: Multiplier to account for transient copies made while
            converting or resampling.
        min_free_gb: Minimum free GB to leave available after allocating.

    Returns:
        MemoryEstimate: Contains required bytes, available bytes, safety boolean, and reason.
    """
    raw_bytes = int(np.prod(shape, dtype=np.int64)) * np.dtype(dtype).itemsize
    total_required = int(raw_bytes * safety_factor)

    mem = psutil.virtual_memory()
    min_free_bytes = int(min_free_gb * (1024**3))
    is_safe = (total_required + min_free_bytes) <= mem.available

    reason = f"Req: {total_required/1e9:.2f}GB, Avail: {mem.available/1e9:.2f}GB"

    return MemoryEstimate(total_required, mem.available, is_safe, reason)

def check_allocation(shape: Tuple[int, ...], dtype: Union[str, np.dtype]) -> MemoryEstimate:
    """
    Raise MemoryError when a full-extent buffer would not fit in RAM.

    Raises:
        MemoryError: If estimate_memory() reports the allocation as unsafe.
    """
    estimate = estimate_memory(shape, dtype)

    if not estimate.is_safe:
        log.error(f"Refusing to allocate buffer {shape} {np.dtype(dtype)}: {estimate.reason}")
        raise MemoryError(
            f"Buffer {shape} of {np.dtype(dtype)} does not fit in memory ({estimate.reason})\n"
            "Tip: fetch a region, or iterate over blocks with iter_blocks()"
        )

    log.debug(f"Memory check passed for buffer {shape}: {estimate.reason}")
    return estimate
