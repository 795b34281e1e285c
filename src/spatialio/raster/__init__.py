# src/spatialio/raster/__init__.py
#
# Copyright (c) The spatialio project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
The raster subpackage provides the raster access engine: windowed RasterIO for
single bands and whole datasets, natural block I/O, the fetch/update
conveniences, pixel type conversion and resampling.
"""
# Core handles
from .layer import (
    Dataset,
    RasterBand
)

# Transfer geometry
from .window import (
    AccessMode,
    Region,
    BufferLayout,
    ResolvedLayout
)

# Pixel types and resampling
from .dtypes import (
    PixelType,
    coerce
)

from .resampling import (
    ResamplingKernel
)

# Resource management
from .resources import (
    BlockStructure,
    MemoryEstimate,
    analyze_structure,
    estimate_memory
)

# Engine operations
from .engine import (
    raster_io,
    dataset_raster_io
)

# Block operations
from .blocks import (
    BlockGrid,
    read_block,
    write_block,
    iter_blocks,
    is_block_aligned
)

# I/O conveniences
from .io import (
    open_raster,
    fetch,
    fetch_into,
    update
)

__all__ = [
    # Layer
    "Dataset",
    "RasterBand",

    # Geometry
    "AccessMode",
    "Region",
    "BufferLayout",
    "ResolvedLayout",

    # Types
    "PixelType",
    "coerce",
    "ResamplingKernel",

    # Resources
    "BlockStructure",
    "MemoryEstimate",
    "analyze_structure",
    "estimate_memory",

    # Engine
    "raster_io",
    "dataset_raster_io",

    # Blocks
    "BlockGrid",
    "read_block",
    "write_block",
    "iter_blocks",
    "is_block_aligned",

    # I/O
    "open_raster",
    "fetch",
    "fetch_into",
    "update"
]
