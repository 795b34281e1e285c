# src/spatialio/__init__.py
#
# Copyright (c) The spatialio project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
spatialio: windowed raster access and tabular vector feature streaming.
"""
# raster must load before config, which depends on raster.resampling
from . import raster
from . import vector

from .config import (
    RasterIOOptions,
    get_default_resampling,
    set_default_resampling
)

from .exceptions import (
    SpatialIOError,
    RasterError,
    RasterValidationError,
    InvalidWindowError,
    InvalidBandError,
    InvalidDatasetError,
    ShapeMismatchError,
    InvalidBlockIndexError,
    RasterIOError,
    TransferCancelledError,
    VectorError
)

__version__ = "0.1.0"

__all__ = [
    "raster",
    "vector",

    # Configuration
    "RasterIOOptions",
    "get_default_resampling",
    "set_default_resampling",

    # Errors
    "SpatialIOError",
    "RasterError",
    "RasterValidationError",
    "InvalidWindowError",
    "InvalidBandError",
    "InvalidDatasetError",
    "ShapeMismatchError",
    "InvalidBlockIndexError",
    "RasterIOError",
    "TransferCancelledError",
    "VectorError"
]
