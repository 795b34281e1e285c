# src/spatialio/exceptions.py

"""
This module defines the exception hierarchy shared by the raster and vector subpackages.

Caller errors (bad windows, bad handles, mismatched buffers) derive from
RasterValidationError and are never retried. Failures reported by the storage
engine are wrapped in RasterIOError with the original exception chained as
its cause.
"""

from typing import Any, Optional

__all__ = [
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

class SpatialIOError(Exception):
    """Root of every error raised by spatialio."""

class RasterError(SpatialIOError):
    """Base class for raster access errors."""

class RasterValidationError(RasterError, ValueError):
    """The caller supplied an argument that violates the access contract."""

class InvalidWindowError(RasterValidationError):
    """Region geometry is empty, inverted or outside the band extent."""

class InvalidBandError(RasterValidationError):
    """Band handle is missing, closed, or its index is out of range."""

class InvalidDatasetError(RasterValidationError):
    """Dataset handle is missing or closed."""

class ShapeMismatchError(RasterValidationError):
    """Buffer shape, capacity or plane count does not match the request."""

class InvalidBlockIndexError(RasterValidationError, IndexError):
    """Block coordinates fall outside the band's block grid."""

class RasterIOError(RasterError, IOError):
    """
    The storage engine failed while transferring pixels.

    Attributes:
        operation: Name of the access operation that failed ('RasterIO', 'ReadBlock', ...).
        band: 1-based band index involved in the failing transfer, if any.
        location: Region or block coordinates of the failing transfer, if any.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        band: Optional[int] = None,
        location: Optional[Any] = None
    ):
        super().__init__(message)
        self.operation = operation
        self.band = band
        self.location = location

class TransferCancelledError(RasterError):
    """A progress callback requested early termination of a transfer."""

    def __init__(self, message: str, operation: Optional[str] = None, progress: float = 0.0):
        super().__init__(message)
        self.operation = operation
        self.progress = progress

class VectorError(SpatialIOError):
    """Base class for vector feature access errors."""
