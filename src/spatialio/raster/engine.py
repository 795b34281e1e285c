# src/spatialio/raster/engine.py

"""
This module implements windowed RasterIO, the core transfer between a region of
one or more raster bands and a caller buffer.

A transfer reconciles three independent choices:
- the source region inside the band,
- the buffer geometry (shape and byte strides),
- the buffer element type.

Reads ask the storage engine for the region at the buffer's shape, then convert
each plane into the buffer's dtype. Writes gather each plane from the buffer,
scatter it onto the region shape and convert it to the band's native dtype.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np
from rasterio.windows import Window

from spatialio.config import RasterIOOptions
from spatialio.exceptions import (
    InvalidBandError,
    RasterIOError,
    RasterValidationError,
    ShapeMismatchError
)
from .dtypes import coerce
from .layer import Dataset, RasterBand, require_band, require_dataset
from .resampling import ResamplingKernel, scatter_nearest
from .window import AccessMode, BufferLayout, Region

log = logging.getLogger(__name__)

__all__ = [
    "raster_io",
    "dataset_raster_io"
]

def _check_buffer(buffer: Any) -> np.ndarray:
    if not isinstance(buffer, np.ndarray):
        raise ShapeMismatchError(f"Buffer must be a numpy.ndarray, got {type(buffer).__name__}")
    if buffer.dtype.kind not in "biufc":
        raise ShapeMismatchError(f"Buffer dtype {buffer.dtype} is not numeric")
    return buffer

def _buffer_shape(buffer: np.ndarray, buffer_shape: Optional[Tuple[int, int]]) -> Tuple[int, int]:
    """Resolve (width, height) of each buffer plane."""
    if buffer_shape is None:
        if buffer.ndim not in (2, 3):
            raise ShapeMismatchError(
                f"Cannot infer buffer shape from a {buffer.ndim}D array; pass buffer_shape=(width, height)"
            )
        buffer_shape = (buffer.shape[-1], buffer.shape[-2])

    buf_width, buf_height = (int(v) for v in buffer_shape)
    if buf_width < 1 or buf_height < 1:
        raise ShapeMismatchError(f"Buffer shape must be at least 1x1, got {buf_width}x{buf_height}")
    return buf_width, buf_height

def _resolve_band_set(dataset: Dataset, bands: Optional[Sequence[int]]) -> List[int]:
    if bands is None:
        return list(range(1, dataset.count + 1))

    indices = [int(b) for b in bands]
    if not indices:
        raise ShapeMismatchError("Band selection is empty")

    for index in indices:
        if not (1 <= index <= dataset.count):
            raise InvalidBandError(f"Band index {index} out of range (1-{dataset.count}) for {dataset.name}")
    return indices

def _read_planes(
    dataset: Dataset,
    bands: List[int],
    planes: np.ndarray,
    region: Region,
    kernel: ResamplingKernel,
    options: RasterIOOptions,
    operation: str
):
    """Gather each selected band into its buffer plane."""
    if not planes.flags.writeable:
        raise RasterValidationError("Cannot read into a read-only buffer")

    src = dataset.source
    window = region.to_window()
    out_shape = planes.shape[1:]
    total = len(bands)

    for plane, index in enumerate(bands):
        options.report(plane / total, operation)
        try:
            data = src.read(index, window=window, out_shape=out_shape, resampling=kernel.rasterio)
        except Exception as e:
            raise RasterIOError(
                f"Access in {operation} failed reading band {index} at {region}: {e}",
                operation=operation,
                band=index,
                location=region
            ) from e

        planes[plane] = coerce(data, planes.dtype)

    options.report(1.0, operation)

def _write_planes(
    dataset: Dataset,
    bands: List[int],
    planes: np.ndarray,
    region: Region,
    kernel: ResamplingKernel,
    options: RasterIOOptions,
    operation: str
):
    """Scatter each buffer plane onto the region of its band."""
    if not dataset.writable:
        raise RasterIOError(
            f"Access in {operation} failed: {dataset.name} is opened read-only",
            operation=operation,
            location=region
        )

    if planes.shape[1:] != region.shape and kernel is not ResamplingKernel.NEAREST:
        log.debug(f"{operation} write replicates with nearest neighbour; '{kernel.value}' applies to reads only")

    src = dataset.source
    window = region.to_window()
    total = len(bands)

    for plane, index in enumerate(bands):
        options.report(plane / total, operation)
        data = scatter_nearest(planes[plane], region.shape)
        data = coerce(np.ascontiguousarray(data), dataset.band(index).dtype)
        try:
            src.write(data, index, window=window)
        except Exception as e:
            raise RasterIOError(
                f"Access in {operation} failed writing band {index} at {region}: {e}",
                operation=operation,
                band=index,
                location=region
            ) from e

    options.report(1.0, operation)

def _transfer(
    dataset: Dataset,
    bands: List[int],
    buffer: Any,
    region: Optional[Union[Region, Window]],
    access: AccessMode,
    layout: Optional[BufferLayout],
    buffer_shape: Optional[Tuple[int, int]],
    options: Optional[RasterIOOptions],
    operation: str
) -> np.ndarray:
    buffer = _check_buffer(buffer)
    access = AccessMode(access)
    if region is None:
        region = Region.full(dataset.width, dataset.height)
    elif isinstance(region, Window):
        region = Region.from_window(region)
    region = region.validate(dataset.width, dataset.height)
    shape = _buffer_shape(buffer, buffer_shape)
    layout = layout or BufferLayout()
    options = options or RasterIOOptions()

    planes = layout.view(buffer, shape, len(bands))
    kernel = options.resolve_resampling()

    log.debug(
        f"{operation} {access.value}: bands={bands} region={region} "
        f"buffer={shape[0]}x{shape[1]} {buffer.dtype} kernel={kernel.value}"
    )

    if access is AccessMode.READ:
        _read_planes(dataset, bands, planes, region, kernel, options, operation)
    else:
        _write_planes(dataset, bands, planes, region, kernel, options, operation)

    return buffer

def raster_io(
    band: RasterBand,
    buffer: np.ndarray,
    region: Optional[Union[Region, Window]] = None,
    access: AccessMode = AccessMode.READ,
    layout: Optional[BufferLayout] = None,
    buffer_shape: Optional[Tuple[int, int]] = None,
    options: Optional[RasterIOOptions] = None
) -> np.ndarray:
    """
    Read/write a region of image data for one band.

    Pixel values are converted between the buffer dtype and the band's native
    type as needed. When the buffer shape differs from the region shape the
    data is decimated or replicated with the configured resampling kernel.

    For the fastest full-resolution access, align `region` on the band's block
    boundaries and leave the buffer at the region's shape, or use read_block()
    and write_block().

    Args:
        band: The band to access. The underlying dataset must stay open for the call.
        buffer: Buffer to read into or write from, normally (height, width).
        region: Source/destination Region (or rasterio Window). Defaults to the full band extent.
        access: AccessMode.READ or AccessMode.WRITE.
        layout: Optional byte strides for unusually organized buffers, e.g. one
            band of a pixel-interleaved array.
        buffer_shape: (width, height) of the buffer image. Defaults to the
            trailing two axes of `buffer`.
        options: Resampling kernel and progress callback.

    Returns:
        np.ndarray: The caller's buffer.

    Raises:
        InvalidBandError: If the band handle is invalid or closed.
        InvalidWindowError: If the region is empty or outside the band.
        ShapeMismatchError: If the buffer cannot hold the requested layout.
        RasterIOError: If the storage engine fails.
        TransferCancelledError: If the progress callback cancels.
    """
    band = require_band(band)
    return _transfer(
        band.dataset, [band.index], buffer, region, access,
        layout, buffer_shape, options, operation="RasterIO"
    )

def dataset_raster_io(
    dataset: Dataset,
    buffer: np.ndarray,
    bands: Optional[Sequence[int]] = None,
    region: Optional[Union[Region, Window]] = None,
    access: AccessMode = AccessMode.READ,
    layout: Optional[BufferLayout] = None,
    buffer_shape: Optional[Tuple[int, int]] = None,
    options: Optional[RasterIOOptions] = None
) -> np.ndarray:
    """
    Read/write a region of image data from several bands of a dataset.

    Plane k of the buffer is band `bands[k]`, repeats included, so planes can be
    reordered or duplicated without extra copies. Every selected band shares
    the region, buffer shape and kernel; type conversion is applied per band.

    Args:
        dataset: The dataset to access.
        buffer: Buffer of shape (bands, height, width), or raw memory with `layout`.
        bands: 1-based band indices. Defaults to every band in order.
        region: Region shared by all bands. Defaults to the full extent.
        access: AccessMode.READ or AccessMode.WRITE.
        layout: Optional byte strides. An unset band_space defaults to
            line_space * buffer height (band sequential).
        buffer_shape: (width, height) of each buffer plane.
        options: Resampling kernel and progress callback.

    Returns:
        np.ndarray: The caller's buffer.

    Raises:
        InvalidDatasetError: If the dataset handle is invalid or closed.
        InvalidBandError: If a selected band index is out of range.
        ShapeMismatchError: If the buffer plane count differs from len(bands).
        InvalidWindowError, RasterIOError, TransferCancelledError: As raster_io().
    """
    dataset = require_dataset(dataset)
    indices = _resolve_band_set(dataset, bands)
    return _transfer(
        dataset, indices, buffer, region, access,
        layout, buffer_shape, options, operation="DatasetRasterIO"
    )
