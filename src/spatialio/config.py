# src/spatialio/config.py

"""
This module holds the runtime configuration of raster transfers.

The default resampling kernel can be overridden process-wide, either with
set_default_resampling() or through an environment variable. Per-call settings
(kernel, progress callback) travel in a RasterIOOptions object.
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, Union

from spatialio.exceptions import TransferCancelledError
from spatialio.raster.resampling import ResamplingKernel

log = logging.getLogger(__name__)

__all__ = [
    "RESAMPLING_ENV_VARS",
    "RasterIOOptions",
    "get_default_resampling",
    "set_default_resampling"
]

# Checked in order; the GDAL name is honoured so existing environments keep working.
RESAMPLING_ENV_VARS = ("SPATIALIO_RASTERIO_RESAMPLING", "GDAL_RASTERIO_RESAMPLING")

ProgressCallback = Callable[[float], bool]

_default_resampling: Optional[ResamplingKernel] = None

def set_default_resampling(kernel: Optional[Union[ResamplingKernel, str]]) -> None:
    """
    Override the process-wide default kernel.

    Args:
        kernel: Kernel or kernel name. None removes the override so the
                environment (or nearest neighbour) applies again.
    """
    global _default_resampling
    _default_resampling = None if kernel is None else ResamplingKernel.parse(kernel)
    log.debug(f"Default resampling override set to {_default_resampling}")

def get_default_resampling() -> ResamplingKernel:
    """
    Resolve the default kernel: explicit override, then environment, then NEAREST.
    """
    if _default_resampling is not None:
        return _default_resampling

    for name in RESAMPLING_ENV_VARS:
        value = os.getenv(name)
        if not value:
            continue
        try:
            return ResamplingKernel.parse(value)
        except ValueError:
            log.warning(f"Ignoring {name}={value!r}: not a known resampling kernel")

    return ResamplingKernel.NEAREST

@dataclass
class RasterIOOptions:
    """
    Extended arguments for a windowed transfer.

    Args:
        resampling: Kernel used when buffer and region shapes differ.
                    None uses get_default_resampling().
        progress: Optional callback receiving the completed fraction (0.0 to 1.0).
                  Returning False cancels the transfer.
    """
    resampling: Optional[Union[ResamplingKernel, str]] = None
    progress: Optional[ProgressCallback] = None

    def resolve_resampling(self) -> ResamplingKernel:
        if self.resampling is None:
            return get_default_resampling()
        return ResamplingKernel.parse(self.resampling)

    def report(self, fraction: float, operation: str) -> None:
        """
        Forward progress to the callback.

        Raises:
            TransferCancelledError: If the callback returns False.
        """
        if self.progress is None:
            return

        if self.progress(fraction) is False:
            log.info(f"{operation} cancelled by progress callback at {fraction:.0%}")
            raise TransferCancelledError(
                f"{operation} cancelled at {fraction:.0%}",
                operation=operation,
                progress=fraction
            )
