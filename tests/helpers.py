# tests/helpers.py

import numpy as np
import rasterio

from spatialio.raster import Region

def read_reference(path, band: int = 1) -> np.ndarray:
    """Read a full band straight through rasterio, bypassing spatialio."""
    with rasterio.open(path) as src:
        return src.read(band)

def assert_region_equal(actual: np.ndarray, reference: np.ndarray, region: Region):
    """Check that `actual` holds exactly the `region` cut of a full-band array."""
    expected = reference[
        region.y_offset:region.y_offset + region.y_size,
        region.x_offset:region.x_offset + region.x_size
    ]
    assert actual.shape == expected.shape, \
        f"Shape mismatch: {actual.shape} != {expected.shape}"
    assert np.array_equal(actual, expected), \
        f"Pixel mismatch in region {region}"
