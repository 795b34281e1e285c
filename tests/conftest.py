# tests/conftest.py

import pytest
import numpy as np
import geopandas as gpd
import pandas as pd
from shapely.geometry import Point, Polygon
import rasterio
from rasterio.transform import Affine
from rasterio.crs import CRS

from spatialio.config import RESAMPLING_ENV_VARS, set_default_resampling

@pytest.fixture(autouse=True)
def clean_resampling_config(monkeypatch):
    """Every test starts with no kernel override and no environment default."""
    for name in RESAMPLING_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    set_default_resampling(None)
    yield
    set_default_resampling(None)

@pytest.fixture
def raster_factory(tmp_path):
    """
    Fixture: Returns a function writing a (bands, height, width) array to a GeoTIFF.
    Pass tiled=True with a blocksize to get a tiled file instead of strips.
    """
    def _create(name, data, tiled=False, blocksize=256, crs="EPSG:32619"):
        data = np.asarray(data)
        if data.ndim == 2:
            data = data[np.newaxis]
        count, height, width = data.shape

        profile = {
            'driver': 'GTiff',
            'height': height,
            'width': width,
            'count': count,
            'dtype': data.dtype.name,
            'crs': CRS.from_string(crs),
            'transform': Affine.translation(500000, 5000000) * Affine.scale(1.0, -1.0)
        }
        if tiled:
            profile.update(tiled=True, blockxsize=blocksize, blockysize=blocksize)

        path = tmp_path / name
        with rasterio.open(path, 'w', **profile) as dst:
            dst.write(data)
        return path

    return _create

@pytest.fixture
def ramp_data():
    """int16 ramp, 8 wide and 6 high: value = row * 100 + col."""
    rows, cols = np.mgrid[0:6, 0:8]
    return (rows * 100 + cols).astype('int16')

@pytest.fixture
def ramp_path(raster_factory, ramp_data):
    return raster_factory("ramp.tif", ramp_data)

@pytest.fixture
def two_band_path(raster_factory):
    """4x4 uint8 dataset: band 1 is all 10, band 2 is all 20."""
    data = np.stack([np.full((4, 4), 10, 'uint8'), np.full((4, 4), 20, 'uint8')])
    return raster_factory("two_band.tif", data)

@pytest.fixture
def three_band_path(raster_factory):
    """4x4 int16 dataset where band k holds k * 10."""
    data = np.stack([np.full((4, 4), 10 * k, 'int16') for k in (1, 2, 3)])
    return raster_factory("three_band.tif", data)

@pytest.fixture
def quadrant_path(raster_factory):
    """4x4 float32 band made of constant 2x2 quadrants [[1, 2], [3, 4]]."""
    quadrants = np.array([[1, 2], [3, 4]], dtype='float32')
    return raster_factory("quadrants.tif", np.kron(quadrants, np.ones((2, 2), 'float32')))

@pytest.fixture
def tiled_data():
    return (np.arange(300 * 300) % 50000).astype('uint16').reshape(300, 300)

@pytest.fixture
def tiled_path(raster_factory, tiled_data):
    """300x300 uint16 band in 256x256 tiles: a 2x2 grid with partial edge tiles."""
    return raster_factory("tiled.tif", tiled_data, tiled=True, blocksize=256)

@pytest.fixture
def parcels_gdf():
    """Three parcels with int, str, float, datetime and missing attribute values."""
    return gpd.GeoDataFrame(
        {
            'parcel_id': [1, 2, 3],
            'owner': ['north', 'south', None],
            'area': [12.5, np.nan, 40.0],
            'surveyed': pd.to_datetime(['2020-05-01', '2021-06-15', '2022-07-30']),
            'geometry': [
                Polygon([(0, 0), (10, 0), (10, 10), (0, 10)]),
                Polygon([(20, 20), (30, 20), (30, 30), (20, 30)]),
                Point(5, 5).buffer(2)
            ]
        },
        crs="EPSG:32619"
    )

@pytest.fixture
def parcels_path(tmp_path, parcels_gdf):
    """Saves the parcels to a GeoPackage and returns the path."""
    path = tmp_path / "parcels.gpkg"
    parcels_gdf.to_file(path, driver="GPKG", engine="pyogrio")
    return path
