# tests/unit/test_vector.py

from datetime import datetime

import pytest
import geopandas as gpd
import pandas as pd
import polars as pl

from spatialio.exceptions import VectorError
from spatialio.vector import FeatureSource, Vector, feature_source, load_vector

def test_vector_wraps_geodataframe(parcels_gdf):
    vector = Vector(parcels_gdf)

    assert len(vector) == 3
    assert vector.field_names == ['parcel_id', 'owner', 'area', 'surveyed']
    assert 'geometry' in vector.columns
    assert "features=3" in repr(vector)

    with pytest.raises(TypeError):
        Vector(pd.DataFrame({'parcel_id': [1]}))

def test_load_vector(parcels_path):
    vector = load_vector(parcels_path)

    assert isinstance(vector.data, gpd.GeoDataFrame)
    assert len(vector) == 3
    assert vector.crs.to_epsg() == 32619

def test_load_vector_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_vector(tmp_path / "nowhere.gpkg")

def test_load_vector_unreadable(tmp_path):
    path = tmp_path / "broken.geojson"
    path.write_text("{ not json")

    with pytest.raises(VectorError):
        load_vector(path)

def test_schema(parcels_gdf):
    source = FeatureSource(Vector(parcels_gdf))

    assert source.schema.names == ('parcel_id', 'owner', 'area', 'surveyed')
    assert source.schema.types == (int, str, float, datetime)
    assert source.schema.rows == 3
    assert source.schema.columns == 4
    assert source.schema.as_dict()['owner'] is str

def test_stream_fields_in_order(parcels_gdf):
    source = FeatureSource(Vector(parcels_gdf))
    rows = []

    for row in range(1, 4):
        assert not source.is_done()
        rows.append([source.stream_field(row, col) for col in range(1, 5)])

    assert source.is_done()
    assert rows[0] == [1, 'north', 12.5, datetime(2020, 5, 1)]
    assert rows[1][2] is None
    assert rows[2][1] is None
    assert isinstance(rows[0][0], int)

def test_stream_rejects_out_of_order(parcels_gdf):
    source = FeatureSource(Vector(parcels_gdf))

    with pytest.raises(VectorError):
        source.stream_field(1, 2)

    source.stream_field(1, 1)
    with pytest.raises(VectorError):
        source.stream_field(2, 1)

def test_stream_exhausted_until_reset(parcels_gdf):
    source = FeatureSource(Vector(parcels_gdf))
    first = list(source)

    assert len(first) == 3
    assert source.is_done()
    with pytest.raises(VectorError, match="exhausted"):
        source.stream_field(1, 1)

    source.reset()
    assert not source.is_done()
    assert list(source) == first

def test_empty_layer_is_done(parcels_gdf):
    source = FeatureSource(Vector(parcels_gdf.iloc[0:0]))

    assert source.is_done()
    assert list(source) == []
    assert len(source) == 0

def test_to_polars(parcels_gdf):
    source = FeatureSource(Vector(parcels_gdf))
    source.stream_field(1, 1)

    frame = source.to_polars()

    assert isinstance(frame, pl.DataFrame)
    assert frame.columns == ['parcel_id', 'owner', 'area', 'surveyed']
    assert frame.height == 3
    assert frame['owner'].null_count() == 1
    assert frame['area'].null_count() == 1
    assert frame.schema['surveyed'] == pl.Datetime
    # materializing does not move the stream cursor
    assert source.stream_field(1, 2) == 'north'

def test_feature_source_from_path(parcels_path):
    source = feature_source(parcels_path)

    assert source.schema.rows == 3
    assert source.schema.names[0] == 'parcel_id'
    assert next(iter(source))[1] == 'north'

def test_feature_source_rejects_other_inputs():
    with pytest.raises(TypeError):
        feature_source(42)

def test_geometry_only_layer_iterates_once_per_feature():
    gdf = gpd.GeoDataFrame(geometry=gpd.points_from_xy([0, 1], [0, 1]), crs="EPSG:32619")
    source = FeatureSource(Vector(gdf))

    assert source.schema.columns == 0
    assert source.schema.rows == 2
    assert list(source) == [(), ()]
    assert source.is_done()

    source.reset()
    assert not source.is_done()
    assert len(list(source)) == 2
