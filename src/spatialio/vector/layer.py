# src/spatialio/vector/layer.py

"""
This module defines the in-memory feature layer wrapped by the streaming adapter.
"""

import logging
from typing import List

import geopandas as gpd
from geopandas.array import GeometryDtype

log = logging.getLogger(__name__)

__all__ = [
    "Vector"
]

class Vector:
    """
    A layer of features: one geometry column plus attribute fields.

    Args:
        data: The backing GeoDataFrame.
    """

    def __init__(self, data: gpd.GeoDataFrame):
        if not isinstance(data, gpd.GeoDataFrame):
            raise TypeError(f"Expected GeoDataFrame, got {type(data)}")
        self._data = data

    @property
    def data(self) -> gpd.GeoDataFrame:
        return self._data

    @property
    def crs(self):
        return self._data.crs

    @property
    def bounds(self):
        return self._data.total_bounds

    @property
    def columns(self) -> List[str]:
        return self._data.columns.tolist()

    @property
    def field_names(self) -> List[str]:
        """Attribute columns, geometry excluded, in layer order."""
        return [
            name for name, dtype in self._data.dtypes.items()
            if not isinstance(dtype, GeometryDtype)
        ]

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self):
        return f"<Vector features={len(self._data)} fields={len(self.field_names)} crs={self.crs}>"
