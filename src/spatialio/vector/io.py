# src/spatialio/vector/io.py

"""
This module provides reading of vector layers (points, lines, polygons) using GeoPandas.
"""

from pathlib import Path
from typing import Union, Callable
from functools import wraps
import logging

import geopandas as gpd

from spatialio.exceptions import VectorError
from spatialio.vector.layer import Vector

log = logging.getLogger(__name__)

__all__ = [
    "load_vector",
    "resolve_vector"
]

def load_vector(path: Union[str, Path], engine: str = "pyogrio", **kwargs) -> Vector:
    """
    Read a vector file into a Vector.

    Args:
        path: Any OGR-readable file (GeoPackage, Shapefile, GeoJSON, ...).
        engine: GeoPandas I/O engine.
        **kwargs: Forwarded to geopandas.read_file (layer, columns, ...).

    Raises:
        FileNotFoundError: If the file does not exist.
        VectorError: If the file cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Vector file not found: {path}")

    try:
        gdf = gpd.read_file(path, engine=engine, **kwargs)
    except Exception as e:
        raise VectorError(f"Failed to read vector layer {path}: {e}") from e

    log.info(f"Loaded {len(gdf)} features from {path.name}")
    return Vector(gdf)

def resolve_vector(func: Callable):
    """Decorator letting `func` accept a file path wherever it takes a Vector."""
    @wraps(func)
    def wrapper(input_obj: Union[str, Path, Vector], *args, **kwargs):
        if isinstance(input_obj, (str, Path)):
            vector_obj = load_vector(input_obj)
        elif isinstance(input_obj, Vector):
            vector_obj = input_obj
        else:
            raise TypeError(f"Expected file path or Vector object, got {type(input_obj)}")

        return func(vector_obj, *args, **kwargs)
    return wrapper
