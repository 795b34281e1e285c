# src/spatialio/vector/stream.py

"""
This module exposes a feature layer as a tabular source.

The attribute fields of a Vector (the geometry column is excluded) are
described by a FeatureSchema and streamed one field at a time in row-major
order, the way a row-oriented sink pulls them. A source can also be iterated as
row tuples or materialized as a polars DataFrame.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Tuple

import numpy as np
import pandas as pd
import polars as pl

from spatialio.exceptions import VectorError
from spatialio.vector.io import resolve_vector
from spatialio.vector.layer import Vector

log = logging.getLogger(__name__)

__all__ = [
    "FeatureSchema",
    "FeatureSource",
    "feature_source"
]

_KIND_TYPES = {
    "i": int,
    "u": int,
    "f": float,
    "b": bool,
    "M": datetime,
}

_INFERRED_TYPES = {
    "string": str,
    "integer": int,
    "floating": float,
    "mixed-integer-float": float,
    "boolean": bool,
    "datetime": datetime,
    "datetime64": datetime,
    "date": datetime,
}

def _field_type(series: pd.Series) -> type:
    """Python type of the values held in an attribute column."""
    kind = getattr(series.dtype, "kind", "O")
    if kind in _KIND_TYPES:
        return _KIND_TYPES[kind]
    return _INFERRED_TYPES.get(pd.api.types.infer_dtype(series, skipna=True), object)

def _to_python(value: Any) -> Any:
    # missing values of every dtype (NaN, NaT, pd.NA) surface as None
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    return value

@dataclass(frozen=True)
class FeatureSchema:
    """
    Column names, Python types and row count of a feature source.

    Args:
        names: Attribute field names in layer order.
        types: Python type of each field.
        rows: Number of features.
    """
    names: Tuple[str, ...]
    types: Tuple[type, ...]
    rows: int

    @property
    def columns(self) -> int:
        return len(self.names)

    def as_dict(self) -> Dict[str, type]:
        return dict(zip(self.names, self.types))

class FeatureSource:
    """
    Row-major field stream over the attributes of a Vector.

    stream_field() must be called for every (row, col) in order, both 1-based.
    Reading the last field of a row advances the cursor to the next feature;
    reading the last field of the last feature leaves the source done until
    reset() rewinds it.
    """

    def __init__(self, vector: Vector):
        if not isinstance(vector, Vector):
            raise TypeError(f"Expected Vector, got {type(vector)}")

        self._frame = vector.data[vector.field_names]
        self.schema = FeatureSchema(
            names=tuple(self._frame.columns),
            types=tuple(_field_type(self._frame[name]) for name in self._frame.columns),
            rows=len(self._frame)
        )
        self._row = 0
        self._col = 0

        log.debug(f"FeatureSource over {self.schema.rows} features, fields={list(self.schema.names)}")

    def is_done(self) -> bool:
        """True once every feature has been streamed (always true for an empty layer)."""
        return self._row >= self.schema.rows

    def reset(self):
        """Rewind to the first feature."""
        self._row = 0
        self._col = 0

    def stream_field(self, row: int, col: int) -> Any:
        """
        Return one field value of the current feature.

        Args:
            row: 1-based feature index; must be the current feature.
            col: 1-based field index; must follow the previously streamed field.

        Raises:
            VectorError: If the source is exhausted or the access is out of order.
        """
        if self.is_done():
            raise VectorError("Feature stream is exhausted; call reset() to read it again")

        if row != self._row + 1 or col != self._col + 1:
            raise VectorError(
                f"Out-of-order access at ({row}, {col}); "
                f"expected ({self._row + 1}, {self._col + 1})"
            )

        value = _to_python(self._frame.iat[row - 1, col - 1])

        if col == self.schema.columns:
            self._row += 1
            self._col = 0
        else:
            self._col = col
        return value

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        """Yields every remaining feature as a tuple of field values."""
        columns = self.schema.columns
        if columns == 0:
            # geometry-only layer: one empty record per remaining feature
            while not self.is_done():
                self._row += 1
                yield ()
            return

        while not self.is_done():
            row = self._row + 1
            yield tuple(self.stream_field(row, col) for col in range(1, columns + 1))

    def __len__(self) -> int:
        return self.schema.rows

    def to_polars(self) -> pl.DataFrame:
        """Materialize every feature, independently of the stream cursor."""
        data: Dict[str, List[Any]] = {
            name: [_to_python(v) for v in self._frame[name].tolist()]
            for name in self.schema.names
        }
        return pl.DataFrame(data, strict=False)

    def __repr__(self) -> str:
        return f"<FeatureSource rows={self.schema.rows} fields={self.schema.columns}>"

@resolve_vector
def feature_source(vector: Vector) -> FeatureSource:
    """Open a FeatureSource over a Vector or a vector file path."""
    return FeatureSource(vector)
