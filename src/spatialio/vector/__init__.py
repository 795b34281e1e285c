# src/spatialio/vector/__init__.py
#
# Copyright (c) The spatialio project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
The vector subpackage reads feature layers and streams their attribute fields
as a tabular source.
"""

# I/O and data structure
from .layer import (
    Vector
)

from .io import (
    load_vector,
    resolve_vector
)

# Tabular streaming
from .stream import (
    FeatureSchema,
    FeatureSource,
    feature_source
)

__all__ = [
    # I/O and data structure
    "Vector",
    "load_vector",
    "resolve_vector",

    # Tabular streaming
    "FeatureSchema",
    "FeatureSource",
    "feature_source"
]
