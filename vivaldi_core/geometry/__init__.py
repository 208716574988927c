"""
Geometry Module: vectors and random sources.

Key classes:
- Vector: Arithmetic contract shared by all position storages
- TupleVector: Immutable fixed-size tuple storage
- ArrayVector: Read-only numpy buffer storage
- RandomSource: Explicit source of randomness (no global generator)
"""

from .random_source import (
    RandomSource,
    NumpyRandomSource,
    create_random_source,
)
from .vector import (
    Vector,
    TupleVector,
    ArrayVector,
    unit_direction,
)

__all__ = [
    'RandomSource',
    'NumpyRandomSource',
    'create_random_source',
    'Vector',
    'TupleVector',
    'ArrayVector',
    'unit_direction',
]
