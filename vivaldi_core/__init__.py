"""
Vivaldi network coordinates.

Estimates pairwise round-trip latency between nodes without continuous
probing: every node keeps a synthetic coordinate whose distance to another
node's coordinate approximates the RTT between them.

Package structure:
- geometry: Vector storages and explicit random sources
- coordinates: Coordinate value type, Node state and the adaptive update
- metrics: Applied, skipped and geometry-event outcomes of updates

Transport, peer selection and probe scheduling live outside this package.
"""

__version__ = "0.3.0"

from .errors import VivaldiError, DimensionMismatchError, InvalidCoordinateError
from .geometry import (
    RandomSource,
    NumpyRandomSource,
    create_random_source,
    Vector,
    TupleVector,
    ArrayVector,
    unit_direction,
)
from .coordinates import (
    Coordinate,
    Node,
    UpdateResult,
    UpdateStatus,
    VivaldiConfig,
    HeightMode,
    create_default_config,
    create_default_node,
)

__all__ = [
    'VivaldiError',
    'DimensionMismatchError',
    'InvalidCoordinateError',
    'RandomSource',
    'NumpyRandomSource',
    'create_random_source',
    'Vector',
    'TupleVector',
    'ArrayVector',
    'unit_direction',
    'Coordinate',
    'Node',
    'UpdateResult',
    'UpdateStatus',
    'VivaldiConfig',
    'HeightMode',
    'create_default_config',
    'create_default_node',
]
