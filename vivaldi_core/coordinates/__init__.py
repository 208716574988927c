"""
Coordinates Module: coordinate value type, node state, adaptive update.

Key classes:
- Coordinate: Position vector + height + error estimate (+ local offset)
- Node: Owns a Coordinate and applies the Vivaldi update per RTT sample
- VivaldiConfig: Tuning constants, height mode, gravity
"""

from .config import (
    VivaldiConfig,
    HeightMode,
    DEFAULT_ERROR,
    DEFAULT_RAND_BOUND,
    create_default_config,
)
from .latency import to_seconds, to_duration
from .coordinate import Coordinate
from .node import (
    Node,
    UpdateResult,
    UpdateStatus,
    create_default_node,
)

__all__ = [
    # Configuration
    'VivaldiConfig',
    'HeightMode',
    'DEFAULT_ERROR',
    'DEFAULT_RAND_BOUND',
    'create_default_config',
    # Latency units
    'to_seconds',
    'to_duration',
    # State
    'Coordinate',
    'Node',
    'UpdateResult',
    'UpdateStatus',
    'create_default_node',
]
