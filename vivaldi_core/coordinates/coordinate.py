"""
Network coordinate value type.

A coordinate has a Euclidean and a non-Euclidean component:
- The position vector models a high-speed core whose latencies are
  proportional to distance
- The height models the access link between the node and that core

A packet between two nodes travels the source height, the Euclidean
distance, then the destination height. Heights let the embedding absorb
triangle-inequality violations caused by slow access links.

Reference: Vivaldi (Dabek et al., 2004), Section 5.4 (Height vectors)
"""

from dataclasses import dataclass
from typing import Iterable, Type
import math
import numpy as np

from vivaldi_core.errors import DimensionMismatchError, InvalidCoordinateError
from vivaldi_core.geometry import RandomSource, TupleVector, Vector
from .config import DEFAULT_ERROR, DEFAULT_RAND_BOUND


@dataclass(frozen=True)
class Coordinate:
    """
    Immutable network coordinate.

    Attributes:
        position: Euclidean component (seconds along each axis)
        height: Access-link latency (seconds), never negative
        error: Local error estimate (confidence), never negative;
            1.0 means nothing is known yet
        offset: Manual addition to distance queries (seconds); negative
            values are clamped to 0.0

    Notes:
        - Coordinates are replaced wholesale by Node.update, never mutated
        - to_array() gives the N + 2 float layout exchanged between nodes
    """

    position: Vector
    height: float = 0.0
    error: float = DEFAULT_ERROR
    offset: float = 0.0

    def __post_init__(self):
        """Validate coordinate."""
        if not isinstance(self.position, Vector):
            raise TypeError(f"position must be a Vector, got {type(self.position).__name__}")

        object.__setattr__(self, 'height', float(self.height))
        object.__setattr__(self, 'error', float(self.error))
        object.__setattr__(self, 'offset', max(0.0, float(self.offset)))

        if not (self.position.is_finite() and math.isfinite(self.height)
                and math.isfinite(self.error) and math.isfinite(self.offset)):
            raise InvalidCoordinateError(f"Coordinate has non-finite components: {self!r}")

        if self.height < 0:
            raise ValueError(f"Height cannot be negative: {self.height}")

        if self.error < 0:
            raise ValueError(f"Error estimate cannot be negative: {self.error}")

    @classmethod
    def origin(
        cls,
        dims: int,
        vector_type: Type[Vector] = TupleVector,
        error: float = DEFAULT_ERROR,
    ) -> 'Coordinate':
        """Coordinate at the origin with zero height."""
        return cls(position=vector_type.zeros(dims), height=0.0, error=error)

    @classmethod
    def rand(
        cls,
        dims: int,
        rng: RandomSource,
        vector_type: Type[Vector] = TupleVector,
        bound: float = DEFAULT_RAND_BOUND,
        error: float = DEFAULT_ERROR,
    ) -> 'Coordinate':
        """
        Coordinate with a random position, so new nodes don't start
        out overlapping one another.

        Args:
            dims: Number of Euclidean dimensions
            rng: Random source (borrowed for this call only)
            vector_type: Vector storage to use
            bound: Each component is uniform on [-bound, bound)
            error: Initial error estimate

        Returns:
            Coordinate with zero height
        """
        return cls(position=vector_type.random(dims, rng, bound), height=0.0, error=error)

    @classmethod
    def from_array(
        cls,
        values: Iterable[float],
        vector_type: Type[Vector] = TupleVector,
    ) -> 'Coordinate':
        """
        Rebuild a coordinate from the `[*position, height, error]` layout.

        Raises:
            ValueError: If fewer than 3 values are given
        """
        values = np.asarray(list(values), dtype=np.float64)
        if values.ndim != 1 or values.size < 3:
            raise ValueError(f"Need at least 3 values (1 dimension + height + error), got {values.size}")

        return cls(
            position=vector_type.from_components(values[:-2]),
            height=float(values[-2]),
            error=float(values[-1]),
        )

    @property
    def dims(self) -> int:
        """Number of Euclidean dimensions."""
        return self.position.dims

    def raw_distance_to(self, other: 'Coordinate') -> float:
        """
        Estimated latency to `other` in seconds, ignoring offsets.

        Euclidean distance plus both heights.
        """
        self._check_dims(other)
        return self.position.distance(other.position) + self.height + other.height

    def distance_to(self, other: 'Coordinate') -> float:
        """
        Estimated latency to `other` in seconds.

        Euclidean distance plus both heights plus both offsets.
        """
        return self.raw_distance_to(other) + self.offset + other.offset

    def is_finite(self) -> bool:
        """True if every component is finite."""
        return (self.position.is_finite() and math.isfinite(self.height)
                and math.isfinite(self.error))

    def to_array(self) -> np.ndarray:
        """
        Flat `[*position, height, error]` float64 array (N + 2 values).

        Byte order, framing and versioning belong to the transport.
        """
        return np.array(self.position.components() + (self.height, self.error), dtype=np.float64)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            'position': list(self.position.components()),
            'height': self.height,
            'error': self.error,
            'offset': self.offset,
        }

    def _check_dims(self, other: 'Coordinate'):
        if self.dims != other.dims:
            raise DimensionMismatchError(self.dims, other.dims)
