"""
Coordinate vectors.

Two storage strategies implement one arithmetic contract (`Vector`):
- TupleVector: immutable fixed-size tuple of floats
- ArrayVector: read-only numpy float64 buffer

Coordinate and Node code is written against `Vector` only, so either
storage can be used wherever a position is expected. Both are value types:
operations return new vectors and never modify their operands.
"""

import math
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Tuple, Type, TypeVar
import numpy as np

from vivaldi_core.errors import DimensionMismatchError
from .random_source import RandomSource

V = TypeVar('V', bound='Vector')


class Vector(ABC):
    """
    Fixed-dimension real vector.

    Subclasses provide storage and the primitive operations (add, sub,
    scale, norm). Distance, unit vectors and operator sugar are shared.
    Combining vectors of different dimension raises DimensionMismatchError.
    """

    __slots__ = ()

    @classmethod
    @abstractmethod
    def from_components(cls: Type[V], components: Iterable[float]) -> V:
        """Build a vector from an iterable of floats."""

    @classmethod
    def zeros(cls: Type[V], dims: int) -> V:
        """Zero vector of `dims` components."""
        return cls.from_components([0.0] * dims)

    @classmethod
    def random(cls: Type[V], dims: int, rng: RandomSource, bound: float = 1.0) -> V:
        """
        Random vector with each component uniform on [-bound, bound).

        Args:
            dims: Number of components
            rng: Random source to draw from
            bound: Half-width of the uniform distribution
        """
        return cls.from_components(rng.uniform(-bound, bound, dims))

    @classmethod
    def random_unit(cls: Type[V], dims: int, rng: RandomSource) -> V:
        """Random unit vector, uniformly distributed on the sphere."""
        return cls.from_components(rng.unit_vector(dims))

    @property
    @abstractmethod
    def dims(self) -> int:
        """Number of components."""

    @abstractmethod
    def components(self) -> Tuple[float, ...]:
        """Components as a tuple of Python floats."""

    @abstractmethod
    def add(self: V, other: 'Vector') -> V:
        """Componentwise sum."""

    @abstractmethod
    def sub(self: V, other: 'Vector') -> V:
        """Componentwise difference (self - other)."""

    @abstractmethod
    def scale(self: V, factor: float) -> V:
        """Multiply every component by `factor`."""

    @abstractmethod
    def norm(self) -> float:
        """Euclidean norm, without intermediate underflow or overflow."""

    def divide(self: V, divisor: float) -> V:
        """Divide every component by `divisor`."""
        return self.from_components(c / divisor for c in self.components())

    def distance(self, other: 'Vector') -> float:
        """Euclidean distance between the two vectors."""
        return self.sub(other).norm()

    def unit_vector_from(self: V, other: 'Vector', rng: RandomSource) -> Tuple[float, V]:
        """
        Unit vector pointing at this vector from `other`.

        Args:
            other: Origin of the direction
            rng: Used only when the two vectors coincide

        Returns:
            Tuple of (magnitude, unit). When the vectors coincide the
            magnitude is 0.0 and the unit vector is drawn at random, so
            two nodes at the same position can still be pushed apart.
        """
        difference = self.sub(other)
        magnitude = difference.norm()
        if magnitude > 0.0:
            # Divide rather than scale by 1/magnitude, which overflows for subnormals
            return magnitude, difference.divide(magnitude)

        return 0.0, type(self).random_unit(self.dims, rng)

    def is_finite(self) -> bool:
        """True if no component is NaN or infinite."""
        return all(math.isfinite(c) for c in self.components())

    def _check_dims(self, other: 'Vector'):
        if self.dims != other.dims:
            raise DimensionMismatchError(self.dims, other.dims)

    def __add__(self: V, other: 'Vector') -> V:
        return self.add(other)

    def __sub__(self: V, other: 'Vector') -> V:
        return self.sub(other)

    def __mul__(self: V, factor: float) -> V:
        return self.scale(factor)

    __rmul__ = __mul__

    def __neg__(self: V) -> V:
        return self.scale(-1.0)

    def __len__(self) -> int:
        return self.dims

    def __iter__(self) -> Iterator[float]:
        return iter(self.components())

    def __getitem__(self, index: int) -> float:
        return self.components()[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.components() == other.components()

    def __hash__(self) -> int:
        return hash(self.components())

    def __repr__(self) -> str:
        return f'{type(self).__name__}({list(self.components())})'


class TupleVector(Vector):
    """
    Vector stored as an immutable tuple of floats.

    The dimension is fixed at construction and the storage never grows.

    Usage:
        v = TupleVector([1.0, 2.0, 3.0])
        w = v + TupleVector.zeros(3)
    """

    __slots__ = ('_components',)

    def __init__(self, components: Iterable[float]):
        values = tuple(float(c) for c in components)
        if not values:
            raise ValueError("Vector must have at least one dimension")
        self._components = values

    @classmethod
    def from_components(cls, components: Iterable[float]) -> 'TupleVector':
        return cls(components)

    @property
    def dims(self) -> int:
        return len(self._components)

    def components(self) -> Tuple[float, ...]:
        return self._components

    def add(self, other: Vector) -> 'TupleVector':
        self._check_dims(other)
        return TupleVector(a + b for a, b in zip(self._components, other.components()))

    def sub(self, other: Vector) -> 'TupleVector':
        self._check_dims(other)
        return TupleVector(a - b for a, b in zip(self._components, other.components()))

    def scale(self, factor: float) -> 'TupleVector':
        return TupleVector(c * factor for c in self._components)

    def norm(self) -> float:
        return math.hypot(*self._components)


class ArrayVector(Vector):
    """
    Vector stored in a read-only numpy float64 array.

    Usage:
        v = ArrayVector(np.array([1.0, 2.0, 3.0]))
        print(v.array)
    """

    __slots__ = ('_array',)

    def __init__(self, components: Iterable[float]):
        if not isinstance(components, np.ndarray):
            components = list(components)
        array = np.array(components, dtype=np.float64)
        if array.ndim != 1 or array.size == 0:
            raise ValueError(f"Vector must be 1-D with at least one dimension, got shape {array.shape}")
        array.setflags(write=False)
        self._array = array

    @classmethod
    def from_components(cls, components: Iterable[float]) -> 'ArrayVector':
        return cls(components)

    @property
    def array(self) -> np.ndarray:
        """Read-only view of the underlying buffer."""
        return self._array

    @property
    def dims(self) -> int:
        return int(self._array.size)

    def components(self) -> Tuple[float, ...]:
        return tuple(self._array.tolist())

    def add(self, other: Vector) -> 'ArrayVector':
        self._check_dims(other)
        return ArrayVector(self._array + _as_array(other))

    def sub(self, other: Vector) -> 'ArrayVector':
        self._check_dims(other)
        return ArrayVector(self._array - _as_array(other))

    def scale(self, factor: float) -> 'ArrayVector':
        return ArrayVector(self._array * factor)

    def divide(self, divisor: float) -> 'ArrayVector':
        return ArrayVector(self._array / divisor)

    def norm(self) -> float:
        # hypot scales its inputs; np.linalg.norm squares them directly
        return math.hypot(*self._array.tolist())

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self._array)))


def _as_array(vector: Vector) -> np.ndarray:
    if isinstance(vector, ArrayVector):
        return vector.array
    return np.array(vector.components(), dtype=np.float64)


def unit_direction(origin: Vector, target: Vector, rng: RandomSource) -> Vector:
    """
    Unit vector pointing from `origin` toward `target`.

    Falls back to a random unit vector drawn from `rng` when the two points
    coincide.
    """
    _, unit = target.unit_vector_from(origin, rng)
    return unit
