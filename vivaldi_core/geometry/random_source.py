"""
Explicit random number sources.

Every operation that needs randomness (random initialisation, tie-breaking
between coincident coordinates) takes a RandomSource argument. There is no
module-level generator, so a fixed seed reproduces a run exactly.

A RandomSource is not safe for concurrent use; create one per thread.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union
import numpy as np

# Consecutive all-zero normal draws tolerated before giving up
MAX_UNIT_VECTOR_ATTEMPTS = 16


class RandomSource(ABC):
    """
    Supplier of uniform and normal random samples.

    Implementations only need `uniform` and `normal`; `unit_vector` is
    derived from `normal`.
    """

    @abstractmethod
    def uniform(self, low: float, high: float, size: int) -> np.ndarray:
        """
        Draw `size` samples from the uniform distribution on [low, high).

        Args:
            low: Lower bound
            high: Upper bound
            size: Number of samples

        Returns:
            1-D float64 array
        """

    @abstractmethod
    def normal(self, size: int) -> np.ndarray:
        """Draw `size` samples from the standard normal distribution."""

    def unit_vector(self, dims: int) -> np.ndarray:
        """
        Draw a unit vector uniformly distributed on the sphere.

        Normalises an isotropic Gaussian sample, redrawing if the sample is
        the zero vector.

        Args:
            dims: Number of components (>= 1)

        Returns:
            1-D float64 array of unit length

        Raises:
            ValueError: If the source keeps producing zero samples
        """
        for _ in range(MAX_UNIT_VECTOR_ATTEMPTS):
            sample = np.asarray(self.normal(dims), dtype=np.float64)
            magnitude = float(np.linalg.norm(sample))
            if magnitude > 0.0:
                return sample / magnitude

        raise ValueError(
            f"{type(self).__name__} produced {MAX_UNIT_VECTOR_ATTEMPTS} zero samples in a row"
        )


class NumpyRandomSource(RandomSource):
    """
    RandomSource backed by a numpy Generator (PCG64 by default).

    Usage:
        rng = NumpyRandomSource(seed=42)
        node = Node.rand(4, rng)
    """

    def __init__(self, seed: Optional[Union[int, np.random.Generator]] = None):
        """
        Initialize random source.

        Args:
            seed: Integer seed, existing Generator, or None for OS entropy
        """
        self._generator = np.random.default_rng(seed)

    def uniform(self, low: float, high: float, size: int) -> np.ndarray:
        return self._generator.uniform(low, high, size)

    def normal(self, size: int) -> np.ndarray:
        return self._generator.standard_normal(size)


def create_random_source(seed: Optional[int] = None) -> NumpyRandomSource:
    """
    Create the default random source.

    Args:
        seed: Optional seed for reproducible runs

    Returns:
        NumpyRandomSource instance
    """
    return NumpyRandomSource(seed)
