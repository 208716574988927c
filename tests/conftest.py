"""
Pytest configuration and shared fixtures for the Vivaldi coordinate tests.

Provides seeded random sources, both vector storages, and a clean global
metrics collector for every test.
"""

import sys
import math
from pathlib import Path
from typing import Sequence

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from vivaldi_core.geometry import ArrayVector, NumpyRandomSource, TupleVector
from vivaldi_core.coordinates import Coordinate
from vivaldi_core.metrics import get_metrics, reset_metrics


# =============================================================================
# Metrics
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Give every test its own global metrics collector."""
    reset_metrics()
    yield get_metrics()
    reset_metrics()


# =============================================================================
# Random Sources
# =============================================================================


@pytest.fixture
def rng() -> NumpyRandomSource:
    """Seeded random source for reproducible tests."""
    return NumpyRandomSource(seed=1234)


# =============================================================================
# Vector Storages
# =============================================================================


@pytest.fixture(params=[TupleVector, ArrayVector], ids=['tuple', 'array'])
def vector_type(request):
    """Run the test once per vector storage."""
    return request.param


@pytest.fixture
def origin_4d() -> Coordinate:
    """4-D coordinate at the origin with maximal error."""
    return Coordinate.origin(4)


# =============================================================================
# Helper Functions
# =============================================================================


def make_coordinate(
    components: Sequence[float],
    height: float = 0.0,
    error: float = 1.0,
    vector_type=TupleVector,
) -> Coordinate:
    """
    Build a coordinate from plain components.

    Args:
        components: Position components (seconds)
        height: Height term (seconds)
        error: Error estimate
        vector_type: Vector storage to use

    Returns:
        Coordinate instance.
    """
    return Coordinate(vector_type(components), height=height, error=error)


def padded(components: Sequence[float], dims: int) -> list:
    """Extend `components` with zeros up to `dims` entries."""
    return list(components) + [0.0] * (dims - len(components))


def relative_difference(estimate: float, truth: float) -> float:
    """Relative error of `estimate` against `truth`."""
    return abs(estimate - truth) / truth if truth else math.inf
