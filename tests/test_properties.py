"""
Behavioural tests for the update algorithm over many samples.

Tests cover:
- Error and height stay non-negative and finite under random input
- The same answers in every dimension (zero-padded)
- Deterministic two-node scenario from fixed seeds
- Convergence toward a fixed latency and toward a small Euclidean network
"""

import math
from datetime import timedelta
from itertools import combinations

import numpy as np
import pytest

from vivaldi_core.geometry import NumpyRandomSource, TupleVector
from vivaldi_core.coordinates import (
    Coordinate,
    HeightMode,
    Node,
    VivaldiConfig,
)
from tests.conftest import make_coordinate, padded, relative_difference


# =============================================================================
# Invariants Under Random Input
# =============================================================================


class TestInvariants:
    """Tests that hold after any sequence of updates."""

    @pytest.mark.parametrize("seed", [3, 17, 42])
    def test_error_and_height_stay_valid(self, seed, vector_type):
        """Random peers and samples never drive error or height negative."""
        rng = NumpyRandomSource(seed=seed)
        data = np.random.default_rng(seed + 1000)
        config = VivaldiConfig(height_mode=HeightMode.ADAPTIVE, gravity_rho=1.0)
        node = Node.rand(3, rng, config, vector_type=vector_type)

        for _ in range(300):
            peer = Coordinate(
                vector_type(data.uniform(-0.2, 0.2, 3)),
                height=float(data.uniform(0.0, 0.02)),
                error=float(data.uniform(0.0, 2.0)),
            )
            if data.random() < 0.1:
                rtt = float(data.choice([0.0, -0.01, math.nan, math.inf]))
            else:
                rtt = float(data.uniform(0.001, 0.3))

            node.update(rtt, peer, rng)

            coordinate = node.coordinate
            assert coordinate.error >= 0.0
            assert coordinate.height >= 0.0
            assert coordinate.is_finite()

    def test_skips_are_counted(self, rng, fresh_metrics):
        """Every sample is counted exactly once as applied or skipped."""
        node = Node.rand(2, rng)
        peer = Coordinate.rand(2, rng)
        samples = [0.05, 0.0, 0.04, math.nan, 0.06, -1.0, 0.05]

        for rtt in samples:
            node.update(rtt, peer, rng)

        applied = fresh_metrics.applied
        skipped = fresh_metrics.skipped
        assert applied == 4
        assert skipped == 3
        assert fresh_metrics.snapshot().skip_fraction == pytest.approx(3 / 7)


# =============================================================================
# Dimension Genericity
# =============================================================================


class TestDimensions:
    """The algorithm behaves identically in every dimension."""

    @pytest.mark.parametrize("dims", [2, 4, 8])
    def test_padded_update_matches(self, dims, vector_type, rng):
        """A 1-D problem embedded in N dimensions gives the same answer."""
        node = Node(make_coordinate(padded([0.01], dims), vector_type=vector_type))
        peer = Coordinate.origin(dims, vector_type)

        result = node.update(0.05, peer, rng)

        assert result.applied
        assert list(node.coordinate.position) == pytest.approx(padded([0.015], dims))
        assert node.error_estimate == pytest.approx(0.975)

    @pytest.mark.parametrize("dims", [2, 4, 8])
    def test_padded_distance_matches(self, dims):
        """Zero padding leaves distances unchanged."""
        a = make_coordinate(padded([0.03, 0.04], dims), height=0.001)
        b = make_coordinate(padded([0.0, 0.0], dims), height=0.002)

        assert a.distance_to(b) == pytest.approx(0.053)


# =============================================================================
# Deterministic Scenario
# =============================================================================


def _two_node_scenario(seed_a: int, seed_b: int):
    """Place A and B at random, then feed each one sample against the origin."""
    rng_a = NumpyRandomSource(seed=seed_a)
    rng_b = NumpyRandomSource(seed=seed_b)
    origin = Coordinate.origin(4)

    node_a = Node.rand(4, rng_a, node_id="A")
    node_b = Node.rand(4, rng_b, node_id="B")

    result_a = node_a.update(timedelta(milliseconds=200), origin, rng_a)
    result_b = node_b.update(timedelta(milliseconds=30), origin, rng_b)

    return node_a, node_b, result_a, result_b


class TestScenario:
    """Two freshly placed nodes learning from the origin."""

    def test_both_updates_applied(self):
        """Test both samples are applied and errors drop."""
        node_a, node_b, result_a, result_b = _two_node_scenario(1, 2)

        assert result_a.applied
        assert result_b.applied
        assert node_a.error_estimate < 1.0
        assert node_b.error_estimate < 1.0

        estimate = node_a.distance_to(node_b.coordinate)
        assert isinstance(estimate, timedelta)
        assert math.isfinite(estimate.total_seconds())
        assert estimate >= timedelta(0)

    def test_reproducible(self):
        """Same seeds give bit-identical coordinates and estimates."""
        first = _two_node_scenario(1, 2)
        second = _two_node_scenario(1, 2)

        for a, b in zip(first[:2], second[:2]):
            assert a.coordinate.to_array().tobytes() == b.coordinate.to_array().tobytes()

        assert (first[0].distance_seconds(first[1].coordinate)
                == second[0].distance_seconds(second[1].coordinate))

    def test_different_seeds_differ(self):
        """Different seeds place nodes differently."""
        first = _two_node_scenario(1, 2)
        second = _two_node_scenario(3, 4)

        assert first[0].coordinate != second[0].coordinate


# =============================================================================
# Convergence
# =============================================================================


class TestConvergence:
    """Repeated exchanges settle on the measured latencies."""

    @pytest.mark.parametrize("latency_s", [0.08, 0.005, 0.25])
    def test_two_nodes_converge(self, latency_s, vector_type):
        """200 rounds against a fixed latency end within 10%."""
        rng = NumpyRandomSource(seed=7)
        node_a = Node.rand(4, rng, vector_type=vector_type, node_id="A")
        node_b = Node.rand(4, rng, vector_type=vector_type, node_id="B")

        for _ in range(200):
            node_a.update(latency_s, node_b.coordinate, rng)
            node_b.update(latency_s, node_a.coordinate, rng)

        estimate = node_a.distance_seconds(node_b.coordinate)
        assert relative_difference(estimate, latency_s) <= 0.10
        assert node_a.error_estimate < 0.1
        assert node_b.error_estimate < 0.1

    def test_euclidean_network_converges(self):
        """Nodes with planar latencies find a consistent embedding."""
        rng = NumpyRandomSource(seed=21)
        truth = np.array([
            [0.000, 0.000],
            [0.060, 0.000],
            [0.000, 0.045],
            [0.060, 0.045],
            [0.030, 0.090],
        ])
        nodes = [Node.rand(4, rng, node_id=f"n{i}") for i in range(len(truth))]
        pairs = list(combinations(range(len(truth)), 2))

        def latency(i, j):
            return float(np.linalg.norm(truth[i] - truth[j]))

        for _ in range(300):
            for i, j in pairs:
                nodes[i].update(latency(i, j), nodes[j].coordinate, rng)
                nodes[j].update(latency(i, j), nodes[i].coordinate, rng)

        errors = [
            relative_difference(nodes[i].distance_seconds(nodes[j].coordinate), latency(i, j))
            for i, j in pairs
        ]
        assert sum(errors) / len(errors) < 0.25

    def test_gravity_keeps_network_near_origin(self):
        """With gravity the centroid stays close to the origin."""
        rng = NumpyRandomSource(seed=5)
        config = VivaldiConfig(gravity_rho=0.5)
        nodes = [Node.rand(3, rng, config, node_id=f"n{i}") for i in range(3)]

        for _ in range(200):
            for i, j in combinations(range(3), 2):
                nodes[i].update(0.05, nodes[j].coordinate, rng)
                nodes[j].update(0.05, nodes[i].coordinate, rng)

        centroid = sum(
            (n.coordinate.position for n in nodes[1:]), nodes[0].coordinate.position
        ) * (1.0 / len(nodes))
        assert centroid.norm() < 0.05
        assert all(isinstance(n.coordinate.position, TupleVector) for n in nodes)
