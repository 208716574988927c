"""
Node state and the adaptive Vivaldi update.

A Node owns one Coordinate and moves it after every latency sample so that
coordinate distance agrees better with the measured round-trip time. The
step size adapts to how confident each side is in its own position.

Reference:
- Vivaldi (Dabek et al., 2004), Figure 3: The Vivaldi algorithm with an
  adaptive timestep
- Network Coordinates in the Wild (Ledlie et al., 2007), Section 7.2: Gravity

A Node is not thread-safe; each instance must have a single writer.
Distinct nodes are independent.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum
from typing import Optional, Tuple, Type

from vivaldi_core.geometry import RandomSource, TupleVector, Vector
from vivaldi_core.metrics import get_metrics
from .config import VivaldiConfig, create_default_config
from .coordinate import Coordinate
from .latency import Latency, to_duration, to_seconds

logger = logging.getLogger(__name__)


class UpdateStatus(Enum):
    """Outcome of Node.update."""

    APPLIED = "applied"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class UpdateResult:
    """
    Result of one Node.update call.

    Attributes:
        status: APPLIED or SKIPPED
        reason: Skip reason code (None when applied)
        estimated_s: Latency predicted by the coordinates before the update
        relative_error: Clamped relative error of the sample
        weight: Share of the combined error held by the local node
        force: Signed magnitude of the move (positive = away from peer)
    """

    status: UpdateStatus
    reason: Optional[str] = None
    estimated_s: Optional[float] = None
    relative_error: Optional[float] = None
    weight: Optional[float] = None
    force: Optional[float] = None

    @property
    def applied(self) -> bool:
        return self.status is UpdateStatus.APPLIED

    @property
    def skipped(self) -> bool:
        return self.status is UpdateStatus.SKIPPED

    def __bool__(self) -> bool:
        return self.applied


class Node:
    """
    A participant in the coordinate system.

    Usage:
        rng = create_random_source(seed=7)
        node = Node.rand(4, rng, node_id="n1")

        result = node.update(timedelta(milliseconds=42), peer_coordinate, rng)
        if not result:
            print(f"Sample skipped: {result.reason}")

        estimate = node.distance_to(peer_coordinate)  # timedelta

    The RandomSource is borrowed per call and never stored.
    """

    def __init__(
        self,
        coordinate: Coordinate,
        config: Optional[VivaldiConfig] = None,
        node_id: str = "local",
    ):
        """
        Initialize node.

        Args:
            coordinate: Starting coordinate
            config: Update configuration (uses defaults if None)
            node_id: Identifier used in log messages
        """
        self.node_id = node_id
        self.config = config or VivaldiConfig()
        self.metrics = get_metrics()

        self._coordinate = coordinate
        self._last_rejection: Optional[str] = None

    @classmethod
    def origin(
        cls,
        dims: int,
        config: Optional[VivaldiConfig] = None,
        vector_type: Type[Vector] = TupleVector,
        node_id: str = "local",
    ) -> 'Node':
        """Node at the origin with the configured initial error."""
        config = config or VivaldiConfig()
        coordinate = Coordinate.origin(dims, vector_type, error=config.initial_error)
        return cls(coordinate, config, node_id)

    @classmethod
    def rand(
        cls,
        dims: int,
        rng: RandomSource,
        config: Optional[VivaldiConfig] = None,
        vector_type: Type[Vector] = TupleVector,
        node_id: str = "local",
    ) -> 'Node':
        """Node at a random position within the configured bound."""
        config = config or VivaldiConfig()
        coordinate = Coordinate.rand(
            dims, rng, vector_type, bound=config.rand_bound, error=config.initial_error
        )
        return cls(coordinate, config, node_id)

    @property
    def coordinate(self) -> Coordinate:
        """Current coordinate (immutable snapshot)."""
        return self._coordinate

    @property
    def error_estimate(self) -> float:
        return self._coordinate.error

    @property
    def dims(self) -> int:
        return self._coordinate.dims

    @property
    def last_rejection(self) -> Optional[str]:
        """Reason code of the most recent skipped update, cleared on success."""
        return self._last_rejection

    def update(self, rtt: Latency, peer: Coordinate, rng: RandomSource) -> UpdateResult:
        """
        Move this node's coordinate based on one RTT sample to `peer`.

        A high local error means a large move; a high peer error means the
        peer is unsure of its own position, so this node moves less.

        Args:
            rtt: Measured round-trip time (timedelta or seconds)
            peer: Peer's advertised coordinate (not modified)
            rng: Used only if the two positions coincide

        Returns:
            UpdateResult; SKIPPED leaves the node state untouched

        Raises:
            DimensionMismatchError: If `peer` has a different dimension
        """
        rtt_s = to_seconds(rtt)
        if not math.isfinite(rtt_s) or rtt_s <= 0.0:
            return self._skip('invalid_rtt', f"RTT sample {rtt_s!r}s is not positive and finite")

        local = self._coordinate
        estimated = local.raw_distance_to(peer)

        # Relative error of this sample, bounded so one bad sample has limited pull
        relative_error = min(abs(estimated - rtt_s) / rtt_s, 1.0)

        weight = self._sample_weight(local.error, peer.error)

        # Weighted moving average of local error
        ce_weight = self.config.ce * weight
        error = relative_error * ce_weight + local.error * (1.0 - ce_weight)

        delta = self.config.cc * weight
        force = delta * (rtt_s - estimated)

        position, height = self._apply_force(local, peer, force, rng)
        if not (position.is_finite() and math.isfinite(height) and math.isfinite(error)):
            return self._skip('invalid_coordinate', "Update produced a non-finite coordinate")

        self._coordinate = replace(local, position=position, height=height, error=error)
        self._last_rejection = None

        self.metrics.record_applied(relative_error, force)

        logger.debug(f"{self.node_id}: rtt={rtt_s:.6f}s est={estimated:.6f}s "
                     f"rel_err={relative_error:.3f} weight={weight:.3f} error={error:.4f}")

        if self.config.gravity_enabled:
            self.apply_gravity(rng)

        return UpdateResult(
            status=UpdateStatus.APPLIED,
            estimated_s=estimated,
            relative_error=relative_error,
            weight=weight,
            force=force,
        )

    def apply_gravity(self, rng: RandomSource, rho: Optional[float] = None) -> bool:
        """
        Pull the coordinate toward the origin to stop the system drifting.

        The pull is -(distance / rho)^2, a small fraction of the expected
        network diameter.

        Args:
            rng: Used only if the coordinate sits exactly at the origin
            rho: Gravity strength (defaults to config.gravity_rho)

        Returns:
            True if the coordinate moved, False if the result was not finite

        Raises:
            ValueError: If no rho is given and gravity is disabled
        """
        rho = rho if rho is not None else self.config.gravity_rho
        if rho is None or rho <= 0.0:
            raise ValueError(f"Gravity requires a positive rho, got {rho!r}")

        local = self._coordinate
        origin = Coordinate.origin(local.dims, type(local.position))

        distance = local.raw_distance_to(origin)
        ratio = distance / rho
        # Multiply rather than ** so an overflow gives inf instead of raising
        force = -(ratio * ratio)

        position, height = self._apply_force(local, origin, force, rng)
        if not (position.is_finite() and math.isfinite(height)):
            logger.warning(f"{self.node_id}: Gravity produced a non-finite coordinate, ignoring")
            self.metrics.record_event('gravity_rejected')
            return False

        self._coordinate = replace(local, position=position, height=height)
        self.metrics.record_event('gravity_applied')
        return True

    def distance_to(self, peer: Coordinate) -> timedelta:
        """Estimated round-trip time to `peer`."""
        return to_duration(self.distance_seconds(peer))

    def distance_seconds(self, peer: Coordinate) -> float:
        """Estimated round-trip time to `peer` in seconds."""
        return self._coordinate.distance_to(peer)

    def reset(self):
        """Move back to the origin with the initial error (keeps offset)."""
        local = self._coordinate
        self._coordinate = Coordinate(
            position=type(local.position).zeros(local.dims),
            height=0.0,
            error=self.config.initial_error,
            offset=local.offset,
        )
        self._last_rejection = None
        self.metrics.record_event('reset')
        logger.info(f"{self.node_id}: Coordinate reset to origin")

    @staticmethod
    def _sample_weight(local_error: float, peer_error: float) -> float:
        """Share of the combined error held locally (0.5 if both claim zero error)."""
        total = local_error + peer_error
        if total <= 0.0:
            return 0.5
        return local_error / total

    def _apply_force(
        self,
        local: Coordinate,
        other: Coordinate,
        force: float,
        rng: RandomSource,
    ) -> Tuple[Vector, float]:
        """
        Push `local` away from `other` by `force` (negative pulls it closer).

        Returns:
            Tuple of (new position, new height)
        """
        magnitude, unit = local.position.unit_vector_from(other.position, rng)
        if magnitude == 0.0:
            self.metrics.record_event('degenerate_direction')
            logger.debug(f"{self.node_id}: Coincident position, using random direction")

        position = local.position + unit * force

        height = local.height
        if self.config.adaptive_height:
            height_min = self.config.height_min
            height = max(height, height_min)
            if magnitude > 0.0:
                height = max(height + (height + other.height) * force / magnitude, height_min)

        return position, height

    def _skip(self, reason: str, detail: str) -> UpdateResult:
        """Record a skipped update and leave state untouched."""
        self._last_rejection = reason
        self.metrics.record_skipped(reason)
        logger.warning(f"{self.node_id}: {detail}, skipping update")
        return UpdateResult(status=UpdateStatus.SKIPPED, reason=reason)

    def __repr__(self) -> str:
        return f'Node({self.node_id!r}, {self._coordinate!r})'


def create_default_node(dims: int, rng: RandomSource, node_id: str = "local") -> Node:
    """
    Create a randomly placed node with the reference tuning.

    Args:
        dims: Number of Euclidean dimensions
        rng: Random source for the initial position
        node_id: Identifier used in log messages

    Returns:
        Configured Node instance
    """
    return Node.rand(dims, rng, create_default_config(), node_id=node_id)
