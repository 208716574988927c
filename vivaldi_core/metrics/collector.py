"""
Update outcome metrics.

Records what happened to every latency sample handed to a Node:
- Applied updates, with bounded samples of relative error and force
- Skipped updates, each under exactly one reason code
- Geometry events (random direction fallback, gravity, reset)

The skipped total is derived from the reason counts, so the two can never
disagree.
"""

import threading
from collections import Counter, deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, Optional

import numpy as np

# Reason codes for skipped updates
SKIP_REASONS = {
    'invalid_rtt': 'Latency sample non-positive or non-finite',
    'invalid_coordinate': 'Update would produce a non-finite coordinate',
}

# Events that do not change whether an update was applied
EVENTS = {
    'degenerate_direction': 'Coincident positions, random direction used',
    'gravity_applied': 'Coordinate pulled toward the origin',
    'gravity_rejected': 'Gravity pull would produce a non-finite coordinate',
    'reset': 'Coordinate reset to the origin',
}

# Most recent samples kept per distribution
DEFAULT_MAX_SAMPLES = 10000


def summarize(samples: Iterable[float]) -> Optional[Dict[str, float]]:
    """
    Summary statistics of a sample window.

    Returns:
        Dict with count, mean, p95 and max; None if there are no samples
    """
    values = np.fromiter(samples, dtype=np.float64)
    if values.size == 0:
        return None

    return {
        'count': int(values.size),
        'mean': float(values.mean()),
        'p95': float(np.percentile(values, 95)),
        'max': float(values.max()),
    }


@dataclass(frozen=True)
class UpdateStats:
    """
    Point-in-time copy of the update outcomes.

    Attributes:
        applied: Number of applied updates
        skip_reasons: Skipped updates per reason code
        events: Count per geometry event
        relative_error: Summary of recent relative errors (None if none applied)
        force: Summary of recent force magnitudes (None if none applied)
    """

    applied: int
    skip_reasons: Dict[str, int]
    events: Dict[str, int]
    relative_error: Optional[Dict[str, float]]
    force: Optional[Dict[str, float]]

    @property
    def skipped(self) -> int:
        return sum(self.skip_reasons.values())

    @property
    def total(self) -> int:
        """Samples seen, applied or skipped."""
        return self.applied + self.skipped

    @property
    def skip_fraction(self) -> float:
        return self.skipped / self.total if self.total else 0.0


class MetricsCollector:
    """
    Thread-safe record of update outcomes.

    Usage:
        metrics = MetricsCollector()
        metrics.record_applied(relative_error=0.12, force=0.004)
        metrics.record_skipped('invalid_rtt')

        stats = metrics.snapshot()
        print(f"{stats.skipped}/{stats.total} samples skipped")

    Unknown reason or event codes raise ValueError.
    """

    def __init__(self, max_samples: int = DEFAULT_MAX_SAMPLES):
        """
        Initialize collector.

        Args:
            max_samples: Samples kept per distribution (oldest dropped first)
        """
        if max_samples < 1:
            raise ValueError(f"max_samples must be positive: {max_samples}")

        self._lock = threading.Lock()
        self._applied = 0
        self._skip_reasons: Counter = Counter(dict.fromkeys(SKIP_REASONS, 0))
        self._events: Counter = Counter(dict.fromkeys(EVENTS, 0))
        self._relative_error: Deque[float] = deque(maxlen=max_samples)
        self._force: Deque[float] = deque(maxlen=max_samples)

    def record_applied(self, relative_error: float, force: float):
        """Count one applied update and keep its relative error and |force|."""
        with self._lock:
            self._applied += 1
            self._relative_error.append(relative_error)
            self._force.append(abs(force))

    def record_skipped(self, reason: str):
        """Count one skipped update under `reason`."""
        if reason not in SKIP_REASONS:
            raise ValueError(f"Unknown skip reason '{reason}'")

        with self._lock:
            self._skip_reasons[reason] += 1

    def record_event(self, event: str):
        """Count one geometry event."""
        if event not in EVENTS:
            raise ValueError(f"Unknown event '{event}'")

        with self._lock:
            self._events[event] += 1

    @property
    def applied(self) -> int:
        with self._lock:
            return self._applied

    @property
    def skipped(self) -> int:
        with self._lock:
            return sum(self._skip_reasons.values())

    def skip_count(self, reason: str) -> int:
        with self._lock:
            return self._skip_reasons[reason]

    def event_count(self, event: str) -> int:
        with self._lock:
            return self._events[event]

    def snapshot(self) -> UpdateStats:
        """Copy of the current outcomes with distribution summaries."""
        with self._lock:
            applied = self._applied
            skip_reasons = dict(self._skip_reasons)
            events = dict(self._events)
            relative_error = list(self._relative_error)
            force = list(self._force)

        return UpdateStats(
            applied=applied,
            skip_reasons=skip_reasons,
            events=events,
            relative_error=summarize(relative_error),
            force=summarize(force),
        )
