"""
Metrics Module: outcome of every coordinate update.

- Applied updates with relative error and force distributions
- Skipped updates by reason code (no silent no-op updates)
- Geometry events: random direction fallback, gravity, reset

Usage:
    from vivaldi_core.metrics import get_metrics

    metrics = get_metrics()
    stats = metrics.snapshot()
    print(stats.applied, stats.skip_reasons)
"""

from .collector import (
    EVENTS,
    SKIP_REASONS,
    MetricsCollector,
    UpdateStats,
    summarize,
)

# Global singleton shared by all nodes in the process
_global_metrics = None


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector singleton.

    Returns:
        MetricsCollector instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def reset_metrics():
    """Replace the global collector with an empty one (for testing)."""
    global _global_metrics
    _global_metrics = MetricsCollector()


__all__ = [
    'EVENTS',
    'SKIP_REASONS',
    'MetricsCollector',
    'UpdateStats',
    'summarize',
    'get_metrics',
    'reset_metrics',
]
