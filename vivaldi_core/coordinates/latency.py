"""Conversions between latency samples and seconds."""

from datetime import timedelta
from numbers import Real
from typing import Union

Latency = Union[timedelta, float]

# timedelta.max as float seconds (rounds up); any value at or above it overflows timedelta
_MAX_SECONDS = timedelta.max.total_seconds()


def to_seconds(latency: Latency) -> float:
    """
    Convert a latency sample to float seconds.

    Args:
        latency: timedelta or a real number of seconds

    Returns:
        Seconds as float (may be NaN/inf if the input number is)

    Raises:
        TypeError: For any other type
    """
    if isinstance(latency, timedelta):
        return latency.total_seconds()

    if isinstance(latency, Real) and not isinstance(latency, bool):
        return float(latency)

    raise TypeError(f"Latency must be timedelta or seconds, got {type(latency).__name__}")


def to_duration(seconds: float) -> timedelta:
    """
    Convert non-negative float seconds to timedelta.

    timedelta has microsecond resolution, so the result is rounded to the
    nearest microsecond and anything below 0.5us becomes timedelta(0).
    Estimates beyond timedelta.max (about 2.7 million years) saturate to
    timedelta.max; use float seconds where that range matters.
    """
    if seconds >= _MAX_SECONDS:
        return timedelta.max
    return timedelta(seconds=seconds)
