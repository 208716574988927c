"""
Exception types for the coordinate system.

Degenerate geometry and invalid latency samples are handled locally and
never raised. Only programming errors surface as exceptions.
"""


class VivaldiError(Exception):
    """Base class for coordinate system errors."""


class DimensionMismatchError(VivaldiError, ValueError):
    """Raised when vectors or coordinates of different dimension are combined."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Dimension mismatch: expected {expected}, got {actual}")


class InvalidCoordinateError(VivaldiError, ValueError):
    """Raised when a coordinate component is NaN or infinite."""
