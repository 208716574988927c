"""
Tuning parameters for the adaptive coordinate update.

Reference values follow "Vivaldi: A Decentralized Network Coordinate System"
(Dabek et al., 2004), Figure 3 (adaptive timestep). Gravity follows
"Network Coordinates in the Wild" (Ledlie et al., 2007), Section 7.2.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import math


# Error estimate of a coordinate nobody has measured yet
DEFAULT_ERROR = 1.0

# Half-width of random initial components (seconds, +-10ms)
DEFAULT_RAND_BOUND = 0.01


class HeightMode(Enum):
    """How the height term behaves during updates."""

    FIXED = "fixed"          # Height keeps its initial value
    ADAPTIVE = "adaptive"    # Height follows the spring force (Vivaldi Section 5.4)


@dataclass
class VivaldiConfig:
    """
    Configuration for coordinate updates.

    Attributes:
        ce: Error smoothing constant (adaptation speed of the error estimate)
        cc: Position step constant (maximum fraction of the error applied)
        initial_error: Error estimate of new and reset coordinates
        rand_bound: Half-width of random initial components (seconds)
        height_mode: Whether height participates in updates
        height_min: Floor for height in ADAPTIVE mode (seconds)
        gravity_rho: Drift control strength; None disables gravity
    """

    ce: float = 0.25
    cc: float = 0.25
    initial_error: float = DEFAULT_ERROR
    rand_bound: float = DEFAULT_RAND_BOUND
    height_mode: HeightMode = HeightMode.FIXED
    height_min: float = 1e-5
    gravity_rho: Optional[float] = None

    def __post_init__(self):
        """Validate configuration."""
        if not 0.0 < self.ce <= 1.0:
            raise ValueError(f"ce must be in (0, 1]: {self.ce}")

        if not 0.0 < self.cc <= 1.0:
            raise ValueError(f"cc must be in (0, 1]: {self.cc}")

        if not (math.isfinite(self.initial_error) and self.initial_error > 0.0):
            raise ValueError(f"initial_error must be positive: {self.initial_error}")

        if not (math.isfinite(self.rand_bound) and self.rand_bound > 0.0):
            raise ValueError(f"rand_bound must be positive: {self.rand_bound}")

        if not (math.isfinite(self.height_min) and self.height_min >= 0.0):
            raise ValueError(f"height_min cannot be negative: {self.height_min}")

        if self.gravity_rho is not None and not (
            math.isfinite(self.gravity_rho) and self.gravity_rho > 0.0
        ):
            raise ValueError(f"gravity_rho must be positive: {self.gravity_rho}")

    @property
    def adaptive_height(self) -> bool:
        """True if height participates in updates."""
        return self.height_mode is HeightMode.ADAPTIVE

    @property
    def gravity_enabled(self) -> bool:
        """True if updates are followed by a pull toward the origin."""
        return self.gravity_rho is not None


def create_default_config() -> VivaldiConfig:
    """
    Create configuration with the reference tuning.

    Returns:
        VivaldiConfig with ce = cc = 0.25, fixed height, no gravity
    """
    return VivaldiConfig(
        ce=0.25,
        cc=0.25,
        initial_error=DEFAULT_ERROR,
        rand_bound=DEFAULT_RAND_BOUND,
        height_mode=HeightMode.FIXED,
        gravity_rho=None,
    )
