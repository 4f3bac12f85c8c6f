"""Hard-body overlap oracles."""

from .base import OverlapOracle
from .spherocylinder import HardSpherocylinders, axis_distance_sq

__all__ = ["OverlapOracle", "HardSpherocylinders", "axis_distance_sq"]
