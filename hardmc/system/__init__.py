"""System state and box management."""

from .box import Box
from .state import MolecularState

__all__ = ["Box", "MolecularState"]
