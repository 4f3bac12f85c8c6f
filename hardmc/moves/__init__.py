"""Monte Carlo move implementations."""

from .base import MonteCarloMove
from .particle import TranslationRotationMove
from .volume import LogBoxMove

__all__ = [
    "MonteCarloMove",
    "TranslationRotationMove",
    "LogBoxMove",
]
