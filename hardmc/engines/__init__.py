"""Simulation engine implementations."""

from .engine import MCEngine, OverlapError, RunResult
from .reporters import (
    BlockHistoryReporter,
    CallbackReporter,
    ConfigurationReporter,
    Reporter,
    ReporterGroup,
)

__all__ = [
    "MCEngine",
    "OverlapError",
    "RunResult",
    "Reporter",
    "ReporterGroup",
    "ConfigurationReporter",
    "CallbackReporter",
    "BlockHistoryReporter",
]
