"""
hardmc - Monte Carlo sampling of hard linear molecules.

Design Principles:
- Hard-core model: overlap tests are the only interaction
- NVT and NPT ensembles sharing one sampling engine
- Deterministic + reproducible (explicit, seedable generators)
- Observables block-averaged through a fixed-order protocol

Quick Start:
    >>> from hardmc import simulate
    >>> from hardmc.config import NVTParameters
    >>> result = simulate.nvt(NVTParameters(n_blocks=5, n_steps=100), "run1")
    >>> print(f"Pressure: {result.average('P'):.3f}")
"""

__version__ = "0.1.0"

# High-level APIs
from . import plotting, simulate
from .config import ConfigurationError, NPTParameters, NVTParameters
from .engines import MCEngine, OverlapError
from .moves import LogBoxMove, TranslationRotationMove
from .overlap import HardSpherocylinders

# Core components for advanced users
from .system import Box, MolecularState

__all__ = [
    "simulate",
    "plotting",
    "Box",
    "MolecularState",
    "MCEngine",
    "OverlapError",
    "HardSpherocylinders",
    "TranslationRotationMove",
    "LogBoxMove",
    "NVTParameters",
    "NPTParameters",
    "ConfigurationError",
]
