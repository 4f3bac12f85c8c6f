"""Base interface for overlap oracles."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from ..system import Box, MolecularState


class OverlapOracle(ABC):
    """
    Abstract base class for hard-body overlap tests.

    This is the only interaction in a hard-particle model: everything the
    sampler needs to know about the molecular shape goes through this
    interface. All methods are pure functions of the supplied state plus the
    box they are asked about, which may differ from ``state.box`` when a
    trial volume or a virial estimate is being evaluated.
    """

    @abstractmethod
    def overlap_one(
        self,
        state: MolecularState,
        position: NDArray[np.floating],
        orientation: NDArray[np.floating],
        index: int,
        box: Box,
    ) -> bool:
        """
        Test a trial molecule against every other molecule.

        Args:
            state: Current molecular state.
            position: Trial box-relative position, shape (3,).
            orientation: Trial unit orientation, shape (3,).
            index: Index of the molecule being moved (excluded from the test).
            box: Box in which to evaluate separations.

        Returns:
            True if the trial molecule intersects any other molecule.
        """
        ...

    @abstractmethod
    def count_overlaps(self, state: MolecularState, box: Box) -> int:
        """
        Count overlapping pairs in the configuration.

        Args:
            state: Current molecular state.
            box: Box in which to evaluate separations.

        Returns:
            Number of distinct overlapping pairs.
        """
        ...

    def overlap_all(self, state: MolecularState, box: Box) -> bool:
        """
        Test whether any pair in the configuration overlaps.

        Default implementation counts pairs; subclasses should override with
        an early exit if a cheaper test is available.
        """
        return self.count_overlaps(state, box) > 0

    def describe(self) -> dict[str, float]:
        """Return model parameters for the run report."""
        return {}
