"""Base interface for Monte Carlo moves."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from ..overlap import OverlapOracle
    from ..system import MolecularState


class MonteCarloMove(ABC):
    """
    Abstract base class for Monte Carlo trial moves.

    A move proposes a trial, decides acceptance and commits accepted trials
    into the MolecularState. It is the only place where the state is
    mutated during sampling. Attempt and acceptance counts are accumulated
    until reset_statistics() is called.
    """

    def __init__(self) -> None:
        self._n_attempts = 0
        self._n_accepted = 0

    @abstractmethod
    def step(
        self,
        state: MolecularState,
        oracle: OverlapOracle,
        rng: np.random.Generator,
    ) -> float:
        """
        Perform one step's worth of trials of this move.

        Args:
            state: Molecular state, modified in place on acceptance.
            oracle: Overlap oracle for the molecular model.
            rng: Random number generator.

        Returns:
            Fraction of this step's trials that were accepted.
        """
        ...

    def _record(self, accepted: bool) -> None:
        self._n_attempts += 1
        if accepted:
            self._n_accepted += 1

    @property
    def n_attempts(self) -> int:
        """Return number of trials since the last reset."""
        return self._n_attempts

    @property
    def n_accepted(self) -> int:
        """Return number of accepted trials since the last reset."""
        return self._n_accepted

    @property
    def acceptance_rate(self) -> float:
        """Return acceptance rate."""
        if self._n_attempts == 0:
            return 0.0
        return self._n_accepted / self._n_attempts

    def reset_statistics(self) -> None:
        """Reset acceptance statistics."""
        self._n_attempts = 0
        self._n_accepted = 0
