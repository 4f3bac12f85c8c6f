"""Single-molecule translation and rotation move."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ..maths import random_rotate_vector, random_translate_vector
from ..system.box import Box
from .base import MonteCarloMove

if TYPE_CHECKING:
    from ..overlap import OverlapOracle
    from ..system import MolecularState


class TranslationRotationMove(MonteCarloMove):
    """
    Combined random displacement and rotation of one hard molecule.

    The trial is accepted if and only if the moved molecule overlaps no
    other molecule. For hard bodies every non-overlapping configuration has
    the same weight, so no Boltzmann factor enters. A step sweeps all
    molecules once, in index order.

    Attributes:
        max_displacement: Maximum displacement per axis in sigma units.
        max_rotation: Maximum rotation angle in radians.
    """

    def __init__(self, max_displacement: float = 0.05, max_rotation: float = 0.05) -> None:
        """
        Initialize translation-rotation move.

        Args:
            max_displacement: Maximum displacement per axis (sigma units).
            max_rotation: Maximum rotation angle (radians).
        """
        super().__init__()
        if max_displacement < 0.0:
            raise ValueError(f"max_displacement must be >= 0, got {max_displacement}")
        if max_rotation < 0.0:
            raise ValueError(f"max_rotation must be >= 0, got {max_rotation}")
        self.max_displacement = max_displacement
        self.max_rotation = max_rotation

    def propose(
        self,
        state: MolecularState,
        index: int,
        rng: np.random.Generator,
    ) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """
        Propose a trial position and orientation for one molecule.

        The displacement is drawn in box units (half-width
        max_displacement / box) and wrapped into [-0.5, 0.5); the rotation is
        drawn independently. Neither draw depends on any other molecule.

        Returns:
            Tuple of (trial_position, trial_orientation).
        """
        position = random_translate_vector(
            rng, self.max_displacement / state.box.length, state.positions[index]
        )
        position = Box.wrap(position)
        orientation = random_rotate_vector(
            rng, self.max_rotation, state.orientations[index]
        )
        return position, orientation

    def attempt(
        self,
        state: MolecularState,
        oracle: OverlapOracle,
        index: int,
        rng: np.random.Generator,
    ) -> bool:
        """
        Propose, test and (if accepted) commit a move of one molecule.

        Returns:
            True if the trial was accepted.
        """
        position, orientation = self.propose(state, index, rng)
        accepted = not oracle.overlap_one(state, position, orientation, index, state.box)
        if accepted:
            state.move_molecule(index, position, orientation)
        self._record(accepted)
        return accepted

    def sweep(
        self,
        state: MolecularState,
        oracle: OverlapOracle,
        rng: np.random.Generator,
    ) -> int:
        """
        Attempt one move of every molecule in index order.

        Returns:
            Number of accepted moves.
        """
        moves = 0
        for i in range(state.n_molecules):
            if self.attempt(state, oracle, i, rng):
                moves += 1
        return moves

    def step(
        self,
        state: MolecularState,
        oracle: OverlapOracle,
        rng: np.random.Generator,
    ) -> float:
        if state.n_molecules == 0:
            return 0.0
        return self.sweep(state, oracle, rng) / state.n_molecules
