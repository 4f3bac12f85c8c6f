"""Constant-pressure box rescaling move."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ..maths import metropolis
from .base import MonteCarloMove

if TYPE_CHECKING:
    from ..overlap import OverlapOracle
    from ..system import Box, MolecularState


class LogBoxMove(MonteCarloMove):
    """
    Monte Carlo volume move sampled uniformly in log(box length).

    Positions are held in box-relative units, so a trial simply replaces the
    box length; the rescaled configuration is first checked for overlaps and
    then subjected to the Metropolis test on

        delta = P * (V_new - V_old) + (N + 1) * ln(rho_new / rho_old)

    with kT = 1. The factor N + 1 rather than N comes from sampling
    log(box) instead of V. Produces the correct NPT ensemble.

    Attributes:
        max_box_displacement: Maximum change of ln(box) per trial.
        pressure: Target pressure in kT / sigma**3.
    """

    def __init__(self, max_box_displacement: float = 0.001, pressure: float = 1.4) -> None:
        """
        Initialize log-box move.

        Args:
            max_box_displacement: Maximum change of ln(box) per trial.
            pressure: Target pressure in reduced units.
        """
        super().__init__()
        if max_box_displacement < 0.0:
            raise ValueError(
                f"max_box_displacement must be >= 0, got {max_box_displacement}"
            )
        self.max_box_displacement = max_box_displacement
        self.pressure = pressure

    def propose(self, box: Box, rng: np.random.Generator) -> tuple[Box, float]:
        """
        Propose a trial box.

        Returns:
            Tuple of (trial_box, log_box_scale), trial length = box * exp(scale).
        """
        zeta = 2.0 * rng.random() - 1.0  # Uniform in (-1, +1)
        log_box_scale = zeta * self.max_box_displacement
        return box.scaled(np.exp(log_box_scale)), log_box_scale

    def acceptance_exponent(
        self, state: MolecularState, trial_box: Box, log_box_scale: float
    ) -> float:
        """
        Return delta for the Metropolis test of a trial box.

        Args:
            state: Current state (supplies N and the current box).
            trial_box: Proposed box.
            log_box_scale: ln(trial_box / box) as drawn by propose().
        """
        log_density_scale = -3.0 * log_box_scale  # ln((box/trial_box)**3)
        delta = self.pressure * (trial_box.volume - state.box.volume)  # PV term
        delta += (state.n_molecules + 1) * log_density_scale
        return float(delta)

    def attempt(
        self,
        state: MolecularState,
        oracle: OverlapOracle,
        rng: np.random.Generator,
    ) -> bool:
        """
        Propose, test and (if accepted) commit one box rescaling.

        Returns:
            True if the trial box was accepted.
        """
        trial_box, log_box_scale = self.propose(state.box, rng)

        accepted = False
        if not oracle.overlap_all(state, trial_box):
            delta = self.acceptance_exponent(state, trial_box, log_box_scale)
            accepted = metropolis(rng, delta)

        if accepted:
            state.set_box(trial_box)
        self._record(accepted)
        return accepted

    def step(
        self,
        state: MolecularState,
        oracle: OverlapOracle,
        rng: np.random.Generator,
    ) -> float:
        return 1.0 if self.attempt(state, oracle, rng) else 0.0
