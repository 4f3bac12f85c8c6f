"""Per-step observables for hard-molecule Monte Carlo."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .averages import Observable
from .order import nematic_order

if TYPE_CHECKING:
    from ..overlap import OverlapOracle
    from ..system import MolecularState


def virial_pressure(state: MolecularState, oracle: OverlapOracle, eps_box: float) -> float:
    """
    Pressure from the overlap count in a slightly compressed box.

    The hard-wall virial is estimated by finite differences: shrinking the
    box by a factor 1 + eps_box creates overlaps at a rate proportional to
    the contact density, giving

        W = n_overlap(box / (1 + eps_box)) / (3 * eps_box)
        P = rho + W / V

    in units kT / sigma**3.

    Args:
        state: Current molecular state.
        oracle: Overlap oracle for the molecular model.
        eps_box: Relative box compression.

    Returns:
        Instantaneous pressure estimate.
    """
    if eps_box <= 0.0:
        raise ValueError(f"eps_box must be positive, got {eps_box}")
    compressed = state.box.scaled(1.0 / (1.0 + eps_box))
    virial = oracle.count_overlaps(state, compressed) / (3.0 * eps_box)
    return state.density + virial / state.volume


class ObservableCalculator(ABC):
    """
    Abstract base class for ensemble-specific observable sets.

    A calculator always returns the same names in the same order, so its
    output can be fed to a BlockAverager for the whole run. Acceptance
    ratios are marked as not instant: they are zero and unreported in
    snapshots taken outside the sampling loop.
    """

    @abstractmethod
    def compute(
        self,
        state: MolecularState,
        move_ratio: float = 0.0,
        volume_ratio: float = 0.0,
    ) -> list[Observable]:
        """
        Compute observables for the current state.

        Args:
            state: Current molecular state.
            move_ratio: Fraction of accepted particle moves this step.
            volume_ratio: Fraction of accepted volume moves this step.

        Returns:
            Observables in fixed order.
        """
        ...


class NVTObservables(ObservableCalculator):
    """Move ratio, virial pressure and nematic order at constant volume."""

    def __init__(self, oracle: OverlapOracle, eps_box: float = 0.001) -> None:
        """
        Initialize NVT observables.

        Args:
            oracle: Overlap oracle used for the virial estimate.
            eps_box: Relative box compression for the virial estimate.
        """
        if eps_box <= 0.0:
            raise ValueError(f"eps_box must be positive, got {eps_box}")
        self.oracle = oracle
        self.eps_box = eps_box

    def compute(
        self,
        state: MolecularState,
        move_ratio: float = 0.0,
        volume_ratio: float = 0.0,
    ) -> list[Observable]:
        return [
            Observable("Move ratio", move_ratio, instant=False),
            Observable("P", virial_pressure(state, self.oracle, self.eps_box)),
            Observable("Nematic order", nematic_order(state.orientations)),
        ]


class NPTObservables(ObservableCalculator):
    """Move and volume ratios, density and nematic order at constant pressure."""

    def compute(
        self,
        state: MolecularState,
        move_ratio: float = 0.0,
        volume_ratio: float = 0.0,
    ) -> list[Observable]:
        return [
            Observable("Move ratio", move_ratio, instant=False),
            Observable("Volume ratio", volume_ratio, instant=False),
            Observable("Density", state.density),
            Observable("Nematic order", nematic_order(state.orientations)),
        ]
