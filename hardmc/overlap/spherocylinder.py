"""Hard spherocylinder overlap model."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ..system.box import Box
from .base import OverlapOracle

if TYPE_CHECKING:
    from ..system import MolecularState

# Below this value of 1 - (ei.ej)^2 two axes are treated as parallel
PARALLEL_TOLERANCE = 1.0e-6


def axis_distance_sq(
    rij: NDArray[np.floating],
    ei: NDArray[np.floating],
    ej: NDArray[np.floating],
    half_length: float,
) -> NDArray[np.floating]:
    """
    Squared shortest distance between pairs of line segments.

    Each segment is centred on a molecule, runs along its unit axis and
    extends half_length either side of the centre. The unconstrained closest
    approach of the two infinite lines is found first; if it falls outside
    either segment, the worse offender is clamped to its end, the other
    point is re-projected onto its own line, and both are finally clamped.

    Args:
        rij: Centre separations ri - rj in sigma units, shape (M, 3).
        ei: Axes of the first molecules, shape (M, 3) or (3,).
        ej: Axes of the second molecules, shape (M, 3) or (3,).
        half_length: Half the cylinder length.

    Returns:
        Squared segment distances, shape (M,).
    """
    rij = np.atleast_2d(rij)
    ei = np.broadcast_to(ei, rij.shape)
    ej = np.broadcast_to(ej, rij.shape)

    rei = np.sum(rij * ei, axis=1)
    rej = np.sum(rij * ej, axis=1)
    eij = np.sum(ei * ej, axis=1)
    sin_sq = 1.0 - eij**2

    parallel = sin_sq < PARALLEL_TOLERANCE
    safe_sin_sq = np.where(parallel, 1.0, sin_sq)
    ci = np.where(parallel, -rei, (-rei + eij * rej) / safe_sin_sq)
    cj = np.where(parallel, 0.0, (rej - eij * rei) / safe_sin_sq)

    excess_i = np.abs(ci) - half_length
    excess_j = np.abs(cj) - half_length
    outside = (excess_i > 0.0) | (excess_j > 0.0)
    clamp_i = excess_i > excess_j

    ci_end = np.copysign(half_length, ci)
    cj_from_i = ci_end * eij + rej
    cj_end = np.copysign(half_length, cj)
    ci_from_j = cj_end * eij - rei

    ci = np.where(outside, np.where(clamp_i, ci_end, ci_from_j), ci)
    cj = np.where(outside, np.where(clamp_i, cj_from_i, cj_end), cj)
    ci = np.clip(ci, -half_length, half_length)
    cj = np.clip(cj, -half_length, half_length)

    dij = rij + ci[:, np.newaxis] * ei - cj[:, np.newaxis] * ej
    return np.sum(dij**2, axis=1)


class HardSpherocylinders(OverlapOracle):
    """
    Hard spherocylinders: cylinders of given length capped by hemispheres.

    Two molecules overlap when the shortest distance between their axis
    segments is less than the diameter. Pairs whose centres are further apart
    than length + diameter cannot overlap and are skipped before the segment
    calculation.

    Attributes:
        length: Cylinder length (excluding caps) in sigma units.
        diameter: Cylinder diameter in sigma units.
    """

    def __init__(self, length: float = 5.0, diameter: float = 1.0) -> None:
        """
        Initialize spherocylinder model.

        Args:
            length: Cylinder length in sigma units.
            diameter: Cylinder diameter in sigma units.
        """
        if length < 0.0:
            raise ValueError(f"length must be non-negative, got {length}")
        if diameter <= 0.0:
            raise ValueError(f"diameter must be positive, got {diameter}")
        self.length = float(length)
        self.diameter = float(diameter)

    @property
    def range(self) -> float:
        """Centre separation beyond which no overlap is possible."""
        return self.length + self.diameter

    def describe(self) -> dict[str, float]:
        return {
            "Spherocylinder L/D ratio": self.length / self.diameter,
            "Spherocylinder diameter": self.diameter,
            "Spherocylinder length": self.length,
        }

    def _overlapping(
        self,
        rij: NDArray[np.floating],
        ei: NDArray[np.floating],
        ej: NDArray[np.floating],
    ) -> NDArray[np.bool_]:
        """Flag overlapping pairs given separations in sigma units."""
        rij_sq = np.sum(rij**2, axis=1)
        result = np.zeros(len(rij), dtype=bool)
        near = rij_sq < self.range**2
        if not np.any(near):
            return result

        ei = ei if np.ndim(ei) == 1 else ei[near]
        ej = ej if np.ndim(ej) == 1 else ej[near]
        dist_sq = axis_distance_sq(rij[near], ei, ej, 0.5 * self.length)
        result[near] = dist_sq < self.diameter**2
        return result

    def _separations(
        self, state: MolecularState, position: NDArray[np.floating], box: Box
    ) -> NDArray[np.floating]:
        """Minimum-image separations from position to all molecules, sigma units."""
        return Box.minimum_image(position - state.positions) * box.length

    def overlap_one(
        self,
        state: MolecularState,
        position: NDArray[np.floating],
        orientation: NDArray[np.floating],
        index: int,
        box: Box,
    ) -> bool:
        rij = self._separations(state, np.asarray(position), box)
        others = np.arange(state.n_molecules) != index
        flags = self._overlapping(
            rij[others], np.asarray(orientation), state.orientations[others]
        )
        return bool(np.any(flags))

    def overlap_all(self, state: MolecularState, box: Box) -> bool:
        for i in range(state.n_molecules - 1):
            rij = self._separations(state, state.positions[i], box)[i + 1 :]
            if np.any(
                self._overlapping(
                    rij, state.orientations[i], state.orientations[i + 1 :]
                )
            ):
                return True
        return False

    def count_overlaps(self, state: MolecularState, box: Box) -> int:
        count = 0
        for i in range(state.n_molecules - 1):
            rij = self._separations(state, state.positions[i], box)[i + 1 :]
            count += int(
                np.count_nonzero(
                    self._overlapping(
                        rij, state.orientations[i], state.orientations[i + 1 :]
                    )
                )
            )
        return count
