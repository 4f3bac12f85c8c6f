"""Molecular state representation."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .box import Box

# Tolerance on |e| - 1 before an orientation is considered corrupt
ORIENTATION_TOLERANCE = 1.0e-6


@dataclass
class MolecularState:
    """
    Single source of truth for the configuration of N linear molecules.

    Positions and orientations are parallel arrays; a molecule is identified
    only by its index. Positions are held in box-relative units in
    [-0.5, 0.5), so that a change of box length is a single assignment.

    Attributes:
        positions: Box-relative centre positions, shape (N, 3).
        orientations: Unit axis vectors, shape (N, 3).
        box: Cubic simulation box.
    """

    positions: NDArray[np.floating]
    orientations: NDArray[np.floating]
    box: Box

    def __post_init__(self) -> None:
        """Validate shapes, wrap positions and normalise orientations."""
        self.positions = np.array(self.positions, dtype=np.float64)
        self.orientations = np.array(self.orientations, dtype=np.float64)

        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            raise ValueError(
                f"positions must have shape (N, 3), got {self.positions.shape}"
            )
        if self.orientations.shape != self.positions.shape:
            raise ValueError(
                f"orientations shape {self.orientations.shape} incompatible with "
                f"{len(self.positions)} molecules"
            )

        norms = np.linalg.norm(self.orientations, axis=1)
        if np.any(norms == 0.0):
            raise ValueError("orientation vectors must be non-zero")

        self.positions = Box.wrap(self.positions)
        self.orientations = self.orientations / norms[:, np.newaxis]

    @classmethod
    def from_absolute(
        cls,
        positions: ArrayLike,
        orientations: ArrayLike,
        box_length: float,
    ) -> MolecularState:
        """
        Create a state from positions given in sigma units.

        Args:
            positions: Centre positions in sigma units, shape (N, 3).
            orientations: Axis vectors, shape (N, 3); normalised on creation.
            box_length: Box edge length in sigma units.

        Returns:
            New MolecularState with box-relative positions.
        """
        box = Box.cubic(box_length)
        return cls(
            positions=np.asarray(positions, dtype=np.float64) / box.length,
            orientations=orientations,
            box=box,
        )

    @property
    def n_molecules(self) -> int:
        """Return number of molecules."""
        return len(self.positions)

    @property
    def volume(self) -> float:
        """Return box volume."""
        return self.box.volume

    @property
    def density(self) -> float:
        """Return number density N / V."""
        return self.n_molecules / self.box.volume

    @property
    def absolute_positions(self) -> NDArray[np.floating]:
        """Return positions in sigma units."""
        return self.box.to_absolute(self.positions)

    def move_molecule(
        self,
        index: int,
        position: NDArray[np.floating],
        orientation: NDArray[np.floating],
    ) -> None:
        """
        Commit an accepted trial position and orientation for one molecule.

        Args:
            index: Molecule index.
            position: Wrapped box-relative position, shape (3,).
            orientation: Unit orientation vector, shape (3,).
        """
        position = np.asarray(position, dtype=np.float64)
        orientation = np.asarray(orientation, dtype=np.float64)
        if position.shape != (3,) or orientation.shape != (3,):
            raise ValueError(
                f"trial vectors must have shape (3,), got {position.shape} "
                f"and {orientation.shape}"
            )
        if abs(np.linalg.norm(orientation) - 1.0) > ORIENTATION_TOLERANCE:
            raise ValueError("trial orientation is not a unit vector")
        self.positions[index] = position
        self.orientations[index] = orientation

    def set_box(self, box: Box) -> None:
        """Commit a new box; box-relative positions stay valid."""
        self.box = box

    def copy(self) -> MolecularState:
        """Create a deep copy of this state."""
        return MolecularState(
            positions=self.positions.copy(),
            orientations=self.orientations.copy(),
            box=self.box,  # Box is immutable
        )
