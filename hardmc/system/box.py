"""Cubic periodic simulation box."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class Box:
    """
    Cubic simulation box with periodic boundaries.

    Molecular positions are stored in box-relative (reduced) units, so the
    box only carries its edge length. Replacing the box therefore rescales
    the whole configuration in one go.

    Attributes:
        length: Box edge length in sigma units.
    """

    length: float

    def __post_init__(self) -> None:
        """Validate and convert the edge length."""
        length = float(self.length)
        if not np.isfinite(length) or length <= 0.0:
            raise ValueError(f"Box length must be positive, got {self.length}")
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, "length", length)

    @classmethod
    def cubic(cls, length: float) -> Box:
        """Create a cubic box with given side length."""
        return cls(length)

    @property
    def volume(self) -> float:
        """Return box volume."""
        return self.length**3

    def scaled(self, factor: float) -> Box:
        """Return a new box with the edge length multiplied by factor."""
        return Box(self.length * factor)

    @staticmethod
    def wrap(positions: ArrayLike) -> NDArray[np.floating]:
        """
        Wrap box-relative positions into the primary cell [-0.5, 0.5).

        Wrapping an already wrapped position leaves it unchanged.

        Args:
            positions: Positions in box units, shape (3,) or (N, 3).

        Returns:
            Wrapped positions with the same shape.
        """
        positions = np.asarray(positions, dtype=np.float64)
        return positions - np.floor(positions + 0.5)

    @staticmethod
    def minimum_image(separations: ArrayLike) -> NDArray[np.floating]:
        """
        Apply the minimum image convention to box-relative separations.

        Args:
            separations: Separation vector(s) in box units, shape (3,) or (N, 3).

        Returns:
            Nearest-image separations, each component in [-0.5, 0.5).
        """
        separations = np.asarray(separations, dtype=np.float64)
        return separations - np.floor(separations + 0.5)

    def to_absolute(self, positions: ArrayLike) -> NDArray[np.floating]:
        """Convert box-relative positions to sigma units."""
        return np.asarray(positions, dtype=np.float64) * self.length

    def to_reduced(self, positions: ArrayLike) -> NDArray[np.floating]:
        """Convert positions in sigma units to wrapped box-relative units."""
        return self.wrap(np.asarray(positions, dtype=np.float64) / self.length)
