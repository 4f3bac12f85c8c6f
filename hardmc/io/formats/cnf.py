"""Plain-text molecular configuration format (cnf.* files)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..base import ConfigurationReader, ConfigurationWriter

if TYPE_CHECKING:
    from ...system import MolecularState


class CnfWriter(ConfigurationWriter):
    """
    Configuration writer for linear molecules.

    The format is:
        N
        box
        rx ry rz ex ey ez
        ...

    with positions in absolute (sigma) units.
    """

    def __init__(self, filename: str | Path, precision: int = 10) -> None:
        """
        Initialize cnf writer.

        Args:
            filename: Output file path.
            precision: Decimal places for coordinates.
        """
        super().__init__(filename)
        self.precision = precision

    def write_arrays(
        self,
        n_molecules: int,
        box: float,
        positions: ArrayLike,
        orientations: ArrayLike,
    ) -> None:
        """
        Write a configuration given as plain arrays.

        Args:
            n_molecules: Number of molecules.
            box: Box length.
            positions: Absolute positions, shape (N, 3).
            orientations: Orientation vectors, shape (N, 3).
        """
        if self._file is None:
            raise RuntimeError("File not open. Use context manager or call open().")

        positions = np.asarray(positions, dtype=np.float64)
        orientations = np.asarray(orientations, dtype=np.float64)
        if positions.shape != (n_molecules, 3) or orientations.shape != (n_molecules, 3):
            raise ValueError(
                f"arrays of shape {positions.shape} and {orientations.shape} "
                f"incompatible with {n_molecules} molecules"
            )

        width = self.precision + 5
        fmt = f"{{:{width}.{self.precision}f}}"
        self._file.write(f"{n_molecules:15d}\n")
        # Shortest round-trip representation keeps the box length exact
        self._file.write(f"{float(box)!r:>15}\n")
        for r, e in zip(positions, orientations):
            self._file.write("".join(fmt.format(v) for v in (*r, *e)) + "\n")

    def write(self, state: MolecularState) -> None:
        """Write a molecular state, converting positions to absolute units."""
        self.write_arrays(
            state.n_molecules,
            state.box.length,
            state.absolute_positions,
            state.orientations,
        )


class CnfReader(ConfigurationReader):
    """Configuration reader for the cnf format."""

    def _lines(self) -> list[str]:
        if self._file is None:
            raise RuntimeError("File not open.")
        self._file.seek(0)
        return [line for line in self._file.read().splitlines() if line.strip()]

    def _parse_header(self, lines: list[str]) -> tuple[int, float]:
        if len(lines) < 2:
            raise ValueError(f"{self.filename}: missing molecule count or box length")
        try:
            n_molecules = int(lines[0].split()[0])
            box = float(lines[1].split()[0])
        except ValueError as err:
            raise ValueError(f"{self.filename}: malformed header: {err}") from err
        if n_molecules < 0:
            raise ValueError(f"{self.filename}: negative molecule count {n_molecules}")
        if not np.isfinite(box) or box <= 0.0:
            raise ValueError(f"{self.filename}: box length must be positive, got {box}")
        return n_molecules, box

    def read_header(self) -> tuple[int, float]:
        return self._parse_header(self._lines())

    def read(self) -> dict:
        lines = self._lines()
        n_molecules, box = self._parse_header(lines)

        body = lines[2:]
        if len(body) < n_molecules:
            raise ValueError(
                f"{self.filename}: expected {n_molecules} molecules, found {len(body)}"
            )

        data = np.zeros((n_molecules, 6))
        for i in range(n_molecules):
            parts = body[i].split()
            if len(parts) < 6:
                raise ValueError(
                    f"{self.filename}: line {i + 3} has {len(parts)} fields, expected 6"
                )
            try:
                data[i] = [float(x) for x in parts[:6]]
            except ValueError as err:
                raise ValueError(f"{self.filename}: line {i + 3}: {err}") from err

        return {
            "n_molecules": n_molecules,
            "box": box,
            "positions": data[:, :3],
            "orientations": data[:, 3:],
        }


def read_configuration_header(path: str | Path) -> tuple[int, float]:
    """Read only the molecule count and box length of a cnf file."""
    with CnfReader(path) as reader:
        return reader.read_header()


def read_configuration(
    path: str | Path,
) -> tuple[int, float, NDArray[np.floating], NDArray[np.floating]]:
    """
    Read a cnf file.

    Returns:
        Tuple of (n_molecules, box, positions in absolute units, orientations).
    """
    with CnfReader(path) as reader:
        data = reader.read()
    return data["n_molecules"], data["box"], data["positions"], data["orientations"]


def write_configuration(
    path: str | Path,
    n_molecules: int,
    box: float,
    positions: ArrayLike,
    orientations: ArrayLike,
) -> None:
    """Write a cnf file; positions must be in absolute units."""
    with CnfWriter(path) as writer:
        writer.write_arrays(n_molecules, box, positions, orientations)
