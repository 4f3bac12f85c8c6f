"""Base classes for configuration I/O."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from ..system import MolecularState


class _ConfigurationFile(ABC):
    """Text file opened in a fixed mode for the duration of a with-block."""

    mode = "r"

    def __init__(self, filename: str | Path) -> None:
        self.filename = Path(filename)
        self._file: TextIO | None = None

    def open(self) -> None:
        self._file = self.filename.open(self.mode)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class ConfigurationWriter(_ConfigurationFile):
    """
    Writes one molecular configuration per file.

    Example:
        with CnfWriter("cnf.out") as writer:
            writer.write(state)
    """

    mode = "w"

    @abstractmethod
    def write(self, state: MolecularState) -> None:
        """Write a state, with positions converted to absolute units."""
        ...


class ConfigurationReader(_ConfigurationFile):
    """
    Reads a molecular configuration.

    Example:
        with CnfReader("cnf.inp") as reader:
            n, box = reader.read_header()
            state = reader.read_state()
    """

    @abstractmethod
    def read_header(self) -> tuple[int, float]:
        """Return (molecule count, box length)."""
        ...

    @abstractmethod
    def read(self) -> dict:
        """
        Read the full configuration.

        Returns:
            Dictionary with 'n_molecules', 'box', 'positions' (absolute units)
            and 'orientations'.
        """
        ...

    def read_state(self) -> MolecularState:
        """Read the configuration as a MolecularState in box-relative units."""
        from ..system.state import MolecularState

        data = self.read()
        return MolecularState.from_absolute(
            data["positions"], data["orientations"], data["box"]
        )
