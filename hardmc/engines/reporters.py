"""Reporter implementations for block-end output."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from ..analysis.order import nematic_order
from ..io.formats.cnf import CnfWriter

if TYPE_CHECKING:
    from ..system import MolecularState


class Reporter(ABC):
    """
    Abstract base class for simulation reporters.

    Reporters are called at the end of blocks to save configurations,
    record history or run custom code, and once more after the run.
    """

    @abstractmethod
    def report(self, state: MolecularState, block: int, values: dict[str, float]) -> None:
        """
        Generate report at the end of a block.

        Args:
            state: Current molecular state.
            block: Block number (1-based).
            values: Block values of the averaged observables.
        """
        ...

    @property
    def frequency(self) -> int:
        """Return reporting frequency (every N blocks)."""
        return 1

    def should_report(self, block: int) -> bool:
        """Check if reporter should run at this block."""
        return block % self.frequency == 0

    def initialize(self, state: MolecularState, n_blocks: int) -> None:
        """Initialize reporter (called before the first block)."""
        pass

    def finalize(self, state: MolecularState) -> None:
        """Finalize reporter (called after the run has been verified)."""
        pass


class ReporterGroup:
    """
    Collection of reporters with automatic frequency handling.
    """

    def __init__(self, reporters: list[Reporter] | None = None) -> None:
        """
        Initialize reporter group.

        Args:
            reporters: List of reporters to manage.
        """
        self._reporters: list[Reporter] = reporters if reporters else []

    def add(self, reporter: Reporter) -> None:
        """Add a reporter to the group."""
        self._reporters.append(reporter)

    def remove(self, reporter: Reporter) -> None:
        """Remove a reporter from the group."""
        self._reporters.remove(reporter)

    def initialize(self, state: MolecularState, n_blocks: int) -> None:
        """Initialize all reporters."""
        for reporter in self._reporters:
            reporter.initialize(state, n_blocks)

    def report(self, state: MolecularState, block: int, values: dict[str, float]) -> None:
        """Run all reporters that should fire at this block."""
        for reporter in self._reporters:
            if reporter.should_report(block):
                reporter.report(state, block, values)

    def finalize(self, state: MolecularState) -> None:
        """Finalize all reporters."""
        for reporter in self._reporters:
            reporter.finalize(state)

    def __len__(self) -> int:
        return len(self._reporters)


class ConfigurationReporter(Reporter):
    """
    Reporter that saves the configuration at every block end.

    Files are named prefix + three-digit block number (cnf.001, cnf.002, ...)
    when the run has fewer than 1000 blocks; longer runs overwrite a single
    prefix + "sav" file. After the run, the final configuration is written
    to prefix + "out".
    """

    def __init__(
        self,
        directory: str | Path = ".",
        prefix: str = "cnf.",
        save_tag: str = "sav",
        final_tag: str = "out",
    ) -> None:
        """
        Initialize configuration reporter.

        Args:
            directory: Output directory (created if needed).
            prefix: Filename prefix.
            save_tag: Tag for block checkpoints when block numbers do not fit.
            final_tag: Tag for the final configuration.
        """
        self.directory = Path(directory)
        self.prefix = prefix
        self.save_tag = save_tag
        self.final_tag = final_tag
        self._n_blocks = 0
        self._written: list[Path] = []

    def initialize(self, state: MolecularState, n_blocks: int) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._n_blocks = n_blocks

    def tag(self, block: int) -> str:
        """Return the filename tag for a block checkpoint."""
        if self._n_blocks < 1000:
            return f"{block:03d}"
        return self.save_tag

    def _save(self, state: MolecularState, tag: str) -> Path:
        path = self.directory / f"{self.prefix}{tag}"
        with CnfWriter(path) as writer:
            writer.write(state)
        self._written.append(path)
        return path

    def report(self, state: MolecularState, block: int, values: dict[str, float]) -> None:
        """Save block checkpoint."""
        self._save(state, self.tag(block))

    def finalize(self, state: MolecularState) -> None:
        """Save final configuration."""
        self._save(state, self.final_tag)

    @property
    def written(self) -> list[Path]:
        """Return paths written so far, in order."""
        return self._written.copy()


class CallbackReporter(Reporter):
    """
    Reporter that calls a user-defined function.

    Allows arbitrary custom reporting logic.
    """

    def __init__(
        self,
        callback: Callable[[MolecularState, int, dict[str, float]], None],
        frequency: int = 1,
    ) -> None:
        """
        Initialize callback reporter.

        Args:
            callback: Function to call with (state, block, values).
            frequency: Reporting frequency in blocks.
        """
        self._callback = callback
        self._frequency = frequency

    @property
    def frequency(self) -> int:
        return self._frequency

    def report(self, state: MolecularState, block: int, values: dict[str, float]) -> None:
        """Call the callback function."""
        self._callback(state, block, values)


class BlockHistoryReporter(Reporter):
    """
    Reporter that keeps block-end box length, density and nematic order in memory.
    """

    def __init__(self, frequency: int = 1) -> None:
        """
        Initialize block history reporter.

        Args:
            frequency: Reporting frequency in blocks.
        """
        self._frequency = frequency
        self._blocks: list[int] = []
        self._box: list[float] = []
        self._density: list[float] = []
        self._order: list[float] = []

    @property
    def frequency(self) -> int:
        return self._frequency

    def report(self, state: MolecularState, block: int, values: dict[str, float]) -> None:
        """Record block-end snapshot."""
        self._blocks.append(block)
        self._box.append(state.box.length)
        self._density.append(state.density)
        self._order.append(nematic_order(state.orientations))

    @property
    def blocks(self) -> np.ndarray:
        """Return recorded block numbers."""
        return np.array(self._blocks, dtype=int)

    @property
    def box(self) -> np.ndarray:
        """Return box length history."""
        return np.array(self._box)

    @property
    def density(self) -> np.ndarray:
        """Return density history."""
        return np.array(self._density)

    @property
    def nematic_order(self) -> np.ndarray:
        """Return nematic order history."""
        return np.array(self._order)

    def clear(self) -> None:
        """Clear stored data."""
        self._blocks.clear()
        self._box.clear()
        self._density.clear()
        self._order.clear()
