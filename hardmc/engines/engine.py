"""Monte Carlo simulation engine implementation."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

import numpy as np
from numpy.typing import NDArray

from ..analysis.averages import BlockAverager, Observable, RunStatistics
from .reporters import Reporter, ReporterGroup

if TYPE_CHECKING:
    from ..analysis.observables import ObservableCalculator
    from ..moves import LogBoxMove, TranslationRotationMove
    from ..overlap import OverlapOracle
    from ..system import MolecularState


class OverlapError(RuntimeError):
    """Raised when a configuration contains intersecting hard bodies."""


@dataclass
class RunResult:
    """
    Results from a block-averaged Monte Carlo run.

    Attributes:
        block_values: Block value series for each observable, shape (n_blocks,).
        statistics: Run averages, errors and fluctuations.
        initial: Observables of the starting configuration.
        final: Observables of the final configuration.
        state: Final molecular state.
        move_acceptance: Overall particle move acceptance rate.
        volume_acceptance: Overall volume move acceptance rate (NPT only).
        cpu_time: Processor time spent in the block loop of this run, seconds.
    """

    block_values: dict[str, NDArray[np.floating]]
    statistics: RunStatistics
    initial: list[Observable]
    final: list[Observable]
    state: MolecularState
    move_acceptance: float
    volume_acceptance: float | None = None
    cpu_time: float = 0.0

    @property
    def n_blocks(self) -> int:
        return self.statistics.n_blocks

    def average(self, name: str) -> float:
        """Return the run average of an observable."""
        return self.statistics.averages[name]


class MCEngine:
    """
    Monte Carlo engine for hard linear molecules.

    Orchestrates the sampling loop:
    - Particle moves (one sweep over all molecules per step)
    - Volume moves (one trial per step, NPT only)
    - Observable calculation and block averaging
    - Configuration checkpoints (reporters)

    Example usage:
        engine = MCEngine(
            state=initial_state,
            oracle=HardSpherocylinders(length=5.0),
            particle_move=TranslationRotationMove(0.05, 0.05),
            observables=NVTObservables(oracle, eps_box=0.001),
            seed=42,
        )
        engine.add_reporter(ConfigurationReporter("output"))
        result = engine.run(n_blocks=10, n_steps=1000)

    Attributes:
        state: Current molecular state (owned by the engine).
        oracle: Overlap oracle defining the molecular shape.
        particle_move: Single-molecule trial move.
        volume_move: Optional box move; its presence selects the NPT ensemble.
    """

    def __init__(
        self,
        state: MolecularState,
        oracle: OverlapOracle,
        particle_move: TranslationRotationMove,
        observables: ObservableCalculator,
        volume_move: LogBoxMove | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        file: TextIO | None = None,
    ) -> None:
        """
        Initialize MC engine.

        Args:
            state: Initial molecular state (copied).
            oracle: Overlap oracle.
            particle_move: Translation-rotation move.
            observables: Observable calculator for the ensemble.
            volume_move: Optional log-box move for constant pressure.
            rng: Random generator; created from seed if not given.
            seed: Seed used when rng is None.
            file: Report stream (defaults to stdout).
        """
        self._state = state.copy()
        self._oracle = oracle
        self._particle_move = particle_move
        self._volume_move = volume_move
        self._observables = observables
        self._rng = rng if rng is not None else np.random.default_rng(seed)

        self._averager = BlockAverager(file)
        self._reporters = ReporterGroup()

    @property
    def state(self) -> MolecularState:
        """Return current molecular state."""
        return self._state

    @property
    def oracle(self) -> OverlapOracle:
        """Return overlap oracle."""
        return self._oracle

    @property
    def particle_move(self) -> TranslationRotationMove:
        """Return particle move."""
        return self._particle_move

    @property
    def volume_move(self) -> LogBoxMove | None:
        """Return volume move."""
        return self._volume_move

    @property
    def rng(self) -> np.random.Generator:
        """Return random number generator."""
        return self._rng

    @property
    def averager(self) -> BlockAverager:
        """Return block averager."""
        return self._averager

    def add_reporter(self, reporter: Reporter) -> None:
        """Add a reporter."""
        self._reporters.add(reporter)

    def remove_reporter(self, reporter: Reporter) -> None:
        """Remove a reporter."""
        self._reporters.remove(reporter)

    def check_overlap(self, when: str = "current") -> None:
        """
        Verify that the configuration is overlap-free.

        Args:
            when: Which configuration is checked, for the error message.

        Raises:
            OverlapError: If any pair of molecules intersects.
        """
        if self._oracle.overlap_all(self._state, self._state.box):
            if when == "final":
                raise OverlapError(
                    "Overlap in final configuration: accepted moves produced an "
                    "invalid state"
                )
            raise OverlapError(f"Overlap in {when} configuration")

    def sample_step(self) -> list[Observable]:
        """
        Perform a single Monte Carlo step and measure observables.

        A step is:
        1. One translation-rotation trial for every molecule, in index order
        2. One volume trial (if a volume move is configured)
        3. Observable calculation with this step's acceptance ratios

        Returns:
            Observables for this step.
        """
        move_ratio = self._particle_move.step(self._state, self._oracle, self._rng)

        volume_ratio = 0.0
        if self._volume_move is not None:
            volume_ratio = self._volume_move.step(self._state, self._oracle, self._rng)

        return self._observables.compute(self._state, move_ratio, volume_ratio)

    def sample_snapshot(self, label: str) -> list[Observable]:
        """
        Measure observables outside the sampling loop and write them out.

        Acceptance ratios are meaningless here: they are zero and not written.

        Args:
            label: Heading for the report, e.g. "Initial values".

        Returns:
            Observables with zero acceptance ratios.
        """
        observables = self._observables.compute(self._state)
        self._averager.write_snapshot(label, observables)
        return observables

    def run(self, n_blocks: int, n_steps: int) -> RunResult:
        """
        Run a block-averaged simulation.

        Args:
            n_blocks: Number of blocks.
            n_steps: Steps per block.

        Returns:
            RunResult with block series, statistics and final state.

        Raises:
            OverlapError: If the initial or final configuration overlaps.
        """
        if n_blocks < 1 or n_steps < 1:
            raise ValueError(
                f"n_blocks and n_steps must be >= 1, got {n_blocks} and {n_steps}"
            )

        self.check_overlap("initial")
        initial = self.sample_snapshot("Initial values")

        self._reporters.initialize(self._state, n_blocks)
        self._particle_move.reset_statistics()
        if self._volume_move is not None:
            self._volume_move.reset_statistics()
        self._averager.run_begin(initial)

        history: dict[str, list[float]] = {name: [] for name in self._averager.names}
        start_time = time.process_time()

        try:
            for blk in range(1, n_blocks + 1):
                self._averager.block_begin()

                for _ in range(n_steps):
                    self._averager.block_add(self.sample_step())

                values = self._averager.block_end(blk)
                for name, value in values.items():
                    history[name].append(value)
                self._reporters.report(self._state, blk, values)

            statistics = self._averager.run_end()
        finally:
            # Leave the averager idle so the engine can run again
            if self._averager.is_running:
                self._averager.abort()
        cpu_time = time.process_time() - start_time

        self.check_overlap("final")
        final = self.sample_snapshot("Final values")
        self._reporters.finalize(self._state)

        return RunResult(
            block_values={name: np.array(series) for name, series in history.items()},
            statistics=statistics,
            initial=initial,
            final=final,
            state=self._state.copy(),
            move_acceptance=self._particle_move.acceptance_rate,
            volume_acceptance=(
                self._volume_move.acceptance_rate
                if self._volume_move is not None
                else None
            ),
            cpu_time=cpu_time,
        )
