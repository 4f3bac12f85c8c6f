"""Block and run averaging of per-step observables."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

import numpy as np
from numpy.typing import NDArray

COLUMN_WIDTH = 15
LABEL_WIDTH = 40


class AveragingMethod(Enum):
    """How per-step samples of an observable are reduced within a block."""

    AVERAGE = "avg"  # plain mean
    FLUCTUATION = "msd"  # mean squared deviation about the block mean


@dataclass(frozen=True)
class Observable:
    """
    A named instantaneous sample and its averaging treatment.

    Attributes:
        name: Column heading; fixed for the lifetime of a run.
        value: Instantaneous value.
        method: Averaging method.
        offset: Constant added to every reported block value.
        instant: Whether the value is meaningful in a one-off snapshot.
    """

    name: str
    value: float
    method: AveragingMethod = AveragingMethod.AVERAGE
    offset: float = 0.0
    instant: bool = True


class ObservableMismatchError(ValueError):
    """Raised when block_add receives a different observable set than run_begin."""


@dataclass(frozen=True)
class RunStatistics:
    """
    Final statistics over all blocks of a run.

    Attributes:
        names: Observable names in run order.
        averages: Mean of the block values.
        errors: Standard error of the mean, estimated from block-to-block scatter.
        fluctuations: Root-mean-square deviation of the block values.
        n_blocks: Number of blocks averaged.
    """

    names: tuple[str, ...]
    averages: dict[str, float]
    errors: dict[str, float]
    fluctuations: dict[str, float]
    n_blocks: int


def format_row(label: str, value: float | int | str) -> str:
    """Format a label with its value right-aligned at a fixed column."""
    if isinstance(value, (int, np.integer)):
        text = f"{value:{COLUMN_WIDTH}d}"
    elif isinstance(value, str):
        text = f"{value:>{COLUMN_WIDTH}}"
    else:
        text = f"{value:{COLUMN_WIDTH}.6f}"
    return f"{label:<{LABEL_WIDTH}}{text}"


def _format_values(values: NDArray[np.floating]) -> str:
    return "".join(f"{v:{COLUMN_WIDTH}.6f}" for v in values)


class BlockAverager:
    """
    Two-level accumulation of observables: steps into blocks, blocks into a run.

    Lifecycle:
        run_begin -> (block_begin -> block_add* -> block_end)* -> run_end

    The observable names, their order and averaging methods are fixed by
    run_begin; every block_add must supply exactly the same names in the
    same order. Block values and run statistics are written as a table to
    the report stream.

    Example:
        averager = BlockAverager()
        averager.run_begin(calc.compute(state))
        for blk in range(1, n_blocks + 1):
            averager.block_begin()
            for _ in range(n_steps):
                averager.block_add(calc.compute(state))
            averager.block_end(blk)
        stats = averager.run_end()
    """

    def __init__(self, file: TextIO | None = None) -> None:
        """
        Initialize averager.

        Args:
            file: Report stream (defaults to stdout).
        """
        self._file = file if file is not None else sys.stdout
        self._names: tuple[str, ...] = ()
        self._methods: tuple[AveragingMethod, ...] = ()
        self._offsets: NDArray[np.floating] = np.zeros(0)
        self._running = False
        self._in_block = False
        self._reset_run()
        self._reset_block()

    @property
    def names(self) -> tuple[str, ...]:
        """Observable names fixed at run_begin."""
        return self._names

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_block(self) -> bool:
        return self._in_block

    @property
    def n_blocks(self) -> int:
        """Number of blocks completed in the current run."""
        return self._run_norm

    def _reset_run(self) -> None:
        n = len(self._names)
        self._run_sum = np.zeros(n)
        self._run_sum_sq = np.zeros(n)
        self._run_norm = 0

    def _reset_block(self) -> None:
        n = len(self._names)
        self._blk_sum = np.zeros(n)
        self._blk_sum_sq = np.zeros(n)
        self._blk_norm = 0

    def _write(self, line: str = "") -> None:
        self._file.write(line + "\n")

    def run_begin(self, observables: Sequence[Observable]) -> None:
        """
        Start a run and fix its observable set; write column headings.

        Args:
            observables: Template observables (values are ignored).
        """
        if self._running:
            raise RuntimeError("run_begin called while a run is already active")
        if not observables:
            raise ValueError("at least one observable is required")
        names = tuple(o.name for o in observables)
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate observable names in {names}")

        self._names = names
        self._methods = tuple(o.method for o in observables)
        self._offsets = np.array([o.offset for o in observables], dtype=np.float64)
        self._reset_run()
        self._reset_block()
        self._running = True
        self._in_block = False

        header = f"{'Block':>{COLUMN_WIDTH}}" + "".join(
            f"{name:>{COLUMN_WIDTH}}" for name in names
        )
        self._write()
        self._write(header)
        self._write("-" * len(header))
        self._file.flush()

    def block_begin(self) -> None:
        """Zero the block accumulators."""
        if not self._running:
            raise RuntimeError("block_begin called outside a run")
        self._reset_block()
        self._in_block = True

    def block_add(self, observables: Sequence[Observable]) -> None:
        """
        Accumulate one step's observables into the current block.

        Raises:
            ObservableMismatchError: If names or their order differ from run_begin.
        """
        if not self._in_block:
            raise RuntimeError("block_add called outside a block")
        names = tuple(o.name for o in observables)
        if names != self._names:
            raise ObservableMismatchError(
                f"observables {names} do not match run observables {self._names}"
            )

        values = np.array([o.value for o in observables], dtype=np.float64)
        self._blk_sum += values
        self._blk_sum_sq += values**2
        self._blk_norm += 1

    def block_end(self, block_index: int) -> dict[str, float]:
        """
        Reduce the block, feed the run accumulators and write the block row.

        Args:
            block_index: Block number for the report.

        Returns:
            Block value of each observable.
        """
        if not self._in_block:
            raise RuntimeError("block_end called outside a block")
        if self._blk_norm == 0:
            raise RuntimeError(f"block {block_index} contains no samples")

        mean = self._blk_sum / self._blk_norm
        msd = np.maximum(self._blk_sum_sq / self._blk_norm - mean**2, 0.0)
        fluct = np.array([m is AveragingMethod.FLUCTUATION for m in self._methods])
        values = np.where(fluct, msd, mean) + self._offsets

        self._run_sum += values
        self._run_sum_sq += values**2
        self._run_norm += 1

        self._write(f"{block_index:{COLUMN_WIDTH}d}" + _format_values(values))
        self._file.flush()

        self._reset_block()
        self._in_block = False
        return dict(zip(self._names, values.tolist()))

    def run_end(self) -> RunStatistics:
        """
        Reduce the run accumulators and write the run summary.

        Returns:
            Run averages, errors and block-to-block fluctuations.
        """
        if not self._running:
            raise RuntimeError("run_end called outside a run")
        if self._in_block:
            raise RuntimeError("run_end called with a block still open")
        if self._run_norm == 0:
            raise RuntimeError("run contains no completed blocks")

        n = self._run_norm
        averages = self._run_sum / n
        variance = np.maximum(self._run_sum_sq / n - averages**2, 0.0)
        fluctuations = np.sqrt(variance)
        if n > 1:
            errors = np.sqrt(variance / (n - 1))
        else:
            errors = np.zeros_like(averages)

        width = COLUMN_WIDTH * (len(self._names) + 1)
        self._write("-" * width)
        self._write(f"{'Run averages':>{COLUMN_WIDTH}}" + _format_values(averages))
        self._write(f"{'Run errors':>{COLUMN_WIDTH}}" + _format_values(errors))
        self._write(f"{'Run fluct':>{COLUMN_WIDTH}}" + _format_values(fluctuations))
        self._write()
        self._file.flush()

        self._running = False
        return RunStatistics(
            names=self._names,
            averages=dict(zip(self._names, averages.tolist())),
            errors=dict(zip(self._names, errors.tolist())),
            fluctuations=dict(zip(self._names, fluctuations.tolist())),
            n_blocks=n,
        )

    def abort(self) -> None:
        """Discard the current run and any open block without writing a summary."""
        self._running = False
        self._in_block = False
        self._reset_run()
        self._reset_block()

    def write_snapshot(self, label: str, observables: Sequence[Observable]) -> None:
        """Write a labelled listing of the snapshot-meaningful observables."""
        self._write(label)
        for observable in observables:
            if observable.instant:
                self._write(format_row(observable.name, observable.value + observable.offset))
        self._file.flush()
