"""Tests for block and run averaging."""

import io

import numpy as np
import pytest

from hardmc.analysis.averages import (
    AveragingMethod,
    BlockAverager,
    Observable,
    ObservableMismatchError,
    format_row,
)


def sample(a, b):
    """Two observables: a plain average and a fluctuation."""
    return [
        Observable("A", a),
        Observable("B", b, method=AveragingMethod.FLUCTUATION),
    ]


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def averager(stream):
    avg = BlockAverager(stream)
    avg.run_begin(sample(0.0, 0.0))
    return avg


class TestRunLifecycle:
    """Test the run/block state machine."""

    def test_header(self, averager, stream):
        """Test that run_begin writes the column headings."""
        text = stream.getvalue()
        assert "Block" in text
        assert "A" in text and "B" in text
        assert averager.names == ("A", "B")
        assert averager.is_running

    def test_run_begin_twice(self, averager):
        """Test that a second run cannot start while one is active."""
        with pytest.raises(RuntimeError):
            averager.run_begin(sample(0.0, 0.0))

    def test_duplicate_names(self, stream):
        """Test that observable names must be unique."""
        with pytest.raises(ValueError):
            BlockAverager(stream).run_begin([Observable("A", 1.0), Observable("A", 2.0)])

    def test_empty_observables(self, stream):
        """Test that at least one observable is required."""
        with pytest.raises(ValueError):
            BlockAverager(stream).run_begin([])

    def test_add_outside_block(self, averager):
        """Test that samples cannot be added outside a block."""
        with pytest.raises(RuntimeError):
            averager.block_add(sample(1.0, 1.0))

    def test_empty_block(self, averager):
        """Test that a block without samples cannot be closed."""
        averager.block_begin()
        with pytest.raises(RuntimeError):
            averager.block_end(1)

    def test_run_end_without_blocks(self, averager):
        """Test that a run without blocks cannot be closed."""
        with pytest.raises(RuntimeError):
            averager.run_end()

    def test_run_end_with_open_block(self, averager):
        """Test that run_end refuses an open block."""
        averager.block_begin()
        averager.block_add(sample(1.0, 1.0))
        with pytest.raises(RuntimeError):
            averager.run_end()

    def test_new_run_after_end(self, averager):
        """Test that a new run can start after run_end."""
        averager.block_begin()
        averager.block_add(sample(1.0, 1.0))
        averager.block_end(1)
        averager.run_end()
        assert not averager.is_running
        averager.run_begin([Observable("C", 0.0)])
        assert averager.names == ("C",)


class TestObservableMismatch:
    """Test that the observable set is fixed for the run."""

    def test_different_name(self, averager):
        averager.block_begin()
        with pytest.raises(ObservableMismatchError):
            averager.block_add([Observable("A", 1.0), Observable("C", 1.0)])

    def test_different_order(self, averager):
        averager.block_begin()
        with pytest.raises(ObservableMismatchError):
            averager.block_add(list(reversed(sample(1.0, 1.0))))

    def test_missing_observable(self, averager):
        averager.block_begin()
        with pytest.raises(ObservableMismatchError):
            averager.block_add([Observable("A", 1.0)])


class TestBlockValues:
    """Test block reduction."""

    def test_average_and_fluctuation(self, averager):
        """Test mean for AVERAGE and mean squared deviation for FLUCTUATION."""
        averager.block_begin()
        for a, b in [(1.0, 1.0), (2.0, 3.0), (3.0, 5.0)]:
            averager.block_add(sample(a, b))
        values = averager.block_end(1)
        assert values["A"] == pytest.approx(2.0)
        # b = 1, 3, 5: mean 3, mean squared deviation 8/3
        assert values["B"] == pytest.approx(8.0 / 3.0)

    def test_constant_fluctuation_is_zero(self, averager):
        """Test that a constant series has zero fluctuation."""
        averager.block_begin()
        for _ in range(10):
            averager.block_add(sample(0.1, 0.1))
        assert averager.block_end(1)["B"] >= 0.0

    def test_offset(self, stream):
        """Test that the offset is added to block values."""
        avg = BlockAverager(stream)
        avg.run_begin([Observable("E", 0.0, offset=10.0)])
        avg.block_begin()
        avg.block_add([Observable("E", 1.0, offset=10.0)])
        assert avg.block_end(1)["E"] == pytest.approx(11.0)

    def test_block_row_written(self, averager, stream):
        """Test that each block writes one row."""
        averager.block_begin()
        averager.block_add(sample(1.5, 0.0))
        averager.block_end(7)
        last = stream.getvalue().splitlines()[-1]
        assert last.split()[0] == "7"
        assert float(last.split()[1]) == pytest.approx(1.5)


class TestRunStatistics:
    """Test run averages, errors and fluctuations."""

    def _run(self, averager, block_values):
        for blk, a in enumerate(block_values, start=1):
            averager.block_begin()
            averager.block_add(sample(a, 0.0))
            averager.block_end(blk)
        return averager.run_end()

    def test_two_blocks(self, averager):
        """Test statistics of block values 1 and 3."""
        stats = self._run(averager, [1.0, 3.0])
        assert stats.n_blocks == 2
        assert stats.averages["A"] == pytest.approx(2.0)
        assert stats.fluctuations["A"] == pytest.approx(1.0)
        assert stats.errors["A"] == pytest.approx(1.0)

    def test_error_formula(self, averager):
        """Test error = sqrt(var / (n - 1)) with the population variance."""
        values = [0.5, 1.0, 2.0, 4.0, 8.0]
        stats = self._run(averager, values)
        var = np.var(values)
        assert stats.averages["A"] == pytest.approx(np.mean(values))
        assert stats.fluctuations["A"] == pytest.approx(np.sqrt(var))
        assert stats.errors["A"] == pytest.approx(np.sqrt(var / 4))

    def test_single_block_error(self, averager):
        """Test that a single block reports zero error."""
        stats = self._run(averager, [3.0])
        assert stats.errors["A"] == 0.0
        assert stats.averages["A"] == pytest.approx(3.0)

    def test_summary_written(self, averager, stream):
        """Test that the run summary rows are written."""
        self._run(averager, [1.0, 2.0])
        text = stream.getvalue()
        assert "Run averages" in text
        assert "Run errors" in text
        assert "Run fluct" in text

    def test_abort_allows_new_run(self, averager):
        """Test that an aborted run leaves the averager idle."""
        averager.block_begin()
        averager.block_add(sample(1.0, 1.0))
        averager.abort()
        assert not averager.is_running
        assert not averager.in_block
        assert averager.n_blocks == 0
        averager.run_begin(sample(0.0, 0.0))
        assert averager.is_running


class TestSnapshot:
    """Test snapshot output."""

    def test_non_instant_omitted(self, stream):
        """Test that non-instant observables are not written."""
        avg = BlockAverager(stream)
        avg.write_snapshot(
            "Initial values",
            [Observable("Move ratio", 0.0, instant=False), Observable("P", 1.25)],
        )
        text = stream.getvalue()
        assert "Initial values" in text
        assert "Move ratio" not in text
        assert "P" in text and "1.250000" in text

    def test_format_row(self):
        """Test label/value alignment."""
        row = format_row("Number of particles", 64)
        assert row.startswith("Number of particles")
        assert row.endswith("64")
        assert len(row) == 55
