"""Tests for the Monte Carlo engine and reporters."""

import io

import numpy as np
import pytest

from hardmc.analysis import NPTObservables, NVTObservables
from hardmc.engines.engine import MCEngine, OverlapError
from hardmc.engines.reporters import (
    BlockHistoryReporter,
    CallbackReporter,
    ConfigurationReporter,
    ReporterGroup,
)
from hardmc.io import read_configuration
from hardmc.moves import LogBoxMove, TranslationRotationMove
from hardmc.overlap import HardSpherocylinders
from hardmc.simulate import lattice_state
from hardmc.system import MolecularState


@pytest.fixture
def rods():
    return HardSpherocylinders(length=5.0, diameter=1.0)


@pytest.fixture
def far_pair():
    """Two molecules far apart with arbitrary orientations."""
    rng = np.random.default_rng(42)
    return MolecularState.from_absolute(
        [[0.0, 0.0, 0.0], [25.0, 25.0, 25.0]], rng.normal(size=(2, 3)), 100.0
    )


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def nvt_engine(rods, stream):
    """Constant-volume engine on a small lattice."""
    state = lattice_state(8, 16.0, rods)
    return MCEngine(
        state=state,
        oracle=rods,
        particle_move=TranslationRotationMove(0.2, 0.1),
        observables=NVTObservables(rods, eps_box=0.001),
        seed=42,
        file=stream,
    )


@pytest.fixture
def npt_engine(rods, stream):
    """Constant-pressure engine on a small lattice."""
    state = lattice_state(8, 16.0, rods)
    return MCEngine(
        state=state,
        oracle=rods,
        particle_move=TranslationRotationMove(0.2, 0.1),
        observables=NPTObservables(),
        volume_move=LogBoxMove(0.01, pressure=0.1),
        seed=42,
        file=stream,
    )


class TestEngineBasics:
    """Test engine construction and single steps."""

    def test_state_copied(self, rods):
        """Test that the engine owns a copy of the initial state."""
        state = lattice_state(8, 16.0, rods)
        engine = MCEngine(
            state, rods, TranslationRotationMove(), NVTObservables(rods), seed=1,
            file=io.StringIO(),
        )
        engine.sample_step()
        assert engine.state is not state

    def test_all_moves_accepted_when_isolated(self, rods, far_pair):
        """Test that isolated molecules accept every move."""
        engine = MCEngine(
            far_pair, rods, TranslationRotationMove(0.05, 0.05),
            NVTObservables(rods), seed=42, file=io.StringIO(),
        )
        result = engine.run(n_blocks=1, n_steps=1)
        assert result.block_values["Move ratio"][0] == 1.0
        assert result.move_acceptance == 1.0

    def test_sample_step_names(self, npt_engine):
        """Test observables of one NPT step."""
        obs = npt_engine.sample_step()
        assert [o.name for o in obs] == ["Move ratio", "Volume ratio", "Density", "Nematic order"]
        assert obs[1].value in (0.0, 1.0)

    def test_snapshot_omits_ratios(self, nvt_engine, stream):
        """Test that snapshots do not report acceptance ratios."""
        obs = nvt_engine.sample_snapshot("Initial values")
        text = stream.getvalue()
        assert obs[0].value == 0.0
        assert "Initial values" in text
        assert "Move ratio" not in text
        assert "Nematic order" in text

    def test_invalid_run_lengths(self, nvt_engine):
        """Test that empty runs are rejected."""
        with pytest.raises(ValueError):
            nvt_engine.run(0, 10)
        with pytest.raises(ValueError):
            nvt_engine.run(10, 0)

    def test_reproducible(self, rods):
        """Test that equal seeds give identical trajectories."""
        finals = []
        for _ in range(2):
            engine = MCEngine(
                lattice_state(8, 16.0, rods), rods, TranslationRotationMove(0.3, 0.2),
                NVTObservables(rods), seed=7, file=io.StringIO(),
            )
            finals.append(engine.run(2, 3).state)
        assert np.array_equal(finals[0].positions, finals[1].positions)
        assert np.array_equal(finals[0].orientations, finals[1].orientations)


class TestOverlapChecks:
    """Test configuration verification."""

    def test_initial_overlap(self, rods):
        """Test that an overlapping start is rejected before sampling."""
        state = MolecularState.from_absolute(
            [[0.0, 0.0, 0.0], [0.5, 0.0, 0.0]], [[0, 0, 1], [0, 0, 1]], 20.0
        )
        stream = io.StringIO()
        engine = MCEngine(
            state, rods, TranslationRotationMove(), NVTObservables(rods), seed=1, file=stream,
        )
        with pytest.raises(OverlapError, match="initial"):
            engine.run(2, 2)
        assert "Run averages" not in stream.getvalue()

    def test_final_overlap_message(self, nvt_engine, rods):
        """Test the message for an overlap found after sampling."""
        nvt_engine.state.positions[1] = nvt_engine.state.positions[0]
        with pytest.raises(OverlapError, match="final configuration"):
            nvt_engine.check_overlap("final")

    def test_overlap_error_is_runtime_error(self):
        assert issubclass(OverlapError, RuntimeError)


class TestRuns:
    """Test complete block-averaged runs."""

    def test_nvt_run(self, nvt_engine, stream):
        """Test an NVT run produces consistent results."""
        result = nvt_engine.run(n_blocks=3, n_steps=4)
        assert result.n_blocks == 3
        assert set(result.block_values) == {"Move ratio", "P", "Nematic order"}
        assert all(len(v) == 3 for v in result.block_values.values())
        assert result.average("P") == pytest.approx(np.mean(result.block_values["P"]))
        assert 0.0 <= result.move_acceptance <= 1.0
        assert result.volume_acceptance is None
        assert result.state.box.length == 16.0

        text = stream.getvalue()
        assert "Initial values" in text
        assert "Run averages" in text
        assert "Final values" in text

    def test_npt_run(self, npt_engine, rods):
        """Test an NPT run keeps density consistent with the box."""
        result = npt_engine.run(n_blocks=2, n_steps=5)
        final = result.state
        assert result.volume_acceptance is not None
        assert final.density * final.box.length**3 == pytest.approx(8.0)
        assert not rods.overlap_all(final, final.box)
        assert result.final[2].name == "Density"
        assert result.final[2].value == pytest.approx(final.density)


class TestReporters:
    """Test block-end reporters."""

    def test_configuration_files(self, nvt_engine, tmp_path):
        """Test checkpoint and final configuration files."""
        reporter = ConfigurationReporter(tmp_path)
        nvt_engine.add_reporter(reporter)
        result = nvt_engine.run(n_blocks=3, n_steps=2)

        names = [p.name for p in reporter.written]
        assert names == ["cnf.001", "cnf.002", "cnf.003", "cnf.out"]
        n, box, positions, _ = read_configuration(tmp_path / "cnf.out")
        assert n == 8
        assert box == result.state.box.length
        assert np.allclose(positions, result.state.absolute_positions, atol=1e-8)

    def test_save_tag_for_long_runs(self, rods, tmp_path):
        """Test that runs of 1000 blocks or more overwrite one checkpoint."""
        state = lattice_state(8, 16.0, rods)
        reporter = ConfigurationReporter(tmp_path)
        reporter.initialize(state, 999)
        assert reporter.tag(12) == "012"
        reporter.initialize(state, 1000)
        assert reporter.tag(12) == "sav"

    def test_callback_frequency(self, nvt_engine):
        """Test that callbacks fire at their frequency."""
        calls = []
        nvt_engine.add_reporter(
            CallbackReporter(lambda state, block, values: calls.append(block), frequency=2)
        )
        nvt_engine.run(n_blocks=5, n_steps=1)
        assert calls == [2, 4]

    def test_history(self, npt_engine):
        """Test block history recording."""
        history = BlockHistoryReporter()
        npt_engine.add_reporter(history)
        result = npt_engine.run(n_blocks=3, n_steps=2)
        assert list(history.blocks) == [1, 2, 3]
        assert history.density[-1] == pytest.approx(result.state.density)
        assert np.allclose(history.density * history.box**3, 8.0)
        history.clear()
        assert len(history.blocks) == 0

    def test_group_remove(self):
        """Test adding and removing reporters."""
        group = ReporterGroup()
        reporter = BlockHistoryReporter()
        group.add(reporter)
        assert len(group) == 1
        group.remove(reporter)
        assert len(group) == 0


class TestRepeatedRuns:
    """Test running the same engine more than once."""

    def test_run_after_failed_block(self, nvt_engine):
        """Test that an exception inside the block loop does not block later runs."""

        def fail(state, block, values):
            raise RuntimeError("reporter failed")

        reporter = CallbackReporter(fail)
        nvt_engine.add_reporter(reporter)
        with pytest.raises(RuntimeError, match="reporter failed"):
            nvt_engine.run(n_blocks=2, n_steps=1)
        assert not nvt_engine.averager.is_running

        nvt_engine.remove_reporter(reporter)
        result = nvt_engine.run(n_blocks=2, n_steps=1)
        assert result.n_blocks == 2

    def test_cpu_time_per_run(self, nvt_engine):
        """Test that each run reports its own CPU time."""
        first = nvt_engine.run(n_blocks=1, n_steps=1)
        second = nvt_engine.run(n_blocks=1, n_steps=1)
        assert first.cpu_time >= 0.0
        assert second.cpu_time >= 0.0
        assert second.n_blocks == 1
