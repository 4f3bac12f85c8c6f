"""
CI-friendly smoke tests.

These tests are designed to:
1. Run fast (a few seconds at most)
2. Exercise complete NVT and NPT runs end to end
3. Be deterministic (seeded RNG)

Use for continuous integration to catch regressions quickly.
"""

import io

import numpy as np
import pytest

from hardmc.analysis import NPTObservables, NVTObservables
from hardmc.engines import CallbackReporter, MCEngine
from hardmc.moves import LogBoxMove, TranslationRotationMove
from hardmc.overlap import HardSpherocylinders
from hardmc.simulate import lattice_state

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def rods():
    return HardSpherocylinders(length=5.0, diameter=1.0)


@pytest.fixture
def dilute_rods(rods):
    """
    Create a dilute aligned system for smoke tests.

    8 molecules, lattice spacing 8, deterministic seed.
    """
    return lattice_state(8, 16.0, rods)


# =============================================================================
# Smoke Tests
# =============================================================================


class TestSmokeNVT:
    """Constant-volume smoke tests."""

    def test_no_overlap_at_block_ends(self, rods, dilute_rods):
        """Every block-end configuration must be overlap-free."""
        overlaps = []
        engine = MCEngine(
            dilute_rods, rods, TranslationRotationMove(0.5, 0.3),
            NVTObservables(rods), seed=42, file=io.StringIO(),
        )
        engine.add_reporter(
            CallbackReporter(
                lambda state, block, values: overlaps.append(
                    rods.overlap_all(state, state.box)
                )
            )
        )
        result = engine.run(n_blocks=4, n_steps=5)
        assert overlaps == [False] * 4
        assert np.all(result.block_values["P"] >= result.state.density - 1e-12)

    def test_order_decays_from_aligned(self, rods):
        """Large rotations in a dilute system destroy nematic order."""
        state = lattice_state(27, 60.0, rods)
        engine = MCEngine(
            state, rods, TranslationRotationMove(1.0, 1.5),
            NVTObservables(rods), seed=42, file=io.StringIO(),
        )
        result = engine.run(n_blocks=1, n_steps=30)
        assert result.initial[2].value == pytest.approx(1.0)
        assert result.final[2].value < 0.7


class TestSmokeNPT:
    """Constant-pressure smoke tests."""

    def test_zero_pressure_expands(self, rods, dilute_rods):
        """With no external pressure the box grows and most box moves succeed."""
        engine = MCEngine(
            dilute_rods, rods, TranslationRotationMove(0.5, 0.3),
            NPTObservables(), volume_move=LogBoxMove(0.05, pressure=0.0),
            seed=42, file=io.StringIO(),
        )
        result = engine.run(n_blocks=4, n_steps=50)
        assert result.state.box.length > 16.0
        assert result.volume_acceptance > 0.6
        assert result.state.density < 8.0 / 16.0**3

    def test_density_tracks_box(self, rods, dilute_rods):
        """Block-end density is always N / box**3."""
        records = []
        engine = MCEngine(
            dilute_rods, rods, TranslationRotationMove(0.3, 0.2),
            NPTObservables(), volume_move=LogBoxMove(0.02, pressure=0.2),
            seed=7, file=io.StringIO(),
        )
        engine.add_reporter(
            CallbackReporter(
                lambda state, block, values: records.append(
                    (state.density, state.box.length, state.n_molecules)
                )
            )
        )
        engine.run(n_blocks=3, n_steps=10)
        for density, box, n in records:
            assert density * box**3 == pytest.approx(n, rel=1e-12)
