"""
Simple high-level simulation API.

This module runs complete constant-NVT and constant-NPT simulations from a
configuration file, writing the run report, block checkpoints and the final
configuration the same way for both ensembles.

Example:
    >>> from hardmc import simulate
    >>> from hardmc.config import NVTParameters
    >>> result = simulate.nvt(NVTParameters(n_blocks=5, n_steps=100), "run1")
    >>> print(result.average("P"))
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

import numpy as np

from .analysis.averages import format_row
from .analysis.observables import NPTObservables, NVTObservables
from .config import NPTParameters, NVTParameters, RunParameters
from .engines import ConfigurationReporter, MCEngine, RunResult
from .io import read_configuration, read_configuration_header
from .moves import LogBoxMove, TranslationRotationMove
from .overlap import HardSpherocylinders, OverlapOracle
from .system import MolecularState

INPUT_NAME = "cnf.inp"


def lattice_state(
    n_molecules: int,
    box_length: float,
    oracle: OverlapOracle | None = None,
) -> MolecularState:
    """
    Place molecules on a simple cubic lattice, all aligned along z.

    Args:
        n_molecules: Number of molecules.
        box_length: Box edge length in sigma units.
        oracle: If given, the lattice is checked for overlaps.

    Returns:
        New MolecularState.

    Raises:
        ValueError: If the lattice spacing is too small for the molecules.
    """
    if n_molecules < 1:
        raise ValueError(f"n_molecules must be >= 1, got {n_molecules}")

    n_side = int(np.ceil(n_molecules ** (1 / 3)))
    spacing = box_length / n_side

    grid = np.arange(n_side)
    ix, iy, iz = np.meshgrid(grid, grid, grid, indexing="ij")
    sites = np.stack([ix.ravel(), iy.ravel(), iz.ravel()], axis=1)[:n_molecules]
    positions = (sites + 0.5) * spacing - 0.5 * box_length

    orientations = np.zeros((n_molecules, 3))
    orientations[:, 2] = 1.0

    state = MolecularState.from_absolute(positions, orientations, box_length)
    if oracle is not None and oracle.overlap_all(state, state.box):
        raise ValueError(
            f"Lattice of {n_molecules} molecules overlaps in a box of length "
            f"{box_length}; use a larger box"
        )
    return state


def _write_introduction(
    file: TextIO,
    title: str,
    oracle: OverlapOracle,
    params: RunParameters,
) -> None:
    file.write(f"{title}\n")
    for label, value in oracle.describe().items():
        file.write(format_row(label, value) + "\n")
    for label, value in params.rows():
        file.write(format_row(label, value) + "\n")


def _load(path: Path, file: TextIO, show_density: bool) -> MolecularState:
    n_molecules, box = read_configuration_header(path)
    file.write(format_row("Number of particles", n_molecules) + "\n")
    file.write(format_row("Box (in sigma units)", box) + "\n")
    if show_density:
        file.write(format_row("Density", n_molecules / box**3) + "\n")

    _, box, positions, orientations = read_configuration(path)
    return MolecularState.from_absolute(positions, orientations, box)


def _run(
    engine: MCEngine,
    params: RunParameters,
    directory: Path,
    file: TextIO,
) -> RunResult:
    engine.add_reporter(ConfigurationReporter(directory))
    result = engine.run(params.n_blocks, params.n_steps)
    file.write(format_row("CPU time (s)", result.cpu_time) + "\n")
    file.write("Program ends\n")
    file.flush()
    return result


def nvt(
    params: NVTParameters | None = None,
    directory: str | Path = ".",
    oracle: OverlapOracle | None = None,
    file: TextIO | None = None,
    input_name: str = INPUT_NAME,
) -> RunResult:
    """
    Run constant-NVT Monte Carlo for hard linear molecules.

    Reads directory/cnf.inp, writes cnf.NNN checkpoints and cnf.out to the
    same directory.

    Args:
        params: Run parameters (defaults if None).
        directory: Working directory holding the input configuration.
        oracle: Molecular model (default: spherocylinders of length 5).
        file: Report stream (default: stdout).
        input_name: Name of the input configuration file.

    Returns:
        RunResult with block series and run statistics.

    Raises:
        ConfigurationError: If the parameters are invalid.
        OverlapError: If the input configuration contains overlaps.
    """
    params = params if params is not None else NVTParameters()
    params.validate()
    oracle = oracle if oracle is not None else HardSpherocylinders()
    file = file if file is not None else sys.stdout
    directory = Path(directory)

    _write_introduction(
        file, "Monte Carlo, constant-NVT, hard linear molecules", oracle, params
    )
    state = _load(directory / input_name, file, show_density=True)

    engine = MCEngine(
        state=state,
        oracle=oracle,
        particle_move=TranslationRotationMove(params.max_displacement, params.max_rotation),
        observables=NVTObservables(oracle, params.eps_box),
        seed=params.seed,
        file=file,
    )
    return _run(engine, params, directory, file)


def npt(
    params: NPTParameters | None = None,
    directory: str | Path = ".",
    oracle: OverlapOracle | None = None,
    file: TextIO | None = None,
    input_name: str = INPUT_NAME,
) -> RunResult:
    """
    Run constant-NPT Monte Carlo for hard linear molecules.

    Same file conventions as nvt(); one volume trial is made per step.

    Args:
        params: Run parameters (defaults if None).
        directory: Working directory holding the input configuration.
        oracle: Molecular model (default: spherocylinders of length 5).
        file: Report stream (default: stdout).
        input_name: Name of the input configuration file.

    Returns:
        RunResult with block series and run statistics.
    """
    params = params if params is not None else NPTParameters()
    params.validate()
    oracle = oracle if oracle is not None else HardSpherocylinders()
    file = file if file is not None else sys.stdout
    directory = Path(directory)

    _write_introduction(
        file, "Monte Carlo, constant-NPT, hard linear molecules", oracle, params
    )
    state = _load(directory / input_name, file, show_density=False)

    engine = MCEngine(
        state=state,
        oracle=oracle,
        particle_move=TranslationRotationMove(params.max_displacement, params.max_rotation),
        observables=NPTObservables(),
        volume_move=LogBoxMove(params.max_box_displacement, params.pressure),
        seed=params.seed,
        file=file,
    )
    return _run(engine, params, directory, file)
