#!/usr/bin/env python
"""
NVT then NPT Monte Carlo of hard spherocylinders.

This example demonstrates:
- Building an overlap-free starting lattice
- A constant-volume run with virial pressure
- A constant-pressure run continuing from the NVT final configuration
- Plotting block averages

Usage:
    python examples/run_hard_rods.py
"""

import shutil
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend

from hardmc import plotting, simulate
from hardmc.config import NPTParameters, NVTParameters
from hardmc.io import write_configuration
from hardmc.overlap import HardSpherocylinders


def main():
    print("=" * 60)
    print("Hard Spherocylinders (L/D = 5)")
    print("=" * 60)

    workdir = Path("hard_rods_run")
    workdir.mkdir(exist_ok=True)
    oracle = HardSpherocylinders(length=5.0, diameter=1.0)

    # 64 aligned rods; lattice spacing 7 sigma leaves room along the axes
    state = simulate.lattice_state(64, 28.0, oracle)
    write_configuration(
        workdir / "cnf.inp",
        state.n_molecules,
        state.box.length,
        state.absolute_positions,
        state.orientations,
    )

    nvt = simulate.nvt(
        NVTParameters(n_blocks=10, n_steps=200, max_displacement=0.3, max_rotation=0.3, seed=1),
        directory=workdir,
        oracle=oracle,
    )
    plotting.block_averages(nvt, show=False)
    plotting.save("hard_rods_nvt.png")

    # Continue at constant pressure from the NVT final configuration
    shutil.copy(workdir / "cnf.out", workdir / "cnf.inp")
    npt = simulate.npt(
        NPTParameters(
            n_blocks=10,
            n_steps=200,
            max_displacement=0.3,
            max_rotation=0.3,
            max_box_displacement=0.01,
            pressure=0.05,
            seed=2,
        ),
        directory=workdir,
        oracle=oracle,
    )
    plotting.block_averages(npt, show=False)
    plotting.save("hard_rods_npt.png")

    print("\nSummary:")
    print(f"  NVT pressure:       {nvt.average('P'):.4f} ± {nvt.statistics.errors['P']:.4f}")
    print(f"  NPT density:        {npt.average('Density'):.4f}")
    print(f"  NPT nematic order:  {npt.average('Nematic order'):.4f}")
    print(f"  Volume acceptance:  {npt.volume_acceptance:.3f}")


if __name__ == "__main__":
    main()
