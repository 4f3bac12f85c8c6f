"""
Command-line entry point.

Usage:
    hardmc lattice 64 --box 30 --directory run1
    hardmc nvt --directory run1 < nvt.nml
    hardmc npt --directory run1 --namelist npt.nml

Run parameters are read as a namelist (group &nml) from a file or standard
input; an empty namelist accepts the defaults.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import simulate
from .config import ConfigurationError, NPTParameters, NVTParameters
from .engines import OverlapError
from .io import write_configuration
from .overlap import HardSpherocylinders


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--length", type=float, default=5.0,
                        help="spherocylinder length in sigma units (default: 5.0)")
    common.add_argument("--diameter", type=float, default=1.0,
                        help="spherocylinder diameter in sigma units (default: 1.0)")
    common.add_argument("--directory", default=".",
                        help="working directory for cnf.* files (default: .)")

    parser = argparse.ArgumentParser(
        prog="hardmc",
        description="Monte Carlo of hard linear molecules (NVT and NPT ensembles)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("nvt", "constant-NVT run"),
        ("npt", "constant-NPT run"),
    ):
        run = sub.add_parser(name, parents=[common], help=help_text)
        run.add_argument("--namelist", default=None,
                         help="namelist file (default: read standard input)")

    lattice = sub.add_parser("lattice", parents=[common],
                             help="write an aligned lattice to cnf.inp")
    lattice.add_argument("n_molecules", type=int, help="number of molecules")
    lattice.add_argument("--box", type=float, required=True,
                         help="box length in sigma units")
    return parser


def _read_namelist(path: str | None) -> str:
    if path is not None and path != "-":
        return Path(path).read_text()
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    return sys.stdin.read()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    directory = Path(args.directory)

    try:
        oracle = HardSpherocylinders(args.length, args.diameter)
        if args.command == "lattice":
            state = simulate.lattice_state(args.n_molecules, args.box, oracle)
            directory.mkdir(parents=True, exist_ok=True)
            write_configuration(
                directory / simulate.INPUT_NAME,
                state.n_molecules,
                state.box.length,
                state.absolute_positions,
                state.orientations,
            )
        elif args.command == "nvt":
            params = NVTParameters.from_namelist(_read_namelist(args.namelist))
            simulate.nvt(params, directory, oracle)
        else:
            params = NPTParameters.from_namelist(_read_namelist(args.namelist))
            simulate.npt(params, directory, oracle)
    except (ConfigurationError, OverlapError, OSError, ValueError) as err:
        print(f"Error in hardmc {args.command}: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
