"""
Run parameters for hard-molecule Monte Carlo.

Parameters can be built directly, from a mapping, or from a namelist
such as::

    &nml nblock=20, nstep=1000, dr_max=0.1, eps_box=0.005 /

An empty namelist (or empty input) keeps the defaults.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, ClassVar


class ConfigurationError(ValueError):
    """Raised for missing, malformed or out-of-range run parameters."""


_GROUP = re.compile(r"&(\w+)(.*?)(?:/|&end)", re.DOTALL | re.IGNORECASE)
_ASSIGNMENT = re.compile(r"(\w+)\s*=\s*([^,\s/]+)")


def parse_namelist(text: str, group: str = "nml") -> dict[str, str]:
    """
    Extract raw key/value strings from a namelist group.

    Args:
        text: Namelist text; '!' starts a comment.
        group: Group name to look for.

    Returns:
        Mapping of lower-cased keys to unparsed value strings.

    Raises:
        ConfigurationError: If the group is missing or contains stray text.
    """
    text = "\n".join(line.split("!", 1)[0] for line in text.splitlines())
    if not text.strip():
        return {}

    match = _GROUP.search(text)
    if match is None or match.group(1).lower() != group.lower():
        raise ConfigurationError(f"Namelist group &{group} not found")

    body = match.group(2)
    values = {key.lower(): value for key, value in _ASSIGNMENT.findall(body)}
    leftover = _ASSIGNMENT.sub("", body).replace(",", "").strip()
    if leftover:
        raise ConfigurationError(f"Cannot parse namelist entry near {leftover!r}")
    return values


def _convert(key: str, raw: Any, kind: type) -> Any:
    if kind is int:
        if isinstance(raw, bool):
            raise ConfigurationError(f"{key}: expected an integer, got {raw!r}")
        if isinstance(raw, int):
            return raw
        try:
            return int(str(raw))
        except ValueError as err:
            raise ConfigurationError(f"{key}: expected an integer, got {raw!r}") from err
    try:
        # double precision exponents, e.g. 1.0d-3
        return float(str(raw).replace("d", "e").replace("D", "e"))
    except ValueError as err:
        raise ConfigurationError(f"{key}: expected a number, got {raw!r}") from err


@dataclass
class RunParameters:
    """
    Parameters shared by both ensembles.

    Attributes:
        n_blocks: Number of averaging blocks.
        n_steps: Steps per block; each step attempts a move of every molecule.
        max_displacement: Maximum displacement per axis, sigma units.
        max_rotation: Maximum rotation angle, radians.
        seed: Seed for the random number generator (None = fresh entropy).
    """

    # namelist key -> field name
    NAMELIST_KEYS: ClassVar[dict[str, str]] = {
        "nblock": "n_blocks",
        "nstep": "n_steps",
        "dr_max": "max_displacement",
        "de_max": "max_rotation",
        "seed": "seed",
    }

    n_blocks: int = 10
    n_steps: int = 10000
    max_displacement: float = 0.05
    max_rotation: float = 0.05
    seed: int | None = None

    def validate(self) -> None:
        """Check parameter ranges; raise ConfigurationError on failure."""
        if self.n_blocks < 1:
            raise ConfigurationError(f"n_blocks must be >= 1, got {self.n_blocks}")
        if self.n_steps < 1:
            raise ConfigurationError(f"n_steps must be >= 1, got {self.n_steps}")
        if self.max_displacement < 0.0:
            raise ConfigurationError(
                f"max_displacement must be >= 0, got {self.max_displacement}"
            )
        if self.max_rotation < 0.0:
            raise ConfigurationError(f"max_rotation must be >= 0, got {self.max_rotation}")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> RunParameters:
        """
        Build parameters from a mapping of field names or namelist keys.

        Raises:
            ConfigurationError: For unknown keys, bad values or failed validation.
        """
        kinds = {f.name: (int if f.name in ("n_blocks", "n_steps", "seed") else float)
                 for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, raw in values.items():
            name = cls.NAMELIST_KEYS.get(key.lower(), key)
            if name not in kinds:
                raise ConfigurationError(f"Unknown parameter {key!r}")
            kwargs[name] = None if raw is None else _convert(key, raw, kinds[name])

        params = cls(**kwargs)
        params.validate()
        return params

    @classmethod
    def from_namelist(cls, text: str) -> RunParameters:
        """Build parameters from namelist text (group &nml)."""
        return cls.from_dict(parse_namelist(text))

    def rows(self) -> list[tuple[str, int | float]]:
        """Return (label, value) pairs for the run report."""
        return [
            ("Number of blocks", self.n_blocks),
            ("Number of steps per block", self.n_steps),
            ("Maximum displacement", self.max_displacement),
            ("Maximum rotation", self.max_rotation),
        ]


@dataclass
class NVTParameters(RunParameters):
    """
    Constant-volume run parameters.

    Attributes:
        eps_box: Relative box compression used by the virial pressure estimate.
    """

    NAMELIST_KEYS: ClassVar[dict[str, str]] = {
        **RunParameters.NAMELIST_KEYS,
        "eps_box": "eps_box",
    }

    eps_box: float = 0.001

    def validate(self) -> None:
        super().validate()
        if self.eps_box <= 0.0:
            raise ConfigurationError(f"eps_box must be > 0, got {self.eps_box}")

    def rows(self) -> list[tuple[str, int | float]]:
        return super().rows() + [("Pressure scaling parameter", self.eps_box)]


@dataclass
class NPTParameters(RunParameters):
    """
    Constant-pressure run parameters.

    Attributes:
        max_box_displacement: Maximum change of ln(box) per volume trial.
        pressure: Imposed pressure in kT / sigma**3.
    """

    NAMELIST_KEYS: ClassVar[dict[str, str]] = {
        **RunParameters.NAMELIST_KEYS,
        "db_max": "max_box_displacement",
        "pressure": "pressure",
    }

    max_box_displacement: float = 0.001
    pressure: float = 1.4

    def validate(self) -> None:
        super().validate()
        if self.max_box_displacement < 0.0:
            raise ConfigurationError(
                f"max_box_displacement must be >= 0, got {self.max_box_displacement}"
            )
        if self.pressure < 0.0:
            raise ConfigurationError(f"pressure must be >= 0, got {self.pressure}")

    def rows(self) -> list[tuple[str, int | float]]:
        rows = super().rows()
        rows.insert(2, ("Pressure", self.pressure))
        rows.append(("Maximum box displacement", self.max_box_displacement))
        return rows
