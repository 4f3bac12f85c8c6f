"""Configuration format implementations."""

from .cnf import (
    CnfReader,
    CnfWriter,
    read_configuration,
    read_configuration_header,
    write_configuration,
)

__all__ = [
    "CnfReader",
    "CnfWriter",
    "read_configuration",
    "read_configuration_header",
    "write_configuration",
]
