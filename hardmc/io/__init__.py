"""I/O layer for molecular configurations."""

from .base import ConfigurationReader, ConfigurationWriter
from .formats.cnf import (
    CnfReader,
    CnfWriter,
    read_configuration,
    read_configuration_header,
    write_configuration,
)

__all__ = [
    # Base classes
    "ConfigurationReader",
    "ConfigurationWriter",
    # Formats
    "CnfReader",
    "CnfWriter",
    "read_configuration",
    "read_configuration_header",
    "write_configuration",
]
