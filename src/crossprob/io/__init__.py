"""Boundary files and YAML configuration."""

from .boundaries_file import (
    BoundaryFileError,
    read_bound_pairs_file,
    read_boundaries_file,
    resolve_bounds,
    write_boundaries_file,
)
from .config import BenchConfig, ConfigError, load_config

__all__ = [
    "BenchConfig",
    "BoundaryFileError",
    "ConfigError",
    "load_config",
    "read_bound_pairs_file",
    "read_boundaries_file",
    "resolve_bounds",
    "write_boundaries_file",
]
