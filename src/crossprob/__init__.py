"""Exact crossing probabilities for the empirical CDF of uniform samples."""

from importlib import metadata as _metadata

from . import bench, core, io, stats
from .core import (
    ALGORITHMS,
    BoundaryError,
    BoundaryPair,
    crossing_probability,
    noncrossing_probability,
    one_sided_lower,
    one_sided_upper,
    poisson_noncrossing_probability,
    two_sided,
)

try:
    __version__ = _metadata.version("crossprob")
except _metadata.PackageNotFoundError:  # pragma: no cover - during local usage
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "ALGORITHMS",
    "BoundaryError",
    "BoundaryPair",
    "bench",
    "core",
    "crossing_probability",
    "io",
    "noncrossing_probability",
    "one_sided_lower",
    "one_sided_upper",
    "poisson_noncrossing_probability",
    "stats",
    "two_sided",
]
