"""Crossing-probability engine: numeric primitives, convolution and the DP solvers."""

from .boundaries import BoundaryError, BoundaryPair
from .convolution import FFTConvolver, convolve, convolve_direct
from .engine import (
    ALGORITHMS,
    crossing_probability,
    noncrossing_probability,
    one_sided_lower,
    one_sided_upper,
    poisson_noncrossing_probability,
    two_sided,
)
from .poisson import PoissonPMF, poisson_pmf

__all__ = [
    "ALGORITHMS",
    "BoundaryError",
    "BoundaryPair",
    "FFTConvolver",
    "PoissonPMF",
    "convolve",
    "convolve_direct",
    "crossing_probability",
    "noncrossing_probability",
    "one_sided_lower",
    "one_sided_upper",
    "poisson_noncrossing_probability",
    "poisson_pmf",
    "two_sided",
]
