"""
Module: ks
Purpose: Kolmogorov-Smirnov statistics as non-crossing problems
Dependencies: numpy, crossprob.core.engine

D_n <= d holds exactly when ``i/n - d <= X_(i) <= (i-1)/n + d`` for i = 1..n,
so the KS distribution is a two-sided non-crossing probability with linear
bounds, and D_n^+ / D_n^- are its one-sided halves.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from crossprob.core.engine import one_sided_lower, two_sided
from crossprob.core.one_sided import OneSidedVariant

__all__ = ["ks_two_sided_bounds", "ks_plus_bounds", "ks_minus_bounds", "ks_cdf", "ks_plus_cdf"]


def _grid(n: int, d: float) -> NDArray[np.float64]:
    if isinstance(n, bool) or int(n) != n or n <= 0:
        raise ValueError(f"n must be a positive integer. Got {n!r}.")
    if not np.isfinite(d) or d < 0.0:
        raise ValueError(f"d must be a finite non-negative number. Got {d}.")
    return np.arange(int(n), dtype=np.float64)


def ks_plus_bounds(n: int, d: float) -> NDArray[np.float64]:
    """Lower bounds for D_n^+ <= d: X_(i) >= i/n - d."""
    i = _grid(n, d)
    return np.clip((i + 1.0) / n - d, 0.0, 1.0)


def ks_minus_bounds(n: int, d: float) -> NDArray[np.float64]:
    """Upper bounds for D_n^- <= d: X_(i) <= (i-1)/n + d."""
    i = _grid(n, d)
    return np.clip(i / n + d, 0.0, 1.0)


def ks_two_sided_bounds(n: int, d: float) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    return ks_plus_bounds(n, d), ks_minus_bounds(n, d)


def ks_cdf(n: int, d: float, use_fft: bool = True) -> float:
    """Pr[D_n <= d]."""
    lower, upper = ks_two_sided_bounds(n, d)
    return two_sided(lower, upper, use_fft=use_fft)


def ks_plus_cdf(n: int, d: float, variant: OneSidedVariant = "new") -> float:
    """Pr[D_n^+ <= d]."""
    return one_sided_lower(ks_plus_bounds(n, d), variant=variant)
