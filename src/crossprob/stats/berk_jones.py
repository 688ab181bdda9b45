# src/crossprob/stats/berk_jones.py
"""
Module: berk_jones
Purpose: Exact distribution of the Berk-Jones M_n^+ statistic and calibrated order-statistic bounds
Dependencies: numpy, scipy.special, scipy.optimize, crossprob.core.engine

For U_(1) <= ... <= U_(n) sorted uniforms,

    M_n^+ = min_i Pr[Beta(i, n-i+1) <= U_(i)] = min_i I_{U_(i)}(i, n-i+1).

``M_n^+ >= x`` holds exactly when ``U_(i) >= betaincinv(i, n-i+1, x)`` for all
i, so its CDF is one minus a one-sided lower-bound non-crossing probability.
All probabilities here use the ``"new"`` one-sided variant, which stays
accurate for n in the hundreds of thousands.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.optimize import bisect
from scipy.special import betainc, betaincinv

from crossprob.core.engine import one_sided_lower

__all__ = [
    "MAX_BISECTION_STEPS",
    "RELATIVE_TOLERANCE",
    "order_statistic_cdf",
    "mn_plus_statistic",
    "mn_plus_bounds",
    "mn_minus_bounds",
    "mn_plus_cdf",
    "mn_plus_pvalue",
    "inverse_mn_plus",
    "mn_plus_thresholds",
    "OrderStatsBound",
    "berk_jones_bound",
]

logger = logging.getLogger(__name__)

MAX_BISECTION_STEPS = 110
RELATIVE_TOLERANCE = 1e-11


def _check_n(n: int) -> int:
    if isinstance(n, bool) or int(n) != n or n <= 0:
        raise ValueError(f"n must be a positive integer. Got {n!r}.")
    return int(n)


def _check_level(name: str, x: float) -> float:
    x = float(x)
    if not 0.0 <= x <= 1.0:
        raise ValueError(f"{name} must be in [0, 1]. Got {x}.")
    return x


def order_statistic_cdf(i: ArrayLike, n: int, x: ArrayLike) -> NDArray[np.float64]:
    """Pr[U_(i) <= x] for the i-th of n sorted uniforms (1-based i)."""
    n = _check_n(n)
    i = np.asarray(i)
    return betainc(i, n - i + 1, x)


def mn_plus_statistic(samples: ArrayLike) -> float:
    """M_n^+ of a sample from [0, 1]."""
    x = np.sort(np.asarray(samples, dtype=np.float64).ravel())
    if x.size == 0:
        raise ValueError("samples must be non-empty")
    if not (np.all(np.isfinite(x)) and x[0] >= 0.0 and x[-1] <= 1.0):
        raise ValueError("samples must lie in [0, 1]")
    n = x.size
    return float(order_statistic_cdf(np.arange(1, n + 1), n, x).min())


def mn_plus_bounds(n: int, x: float) -> NDArray[np.float64]:
    """Lower bounds b_i = betaincinv(i, n-i+1, x); M_n^+ >= x iff U_(i) >= b_i for all i."""
    n = _check_n(n)
    x = _check_level("x", x)
    i = np.arange(1, n + 1)
    return betaincinv(i, n - i + 1, x)


def mn_minus_bounds(n: int, x: float) -> NDArray[np.float64]:
    """
    Mirror image of :func:`mn_plus_bounds`: upper bounds for the reflected sample.

    ``one_sided_upper(mn_minus_bounds(n, x)) == one_sided_lower(mn_plus_bounds(n, x))``.
    """
    n = _check_n(n)
    x = _check_level("x", x)
    i = np.arange(1, n + 1)
    return betaincinv(i, n - i + 1, 1.0 - x)


def mn_plus_cdf(n: int, x: float) -> float:
    """Pr[M_n^+ < x] under the null hypothesis that the samples are i.i.d. U[0,1]."""
    return 1.0 - one_sided_lower(mn_plus_bounds(n, x), variant="new")


def mn_plus_pvalue(samples: ArrayLike) -> float:
    """Pr[M_n^+ <= observed] under the null; small values mean the sample sits too far left."""
    x = np.asarray(samples, dtype=np.float64).ravel()
    return mn_plus_cdf(x.size, mn_plus_statistic(x))


def inverse_mn_plus(n: int, alpha: float) -> float:
    """
    Threshold x with Pr[M_n^+ < x] = alpha, by bisection on [0, 1].

    Stops once the bracket no longer shrinks in floating point. A warning is
    logged when the achieved level is off by more than ``RELATIVE_TOLERANCE``
    relative to ``alpha``.

    Raises:
        ValueError: alpha outside (0, 1).
        RuntimeError: the bracket still shrinks after ``MAX_BISECTION_STEPS`` halvings.
    """
    n = _check_n(n)
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"alpha must be in (0, 1). Got {alpha}.")

    low, high = 0.0, 1.0
    mid = 0.5
    last_range = None
    for step in range(MAX_BISECTION_STEPS):
        if last_range == (low, high) or low >= high:
            break
        last_range = (low, high)
        mid = (low + high) / 2.0
        if mn_plus_cdf(n, mid) < alpha:
            low = mid
        else:
            high = mid
    else:
        raise RuntimeError(f"inverse_mn_plus(n={n}, alpha={alpha}) did not converge")

    achieved = mn_plus_cdf(n, mid)
    relative_error = abs(alpha - achieved) / alpha
    if relative_error > RELATIVE_TOLERANCE:
        logger.warning(
            "inverse_mn_plus(n=%d, alpha=%g): large relative error %.3g after %d steps",
            n,
            alpha,
            relative_error,
            step,
        )
    return mid


def mn_plus_thresholds(alpha: float, n_values: Iterable[int]) -> List[Tuple[int, float]]:
    """``[(n, inverse_mn_plus(n, alpha)) for n in n_values]``."""
    out: List[Tuple[int, float]] = []
    for n in n_values:
        threshold = inverse_mn_plus(n, alpha)
        logger.info("M_n^+ %g-level threshold for n=%d: %.17g", alpha, n, threshold)
        out.append((int(n), threshold))
    return out


# ---------------- Calibrated bounds ----------------


@dataclass(frozen=True)
class OrderStatsBound:
    """CDF lower bounds on the order statistics holding jointly with probability 1 - delta."""

    q: NDArray[np.float64]
    delta: float

    def __post_init__(self) -> None:
        q = np.array(self.q, dtype=np.float64)
        if q.ndim != 1 or q.size == 0:
            raise ValueError("q must be a non-empty 1-d array")
        if q.min() < 0.0 or q.max() > 1.0:
            raise ValueError("elements of q must be in [0, 1]")
        if np.any(np.diff(q) < 0.0):
            raise ValueError("elements of q must be non-decreasing")
        if not 0.0 <= self.delta <= 1.0:
            raise ValueError("delta must be in [0, 1]")
        q.setflags(write=False)
        object.__setattr__(self, "q", q)

    @property
    def n(self) -> int:
        return int(self.q.shape[0])

    def coverage(self) -> float:
        """Pr[U_(i) >= q_i for all i]; equals 1 - delta up to bisection tolerance."""
        return one_sided_lower(self.q, variant="new")


def _calibrate(proposal: Callable[[float], NDArray[np.float64]], delta: float) -> OrderStatsBound:
    def excess(c: float) -> float:
        return one_sided_lower(proposal(c), variant="new") - (1.0 - delta)

    c_opt = bisect(excess, 0.0, 1.0)
    return OrderStatsBound(proposal(c_opt), delta)


def berk_jones_bound(n: int, delta: float, k: int = 0) -> OrderStatsBound:
    """
    Berk-Jones lower bounds with joint coverage 1 - delta.

    With ``k > 0`` the first k bounds are fixed at 0 (the truncated variant),
    which spends the whole failure budget on the remaining order statistics.
    """
    n = _check_n(n)
    if not 0.0 < delta < 1.0:
        raise ValueError(f"delta must be in (0, 1). Got {delta}.")
    if not 0 <= k < n:
        raise ValueError(f"k must be in [0, n). Got k={k}, n={n}.")
    i = np.arange(1, n + 1)

    def proposal(c: float) -> NDArray[np.float64]:
        b = betaincinv(i, n - i + 1, c)
        b[:k] = 0.0
        return b

    return _calibrate(proposal, delta)
