# src/crossprob/core/poisson.py
"""
Module: poisson
Purpose: Log-domain Poisson probability mass values for the crossing-probability recurrences
Dependencies: numpy, scipy.special

Every transition weight used by the solvers is a Poisson pmf

    Pr[Pois(lam) = k] = exp(-lam) * lam**k / k!

evaluated as ``exp(k*log(lam) - lam - lgamma(k+1))`` so that large ``k*lam``
never overflows an intermediate. Results that underflow come back as 0.0.
"""

from __future__ import annotations

import math
from typing import Union

import numpy as np
from numpy.typing import NDArray
from scipy.special import gammaln

__all__ = [
    "poisson_pmf",
    "PoissonPMF",
]


def _check_rate(lam: float) -> float:
    lam = float(lam)
    if not math.isfinite(lam) or lam < 0.0:
        raise ValueError(f"Poisson rate must be finite and non-negative. Got {lam}.")
    return lam


def poisson_pmf(lam: float, k: int) -> float:
    """
    Pr[Pois(lam) = k] for a single rate and count.

    Raises:
        ValueError: on a negative / non-finite rate or a negative / non-integer count.
    """
    lam = _check_rate(lam)
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 0:
        raise ValueError(f"k must be a non-negative integer. Got {k!r}.")
    k = int(k)
    if lam == 0.0:
        return 1.0 if k == 0 else 0.0
    return math.exp(k * math.log(lam) - lam - math.lgamma(k + 1))


class PoissonPMF:
    """
    Poisson pmf generator with a log-factorial lookup table.

    One instance is created per top-level solve and sized for counts
    ``0..max_k``. It holds no state besides the table.
    """

    def __init__(self, max_k: int) -> None:
        if max_k < 0:
            raise ValueError(f"max_k must be non-negative. Got {max_k}.")
        self.max_k = int(max_k)
        # log(k!) for k = 0..max_k
        self._log_factorial = gammaln(np.arange(self.max_k + 1, dtype=np.float64) + 1.0)

    def log_factorial(self, k: int) -> float:
        return float(self._log_factorial[k])

    def array(self, lam: float, size: int) -> NDArray[np.float64]:
        """Return ``[pmf(lam, 0), ..., pmf(lam, size-1)]``."""
        if size > self.max_k + 1:
            raise ValueError(f"size={size} exceeds the table size {self.max_k + 1}.")
        lam = _check_rate(lam)
        out = np.zeros(size, dtype=np.float64)
        if size == 0:
            return out
        if lam == 0.0:
            out[0] = 1.0
            return out
        ks = np.arange(size, dtype=np.float64)
        out[:] = np.exp(ks * math.log(lam) - lam - self._log_factorial[:size])
        return out

    def evaluate(
        self, lam: Union[float, NDArray[np.float64]], ks: NDArray[np.integer]
    ) -> NDArray[np.float64]:
        """
        Vectorized pmf at integer counts ``ks``.

        ``lam`` may be a scalar or an array broadcastable against ``ks``.
        Zero rates are handled exactly (mass 1 at k == 0).
        """
        ks = np.asarray(ks)
        lam_arr = np.asarray(lam, dtype=np.float64)
        if np.any(lam_arr < 0.0) or not np.all(np.isfinite(lam_arr)):
            raise ValueError("Poisson rates must be finite and non-negative.")
        lam_b, ks_b = np.broadcast_arrays(lam_arr, ks)
        out = np.zeros(lam_b.shape, dtype=np.float64)
        pos = lam_b > 0.0
        if np.any(pos):
            lp = lam_b[pos]
            kp = ks_b[pos]
            out[pos] = np.exp(kp * np.log(lp) - lp - self._log_factorial[kp])
        out[~pos & (ks_b == 0)] = 1.0
        return out
