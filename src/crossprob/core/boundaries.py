# src/crossprob/core/boundaries.py
"""
Module: boundaries
Purpose: Validation and normalization of order-statistic bounds before they reach the solvers
Dependencies: numpy

A boundary pair constrains ``lower[i] <= X_(i+1) <= upper[i]``. Because the
order statistics are sorted, per-index bounds can be replaced by their
monotone envelopes without changing the event:

    X_(i) >= lower[i] for all i  <=>  X_(i) >= max_{j<=i} lower[j] for all i
    X_(i) <= upper[i] for all i  <=>  X_(i) <= min_{j>=i} upper[j] for all i

The solvers assume normalized (non-decreasing) input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

__all__ = [
    "BoundaryError",
    "BoundaryPair",
    "as_bound_array",
    "lower_envelope",
    "upper_envelope",
    "reflect",
]


class BoundaryError(ValueError):
    """Raised for malformed boundary input (shape, length, range, non-finite values)."""


def as_bound_array(name: str, values: ArrayLike, n: Optional[int] = None) -> NDArray[np.float64]:
    """
    Coerce ``values`` to a read-only 1-D float64 array of bounds in [0, 1].

    Raises:
        BoundaryError: empty input, wrong length, non-finite or out-of-range values.
    """
    try:
        arr = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise BoundaryError(f"{name} must be a sequence of numbers: {e}") from e
    if arr.ndim != 1:
        raise BoundaryError(f"{name} must be 1-D. Got shape {arr.shape}.")
    if arr.size == 0:
        raise BoundaryError(f"{name} must contain at least one bound.")
    if n is not None and arr.size != n:
        raise BoundaryError(f"Expecting {n} bounds for {name} but got {arr.size}.")
    if not np.isfinite(arr).all():
        raise BoundaryError(f"{name} contains non-finite values.")
    if arr.min() < 0.0 or arr.max() > 1.0:
        raise BoundaryError(f"{name} must lie in the interval [0,1].")
    arr.setflags(write=False)
    return arr


def lower_envelope(lower: NDArray[np.float64]) -> NDArray[np.float64]:
    """Running maximum: the tightest non-decreasing sequence equivalent to ``lower``."""
    return np.maximum.accumulate(lower)


def upper_envelope(upper: NDArray[np.float64]) -> NDArray[np.float64]:
    """Reverse running minimum: the tightest non-decreasing sequence equivalent to ``upper``."""
    return np.minimum.accumulate(upper[::-1])[::-1]


def reflect(
    lower: NDArray[np.float64], upper: NDArray[np.float64]
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Map bounds on ``X`` to bounds on ``1 - X``.

    ``lower'[i] = 1 - upper[n-1-i]`` and ``upper'[i] = 1 - lower[n-1-i]``.
    The uniform distribution is symmetric, so both pairs have the same probability.
    """
    return 1.0 - upper[::-1], 1.0 - lower[::-1]


@dataclass(frozen=True)
class BoundaryPair:
    """Validated two-sided bounds ``lower[i] <= X_(i+1) <= upper[i]``."""

    lower: NDArray[np.float64]
    upper: NDArray[np.float64]

    @classmethod
    def from_arrays(cls, lower: ArrayLike, upper: ArrayLike) -> "BoundaryPair":
        lo = as_bound_array("lower", lower)
        hi = as_bound_array("upper", upper, n=lo.size)
        return cls(lo, hi)

    @classmethod
    def from_lower(cls, lower: ArrayLike) -> "BoundaryPair":
        lo = as_bound_array("lower", lower)
        return cls(lo, np.ones_like(lo))

    @classmethod
    def from_upper(cls, upper: ArrayLike) -> "BoundaryPair":
        hi = as_bound_array("upper", upper)
        return cls(np.zeros_like(hi), hi)

    @property
    def n(self) -> int:
        return int(self.lower.size)

    def normalized(self) -> "BoundaryPair":
        return BoundaryPair(lower_envelope(self.lower), upper_envelope(self.upper))

    def reflected(self) -> "BoundaryPair":
        lo, hi = reflect(self.lower, self.upper)
        return BoundaryPair(lo, hi)

    def is_infeasible(self) -> bool:
        """
        True when the bounds hold with probability zero.

        That is the case when the envelopes cross, and also when they touch:
        ``lower[i] == upper[i]`` pins X_(i+1) to a single point. An upper
        bound of 0 or a lower bound of 1 touches the implicit 0/1 side.
        """
        norm = self.normalized()
        return bool(np.any(norm.lower >= norm.upper))

    def is_trivial(self) -> bool:
        """True when every sample satisfies the bounds."""
        return bool(np.all(self.lower <= 0.0) and np.all(self.upper >= 1.0))
