# src/crossprob/core/engine.py
"""
Module: engine
Purpose: Public entry points of the crossing-probability engine
Dependencies: numpy, crossprob.core.{boundaries, one_sided, two_sided}

Every entry point validates its input, normalizes the bounds to their
monotone envelopes, resolves the degenerate cases exactly and only then runs a
solver:

  - trivial bounds (lower <= 0, upper >= 1 everywhere)  -> 1.0
  - infeasible bounds (some normalized lower >= upper)    -> 0.0

Numerical degradation of a solver (NaN, values slightly outside [0, 1] from
round-off) is passed through as computed, except that finite values are
clipped into [0, 1]. Callers that need to guard against the less stable
variants inspect the result themselves.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Literal, Optional, Protocol

import numpy as np
from numpy.typing import ArrayLike, NDArray

from crossprob.core.boundaries import (
    BoundaryError,
    BoundaryPair,
    as_bound_array,
    lower_envelope,
    upper_envelope,
)
from crossprob.core.one_sided import (
    OneSidedVariant,
    lower_noncrossing_new,
    lower_noncrossing_reference,
    upper_noncrossing_new,
    upper_noncrossing_reference,
)
from crossprob.core.two_sided import noncrossing_direct, noncrossing_fft, process_noncrossing

__all__ = [
    "Method",
    "Solver",
    "ALGORITHMS",
    "two_sided",
    "one_sided_lower",
    "one_sided_upper",
    "noncrossing_probability",
    "crossing_probability",
    "poisson_noncrossing_probability",
]

logger = logging.getLogger(__name__)

Method = Literal["two-sided-direct", "two-sided-fft", "one-sided-reference", "one-sided-new"]


class Solver(Protocol):
    """Common signature of every entry in ``ALGORITHMS``; a side may be None."""

    def __call__(self, lower: Optional[NDArray[np.float64]], upper: Optional[NDArray[np.float64]]) -> float: ...


OneSidedSolver = Callable[[NDArray[np.float64]], float]

_LOWER_SOLVERS: Dict[str, OneSidedSolver] = {"reference": lower_noncrossing_reference, "new": lower_noncrossing_new}
_UPPER_SOLVERS: Dict[str, OneSidedSolver] = {"reference": upper_noncrossing_reference, "new": upper_noncrossing_new}


def _clip_probability(p: float) -> float:
    return float(np.clip(p, 0.0, 1.0))


def _check_variant(variant: str) -> None:
    if variant not in _LOWER_SOLVERS:
        raise ValueError(f'variant must be "reference" or "new". Got {variant!r}.')


def two_sided(lower: ArrayLike, upper: ArrayLike, use_fft: bool = True) -> float:
    """
    Pr[lower[i] <= X_(i+1) <= upper[i] for all i] for n uniform samples, n = len(lower).

    Args:
        lower: n lower bounds in [0, 1]; need not be monotone.
        upper: n upper bounds in [0, 1]; need not be monotone.
        use_fft: FFT window updates (O(n^2 log n)) instead of direct summation (O(n^3)).

    Raises:
        BoundaryError: on mismatched lengths, empty input or values outside [0, 1].
    """
    pair = BoundaryPair.from_arrays(lower, upper)
    if pair.is_trivial():
        logger.debug("two_sided: bounds admit every sample (n=%d)", pair.n)
        return 1.0
    if pair.is_infeasible():
        logger.debug("two_sided: bounds cross or pin a sample (n=%d)", pair.n)
        return 0.0
    norm = pair.normalized()
    solver = noncrossing_fft if use_fft else noncrossing_direct
    return _clip_probability(solver(norm.lower, norm.upper))


def one_sided_lower(lower: ArrayLike, variant: OneSidedVariant = "new") -> float:
    """Pr[X_(i+1) >= lower[i] for all i]; the upper bounds are implicitly 1."""
    _check_variant(variant)
    pair = BoundaryPair.from_lower(lower)
    if pair.is_trivial():
        logger.debug("one_sided_lower: bounds admit every sample (n=%d)", pair.n)
        return 1.0
    if pair.is_infeasible():
        logger.debug("one_sided_lower: bounds cross or pin a sample (n=%d)", pair.n)
        return 0.0
    norm = pair.normalized()
    return _clip_probability(_LOWER_SOLVERS[variant](norm.lower))


def one_sided_upper(upper: ArrayLike, variant: OneSidedVariant = "new") -> float:
    """Pr[X_(i+1) <= upper[i] for all i]; the lower bounds are implicitly 0."""
    _check_variant(variant)
    pair = BoundaryPair.from_upper(upper)
    if pair.is_trivial():
        logger.debug("one_sided_upper: bounds admit every sample (n=%d)", pair.n)
        return 1.0
    if pair.is_infeasible():
        logger.debug("one_sided_upper: bounds cross or pin a sample (n=%d)", pair.n)
        return 0.0
    norm = pair.normalized()
    return _clip_probability(_UPPER_SOLVERS[variant](norm.upper))


def _two_sided(use_fft: bool) -> Solver:
    def solve(lower, upper):
        if lower is None:
            lower = np.zeros(np.size(upper))
        if upper is None:
            upper = np.ones(np.size(lower))
        return two_sided(lower, upper, use_fft=use_fft)

    return solve


def _one_sided(variant: OneSidedVariant) -> Solver:
    def solve(lower, upper):
        lower_binds = lower is not None and bool(np.any(np.asarray(lower) > 0.0))
        upper_binds = upper is not None and bool(np.any(np.asarray(upper) < 1.0))
        if lower_binds and upper_binds:
            raise BoundaryError("One-sided methods take either lower or upper bounds, not both.")
        if upper_binds or lower is None:
            return one_sided_upper(upper, variant)
        return one_sided_lower(lower, variant)

    return solve


ALGORITHMS: Dict[str, Solver] = {
    "two-sided-direct": _two_sided(use_fft=False),
    "two-sided-fft": _two_sided(use_fft=True),
    "one-sided-reference": _one_sided("reference"),
    "one-sided-new": _one_sided("new"),
}


def noncrossing_probability(
    lower: Optional[ArrayLike] = None,
    upper: Optional[ArrayLike] = None,
    method: Method = "two-sided-fft",
) -> float:
    """
    Non-crossing probability by named method.

    A missing side of a two-sided method defaults to 0 (lower) or 1 (upper).
    One-sided methods accept exactly one informative side.
    """
    if method not in ALGORITHMS:
        raise ValueError(f"Unknown method {method!r}; expected one of {sorted(ALGORITHMS)}.")
    lo = None if lower is None else as_bound_array("lower", lower)
    hi = None if upper is None else as_bound_array("upper", upper)
    if lo is None and hi is None:
        raise BoundaryError("Either lower or upper bounds are required.")
    if lo is not None and hi is not None and lo.size != hi.size:
        raise BoundaryError(f"Expecting {lo.size} bounds for upper but got {hi.size}.")
    return ALGORITHMS[method](lo, hi)


def crossing_probability(
    lower: Optional[ArrayLike] = None,
    upper: Optional[ArrayLike] = None,
    method: Method = "two-sided-fft",
) -> float:
    """``1 - noncrossing_probability(...)``: the probability that some bound is violated."""
    return 1.0 - noncrossing_probability(lower, upper, method)


def poisson_noncrossing_probability(
    lower: ArrayLike,
    upper: Optional[ArrayLike],
    intensity: float,
    use_fft: bool = True,
) -> float:
    """
    Probability that a homogeneous Poisson process N on [0, 1] stays in a band.

    The band is given by the jump times it allows: the (i+1)-th point may not
    come before ``lower[i]`` and must come by ``upper[i]``. ``len(lower)``
    caps the total count; ``upper`` may be shorter than ``lower`` (or None),
    leaving the later points unconstrained from above. Unlike ``two_sided``
    the result is not conditioned on N(1).

    Raises:
        BoundaryError: on empty or out-of-range bounds.
        ValueError: if ``intensity`` is negative or not finite.
    """
    lo = as_bound_array("lower", lower)
    hi = np.zeros(0, dtype=np.float64) if upper is None else as_bound_array("upper", upper)
    rate = float(intensity)
    if not np.isfinite(rate) or rate < 0.0:
        raise ValueError(f"intensity must be finite and non-negative. Got {intensity!r}.")
    if hi.size > lo.size:
        # N(1) >= len(upper) > len(lower) >= N(1)
        logger.debug("poisson: more upper than lower bounds (%d > %d)", hi.size, lo.size)
        return 0.0

    lo = lower_envelope(lo)
    hi = upper_envelope(hi)
    if np.any(lo[: hi.size] >= hi):
        logger.debug("poisson: bounds cross or pin a point (n=%d)", lo.size)
        return 0.0
    return _clip_probability(process_noncrossing(lo, hi, rate, use_fft))
