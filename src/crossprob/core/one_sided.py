# src/crossprob/core/one_sided.py
"""
Module: one_sided
Purpose: One-sided non-crossing probabilities Pr[X_(i+1) <= upper[i] for all i] in O(n^2)
Dependencies: numpy, crossprob.core.{poisson, convolution}

Both variants work on the upper-bound form. For a Poisson process N of
intensity n the event is ``N(upper[i]) >= i+1`` for every i, and the answer
is Pr[no crossing, N(1) = n] / Pr[Pois(n) = n]. The lower-bound form
``X_(i+1) >= lower[i]`` is the upper-bound form of the reflected sample
``1 - X`` with ``upper'[i] = 1 - lower[n-1-i]``.

Variants
--------
reference
    First-exit recursion. A path first crosses at bound i exactly when
    N(upper[i]) = i, so with e_i the mass of such paths

        e_i = pmf(n*upper[i], i) - sum_{j<i} e_j * pmf(n*(upper[i]-upper[j]), i-j)
        P   = pmf(n, n)          - sum_j     e_j * pmf(n*(1-upper[j]), n-j)

    Long alternating sums of nearly equal terms: accuracy decays and NaN can
    appear once n reaches the tens of thousands.

new
    Blocked recurrence. Bounds are processed in blocks of k ~ sqrt(n). For
    each block the whole column is pushed to the block's last bound with a
    single FFT convolution, ignoring the intermediate bounds, and the mass of
    paths that first cross inside the block is then subtracted. The
    first-crossing masses come from a block-local column of at most k counts,
    so every subtraction involves only O(k) terms.
"""

from __future__ import annotations

import math
from typing import Literal

import numpy as np
from numpy.typing import NDArray

from crossprob.core.convolution import FFTConvolver
from crossprob.core.poisson import PoissonPMF, poisson_pmf

__all__ = [
    "OneSidedVariant",
    "block_size",
    "upper_noncrossing_column_new",
    "upper_noncrossing_new",
    "upper_noncrossing_reference",
    "lower_noncrossing_new",
    "lower_noncrossing_reference",
]

OneSidedVariant = Literal["reference", "new"]


def block_size(n: int) -> int:
    """Block length for the ``new`` variant; +1 keeps it positive for tiny n."""
    return int(math.isqrt(n)) + 1


def _reflect_lower(lower: NDArray[np.float64]) -> NDArray[np.float64]:
    return 1.0 - lower[::-1]


# ---- new -------------------------------------------------------------------

def upper_noncrossing_column_new(
    n: int, upper: NDArray[np.float64], jump: int
) -> NDArray[np.float64]:
    """
    Blocked recurrence; returns the final Poisson column (index = N(1)).

    Expects ``len(upper) == n`` with non-decreasing entries and ``jump >= 1``.
    """
    if jump < 1:
        raise ValueError(f"jump must be positive. Got {jump}.")
    intensity = float(n)
    n_steps = int(upper.size)

    pmfgen = PoissonPMF(n + 1)
    convolver = FFTConvolver(n + 1)

    src = np.zeros(n + 1, dtype=np.float64)
    dest = np.zeros(n + 1, dtype=np.float64)
    src[0] = 1.0
    mini_src = np.zeros(jump, dtype=np.float64)
    mini_dest = np.zeros(jump, dtype=np.float64)

    prev_end = -1
    prev_end_location = 0.0
    end = min(prev_end + jump, n_steps - 1)
    while True:
        # Push counts >= prev_end+1 straight to upper[end].
        size = n - prev_end
        pmf = pmfgen.array(intensity * (upper[end] - prev_end_location), size)
        pushed = convolver.convolve_same_size(size, pmf, src[prev_end + 1 :])
        dest[: end + 1] = 0.0
        dest[end + 1 :] = pushed[end - prev_end :]

        # Walk the intermediate bounds on the counts [prev_end+1, end] only.
        width = end - prev_end
        mini_src[:width] = src[prev_end + 1 : end + 1]
        location = prev_end_location
        for i in range(prev_end + 1, end):
            offset = i - prev_end - 1
            m = end - i + 1
            pmf_i = pmfgen.array(intensity * (upper[i] - location), m)
            mini_dest[offset : offset + m] = convolver.convolve_same_size(
                m, pmf_i, mini_src[offset : offset + m]
            )

            # Mass sitting exactly at count i when bound i is reached crosses here.
            exit_now = mini_dest[offset]
            if exit_now != 0.0:
                ks = np.arange(end + 1 - i, n + 1 - i)
                dest[end + 1 :] -= exit_now * pmfgen.evaluate(intensity * (upper[end] - upper[i]), ks)

            mini_dest[offset] = 0.0
            mini_src[offset] = 0.0
            mini_src, mini_dest = mini_dest, mini_src
            location = upper[i]

        prev_end = end
        prev_end_location = upper[end]
        src, dest = dest, src
        if end == n_steps - 1:
            break
        end = min(end + jump, n_steps - 1)

    size = n - n_steps + 1
    pmf = pmfgen.array(intensity * (1.0 - prev_end_location), size)
    dest[n_steps:] = convolver.convolve_same_size(size, pmf, src[n_steps:])
    dest[:n_steps] = 0.0
    return dest


def upper_noncrossing_new(upper: NDArray[np.float64]) -> float:
    n = int(upper.size)
    column = upper_noncrossing_column_new(n, upper, block_size(n))
    return float(column[n] / poisson_pmf(n, n))


def lower_noncrossing_new(lower: NDArray[np.float64]) -> float:
    return upper_noncrossing_new(_reflect_lower(lower))


# ---- reference -------------------------------------------------------------

def upper_noncrossing_reference(upper: NDArray[np.float64]) -> float:
    """First-exit recursion over all bounds (see module docstring)."""
    n = int(upper.size)
    intensity = float(n)
    pmfgen = PoissonPMF(n + 1)

    exits = np.zeros(n, dtype=np.float64)
    for i in range(n):
        acc = pmfgen.evaluate(intensity * upper[i], np.array([i]))[0]
        if i > 0:
            j = np.arange(i)
            weights = pmfgen.evaluate(intensity * (upper[i] - upper[:i]), i - j)
            acc -= float(np.dot(exits[:i], weights))
        exits[i] = acc

    j = np.arange(n)
    weights = pmfgen.evaluate(intensity * (1.0 - upper), n - j)
    total = poisson_pmf(intensity, n) - float(np.dot(exits, weights))
    return float(total / poisson_pmf(intensity, n))


def lower_noncrossing_reference(lower: NDArray[np.float64]) -> float:
    return upper_noncrossing_reference(_reflect_lower(lower))
