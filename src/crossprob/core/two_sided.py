# src/crossprob/core/two_sided.py
"""
Module: two_sided
Purpose: Two-sided non-crossing probability Pr[lower[i] <= X_(i+1) <= upper[i] for all i]
Dependencies: numpy, crossprob.core.{poisson, convolution}

Overview
--------
Poissonize: replace the n uniforms by a Poisson process N(t) of intensity n on
[0,1]. Conditioned on N(1) = n its points are the sorted sample, so

    Pr[bounds hold] = Pr[N stays inside, N(1) = n] / Pr[Pois(n) = n].

In terms of N the bounds read

    X_(i) >= lower[i-1]   <=>  N(t) <= i-1 for t < lower[i-1]
    X_(i) <= upper[i-1]   <=>  N(t) >= i   for t >= upper[i-1]

so at any time the admissible counts form a window
``[#upper bounds passed, #lower bounds passed]``. All 2n bound locations plus
the end point 1.0 are merged into one sorted event list; between consecutive
events the window is convolved with the Poisson(n * dt) pmf, and at each event
one end of the window moves.

The same recurrence with an arbitrary intensity and without the final
division gives the crossing probability of the Poisson process itself
(``process_noncrossing``).

Two interchangeable window updates are provided:
  - direct summation: O(n^2) per event, O(n^3) overall (the oracle)
  - FFT convolution:  O(n log n) per event, O(n^2 log n) overall
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from typing_extensions import TypeAlias

from crossprob.core.convolution import FFTConvolver
from crossprob.core.poisson import PoissonPMF, poisson_pmf

__all__ = [
    "poisson_noncrossing_column",
    "noncrossing_direct",
    "noncrossing_fft",
    "process_noncrossing",
]

# Event tags; the numeric order is the tie-break order at equal locations.
LOWER_STEP = 0
UPPER_STEP = 1
END = 2

WindowConvolve: TypeAlias = Callable[[int, NDArray[np.float64], NDArray[np.float64]], NDArray[np.float64]]


def _merge_events(lower: NDArray[np.float64], upper: NDArray[np.float64]) -> List[Tuple[float, int]]:
    locations = np.concatenate([lower, upper, [1.0]])
    tags = np.concatenate(
        [
            np.full(lower.size, LOWER_STEP, dtype=np.int64),
            np.full(upper.size, UPPER_STEP, dtype=np.int64),
            [END],
        ]
    )
    order = np.lexsort((tags, locations))
    return [(float(locations[j]), int(tags[j])) for j in order]


def _direct_window(size: int, pmf: NDArray[np.float64], column: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.convolve(pmf[:size], column[:size])[:size]


def poisson_noncrossing_column(
    n: int,
    lower: NDArray[np.float64],
    upper: NDArray[np.float64],
    window_convolve: WindowConvolve,
    intensity: Optional[float] = None,
) -> NDArray[np.float64]:
    """
    Run the windowed recurrence and return the final column.

    ``column[k]`` is Pr[N never leaves the band and N(1) = k] for a Poisson
    process of the given intensity (default ``n``). Expects non-decreasing
    bounds; ``lower`` has length ``n`` and ``upper`` at most ``n``. Only the
    final window ``[len(upper), n]`` of the column is meaningful.
    """
    if intensity is None:
        intensity = float(n)
    pmfgen = PoissonPMF(n + 1)
    src = np.zeros(n + 1, dtype=np.float64)
    dest = np.zeros(n + 1, dtype=np.float64)
    src[0] = 1.0

    lower_count = 0
    upper_count = 0
    prev_location = 0.0
    for location, tag in _merge_events(lower, upper):
        size = lower_count - upper_count + 1
        if size <= 0:
            # window is empty: every path has crossed
            return np.zeros(n + 1, dtype=np.float64)
        pmf = pmfgen.array(intensity * (location - prev_location), size)
        dest[upper_count : upper_count + size] = window_convolve(
            size, pmf, src[upper_count : upper_count + size]
        )

        if tag == LOWER_STEP:
            lower_count += 1
            dest[lower_count] = 0.0
        elif tag == UPPER_STEP:
            dest[upper_count] = 0.0
            upper_count += 1

        prev_location = location
        src, dest = dest, src

    return src


def _finish(n: int, column: NDArray[np.float64]) -> float:
    return float(column[n] / poisson_pmf(n, n))


def process_noncrossing(
    lower: NDArray[np.float64],
    upper: NDArray[np.float64],
    intensity: float,
    use_fft: bool = True,
) -> float:
    """
    Pr[a Poisson process of the given intensity stays inside the band].

    ``lower[i]`` is the earliest time the process may reach count i+1 and
    ``upper[i]`` the latest. With ``len(lower) = n`` the count never exceeds
    n; with ``len(upper) = m <= n`` it ends at least at m. No conditioning
    on N(1) is applied.
    """
    n = int(lower.size)
    if use_fft:
        window_convolve: WindowConvolve = FFTConvolver(n + 1).convolve_same_size
    else:
        window_convolve = _direct_window
    column = poisson_noncrossing_column(n, lower, upper, window_convolve, intensity=intensity)
    return float(column[upper.size : n + 1].sum())


def noncrossing_direct(lower: NDArray[np.float64], upper: NDArray[np.float64]) -> float:
    """Two-sided probability with direct-summation window updates (O(n^3))."""
    n = int(lower.size)
    column = poisson_noncrossing_column(n, lower, upper, _direct_window)
    return _finish(n, column)


def noncrossing_fft(lower: NDArray[np.float64], upper: NDArray[np.float64]) -> float:
    """Two-sided probability with FFT window updates (O(n^2 log n))."""
    n = int(lower.size)
    convolver = FFTConvolver(n + 1)
    column = poisson_noncrossing_column(n, lower, upper, convolver.convolve_same_size)
    return _finish(n, column)
