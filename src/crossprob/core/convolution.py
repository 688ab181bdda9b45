# src/crossprob/core/convolution.py
"""
Module: convolution
Purpose: FFT convolution of real probability vectors for the DP column updates
Dependencies: numpy, scipy.fft

Overview
--------
The solvers advance a column of Poisson masses by convolving it with a Poisson
increment pmf. Only the first ``size`` terms of the product are ever needed,
so the engine exposes ``FFTConvolver.convolve_same_size`` next to a plain full
``convolve``.

Design notes
------------
- Forward real FFT of both zero-padded inputs, pointwise product, inverse real
  FFT. ``scipy.fft.irfft`` already applies the 1/L normalization.
- Padded lengths come from ``scipy.fft.next_fast_len`` and are cached per
  request size.
- Below ``MIN_FFT_SIZE`` direct summation is both faster and exact enough.
- A convolver belongs to one solve. Nothing here is module-global.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import fft as sp_fft

__all__ = [
    "MIN_FFT_SIZE",
    "convolve",
    "convolve_direct",
    "FFTConvolver",
]

MIN_FFT_SIZE = 80


def _as_vector(x: ArrayLike) -> NDArray[np.float64]:
    arr = np.asarray(x, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got shape {arr.shape}.")
    return arr


def convolve_direct(a: ArrayLike, b: ArrayLike) -> NDArray[np.float64]:
    """Full convolution by direct O(len(a)*len(b)) summation."""
    A = _as_vector(a)
    B = _as_vector(b)
    if A.size == 0 or B.size == 0:
        return np.zeros(0, dtype=np.float64)
    return np.convolve(A, B)


def convolve(a: ArrayLike, b: ArrayLike) -> NDArray[np.float64]:
    """
    Full discrete convolution ``c[k] = sum_j a[j] * b[k-j]`` via real FFTs.

    Returns an array of length ``len(a) + len(b) - 1``; empty if either input is empty.
    """
    A = _as_vector(a)
    B = _as_vector(b)
    if A.size == 0 or B.size == 0:
        return np.zeros(0, dtype=np.float64)
    out_len = A.size + B.size - 1
    padded = sp_fft.next_fast_len(out_len, real=True)
    spectrum = sp_fft.rfft(A, n=padded) * sp_fft.rfft(B, n=padded)
    return sp_fft.irfft(spectrum, n=padded)[:out_len]


class FFTConvolver:
    """
    Truncated convolution engine owned by a single solve.

    Work buffers grow to the largest padded length requested and are reused
    across the DP steps of that solve.
    """

    def __init__(self, max_size: int, min_fft_size: int = MIN_FFT_SIZE) -> None:
        if max_size < 0:
            raise ValueError(f"max_size must be non-negative. Got {max_size}.")
        self.max_size = int(max_size)
        self.min_fft_size = int(min_fft_size)
        self._padded_len: Dict[int, int] = {}
        self._buf0 = np.zeros(0, dtype=np.float64)
        self._buf1 = np.zeros(0, dtype=np.float64)

    def _padded(self, size: int) -> int:
        L = self._padded_len.get(size)
        if L is None:
            L = sp_fft.next_fast_len(2 * size - 1, real=True)
            self._padded_len[size] = L
        return L

    def _buffers(self, length: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        if self._buf0.size < length:
            self._buf0 = np.zeros(length, dtype=np.float64)
            self._buf1 = np.zeros(length, dtype=np.float64)
        return self._buf0[:length], self._buf1[:length]

    def convolve_same_size(self, size: int, a: ArrayLike, b: ArrayLike) -> NDArray[np.float64]:
        """
        First ``size`` terms of ``a[:size] * b[:size]``.

        The returned array is freshly allocated; the inputs are never modified.
        """
        if size < 0 or size > self.max_size:
            raise ValueError(f"size must be in [0, {self.max_size}]. Got {size}.")
        if size == 0:
            return np.zeros(0, dtype=np.float64)
        A = _as_vector(a)[:size]
        B = _as_vector(b)[:size]
        if A.size < size or B.size < size:
            raise ValueError(f"Inputs shorter than size={size}.")

        if size < self.min_fft_size:
            return np.convolve(A, B)[:size]

        L = self._padded(size)
        x0, x1 = self._buffers(L)
        x0[:size] = A
        x0[size:] = 0.0
        x1[:size] = B
        x1[size:] = 0.0
        spectrum = sp_fft.rfft(x0)
        spectrum *= sp_fft.rfft(x1)
        return sp_fft.irfft(spectrum, n=L)[:size].copy()
