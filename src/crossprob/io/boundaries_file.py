# src/crossprob/io/boundaries_file.py
"""
Module: boundaries_file
Purpose: Read and write boundary files for the crossing-probability CLI
Dependencies: numpy, pathlib

Two text layouts are supported.

``lines`` (default)::

    0, 0.15, 0.5,
    0.7, 0.9, 1

Line 1 holds the lower bounds b_1..b_n, line 2 the upper bounds B_1..B_n.
Numbers are separated by commas and/or whitespace; a trailing separator is
allowed. An empty (or missing) line means the side is not given.

``pairs``::

    0, 0.7
    0.15, 1

One ``lower, upper`` pair per line, one line per order statistic.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "BoundaryFileError",
    "parse_numbers",
    "read_boundaries_file",
    "read_bound_pairs_file",
    "write_boundaries_file",
    "resolve_bounds",
]

PathLike = Union[str, Path]
_SEP = re.compile(r"[,\s]+")


class BoundaryFileError(ValueError):
    """Raised when a boundary file is missing, unreadable or malformed."""


def parse_numbers(line: str, *, where: str = "line") -> List[float]:
    """Parse a comma/whitespace separated list of floats; empty fields are skipped."""
    out: List[float] = []
    for tok in _SEP.split(line.strip()):
        if not tok:
            continue
        try:
            out.append(float(tok))
        except ValueError:
            raise BoundaryFileError(f"{where}: cannot parse {tok!r} as a number") from None
    return out


def _read_lines(path: PathLike) -> List[str]:
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise BoundaryFileError(f"Unable to read input file '{p}': {e}") from e


def read_boundaries_file(
    path: PathLike,
) -> Tuple[Optional[NDArray[np.float64]], Optional[NDArray[np.float64]]]:
    """
    Read the two-line layout. Returns ``(lower, upper)``; a side is None when its line is empty.

    Raises:
        BoundaryFileError: unreadable file, unparsable numbers or more than two non-empty lines.
    """
    lines = _read_lines(path)
    extra = [i for i, line in enumerate(lines[2:], start=3) if line.strip()]
    if extra:
        raise BoundaryFileError(f"{path}: expecting at most 2 lines, found content on line {extra[0]}")
    padded = (lines + ["", ""])[:2]
    sides: List[Optional[NDArray[np.float64]]] = []
    for lineno, line in enumerate(padded, start=1):
        values = parse_numbers(line, where=f"{path}:{lineno}")
        sides.append(np.asarray(values, dtype=np.float64) if values else None)
    return sides[0], sides[1]


def read_bound_pairs_file(path: PathLike) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Read the ``lower, upper`` per-line layout. Blank lines and ``#`` comments are ignored."""
    lower: List[float] = []
    upper: List[float] = []
    for lineno, raw in enumerate(_read_lines(path), start=1):
        line = raw.split("#", 1)[0]
        if not line.strip():
            continue
        values = parse_numbers(line, where=f"{path}:{lineno}")
        if len(values) != 2:
            raise BoundaryFileError(f"{path}:{lineno}: expecting 2 numbers, got {len(values)}")
        lower.append(values[0])
        upper.append(values[1])
    if not lower:
        raise BoundaryFileError(f"{path}: no bounds found")
    return np.asarray(lower, dtype=np.float64), np.asarray(upper, dtype=np.float64)


def write_boundaries_file(
    path: PathLike,
    lower: Optional[Sequence[float]],
    upper: Optional[Sequence[float]],
) -> Path:
    """Write the two-line layout (``repr`` precision, so values round-trip exactly)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    def fmt(xs: Optional[Sequence[float]]) -> str:
        return "" if xs is None else ", ".join(repr(float(x)) for x in xs)

    p.write_text(f"{fmt(lower)}\n{fmt(upper)}\n", encoding="utf-8")
    return p


def resolve_bounds(
    lower: Optional[NDArray[np.float64]],
    upper: Optional[NDArray[np.float64]],
    n: int,
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Fill a missing side with its implicit value (0 for lower, 1 for upper) and check lengths.

    Raises:
        BoundaryFileError: non-positive n, both sides missing, or a side whose length is not n.
    """
    if n <= 0:
        raise BoundaryFileError(f"n must be a positive integer. Got {n}.")
    if lower is None and upper is None:
        raise BoundaryFileError("At least one of the lower/upper bound lines must be given.")
    for name, side in (("lower", lower), ("upper", upper)):
        if side is not None and side.size != n:
            raise BoundaryFileError(f"Expecting {n} {name} bounds but got {side.size}.")
    lo = np.zeros(n, dtype=np.float64) if lower is None else lower
    hi = np.ones(n, dtype=np.float64) if upper is None else upper
    return lo, hi
