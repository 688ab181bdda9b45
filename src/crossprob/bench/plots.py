# src/crossprob/bench/plots.py
"""
Module: plots
Purpose: Timing and relative-error figures for benchmark records
Dependencies: matplotlib, numpy, crossprob.bench.timing

Figures are written headless (Agg backend) and the output path is returned.
"""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")  # headless
import matplotlib.pyplot as plt
import numpy as np

from crossprob.bench.timing import BenchRecord

__all__ = ["plot_timings", "relative_errors", "plot_relative_errors"]


def _by_method(records: Sequence[BenchRecord]) -> Dict[str, List[BenchRecord]]:
    grouped: Dict[str, List[BenchRecord]] = defaultdict(list)
    for rec in records:
        grouped[rec.method].append(rec)
    for rows in grouped.values():
        rows.sort(key=lambda r: r.n)
    return grouped


def plot_timings(records: Sequence[BenchRecord], outfile: str | Path) -> str:
    """Runtime against n for each method, log-scale y axis. Degraded points are drawn hollow."""
    if not records:
        raise ValueError("no benchmark records to plot")
    Path(outfile).parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots()
    for method, rows in sorted(_by_method(records).items()):
        ns = [r.n for r in rows]
        line = ax.plot(ns, [r.elapsed for r in rows], ".-", label=method)[0]
        bad = [r for r in rows if r.degraded]
        if bad:
            ax.plot(
                [r.n for r in bad],
                [r.elapsed for r in bad],
                "o",
                mfc="none",
                color=line.get_color(),
            )
    ax.set_yscale("log")
    ax.set_xlabel("n")
    ax.set_ylabel("Running time (seconds)")
    ax.grid(which="both")
    ax.legend(loc="upper left")
    fig.savefig(str(outfile), bbox_inches="tight")
    plt.close(fig)
    return str(outfile)


def relative_errors(
    records: Sequence[BenchRecord], reference: str, other: str
) -> Tuple[np.ndarray, np.ndarray]:
    """(n, |other - reference| / reference) at every n both methods ran."""
    grouped = _by_method(records)
    ref = {r.n: r.result for r in grouped.get(reference, [])}
    pairs = [(r.n, r.result) for r in grouped.get(other, []) if r.n in ref]
    if not pairs:
        raise ValueError(f"no sample size has results for both {reference!r} and {other!r}")
    ns = np.array([n for n, _ in pairs], dtype=np.int64)
    vals = np.array([v for _, v in pairs], dtype=np.float64)
    refs = np.array([ref[n] for n, _ in pairs], dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        errs = np.abs(vals - refs) / refs
    return ns, errs


def plot_relative_errors(
    records: Sequence[BenchRecord],
    outfile: str | Path,
    reference: str = "two-sided-fft",
    other: str = "one-sided-new",
) -> str:
    ns, errs = relative_errors(records, reference, other)
    Path(outfile).parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots()
    ax.plot(ns, errs, ".-k", label=f"{other} vs {reference}")
    ax.set_xlabel("n")
    ax.set_ylabel("Relative error")
    ax.grid(which="both")
    ax.legend(loc="upper right")
    fig.savefig(str(outfile), bbox_inches="tight")
    plt.close(fig)
    return str(outfile)
