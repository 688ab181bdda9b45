# src/crossprob/bench/timing.py
"""
Module: timing
Purpose: Time the non-crossing methods over a grid of sample sizes
Dependencies: numpy, crossprob.{core.engine, stats, io.config, bench.audit}

For each n the harness builds one lower-bound family (Berk-Jones bounds at
the alpha-level threshold, or one-sided KS bounds), then runs every enabled
method on the same bounds so the results are directly comparable. Every
method sees ``upper = 1``, so one-sided and two-sided methods compute the
same crossing probability.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from crossprob.bench import audit
from crossprob.core.engine import ALGORITHMS
from crossprob.io.config import BenchConfig
from crossprob.stats.berk_jones import inverse_mn_plus, mn_plus_bounds
from crossprob.stats.ks import ks_plus_bounds

__all__ = ["Timer", "BenchRecord", "build_bounds", "run_benchmark"]

logger = logging.getLogger(__name__)


class Timer:
    """Wall-clock and CPU time of a ``with`` block; logs them when given a label."""

    def __init__(self, label: Optional[str] = None) -> None:
        self.label = label
        self.elapsed = math.nan
        self.cpu = math.nan
        self._start_wall = 0.0
        self._start_cpu = 0.0

    def __enter__(self) -> "Timer":
        self._start_wall = time.perf_counter()
        self._start_cpu = time.process_time()
        return self

    def stop(self) -> None:
        self.elapsed = time.perf_counter() - self._start_wall
        self.cpu = time.process_time() - self._start_cpu

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
        if self.label is not None:
            logger.info("%s: wall %.3fs, cpu %.3fs", self.label, self.elapsed, self.cpu)


@dataclass(frozen=True)
class BenchRecord:
    n: int
    method: str
    elapsed: float
    cpu: float
    result: float
    degraded: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_bounds(config: BenchConfig, n: int) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Lower/upper bounds of the configured family for sample size n."""
    if config.family == "berk-jones":
        with Timer(f"threshold n={n}"):
            threshold = inverse_mn_plus(n, config.alpha)
        lower = mn_plus_bounds(n, threshold)
    else:
        d = config.ks_d if config.ks_d is not None else math.sqrt(math.log(1.0 / config.alpha) / (2.0 * n))
        lower = ks_plus_bounds(n, d)
    return lower, np.ones(n, dtype=np.float64)


def _is_degraded(p: float) -> bool:
    return not (math.isfinite(p) and 0.0 <= p <= 1.0)


def run_benchmark(config: BenchConfig, audit_path: Optional[str] = None) -> List[BenchRecord]:
    """
    Best-of-``repetitions`` timings of each method at each n.

    Methods whose ``max_n`` is below n are skipped. Results that are NaN or
    outside [0, 1] are kept and marked ``degraded``. When ``audit_path`` (or
    ``config.audit``) is set, each row is appended to that JSONL chain.
    """
    config.validate()
    path = audit_path if audit_path is not None else config.audit
    cfg = config.to_dict()
    records: List[BenchRecord] = []

    for n in config.n_values:
        lower, upper = build_bounds(config, n)
        for method in config.methods:
            limit = config.limit(method)
            if limit is not None and n > limit:
                logger.debug("skipping %s at n=%d (max_n=%d)", method, n, limit)
                continue
            solve = ALGORITHMS[method]
            best_wall = math.inf
            best_cpu = math.inf
            result = math.nan
            for _ in range(config.repetitions):
                with Timer() as t:
                    result = 1.0 - solve(lower, upper)
                best_wall = min(best_wall, t.elapsed)
                best_cpu = min(best_cpu, t.cpu)
            row = BenchRecord(n, method, best_wall, best_cpu, result, _is_degraded(result))
            if row.degraded:
                logger.warning("%s at n=%d returned %r", method, n, result)
            logger.info("n=%d %s: %.3fs crossing=%.17g", n, method, best_wall, result)
            records.append(row)
            if path:
                audit.append_jsonl(
                    path,
                    audit.make_record(cfg, n, method, best_wall, best_cpu, result, row.degraded),
                )
    return records
