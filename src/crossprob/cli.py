# src/crossprob/cli.py
"""
crossprob CLI

Subcommands:
  - compute         Crossing probability for the bounds in a file
  - poisson         Crossing probability of a Poisson process of given intensity
  - bj-threshold    Alpha-level thresholds of the Berk-Jones M_n^+ statistic
  - bench           Time the methods over a grid of n (YAML config), append results to an audit chain
  - verify-audit    Verify a benchmark JSONL audit chain

Examples:
  crossprob compute two-sided-fft 3 bounds.txt
  crossprob compute one-sided-new 2 pairs.txt --format pairs --noncrossing
  crossprob poisson 2.0 bounds.txt
  crossprob bj-threshold --n 100 1000 --alpha 0.05
  crossprob bench --config bench.yaml --audit runs/bench.jsonl --fig runs/timings.png
  crossprob verify-audit --audit runs/bench.jsonl

Exit codes: 0 success, 2 usage error, 3 invalid input (bad file, bad bounds,
bad config, broken audit chain).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from crossprob.bench import audit, plots, timing
from crossprob.core.engine import (
    ALGORITHMS,
    crossing_probability,
    noncrossing_probability,
    poisson_noncrossing_probability,
)
from crossprob.io import boundaries_file
from crossprob.io.config import BenchConfig
from crossprob.stats.berk_jones import mn_plus_thresholds

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_INPUT = 3

logger = logging.getLogger("crossprob.cli")


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _parser(cmd: str, description: str) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=f"crossprob {cmd}", description=description)
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    return p


def _setup_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format="%(levelname)s %(name)s: %(message)s")


# -----------------------------------------------------------------------------
# Subcommands
# -----------------------------------------------------------------------------

def _cmd_compute(argv: List[str]) -> int:
    p = _parser("compute", "Probability that the ECDF of n uniforms crosses the bounds in a file.")
    p.add_argument("method", choices=sorted(ALGORITHMS), help="Algorithm")
    p.add_argument("n", type=int, help="Number of samples (must match the file)")
    p.add_argument("file", help="Boundary file")
    p.add_argument(
        "--format",
        default="lines",
        choices=["lines", "pairs"],
        help="'lines': lower bounds on line 1, upper on line 2; 'pairs': one 'lower, upper' per line",
    )
    p.add_argument("--noncrossing", action="store_true", help="Print the non-crossing probability instead")
    args = p.parse_args(argv)
    _setup_logging(args.log_level)

    if args.format == "pairs":
        lower, upper = boundaries_file.read_bound_pairs_file(args.file)
    else:
        lower, upper = boundaries_file.read_boundaries_file(args.file)
    lower, upper = boundaries_file.resolve_bounds(lower, upper, args.n)

    prob = noncrossing_probability if args.noncrossing else crossing_probability
    print(repr(prob(lower, upper, method=args.method)))
    return EXIT_OK


def _cmd_poisson(argv: List[str]) -> int:
    p = _parser("poisson", "Probability that a Poisson process on [0,1] crosses the bounds in a two-line file.")
    p.add_argument("intensity", type=float, help="Intensity of the process")
    p.add_argument("file", help="Boundary file; line 1 (required) caps the count, line 2 may be shorter")
    p.add_argument("--direct", action="store_true", help="Direct summation instead of FFT window updates")
    p.add_argument("--noncrossing", action="store_true", help="Print the non-crossing probability instead")
    args = p.parse_args(argv)
    _setup_logging(args.log_level)

    lower, upper = boundaries_file.read_boundaries_file(args.file)
    if lower is None:
        raise boundaries_file.BoundaryFileError(f"{args.file}: the lower bound line is required")
    prob = poisson_noncrossing_probability(lower, upper, args.intensity, use_fft=not args.direct)
    print(repr(prob if args.noncrossing else 1.0 - prob))
    return EXIT_OK


def _cmd_bj_threshold(argv: List[str]) -> int:
    p = _parser("bj-threshold", "Alpha-level thresholds x with Pr[M_n^+ < x] = alpha.")
    p.add_argument("--n", type=int, nargs="+", required=True, help="Sample size(s)")
    p.add_argument("--alpha", type=float, default=0.05, help="Level (default: 0.05)")
    args = p.parse_args(argv)
    _setup_logging(args.log_level)

    for n, threshold in mn_plus_thresholds(args.alpha, args.n):
        print(f"{n}\t{threshold!r}")
    return EXIT_OK


def _cmd_bench(argv: List[str]) -> int:
    p = _parser("bench", "Time the crossing-probability methods over a grid of sample sizes.")
    p.add_argument("--config", required=True, help="Path to YAML benchmark config")
    p.add_argument("--audit", default=None, help="JSONL audit chain to append results to (overrides config)")
    p.add_argument("--fig", default=None, help="Timing figure (PNG/PDF) (overrides config)")
    p.add_argument("--errors-fig", default=None, help="Relative error figure, one-sided-new vs two-sided-fft")
    args = p.parse_args(argv)
    _setup_logging(args.log_level)

    config = BenchConfig.from_yaml(args.config)
    records = timing.run_benchmark(config, audit_path=args.audit)

    print("n\tmethod\telapsed\tcpu\tcrossing\tdegraded")
    for r in records:
        print(f"{r.n}\t{r.method}\t{r.elapsed:.6f}\t{r.cpu:.6f}\t{r.result!r}\t{r.degraded}")

    fig = args.fig if args.fig is not None else config.fig
    if fig:
        print(f"figure: {plots.plot_timings(records, fig)}")
    if args.errors_fig:
        print(f"figure: {plots.plot_relative_errors(records, args.errors_fig)}")
    audit_path = args.audit if args.audit is not None else config.audit
    if audit_path:
        print(f"audit_sha: {audit.tail_sha(audit_path)}")
    return EXIT_OK


def _cmd_verify_audit(argv: List[str]) -> int:
    p = _parser("verify-audit", "Verify integrity of an append-only JSONL audit chain.")
    p.add_argument("--audit", required=True, help="Path to JSONL audit log")
    args = p.parse_args(argv)
    _setup_logging(args.log_level)

    count = audit.verify_chain(args.audit)
    print(f"audit chain OK ({count} records)")
    return EXIT_OK


COMMANDS: Dict[str, Callable[[List[str]], int]] = {
    "compute": _cmd_compute,
    "poisson": _cmd_poisson,
    "bj-threshold": _cmd_bj_threshold,
    "bench": _cmd_bench,
    "verify-audit": _cmd_verify_audit,
}


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] in ("-h", "--help"):
        print(f"Usage: crossprob {{{'|'.join(COMMANDS)}}} ...", file=sys.stderr)
        return EXIT_OK if args else EXIT_USAGE

    cmd, rest = args[0], args[1:]
    handler = COMMANDS.get(cmd)
    if handler is None:
        print(f"unknown subcommand: {cmd}", file=sys.stderr)
        return EXIT_USAGE
    try:
        return handler(rest)
    except SystemExit as e:
        # argparse reports usage errors (and --help) this way
        return e.code if isinstance(e.code, int) else EXIT_USAGE
    except (ValueError, FileNotFoundError, audit.AuditError) as e:
        logger.debug("command %s failed", cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT


if __name__ == "__main__":
    sys.exit(main())
