"""Benchmark harness: timings, hash-chained result logs and figures."""

from .audit import AuditError, append_jsonl, read_records, tail_sha, verify_chain
from .timing import BenchRecord, Timer, run_benchmark

__all__ = [
    "AuditError",
    "BenchRecord",
    "Timer",
    "append_jsonl",
    "read_records",
    "run_benchmark",
    "tail_sha",
    "verify_chain",
]
