"""
Module: audit
Purpose: Hash-chained JSONL persistence for benchmark results
Dependencies: hashlib, json, os, typing, datetime

Every line is one JSON object written with sorted keys and compact
separators. ``sha256`` is the digest of the line without that field and
``prev_sha256`` links to the previous line, so editing, dropping or
reordering lines breaks :func:`verify_chain`.
"""

from __future__ import annotations

import hashlib
import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

__all__ = [
    "AuditError",
    "SCHEMA",
    "append_jsonl",
    "verify_chain",
    "tail_sha",
    "read_records",
    "make_record",
]

SCHEMA = "crossprob/bench.v1"
_CHAIN_KEYS = ("prev_sha256", "sha256")


class AuditError(RuntimeError):
    """The JSONL chain is unreadable or fails verification."""


def _stable_dumps(obj: Mapping[str, Any]) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), allow_nan=True)


def _digest(rec_no_sha: Mapping[str, Any]) -> str:
    return hashlib.sha256(_stable_dumps(rec_no_sha).encode("utf-8")).hexdigest()


def _iter_jsonl(path: str) -> Iterator[Tuple[int, Dict[str, Any]]]:
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise AuditError(f"Line {lineno}: not valid JSON ({e.msg})") from e
            if not isinstance(obj, dict):
                raise AuditError(f"Line {lineno}: expected a JSON object")
            yield lineno, obj


def tail_sha(path: str) -> Optional[str]:
    """``sha256`` of the last record, or None for a missing or empty file."""
    if not os.path.exists(path):
        return None
    last: Optional[Dict[str, Any]] = None
    for _, obj in _iter_jsonl(path):
        last = obj
    if last is None:
        return None
    val = last.get("sha256")
    return val if isinstance(val, str) else None


def append_jsonl(path: str, rec: Mapping[str, Any]) -> str:
    """
    Append ``rec`` to the chain at ``path`` and return its digest.

    Chain fields already present in ``rec`` are replaced.
    """
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

    base: Dict[str, Any] = {k: v for k, v in rec.items() if k not in _CHAIN_KEYS}
    base["prev_sha256"] = tail_sha(path)
    sha = _digest(base)
    base["sha256"] = sha

    with open(path, "a", encoding="utf-8") as f:
        f.write(_stable_dumps(base) + "\n")
    return sha


def verify_chain(path: str) -> int:
    """
    Check every digest and back-link. Returns the number of records.

    Raises:
        FileNotFoundError: ``path`` does not exist.
        AuditError: on the first malformed, altered or unlinked record.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(path)

    prev: Optional[str] = None
    count = 0
    for lineno, obj in _iter_jsonl(path):
        expected = obj.get("sha256")
        if expected is None:
            raise AuditError(f"Line {lineno}: missing sha256")
        content = {k: v for k, v in obj.items() if k != "sha256"}
        got = _digest(content)
        if got != expected:
            raise AuditError(f"Line {lineno}: SHA mismatch (expected {expected}, got {got})")
        if content.get("prev_sha256") != prev:
            raise AuditError(f"Line {lineno}: chain break (prev_sha256 mismatch)")
        prev = expected
        count += 1
    return count


def read_records(path: str) -> List[Dict[str, Any]]:
    """All records of a verified chain, without the chain fields."""
    verify_chain(path)
    return [{k: v for k, v in obj.items() if k not in _CHAIN_KEYS} for _, obj in _iter_jsonl(path)]


def _now_iso_utc() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def make_record(
    cfg: Mapping[str, Any],
    n: int,
    method: str,
    elapsed: float,
    cpu: float,
    result: float,
    degraded: bool,
) -> Dict[str, Any]:
    """
    One benchmark row as a JSON-serializable record.

    ``result`` is the crossing probability; NaN is written as JSON ``NaN``.
    """
    return {
        "meta": {"schema": SCHEMA, "ts": _now_iso_utc()},
        "cfg": {
            "alpha": cfg.get("alpha"),
            "family": cfg.get("family"),
            "repetitions": cfg.get("repetitions"),
        },
        "n": int(n),
        "method": str(method),
        "timing": {"elapsed": float(elapsed), "cpu": float(cpu)},
        "result": float(result),
        "degraded": bool(degraded),
    }
