import json
import math

import pytest

from crossprob.bench import audit

# ---------------------------
# JSONL audit chain tests
# ---------------------------


def test_append_replaces_chain_keys_and_links_correctly(tmp_path):
    p = tmp_path / "audit.jsonl"

    # Caller-supplied chain fields must not survive.
    rec = {"payload": {"x": 1}, "sha256": "malicious", "prev_sha256": "evil"}
    h1 = audit.append_jsonl(str(p), rec)

    obj = json.loads(p.read_text(encoding="utf-8").strip())
    assert obj["sha256"] == h1 and obj["sha256"] != "malicious"
    assert obj["prev_sha256"] is None
    assert audit.verify_chain(str(p)) == 1


def test_chain_two_records_and_verify(tmp_path):
    p = tmp_path / "audit.jsonl"
    h1 = audit.append_jsonl(str(p), {"event": "first"})
    h2 = audit.append_jsonl(str(p), {"event": "second"})
    assert h2 and h2 != h1
    assert audit.tail_sha(str(p)) == h2
    assert audit.verify_chain(str(p)) == 2
    assert [r["event"] for r in audit.read_records(str(p))] == ["first", "second"]


def test_verify_chain_detects_tamper(tmp_path):
    p = tmp_path / "audit.jsonl"
    audit.append_jsonl(str(p), {"payload": {"x": 1}})
    audit.append_jsonl(str(p), {"payload": {"y": 2}})
    lines = p.read_text(encoding="utf-8").splitlines()
    obj1 = json.loads(lines[0])
    obj1["payload"]["x"] = 999  # content change, stale sha remains
    lines[0] = json.dumps(obj1, sort_keys=True, separators=(",", ":"))
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")

    with pytest.raises(audit.AuditError) as ei:
        audit.verify_chain(str(p))
    assert "SHA mismatch" in str(ei.value)


def test_verify_chain_detects_dropped_record(tmp_path):
    p = tmp_path / "audit.jsonl"
    for k in range(3):
        audit.append_jsonl(str(p), {"k": k})
    lines = p.read_text(encoding="utf-8").splitlines()
    p.write_text(lines[0] + "\n" + lines[2] + "\n", encoding="utf-8")
    with pytest.raises(audit.AuditError, match="chain break"):
        audit.verify_chain(str(p))


def test_verify_chain_raises_on_missing_sha_field_and_junk(tmp_path):
    p = tmp_path / "audit_broken.jsonl"
    audit.append_jsonl(str(p), {"ok": True})
    with open(p, "a", encoding="utf-8") as f:
        f.write(json.dumps({"prev_sha256": "abc", "payload": {"oops": 1}}) + "\n")
    with pytest.raises(audit.AuditError, match="missing sha256"):
        audit.verify_chain(str(p))

    q = tmp_path / "junk.jsonl"
    q.write_text("{ this is not json\n", encoding="utf-8")
    with pytest.raises(audit.AuditError, match="not valid JSON"):
        audit.verify_chain(str(q))


def test_missing_file(tmp_path):
    assert audit.tail_sha(str(tmp_path / "none.jsonl")) is None
    with pytest.raises(FileNotFoundError):
        audit.verify_chain(str(tmp_path / "none.jsonl"))


def test_benchmark_record_with_nan_result_round_trips(tmp_path):
    p = tmp_path / "runs" / "bench.jsonl"
    rec = audit.make_record({"alpha": 0.05, "family": "ks"}, 100, "one-sided-reference", 0.5, 0.4, math.nan, True)
    assert rec["meta"]["schema"] == audit.SCHEMA
    audit.append_jsonl(str(p), rec)
    (back,) = audit.read_records(str(p))
    assert back["method"] == "one-sided-reference" and back["n"] == 100
    assert math.isnan(back["result"]) and back["degraded"] is True
