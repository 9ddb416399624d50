"""
tests/test_receipts.py - Receipt Foundation Tests

Validates:
- dual_hash format
- emit_receipt fields and tenant defaults
- JSONL writing and Merkle roots
- Ledger bounding and sink mirroring
"""

import io
import json

import pytest

from receipts import (
    StopRule,
    canonical_json,
    dual_hash,
    emit_receipt,
    merkle,
    write_receipt_jsonl,
)

from flow.cycle import initialize_state
from flow.ledger import receipts_of_type, record
from flow.types_config import FlowConfig


class TestCanonicalJson:
    """Test canonical_json helper."""

    def test_sorted_keys(self):
        assert canonical_json({"b": 1, "a": 2}) == '{"a": 2, "b": 1}'

    def test_str_fallback(self):
        assert canonical_json({"t": (1, 2), "s": {1}}) == '{"s": "{1}", "t": [1, 2]}'


class TestDualHash:
    """Test dual_hash function."""

    def test_format(self):
        sha, b3 = dual_hash("flow").split(":")
        assert len(sha) == 64 and len(b3) == 64
        assert sha != b3

    def test_str_and_bytes_agree(self):
        assert dual_hash("flow") == dual_hash(b"flow")


class TestEmitReceipt:
    """Test emit_receipt function."""

    def test_fields(self):
        r = emit_receipt("mode_toggle", {"mode": "Emergence"})
        assert r["receipt_type"] == "mode_toggle"
        assert r["tenant_id"] == "flowsim"
        assert r["mode"] == "Emergence"
        assert "ts" in r and ":" in r["payload_hash"]

    def test_tenant_override(self):
        assert emit_receipt("x", {"tenant_id": "lab"})["tenant_id"] == "lab"

    def test_payload_hash_stable(self):
        a = emit_receipt("x", {"a": 1, "b": 2})
        b = emit_receipt("x", {"b": 2, "a": 1})
        assert a["payload_hash"] == b["payload_hash"]


class TestJsonlAndMerkle:
    """Test write_receipt_jsonl and merkle."""

    def test_jsonl_line(self):
        fh = io.StringIO()
        write_receipt_jsonl({"receipt_type": "x", "n": 1}, fh)
        line = fh.getvalue()
        assert line.endswith("\n") and line.count("\n") == 1
        assert json.loads(line) == {"receipt_type": "x", "n": 1}

    def test_merkle_empty(self):
        assert merkle([]) == dual_hash(b"empty")

    def test_merkle_order_sensitive(self):
        assert merkle([1, 2, 3]) != merkle([3, 2, 1])

    def test_merkle_single(self):
        assert merkle([{"a": 1}]) == dual_hash(json.dumps({"a": 1}, sort_keys=True))


class TestLedger:
    """Test FlowState ledger helpers."""

    def test_record_stamps_tick(self):
        state = initialize_state(FlowConfig(random_seed=1))
        state.tick = 17
        r = record(state, "flow_reset", {})
        assert r["tick"] == 17
        assert receipts_of_type(state, "flow_reset") == [r]

    def test_bounded(self):
        state = initialize_state(FlowConfig(ledger_limit=3))
        for i in range(5):
            record(state, "phase_change", {"i": i})
        assert [r["i"] for r in state.receipt_ledger] == [2, 3, 4]

    def test_sink_mirror(self):
        state = initialize_state(FlowConfig())
        state.receipt_sink = io.StringIO()
        record(state, "flow_reset", {"particles": 0})
        (line,) = state.receipt_sink.getvalue().splitlines()
        assert json.loads(line)["receipt_type"] == "flow_reset"

    def test_tenant_from_config(self):
        state = initialize_state(FlowConfig(tenant_id="lab-7"))
        assert record(state, "flow_reset", {})["tenant_id"] == "lab-7"


def test_stoprule_is_exception():
    with pytest.raises(StopRule):
        raise StopRule("population cap breached")
