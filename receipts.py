"""
receipts.py - Flow Event Receipts

Every control event, phase transition, memory settlement and run summary in
the flow simulation is recorded as a receipt: a flat dict stamped with type,
UTC timestamp, tenant and a dual hash of its payload. Receipts are the
simulation's observability channel; they are appended to the state ledger
and optionally streamed as JSONL.

Hashes are always SHA256:BLAKE3 pairs.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Union

import blake3

__all__ = [
    "DEFAULT_TENANT",
    "StopRule",
    "canonical_json",
    "dual_hash",
    "emit_receipt",
    "merkle",
    "write_receipt_jsonl",
]

DEFAULT_TENANT = "flowsim"


class StopRule(Exception):
    """A simulation invariant broke. Propagates; callers must not swallow it."""


# =============================================================================
# HASHING
# =============================================================================

def canonical_json(obj: Any) -> str:
    """Key-sorted JSON; enums, tuples and other leftovers fall back to str()."""
    return json.dumps(obj, sort_keys=True, default=str)


def dual_hash(data: Union[bytes, str]) -> str:
    """
    Hash with both SHA256 and BLAKE3.

    Args:
        data: Raw bytes, or text encoded as UTF-8

    Returns:
        str: "<sha256 hex>:<blake3 hex>"
    """
    raw = data.encode("utf-8") if isinstance(data, str) else data
    return f"{hashlib.sha256(raw).hexdigest()}:{blake3.blake3(raw).hexdigest()}"


def merkle(items: Iterable[Any]) -> str:
    """
    Merkle root over canonical-JSON leaves.

    Odd levels carry their last hash up by pairing it with itself. An empty
    input has a fixed root.
    """
    level = [dual_hash(canonical_json(item)) for item in items]
    if not level:
        return dual_hash(b"empty")
    while len(level) > 1:
        if len(level) % 2:
            level.append(level[-1])
        level = [dual_hash(left + right) for left, right in zip(level[::2], level[1::2])]
    return level[0]


# =============================================================================
# EMISSION
# =============================================================================

def emit_receipt(receipt_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a receipt for one simulation event.

    The payload is hashed before the envelope fields are added, so the hash
    depends only on what the caller passed in.

    Args:
        receipt_type: Event name (see flow.constants.RECEIPT_SCHEMA)
        data: Event payload; "tenant_id" in it overrides DEFAULT_TENANT

    Returns:
        dict: Envelope (receipt_type, ts, tenant_id, payload_hash) merged with data
    """
    return {
        "receipt_type": receipt_type,
        "ts": datetime.now(timezone.utc).isoformat(),
        "tenant_id": data.get("tenant_id", DEFAULT_TENANT),
        "payload_hash": dual_hash(canonical_json(data)),
        **data
    }


def write_receipt_jsonl(receipt: Dict[str, Any], fh) -> None:
    """Write one receipt as a compact JSON line to an open text handle."""
    fh.write(json.dumps(receipt, separators=(",", ":"), default=str) + "\n")
