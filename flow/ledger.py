"""
flow/ledger.py - Receipt Ledger Helpers

Appends receipts to the bounded state ledger and mirrors them to an
optional JSONL sink.
"""

from receipts import emit_receipt, write_receipt_jsonl

from .types_state import FlowState


def record(state: FlowState, receipt_type: str, data: dict) -> dict:
    """
    Emit a receipt stamped with tenant and tick, and append it to the ledger.

    Args:
        state: FlowState owning the ledger
        receipt_type: Receipt type from RECEIPT_SCHEMA
        data: Payload fields

    Returns:
        dict: The emitted receipt
    """
    receipt = emit_receipt(receipt_type, {
        "tenant_id": state.tenant_id,
        "tick": state.tick,
        **data
    })
    state.receipt_ledger.append(receipt)
    if state.receipt_sink is not None:
        write_receipt_jsonl(receipt, state.receipt_sink)
    return receipt


def receipts_of_type(state: FlowState, receipt_type: str) -> list:
    return [r for r in state.receipt_ledger if r.get("receipt_type") == receipt_type]
