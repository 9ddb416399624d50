"""
flow/types_result.py - FlowResult Dataclass

Immutable result container for a headless run.
"""

from dataclasses import dataclass

from .types_config import FlowConfig
from .types_state import FlowState


@dataclass(frozen=True)
class FlowResult:
    """Immutable run result."""
    final_state: FlowState
    all_traces: dict
    statistics: dict
    config: FlowConfig
