"""
flow/criticality.py - Criticality Evaluator

Derives the coupling-implied optimal complexity and the pulsing display
intensity used while the network sits at it.
"""

import math
from typing import Optional, Sequence

import numpy as np

from .constants import (
    BACKGROUND_PULSE_AMPLITUDE, BACKGROUND_PULSE_BASE, BACKGROUND_PULSE_RATE,
    OSCILLATION_RATE,
)
from .ledger import record
from .types_state import FlowState


def optimal_complexity(coupling: Sequence[float]) -> int:
    """
    Complexity at which the network is critical.

    Formula: round(mean(coupling) * 2 + 2), halves rounded up.

    Args:
        coupling: Coupling vector

    Returns:
        int: Optimal node count per level
    """
    return int(math.floor(float(np.mean(coupling)) * 2 + 2 + 0.5))


def is_critical(complexity: int, coupling: Sequence[float]) -> bool:
    return complexity == optimal_complexity(coupling)


def oscillation(frame_time: float, critical: bool,
                rate: float = OSCILLATION_RATE) -> float:
    """Banner intensity in [0, 1] while critical, 0 otherwise."""
    if not critical:
        return 0.0
    return math.sin(frame_time * rate) * 0.5 + 0.5


def background_alpha(frame_time: float) -> float:
    """Slow canvas pulse, independent of criticality."""
    return (math.sin(frame_time * BACKGROUND_PULSE_RATE) * BACKGROUND_PULSE_AMPLITUDE
            + BACKGROUND_PULSE_BASE)


def refresh_criticality(state: FlowState) -> Optional[dict]:
    """
    Recompute optimal complexity and the critical flag from current settings.

    Called after any complexity or coupling change and on reset.

    Args:
        state: FlowState (mutated in place)

    Returns:
        criticality_change receipt if the flag flipped, else None
    """
    was_critical = state.is_critical
    state.optimal_complexity = optimal_complexity(state.coupling)
    state.is_critical = state.complexity == state.optimal_complexity

    if not state.is_critical:
        state.criticality_intensity = 0.0

    if state.is_critical != was_critical:
        return record(state, "criticality_change", {
            "is_critical": state.is_critical,
            "complexity": state.complexity,
            "optimal_complexity": state.optimal_complexity,
            "coupling": list(state.coupling),
        })
    return None


def update_oscillation(state: FlowState, frame_time: float, rate: float = OSCILLATION_RATE) -> float:
    """Per-frame refresh of the display pulses. Returns banner intensity."""
    state.criticality_intensity = oscillation(frame_time, state.is_critical, rate)
    state.background_alpha = background_alpha(frame_time)
    return state.criticality_intensity
