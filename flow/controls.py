"""
flow/controls.py - Control Events

Synchronous state transitions requested by the host UI: mode toggles,
slider changes and reset. Handlers run between ticks, never during one.
"""

from typing import Union

from .constants import MODE_DESCRIPTIONS, N_PAIRS, FlowPhase, FlowRegime
from .criticality import refresh_criticality
from .ledger import record
from .types_config import FlowConfig
from .types_state import FlowState


def parse_regime(mode: Union[FlowRegime, str]) -> FlowRegime:
    """
    Resolve a regime from an enum member, display name or enum name.

    Raises:
        ValueError: If the name is not one of the three regimes
    """
    if isinstance(mode, FlowRegime):
        return mode
    for regime in FlowRegime:
        if mode in (regime.value, regime.name):
            return regime
    raise ValueError(
        f"Unknown mode: {mode!r}. Choose from {[r.value for r in FlowRegime]}"
    )


def sync_phase(state: FlowState) -> FlowPhase:
    """Derive IDLE/RUNNING from the regime set, recording transitions."""
    phase = FlowPhase.RUNNING if state.active_regimes else FlowPhase.IDLE
    if phase != state.phase:
        record(state, "phase_change", {
            "from_phase": state.phase.value,
            "to_phase": phase.value,
            "in_flight": len(state.particles),
        })
        state.phase = phase
    return phase


def toggle_mode(state: FlowState, mode: Union[FlowRegime, str]) -> bool:
    """
    Flip a regime's membership in the active set.

    The description always switches to the toggled mode, whether it was
    turned on or off.

    Args:
        state: FlowState (mutated in place)
        mode: FlowRegime or its display name

    Returns:
        bool: True if the regime is now active
    """
    regime = parse_regime(mode)
    if regime in state.active_regimes:
        state.active_regimes.discard(regime)
        active = False
    else:
        state.active_regimes.add(regime)
        active = True
    state.description = MODE_DESCRIPTIONS[regime]

    record(state, "mode_toggle", {
        "mode": regime.value,
        "active": active,
        "active_modes": sorted(r.value for r in state.active_regimes),
    })
    sync_phase(state)
    return active


def set_complexity(state: FlowState, n: int, config: FlowConfig) -> int:
    """
    Change the node count per level.

    Particles whose start or end node no longer exists are dropped.

    Args:
        state: FlowState (mutated in place)
        n: New complexity, within [complexity_min, complexity_max]
        config: FlowConfig with bounds

    Returns:
        int: Number of particles dropped

    Raises:
        ValueError: If n is not an integer in range
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValueError(f"Complexity must be an integer, got {type(n).__name__}")
    if not config.complexity_min <= n <= config.complexity_max:
        raise ValueError(
            f"Complexity {n} out of range [{config.complexity_min}, {config.complexity_max}]"
        )

    previous = state.complexity
    state.complexity = n

    kept = [p for p in state.particles if p.start_node < n and p.end_node < n]
    dropped = len(state.particles) - len(kept)
    state.particles = kept

    record(state, "complexity_change", {
        "from_complexity": previous,
        "to_complexity": n,
    })
    if dropped:
        state.pruned += dropped
        record(state, "particle_pruned", {
            "dropped": dropped,
            "complexity": n,
            "remaining": len(kept),
        })
    refresh_criticality(state)
    return dropped


def set_coupling(state: FlowState, pair_index: int, value: float, config: FlowConfig) -> None:
    """
    Set the coupling coefficient of one adjacent level pair.

    Raises:
        ValueError: If pair_index is not 0..2 or value is outside the bounds
    """
    if isinstance(pair_index, bool) or not isinstance(pair_index, int) \
            or not 0 <= pair_index < N_PAIRS:
        raise ValueError(f"Coupling pair index must be 0..{N_PAIRS - 1}, got {pair_index!r}")
    value = float(value)
    if not config.coupling_min <= value <= config.coupling_max:
        raise ValueError(
            f"Coupling {value} out of range [{config.coupling_min}, {config.coupling_max}]"
        )

    previous = state.coupling[pair_index]
    state.coupling[pair_index] = value
    record(state, "coupling_change", {
        "pair_index": pair_index,
        "from_value": previous,
        "to_value": value,
    })
    refresh_criticality(state)


def reset(state: FlowState, config: FlowConfig) -> None:
    """
    Return to a clean IDLE state with default settings.

    Clears modes, particles, edge memory and description; restores
    complexity and coupling defaults. Counters, the tick clock and the
    ledger are kept.
    """
    cleared = {
        "particles": len(state.particles),
        "edges": len(state.edge_memory),
        "modes": sorted(r.value for r in state.active_regimes),
    }
    state.active_regimes.clear()
    state.particles = []
    state.edge_memory = {}
    state.complexity = config.default_complexity
    state.coupling = list(config.default_coupling)
    state.description = ""

    record(state, "flow_reset", cleared)
    sync_phase(state)
    refresh_criticality(state)
