"""
flow/types_config.py - FlowConfig Dataclass and Presets

Immutable configuration for flow simulation sessions.
Frozen dataclass, no behavior beyond coercion.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .constants import (
    CANVAS_WIDTH, CANVAS_HEIGHT,
    COMPLEXITY_MIN, COMPLEXITY_MAX, DEFAULT_COMPLEXITY,
    COUPLING_MIN, COUPLING_MAX, DEFAULT_COUPLING,
    MAX_PARTICLES, SPAWN_PROBABILITY, BASE_STEP, TRAIL_CAPACITY,
    MEMORY_THRESHOLD, OSCILLATION_RATE,
)


@dataclass(frozen=True)
class FlowConfig:
    """Simulation configuration (immutable)."""
    width: float = CANVAS_WIDTH
    height: float = CANVAS_HEIGHT
    complexity_min: int = COMPLEXITY_MIN
    complexity_max: int = COMPLEXITY_MAX
    default_complexity: int = DEFAULT_COMPLEXITY
    coupling_min: float = COUPLING_MIN
    coupling_max: float = COUPLING_MAX
    default_coupling: Tuple[float, float, float] = field(default=DEFAULT_COUPLING)
    max_particles: int = MAX_PARTICLES
    spawn_probability: float = SPAWN_PROBABILITY
    base_step: float = BASE_STEP
    trail_capacity: int = TRAIL_CAPACITY
    memory_threshold: int = MEMORY_THRESHOLD
    oscillation_rate: float = OSCILLATION_RATE
    random_seed: Optional[int] = None
    ledger_limit: int = 1000  # Oldest receipts dropped beyond this
    tenant_id: str = "flowsim"
    preset_name: str = "DEFAULT"

    def __post_init__(self):
        """Coerce list couplings (from JSON/YAML) into a tuple of floats."""
        if not isinstance(self.default_coupling, tuple):
            object.__setattr__(self, 'default_coupling',
                               tuple(float(c) for c in self.default_coupling))


# =============================================================================
# PRESETS
# =============================================================================

PRESET_DEFAULT = FlowConfig()

# Slow, sparse flow for inspection of individual trajectories
PRESET_CALM = FlowConfig(
    default_coupling=(0.5, 0.5, 0.5),
    spawn_probability=0.05,
    max_particles=20,
    preset_name="CALM",
)

# Coupling chosen so the default complexity sits at the critical point:
# round(1.5 * 2 + 2) == 5
PRESET_CRITICAL = FlowConfig(
    default_coupling=(1.5, 1.5, 1.5),
    preset_name="CRITICAL",
)

PRESETS = {
    "DEFAULT": PRESET_DEFAULT,
    "CALM": PRESET_CALM,
    "CRITICAL": PRESET_CRITICAL,
}
