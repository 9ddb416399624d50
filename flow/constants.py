"""
flow/constants.py - Network and Flow Constants

All constants for the multi-level flow simulation. Centralized for tuning.
Pure data, no behavior.
"""

from enum import Enum

# =============================================================================
# HIERARCHY
# =============================================================================

LEVELS = ("Quantum", "Molecular", "Cellular", "Organismal")
N_LEVELS = len(LEVELS)
TOP_LEVEL = N_LEVELS - 1
NODE_COLORS = ("#4CAF50", "#2196F3", "#FFC107", "#E91E63")
PAIR_LABELS = ("Quantum - Molecular", "Molecular - Cellular", "Cellular - Organismal")
N_PAIRS = N_LEVELS - 1

# =============================================================================
# CANVAS
# =============================================================================

CANVAS_WIDTH = 800.0
CANVAS_HEIGHT = 600.0

# =============================================================================
# COMPLEXITY AND COUPLING BOUNDS
# =============================================================================

COMPLEXITY_MIN = 2
COMPLEXITY_MAX = 6
DEFAULT_COMPLEXITY = 5

COUPLING_MIN = 0.1
COUPLING_MAX = 2.0
DEFAULT_COUPLING = (1.0, 1.0, 1.0)

# Exact value that unlocks diamond shapes and edge memory in Feedback Loop
FEEDBACK_LOCK_COUPLING = 2.0

# =============================================================================
# PARTICLE DYNAMICS
# =============================================================================

MAX_PARTICLES = 50
SPAWN_PROBABILITY = 0.1      # Per-attempt chance, re-rolled while under cap
BASE_STEP = 0.02             # Progress per tick at coupling 1.0
TRAIL_CAPACITY = 5
ADMISSION_SCALE = 0.5        # Gate = coupling * 0.5
EMERGENCE_DIAMOND_SCALE = 0.2
ENERGY_UPWARD_PROBABILITY = 0.9

# =============================================================================
# EDGE MEMORY
# =============================================================================

MEMORY_THRESHOLD = 5         # Color follows traffic once count exceeds this

# =============================================================================
# CRITICALITY AND DISPLAY PULSES
# =============================================================================

OSCILLATION_RATE = 0.002     # rad per ms for the CRITICALITY banner
BACKGROUND_PULSE_RATE = 0.001
BACKGROUND_PULSE_AMPLITUDE = 0.05
BACKGROUND_PULSE_BASE = 0.1

# =============================================================================
# RENDER TOKENS
# =============================================================================

IDLE_EDGE_COLOR = "rgba(100, 100, 100, 0.3)"
ACTIVE_EDGE_COLOR = "rgba(100, 100, 100, 0.1)"
NON_ADJACENT_STROKE = 0.1
NODE_RADIUS = 20
PARTICLE_RADIUS = 3
DIAMOND_HALF = 4
CRITICAL_OVERLAY = "rgba(0, 255, 0, 0.2)"

FRAME_MS = 1000.0 / 60.0

# =============================================================================
# RECEIPT SCHEMA
# =============================================================================

RECEIPT_SCHEMA = [
    "mode_toggle", "complexity_change", "coupling_change", "flow_reset",
    "particle_pruned", "edge_settled", "criticality_change", "phase_change",
    "scheduler_started", "scheduler_stopped", "flow_result",
]


# =============================================================================
# ENUMS
# =============================================================================

class FlowRegime(Enum):
    """Flow regimes, declared in spawn priority order."""
    FEEDBACK_LOOP = "Feedback Loop"
    EMERGENCE = "Emergence"
    ENERGY_FLOW = "Energy Flow"


REGIME_PRIORITY = (FlowRegime.FEEDBACK_LOOP, FlowRegime.EMERGENCE, FlowRegime.ENERGY_FLOW)

MODE_DESCRIPTIONS = {
    FlowRegime.ENERGY_FLOW: (
        "Energy Flow: Represents the transfer of energy between different "
        "levels of the system."
    ),
    FlowRegime.EMERGENCE: (
        "Emergence: Shows how complex behaviors arise from simple interactions "
        "at lower levels."
    ),
    FlowRegime.FEEDBACK_LOOP: (
        "Feedback Loop: Illustrates how outputs of a system are routed back as "
        "inputs, influencing the system's behavior."
    ),
}


class ParticleShape(Enum):
    CIRCLE = "circle"
    DIAMOND = "diamond"


class FlowPhase(Enum):
    """Scheduler-visible phase, derived from the active regime set."""
    IDLE = "IDLE"  # no regimes, in-flight particles drain
    RUNNING = "RUNNING"  # at least one regime, spawning enabled
