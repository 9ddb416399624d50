"""
flow - Multi-Level Information-Flow Simulation Package

Public API for the particle-flow network: four fixed levels, a tunable
node count, and three flow regimes animating particles between them.
"""

# =============================================================================
# TYPES (Dataclasses)
# =============================================================================
from .types_config import (
    FlowConfig,
    PRESET_DEFAULT,
    PRESET_CALM,
    PRESET_CRITICAL,
    PRESETS,
)
from .types_state import (
    EdgeKey,
    EdgeMemoryEntry,
    FlowState,
    Particle,
    TickContext,
    TrailBuffer,
)
from .types_result import FlowResult

# =============================================================================
# CONSTANTS
# =============================================================================
from .constants import (
    FlowPhase,
    FlowRegime,
    ParticleShape,
    LEVELS,
    NODE_COLORS,
    MAX_PARTICLES,
    MEMORY_THRESHOLD,
    RECEIPT_SCHEMA,
    REGIME_PRIORITY,
)

# =============================================================================
# CORE SIMULATION
# =============================================================================
from .geometry import node_position, interpolate
from .particles import (
    advance_particle,
    coupling_index,
    particle_position,
    spawn_particle,
)
from .spawn import SpawnDecision, admit, attempt_spawns, decide_spawn, select_regime
from .edge_memory import color_for, memory_condition, record_traffic
from .criticality import is_critical, optimal_complexity, oscillation, refresh_criticality
from .controls import reset, set_complexity, set_coupling, toggle_mode
from .cycle import initialize_state, run_frames, simulate_tick, validate_state
from .scheduler import FrameHost, FrameScheduler, ManualFrameHost

# =============================================================================
# OUTPUT
# =============================================================================
from .render import FrameSnapshot, build_frame
from .topology import build_network, hub_nodes, traffic_graph
from .export import export_frame_json, export_run, frame_to_svg, generate_report

__all__ = [
    "FlowConfig", "PRESET_DEFAULT", "PRESET_CALM", "PRESET_CRITICAL", "PRESETS",
    "EdgeKey", "EdgeMemoryEntry", "FlowState", "Particle", "TickContext", "TrailBuffer",
    "FlowResult",
    "FlowPhase", "FlowRegime", "ParticleShape", "LEVELS", "NODE_COLORS",
    "MAX_PARTICLES", "MEMORY_THRESHOLD", "RECEIPT_SCHEMA", "REGIME_PRIORITY",
    "node_position", "interpolate",
    "advance_particle", "coupling_index", "particle_position", "spawn_particle",
    "SpawnDecision", "admit", "attempt_spawns", "decide_spawn", "select_regime",
    "color_for", "memory_condition", "record_traffic",
    "is_critical", "optimal_complexity", "oscillation", "refresh_criticality",
    "reset", "set_complexity", "set_coupling", "toggle_mode",
    "initialize_state", "run_frames", "simulate_tick", "validate_state",
    "FrameHost", "FrameScheduler", "ManualFrameHost",
    "FrameSnapshot", "build_frame",
    "build_network", "hub_nodes", "traffic_graph",
    "export_frame_json", "export_run", "frame_to_svg", "generate_report",
]
