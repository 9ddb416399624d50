"""
flow/cycle.py - Core Simulation Loop

Entry points: initialize_state, simulate_tick, run_frames.
One tick advances every particle, feeds edge memory on expiry, runs the
spawn loop and refreshes the criticality pulse.
"""

import random
from collections import deque
from typing import Iterable, Optional, Union

from receipts import StopRule

from .constants import FRAME_MS, FlowRegime
from .controls import parse_regime, toggle_mode
from .criticality import refresh_criticality, update_oscillation
from .edge_memory import memory_condition, record_traffic, settled_edges
from .ledger import record
from .particles import advance_particle
from .spawn import attempt_spawns
from .types_config import FlowConfig
from .types_result import FlowResult
from .types_state import FlowState, TickContext


def initialize_state(config: FlowConfig) -> FlowState:
    """
    Build an IDLE state with the config's defaults.

    Args:
        config: FlowConfig with parameters

    Returns:
        FlowState with empty population and memory
    """
    state = FlowState(
        complexity=config.default_complexity,
        coupling=list(config.default_coupling),
        rng=random.Random(config.random_seed),
        receipt_ledger=deque(maxlen=config.ledger_limit),
        tenant_id=config.tenant_id,
    )
    refresh_criticality(state)
    return state


def snapshot_context(state: FlowState, frame_time: float) -> TickContext:
    return TickContext(
        complexity=state.complexity,
        coupling=tuple(state.coupling),
        regimes=frozenset(state.active_regimes),
        frame_time=frame_time,
    )


def simulate_tick(state: FlowState, config: FlowConfig, frame_time: float) -> dict:
    """
    One frame of the simulation.

    Runs regardless of phase: in IDLE nothing spawns but in-flight
    particles keep draining to completion.

    Args:
        state: Current FlowState (mutated in place)
        config: FlowConfig with parameters
        frame_time: Host frame timestamp in milliseconds

    Returns:
        dict with spawned, expired and memory_events for this tick
    """
    ctx = snapshot_context(state, frame_time)
    state.frame_time = frame_time

    survivors = []
    expired = 0
    memory_events = 0
    for particle in state.particles:
        if advance_particle(particle, ctx.coupling, ctx.complexity, config.base_step,
                            config.width, config.height) is not None:
            survivors.append(particle)
            continue

        expired += 1
        if memory_condition(ctx.regimes, ctx.coupling, particle.start_level, particle.end_level):
            memory_events += 1
            entry = record_traffic(state.edge_memory, particle.edge_key, particle.color,
                                   config.memory_threshold)
            if entry.count == config.memory_threshold + 1:
                record(state, "edge_settled", {
                    "edge": list(particle.edge_key),
                    "color": entry.color,
                    "count": entry.count,
                })
    state.particles = survivors

    created = attempt_spawns(state.particles, ctx, config, state.rng)

    update_oscillation(state, frame_time, config.oscillation_rate)

    state.spawned += len(created)
    state.expired += expired
    state.memory_events += memory_events
    state.tick += 1

    return {
        "spawned": len(created),
        "expired": expired,
        "memory_events": memory_events,
    }


def validate_state(state: FlowState, config: FlowConfig) -> None:
    """
    Check population invariants after a tick.

    Raises:
        StopRule: If the cap, progress range or node bounds are violated
    """
    if len(state.particles) > config.max_particles:
        raise StopRule(
            f"Population {len(state.particles)} exceeds cap {config.max_particles}"
        )
    for p in state.particles:
        if not 0.0 <= p.progress <= 1.0:
            raise StopRule(f"Particle {p.particle_id} progress {p.progress} outside [0, 1]")
        if p.start_node >= state.complexity or p.end_node >= state.complexity:
            raise StopRule(
                f"Particle {p.particle_id} references node beyond complexity {state.complexity}"
            )


def run_frames(config: FlowConfig, n_frames: int,
               modes: Iterable[Union[FlowRegime, str]] = (),
               frame_ms: float = FRAME_MS,
               state: Optional[FlowState] = None) -> FlowResult:
    """
    Run a headless session for a fixed number of frames.

    Args:
        config: FlowConfig with parameters
        n_frames: Frames to run
        modes: Regimes switched on before the first frame (already active ones stay on)
        frame_ms: Simulated frame interval
        state: Existing state to continue from (a fresh one if None)

    Returns:
        FlowResult with final state, traces and statistics
    """
    from .scheduler import FrameScheduler, ManualFrameHost

    if state is None:
        state = initialize_state(config)
    for mode in modes:
        if parse_regime(mode) not in state.active_regimes:
            toggle_mode(state, mode)

    traces = {"population": [], "settled_edges": [], "criticality": []}
    host = ManualFrameHost()
    scheduler = FrameScheduler(state, config, host)

    def observe(tick_state: FlowState, _report: dict) -> None:
        validate_state(tick_state, config)
        traces["population"].append(len(tick_state.particles))
        traces["settled_edges"].append(settled_edges(tick_state.edge_memory))
        traces["criticality"].append(tick_state.criticality_intensity)

    scheduler.on_tick = observe
    scheduler.start()
    start_time = state.frame_time
    for frame in range(1, n_frames + 1):
        host.advance(start_time + frame * frame_ms)
    scheduler.stop()

    statistics = {
        "frames": n_frames,
        "spawned": state.spawned,
        "expired": state.expired,
        "memory_events": state.memory_events,
        "pruned": state.pruned,
        "final_population": len(state.particles),
        "edges_remembered": len(state.edge_memory),
        "edges_settled": settled_edges(state.edge_memory),
        "peak_population": max(traces["population"], default=0),
    }
    record(state, "flow_result", {"statistics": statistics})

    return FlowResult(
        final_state=state,
        all_traces=traces,
        statistics=statistics,
        config=config,
    )
