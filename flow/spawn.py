"""
flow/spawn.py - Spawn Policy Engine

Decides, per tick, whether new particles enter the network and with what
endpoints, color and shape. Regime dispatch is an ordered lookup over
REGIME_PRIORITY; the decision itself is a pure function of its inputs and
the supplied random source.
"""

import random
from dataclasses import dataclass
from typing import AbstractSet, List, Optional, Sequence

from .constants import (
    ADMISSION_SCALE, EMERGENCE_DIAMOND_SCALE, ENERGY_UPWARD_PROBABILITY,
    FEEDBACK_LOCK_COUPLING, N_LEVELS, NODE_COLORS, REGIME_PRIORITY, TOP_LEVEL,
    FlowRegime, ParticleShape,
)
from .particles import coupling_index, pair_coupling, spawn_particle
from .types_config import FlowConfig
from .types_state import Particle, TickContext


@dataclass(frozen=True)
class SpawnDecision:
    """Endpoints and appearance chosen for one spawn attempt."""
    regime: FlowRegime
    start_level: int
    start_node: int
    end_level: int
    end_node: int
    color: str
    shape: ParticleShape


def select_regime(regimes: AbstractSet[FlowRegime]) -> Optional[FlowRegime]:
    """First active regime in priority order, or None when none is active."""
    for regime in REGIME_PRIORITY:
        if regime in regimes:
            return regime
    return None


def _feedback_loop(start_level, start_node, complexity, coupling, rng):
    end_level = rng.randrange(N_LEVELS)
    end_node = rng.randrange(complexity)
    if pair_coupling(coupling, start_level, end_level) == FEEDBACK_LOCK_COUPLING:
        shape = ParticleShape.DIAMOND
    else:
        shape = ParticleShape.CIRCLE
    return end_level, end_node, NODE_COLORS[start_level], shape


def _emergence(start_level, start_node, complexity, coupling, rng):
    # Wraps from the top level back to the bottom
    end_level = (start_level + 1) % N_LEVELS
    end_node = rng.randrange(complexity)
    diamond_p = coupling[coupling_index(start_level, start_level)] * EMERGENCE_DIAMOND_SCALE
    shape = ParticleShape.DIAMOND if rng.random() < diamond_p else ParticleShape.CIRCLE
    return end_level, end_node, NODE_COLORS[start_level], shape


def _energy_flow(start_level, start_node, complexity, coupling, rng):
    if rng.random() < ENERGY_UPWARD_PROBABILITY:
        end_level = min(TOP_LEVEL, start_level + 1)
    else:
        end_level = max(0, start_level - 1)
    end_node = rng.randrange(complexity)
    # Color reflects the higher tier touched
    if end_level < start_level:
        color = NODE_COLORS[start_level]
    else:
        color = NODE_COLORS[end_level]
    return end_level, end_node, color, ParticleShape.CIRCLE


_BRANCHES = {
    FlowRegime.FEEDBACK_LOOP: _feedback_loop,
    FlowRegime.EMERGENCE: _emergence,
    FlowRegime.ENERGY_FLOW: _energy_flow,
}


def decide_spawn(regime: FlowRegime, start_level: int, start_node: int, complexity: int,
                 coupling: Sequence[float], rng: random.Random) -> SpawnDecision:
    """
    Choose endpoints, color and shape for one attempt under a regime.

    Args:
        regime: Regime selected for this attempt
        start_level, start_node: Chosen origin
        complexity: Node count per level
        coupling: Coupling vector snapshot
        rng: Random source

    Returns:
        SpawnDecision (admission is decided separately by admit())
    """
    end_level, end_node, color, shape = _BRANCHES[regime](
        start_level, start_node, complexity, coupling, rng)
    return SpawnDecision(
        regime=regime,
        start_level=start_level,
        start_node=start_node,
        end_level=end_level,
        end_node=end_node,
        color=color,
        shape=shape,
    )


def admit(decision: SpawnDecision, coupling: Sequence[float], rng: random.Random) -> bool:
    """Admission gate: pass with probability pair coupling * ADMISSION_SCALE."""
    gate = pair_coupling(coupling, decision.start_level, decision.end_level) * ADMISSION_SCALE
    return rng.random() < gate


def attempt_spawns(particles: List[Particle], ctx: TickContext, config: FlowConfig,
                   rng: random.Random) -> List[Particle]:
    """
    Run the spawn loop for one tick.

    While the population is under the cap, each roll below
    spawn_probability produces one attempt, so a tick usually spawns nothing
    and occasionally more than one.

    Args:
        particles: Current population (appended in place)
        ctx: Tick snapshot
        config: FlowConfig
        rng: Random source

    Returns:
        List of particles created this tick
    """
    regime = select_regime(ctx.regimes)
    if regime is None:
        return []

    created = []
    while len(particles) < config.max_particles and rng.random() < config.spawn_probability:
        start_level = rng.randrange(N_LEVELS)
        start_node = rng.randrange(ctx.complexity)
        decision = decide_spawn(regime, start_level, start_node, ctx.complexity, ctx.coupling, rng)
        if admit(decision, ctx.coupling, rng):
            particle = spawn_particle(
                decision.start_level, decision.start_node,
                decision.end_level, decision.end_node,
                decision.color, decision.shape,
                trail_capacity=config.trail_capacity,
            )
            particles.append(particle)
            created.append(particle)
    return created
