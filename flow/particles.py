"""
flow/particles.py - Particle Model

Particle lifecycle: spawn, advance, expire. Trails are ring buffers, so
advancing never grows memory.
"""

from typing import Optional, Sequence

from .constants import (
    BASE_STEP, CANVAS_HEIGHT, CANVAS_WIDTH, N_PAIRS, TRAIL_CAPACITY, ParticleShape,
)
from .geometry import Point, interpolate, node_position
from .types_state import Particle, TrailBuffer


def coupling_index(level_a: int, level_b: int) -> int:
    """
    Coupling slot for a level pair: the lower level, clamped to 0..N_PAIRS-1.

    Same-level traffic on the top level (3, 3) has no pair of its own and
    borrows the last coefficient.
    """
    return max(0, min(min(level_a, level_b), N_PAIRS - 1))


def pair_coupling(coupling: Sequence[float], level_a: int, level_b: int) -> float:
    return coupling[coupling_index(level_a, level_b)]


def spawn_particle(start_level: int, start_node: int, end_level: int, end_node: int,
                   color: str, shape: ParticleShape = ParticleShape.CIRCLE,
                   trail_capacity: int = TRAIL_CAPACITY) -> Particle:
    """
    Create a fresh particle at progress 0 with an empty trail.

    Args:
        start_level, start_node: Origin endpoint
        end_level, end_node: Destination endpoint
        color: Color token
        shape: Render shape
        trail_capacity: Ring buffer size for the trail

    Returns:
        Particle with a new unique id
    """
    return Particle(
        start_level=start_level,
        start_node=start_node,
        end_level=end_level,
        end_node=end_node,
        color=color,
        shape=shape,
        trail=TrailBuffer(trail_capacity),
    )


def particle_position(particle: Particle, complexity: int,
                      width: float = CANVAS_WIDTH, height: float = CANVAS_HEIGHT,
                      progress: Optional[float] = None) -> Point:
    """Interpolated canvas position at the particle's (or given) progress."""
    start = node_position(particle.start_level, particle.start_node, complexity, width, height)
    end = node_position(particle.end_level, particle.end_node, complexity, width, height)
    return interpolate(start, end, particle.progress if progress is None else progress)


def advance_particle(particle: Particle, coupling: Sequence[float], complexity: int,
                     base_step: float = BASE_STEP,
                     width: float = CANVAS_WIDTH, height: float = CANVAS_HEIGHT) -> Optional[Particle]:
    """
    Move a particle one tick along its edge.

    Progress grows by base_step scaled by the pair's coupling coefficient.
    Past 1.0 the particle is expired and None is returned; the caller owns
    any expiry side effects. Otherwise the new position is pushed onto the
    trail and the same particle is returned.

    Args:
        particle: Particle to advance (mutated in place)
        coupling: Coupling vector snapshot
        complexity: Complexity snapshot
        base_step: Progress per tick at coupling 1.0

    Returns:
        The particle, or None when expired
    """
    new_progress = particle.progress + base_step * pair_coupling(
        coupling, particle.start_level, particle.end_level)
    if new_progress > 1:
        return None

    particle.progress = new_progress
    x, y = particle_position(particle, complexity, width, height)
    particle.trail.push(x, y)
    return particle
