"""
flow/render.py - Frame Snapshot

Read-only, render-ready view of the simulation for one frame: resolved
particle positions and trails, edge colors and weights, node markers and
the criticality display.
"""

from dataclasses import dataclass
from typing import Tuple

from .constants import (
    ACTIVE_EDGE_COLOR, IDLE_EDGE_COLOR, LEVELS, N_LEVELS, NODE_COLORS,
)
from .edge_memory import color_for, memory_condition
from .geometry import Point, level_x, node_position
from .particles import particle_position
from .topology import build_network
from .types_config import FlowConfig
from .types_state import EdgeKey, FlowState


@dataclass(frozen=True)
class TrailSample:
    x: float
    y: float
    radius: float
    opacity: float


@dataclass(frozen=True)
class ParticleView:
    particle_id: str
    x: float
    y: float
    shape: str
    color: str
    progress: float
    trail: Tuple[TrailSample, ...]


@dataclass(frozen=True)
class EdgeView:
    key: EdgeKey
    start: Point
    end: Point
    color: str
    stroke_width: float
    learned: bool


@dataclass(frozen=True)
class NodeView:
    level: int
    node: int
    x: float
    y: float
    color: str
    label: str


@dataclass(frozen=True)
class LevelLabel:
    level: int
    name: str
    x: float


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything a renderer needs to draw one frame."""
    tick: int
    frame_time: float
    width: float
    height: float
    complexity: int
    optimal_complexity: int
    is_critical: bool
    criticality_intensity: float
    background_alpha: float
    active_modes: Tuple[str, ...]
    description: str
    coupling: Tuple[float, ...]
    levels: Tuple[LevelLabel, ...]
    nodes: Tuple[NodeView, ...]
    edges: Tuple[EdgeView, ...]
    particles: Tuple[ParticleView, ...]


def trail_samples(samples) -> Tuple[TrailSample, ...]:
    """Older samples are smaller and fainter."""
    return tuple(
        TrailSample(x=x, y=y, radius=1 + i * 0.2, opacity=(i + 1) / 10)
        for i, (x, y) in enumerate(samples)
    )


def build_frame(state: FlowState, config: FlowConfig) -> FrameSnapshot:
    """
    Resolve the current state into a FrameSnapshot.

    Learned edge colors are shown only while the memory condition holds for
    that edge; otherwise edges fall back to the translucent default, which
    is lighter while any mode is active.

    Args:
        state: Current FlowState
        config: FlowConfig (canvas size)

    Returns:
        FrameSnapshot
    """
    n = state.complexity
    w, h = config.width, config.height
    default_color = ACTIVE_EDGE_COLOR if state.active_regimes else IDLE_EDGE_COLOR

    levels = tuple(LevelLabel(level=i, name=LEVELS[i], x=level_x(i, w)) for i in range(N_LEVELS))

    nodes = []
    for level in range(N_LEVELS):
        for node in range(n):
            x, y = node_position(level, node, n, w, h)
            nodes.append(NodeView(level=level, node=node, x=x, y=y,
                                  color=NODE_COLORS[level], label=f"Node {node + 1}"))

    edges = []
    for (la, na), (lb, nb), data in build_network(n, state.coupling).edges(data=True):
        key = EdgeKey(la, na, lb, nb)
        learned = None
        if memory_condition(state.active_regimes, state.coupling, la, lb):
            learned = color_for(state.edge_memory, key)
        edges.append(EdgeView(
            key=key,
            start=node_position(la, na, n, w, h),
            end=node_position(lb, nb, n, w, h),
            color=learned if learned is not None else default_color,
            stroke_width=data["stroke_width"],
            learned=learned is not None,
        ))

    particles = []
    for p in state.particles:
        x, y = particle_position(p, n, w, h)
        particles.append(ParticleView(
            particle_id=p.particle_id,
            x=x,
            y=y,
            shape=p.shape.value,
            color=p.color,
            progress=p.progress,
            trail=trail_samples(p.trail.samples()),
        ))

    return FrameSnapshot(
        tick=state.tick,
        frame_time=state.frame_time,
        width=w,
        height=h,
        complexity=n,
        optimal_complexity=state.optimal_complexity,
        is_critical=state.is_critical,
        criticality_intensity=state.criticality_intensity,
        background_alpha=state.background_alpha,
        active_modes=tuple(sorted(r.value for r in state.active_regimes)),
        description=state.description,
        coupling=tuple(state.coupling),
        levels=levels,
        nodes=tuple(nodes),
        edges=tuple(edges),
        particles=tuple(particles),
    )
