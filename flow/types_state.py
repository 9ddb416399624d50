"""
flow/types_state.py - FlowState and Particle Dataclasses

Mutable simulation state, particle records and edge memory structures.
Dataclasses for state; behavior lives in the sibling modules.
"""

import random
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, FrozenSet, IO, List, NamedTuple, Optional, Set, Tuple
from uuid import uuid4

import numpy as np

from .constants import (
    DEFAULT_COMPLEXITY, DEFAULT_COUPLING, TRAIL_CAPACITY,
    FlowPhase, FlowRegime, ParticleShape,
)


# =============================================================================
# EDGE KEY
# =============================================================================

class EdgeKey(NamedTuple):
    """Directed node-to-node connection identity."""
    start_level: int
    start_node: int
    end_level: int
    end_node: int


# =============================================================================
# TRAIL RING BUFFER
# =============================================================================

class TrailBuffer:
    """Fixed-capacity ring of recent (x, y) samples.

    Storage is a preallocated (capacity, 2) float array; pushing past
    capacity overwrites the oldest sample.
    """

    __slots__ = ("_data", "_head", "_size")

    def __init__(self, capacity: int = TRAIL_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Trail capacity must be >= 1, got {capacity}")
        self._data = np.zeros((capacity, 2), dtype=float)
        self._head = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._data.shape[0]

    def push(self, x: float, y: float) -> None:
        self._data[self._head] = (x, y)
        self._head = (self._head + 1) % self.capacity
        self._size = min(self._size + 1, self.capacity)

    def samples(self) -> List[Tuple[float, float]]:
        """Samples ordered oldest to newest."""
        if self._size < self.capacity:
            ordered = self._data[:self._size]
        else:
            ordered = np.roll(self._data, -self._head, axis=0)
        return [(float(x), float(y)) for x, y in ordered]

    def clear(self) -> None:
        self._head = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size


# =============================================================================
# PARTICLE
# =============================================================================

@dataclass
class Particle:
    """A unit of flow travelling from one (level, node) to another."""
    start_level: int
    start_node: int
    end_level: int
    end_node: int
    color: str
    shape: ParticleShape = ParticleShape.CIRCLE
    progress: float = 0.0
    trail: TrailBuffer = field(default_factory=TrailBuffer)
    particle_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def edge_key(self) -> EdgeKey:
        return EdgeKey(self.start_level, self.start_node, self.end_level, self.end_node)


# =============================================================================
# EDGE MEMORY ENTRY
# =============================================================================

@dataclass
class EdgeMemoryEntry:
    """Traffic counter and learned color for one directed edge."""
    color: str
    count: int = 0
    settled: bool = False  # True once count has exceeded the threshold


# =============================================================================
# TICK CONTEXT
# =============================================================================

@dataclass(frozen=True)
class TickContext:
    """Configuration snapshot read by a tick for its whole duration."""
    complexity: int
    coupling: Tuple[float, float, float]
    regimes: FrozenSet[FlowRegime]
    frame_time: float


# =============================================================================
# FLOWSTATE DATACLASS
# =============================================================================

@dataclass
class FlowState:
    """Mutable simulation state, owned by the loop and control handlers."""
    complexity: int = DEFAULT_COMPLEXITY
    coupling: List[float] = field(default_factory=lambda: list(DEFAULT_COUPLING))
    active_regimes: Set[FlowRegime] = field(default_factory=set)
    particles: List[Particle] = field(default_factory=list)
    edge_memory: Dict[EdgeKey, EdgeMemoryEntry] = field(default_factory=dict)
    description: str = ""

    # Derived criticality
    optimal_complexity: int = DEFAULT_COMPLEXITY
    is_critical: bool = False
    criticality_intensity: float = 0.0
    background_alpha: float = 0.0

    phase: FlowPhase = FlowPhase.IDLE
    tick: int = 0
    frame_time: float = 0.0

    # Cumulative counters
    spawned: int = 0
    expired: int = 0
    memory_events: int = 0
    pruned: int = 0

    rng: random.Random = field(default_factory=random.Random)
    receipt_ledger: Deque[dict] = field(default_factory=deque)
    receipt_sink: Optional[IO[str]] = None
    tenant_id: str = "flowsim"
