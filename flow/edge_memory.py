"""
flow/edge_memory.py - Edge Memory

Per-edge traffic counters that learn a display color once an edge has
carried enough qualifying traffic.
"""

from typing import AbstractSet, Dict, Optional, Sequence

from .constants import FEEDBACK_LOCK_COUPLING, MEMORY_THRESHOLD, FlowRegime
from .particles import pair_coupling
from .types_state import EdgeKey, EdgeMemoryEntry


def memory_condition(regimes: AbstractSet[FlowRegime], coupling: Sequence[float],
                     level_a: int, level_b: int) -> bool:
    """
    Whether traffic between two levels feeds (and reveals) edge memory.

    True under Emergence, or under Feedback Loop when the pair coupling is
    exactly FEEDBACK_LOCK_COUPLING. The equality is exact, not a range.
    """
    if FlowRegime.EMERGENCE in regimes:
        return True
    return (FlowRegime.FEEDBACK_LOOP in regimes
            and pair_coupling(coupling, level_a, level_b) == FEEDBACK_LOCK_COUPLING)


def record_traffic(memory: Dict[EdgeKey, EdgeMemoryEntry], key: EdgeKey, color: str,
                   threshold: int = MEMORY_THRESHOLD) -> EdgeMemoryEntry:
    """
    Count one qualifying traversal of an edge.

    A new entry starts with the first color it sees. After the counter
    exceeds threshold, every call overwrites the color with the latest one.

    Args:
        memory: Edge memory map (mutated in place)
        key: Edge traversed
        color: Color of the traversing particle
        threshold: Count that must be exceeded before the color follows traffic

    Returns:
        The updated EdgeMemoryEntry
    """
    entry = memory.get(key)
    if entry is None:
        entry = EdgeMemoryEntry(color=color)
        memory[key] = entry

    entry.count += 1
    if entry.count > threshold:
        entry.color = color
        entry.settled = True
    return entry


def color_for(memory: Dict[EdgeKey, EdgeMemoryEntry], key: EdgeKey) -> Optional[str]:
    entry = memory.get(key)
    return entry.color if entry is not None else None


def settled_edges(memory: Dict[EdgeKey, EdgeMemoryEntry]) -> int:
    return sum(1 for entry in memory.values() if entry.settled)
