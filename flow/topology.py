"""
flow/topology.py - Network Topology Graphs

networkx views of the level network: the full node-to-node connection
graph drawn by the renderer, and the traffic graph learned by edge memory.
"""

from typing import Dict, List, Sequence, Tuple

import networkx as nx

from .constants import LEVELS, N_LEVELS, NON_ADJACENT_STROKE
from .particles import pair_coupling
from .types_state import EdgeKey, EdgeMemoryEntry

NodeId = Tuple[int, int]


def stroke_width(coupling: Sequence[float], level_a: int, level_b: int) -> float:
    """Adjacent levels draw at their pair coupling, all others hairline."""
    if abs(level_a - level_b) == 1:
        return pair_coupling(coupling, level_a, level_b)
    return NON_ADJACENT_STROKE


def build_network(complexity: int, coupling: Sequence[float]) -> nx.DiGraph:
    """
    Full directed connection graph over (level, node) pairs.

    Every ordered pair of nodes, self-loops included, is an edge, matching
    the set of lines the renderer draws.

    Args:
        complexity: Node count per level
        coupling: Coupling vector

    Returns:
        nx.DiGraph with node attrs level/node/label and edge attr stroke_width
    """
    graph = nx.DiGraph()
    nodes = [(level, node) for level in range(N_LEVELS) for node in range(complexity)]
    for level, node in nodes:
        graph.add_node((level, node), level=level, node=node,
                       label=f"{LEVELS[level]} {node + 1}")
    for a in nodes:
        for b in nodes:
            graph.add_edge(a, b, stroke_width=stroke_width(coupling, a[0], b[0]))
    return graph


def traffic_graph(memory: Dict[EdgeKey, EdgeMemoryEntry]) -> nx.DiGraph:
    """Directed graph of remembered edges weighted by traffic count."""
    graph = nx.DiGraph()
    for key, entry in memory.items():
        graph.add_edge((key.start_level, key.start_node), (key.end_level, key.end_node),
                       weight=entry.count, color=entry.color, settled=entry.settled)
    return graph


def hub_nodes(graph: nx.DiGraph, k: int = 3) -> List[Tuple[NodeId, float]]:
    """
    Nodes carrying the most traffic, by weighted in+out degree.

    Returns:
        Up to k (node, weighted_degree) pairs, heaviest first
    """
    if graph.number_of_nodes() == 0:
        return []
    degrees = dict(graph.degree(weight="weight"))
    ranked = sorted(degrees.items(), key=lambda item: (-item[1], item[0]))
    return [(node, float(w)) for node, w in ranked[:k]]


def level_flow_matrix(memory: Dict[EdgeKey, EdgeMemoryEntry]) -> List[List[int]]:
    """N_LEVELS x N_LEVELS traffic totals, rows = start level, cols = end level."""
    matrix = [[0] * N_LEVELS for _ in range(N_LEVELS)]
    for key, entry in memory.items():
        matrix[key.start_level][key.end_level] += entry.count
    return matrix
