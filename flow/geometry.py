"""
flow/geometry.py - Geometry Mapper

Maps (level, node, complexity) onto canvas coordinates.
Pure functions, no state.
"""

from typing import Tuple

from .constants import CANVAS_WIDTH, CANVAS_HEIGHT, N_LEVELS

Point = Tuple[float, float]


def node_position(level: int, node: int, complexity: int,
                  width: float = CANVAS_WIDTH, height: float = CANVAS_HEIGHT) -> Point:
    """
    Canvas position of a node.

    Levels are spaced evenly across N_LEVELS + 1 horizontal slots and nodes
    across complexity + 1 vertical slots, so neither touches the border.

    Args:
        level: Level index, 0..3
        node: Node index, 0..complexity-1
        complexity: Current node count per level
        width: Canvas width
        height: Canvas height

    Returns:
        (x, y) tuple
    """
    x = (width / (N_LEVELS + 1)) * (level + 1)
    y = (height / (complexity + 1)) * (node + 1)
    return (x, y)


def interpolate(start: Point, end: Point, progress: float) -> Point:
    """Linear interpolation between two points."""
    return (start[0] + (end[0] - start[0]) * progress,
            start[1] + (end[1] - start[1]) * progress)


def level_x(level: int, width: float = CANVAS_WIDTH) -> float:
    """Horizontal center of a level column (used for labels)."""
    return (width / (N_LEVELS + 1)) * (level + 1)
