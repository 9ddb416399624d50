"""
flow/export.py - Frame and Run Export

JSON and SVG serialization of frame snapshots, plus run reports.
"""

import json
from dataclasses import asdict
from typing import Optional
from xml.sax.saxutils import escape

from receipts import dual_hash, merkle

from .constants import (
    CRITICAL_OVERLAY, DIAMOND_HALF, NODE_RADIUS, PARTICLE_RADIUS,
)
from .render import FrameSnapshot
from .topology import hub_nodes, level_flow_matrix, traffic_graph
from .types_result import FlowResult


def frame_to_dict(frame: FrameSnapshot) -> dict:
    """Plain-dict form of a frame, JSON-serializable."""
    data = asdict(frame)
    for edge in data["edges"]:
        edge["key"] = list(edge["key"])
        edge["start"] = list(edge["start"])
        edge["end"] = list(edge["end"])
    return data


def export_frame_json(frame: FrameSnapshot, output_path: Optional[str] = None,
                      pretty: bool = False) -> str:
    """
    Serialize a frame to JSON, stamped with a dual hash of its content.

    Args:
        frame: FrameSnapshot to export
        output_path: Optional file path to write
        pretty: Indent output

    Returns:
        str: JSON text
    """
    data = frame_to_dict(frame)
    data["frame_hash"] = dual_hash(json.dumps(data, sort_keys=True))
    text = json.dumps(data, indent=2 if pretty else None)
    if output_path:
        with open(output_path, "w") as f:
            f.write(text)
    return text


# =============================================================================
# SVG
# =============================================================================

def _fmt(v: float) -> str:
    return f"{v:.2f}".rstrip("0").rstrip(".")


def _particle_svg(p) -> str:
    x, y = p.x, p.y
    if p.shape == "diamond":
        d = DIAMOND_HALF
        points = (f"{_fmt(x)},{_fmt(y - d)} {_fmt(x + d)},{_fmt(y)} "
                  f"{_fmt(x)},{_fmt(y + d)} {_fmt(x - d)},{_fmt(y)}")
        return f'<polygon points="{points}" fill="{p.color}" />'
    return f'<circle cx="{_fmt(x)}" cy="{_fmt(y)}" r="{PARTICLE_RADIUS}" fill="{p.color}" />'


def frame_to_svg(frame: FrameSnapshot) -> str:
    """
    Render a frame as a standalone SVG document.

    Draw order: background pulse, critical overlay, levels and nodes, edges,
    particle trails and heads, CRITICALITY banner.
    """
    w, h = _fmt(frame.width), _fmt(frame.height)
    out = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {w} {h}">',
        f'<rect x="0" y="0" width="{w}" height="{h}" '
        f'fill="rgba(200, 200, 200, {frame.background_alpha:.4f})" />',
    ]
    if frame.is_critical:
        out.append(f'<rect x="0" y="0" width="{w}" height="{h}" fill="{CRITICAL_OVERLAY}" />')

    for label in frame.levels:
        out.append(f'<text x="{_fmt(label.x)}" y="30" text-anchor="middle" '
                   f'font-weight="bold">{escape(label.name)}</text>')
    for node in frame.nodes:
        out.append(f'<circle cx="{_fmt(node.x)}" cy="{_fmt(node.y)}" r="{NODE_RADIUS}" '
                   f'fill="{node.color}" />')
        out.append(f'<text x="{_fmt(node.x)}" y="{_fmt(node.y + 30)}" text-anchor="middle" '
                   f'font-size="12">{escape(node.label)}</text>')

    for edge in frame.edges:
        out.append(f'<line x1="{_fmt(edge.start[0])}" y1="{_fmt(edge.start[1])}" '
                   f'x2="{_fmt(edge.end[0])}" y2="{_fmt(edge.end[1])}" '
                   f'stroke="{edge.color}" stroke-width="{_fmt(edge.stroke_width)}" />')

    for p in frame.particles:
        out.append("<g>")
        for s in p.trail:
            out.append(f'<circle cx="{_fmt(s.x)}" cy="{_fmt(s.y)}" r="{_fmt(s.radius)}" '
                       f'fill="{p.color}" opacity="{_fmt(s.opacity)}" />')
        out.append(_particle_svg(p))
        out.append("</g>")

    if frame.is_critical:
        out.append(f'<text x="{_fmt(frame.width / 2)}" y="{_fmt(frame.height / 2)}" '
                   f'text-anchor="middle" font-size="36" font-weight="bold" '
                   f'fill="rgba(255, 0, 0, {frame.criticality_intensity:.4f})">CRITICALITY</text>')

    out.append("</svg>")
    return "\n".join(out)


def write_svg(frame: FrameSnapshot, output_path: str) -> str:
    svg = frame_to_svg(frame)
    with open(output_path, "w") as f:
        f.write(svg)
    return svg


# =============================================================================
# RUN REPORTS
# =============================================================================

def export_run(result: FlowResult, output_path: Optional[str] = None) -> dict:
    """
    Summarize a run as a dict: statistics, traces, traffic hubs and the
    Merkle root of the receipt ledger.
    """
    state = result.final_state
    graph = traffic_graph(state.edge_memory)
    data = {
        "preset": result.config.preset_name,
        "random_seed": result.config.random_seed,
        "statistics": result.statistics,
        "traces": result.all_traces,
        "complexity": state.complexity,
        "optimal_complexity": state.optimal_complexity,
        "coupling": list(state.coupling),
        "active_modes": sorted(r.value for r in state.active_regimes),
        "hub_nodes": [[list(node), weight] for node, weight in hub_nodes(graph)],
        "level_flow": level_flow_matrix(state.edge_memory),
        "ledger_root": merkle(list(state.receipt_ledger)),
    }
    if output_path:
        with open(output_path, "w") as f:
            json.dump(data, f, indent=2)
    return data


def generate_report(result: FlowResult) -> str:
    """
    Generate human-readable summary.

    Args:
        result: FlowResult to summarize

    Returns:
        str: Report text
    """
    state = result.final_state
    stats = result.statistics
    hubs = hub_nodes(traffic_graph(state.edge_memory))
    lines = [
        "=== FLOW REPORT ===",
        f"Frames: {stats['frames']}",
        f"Modes: {', '.join(sorted(r.value for r in state.active_regimes)) or 'none'}",
        f"Complexity: {state.complexity} (Optimal: {state.optimal_complexity})",
        f"Coupling: {', '.join(f'{c:.2f}' for c in state.coupling)}",
        f"Spawned: {stats['spawned']}",
        f"Expired: {stats['expired']}",
        f"Peak Population: {stats['peak_population']}",
        f"Final Population: {stats['final_population']}",
        f"Edges Remembered: {stats['edges_remembered']}",
        f"Edges Settled: {stats['edges_settled']}",
    ]
    if hubs:
        lines.append("Hub Nodes: " + ", ".join(
            f"L{level}N{node}={weight:.0f}" for (level, node), weight in hubs))
    lines.append("")
    lines.append("Criticality: " + ("CRITICAL" if state.is_critical else "off"))
    return "\n".join(lines)
