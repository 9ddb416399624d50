#!/usr/bin/env python3
"""
flow_cli.py - Headless Flow Simulation CLI

Runs the multi-level flow simulation without a display host and reports
statistics, final frames (JSON or SVG) and receipts.

Usage:
    python flow_cli.py run --frames 600 --mode Emergence --seed 7
    python flow_cli.py frame --frames 120 --mode "Energy Flow" --output frame.json
    python flow_cli.py svg --frames 300 --mode "Feedback Loop" --output frame.svg
    python flow_cli.py explain-config --config flow.yaml
"""

import argparse
import json
import sys
from typing import List, Optional

import config_schema
from flow.constants import FRAME_MS, FlowRegime
from flow.controls import set_complexity, set_coupling
from flow.cycle import initialize_state, run_frames
from flow.export import export_frame_json, export_run, generate_report, write_svg
from flow.render import build_frame
from flow.types_config import FlowConfig, PRESETS
from flow.types_result import FlowResult


def resolve_config(args: argparse.Namespace) -> FlowConfig:
    """Config file (or preset) first, then --seed override."""
    if getattr(args, "config", None):
        config = config_schema.load(args.config, strict=args.strict)
    else:
        config = PRESETS[args.preset]
    if getattr(args, "seed", None) is not None:
        config = config_schema.from_dict(
            {**config_schema.config_to_dict(config), "random_seed": args.seed})
    return config


def run_session(args: argparse.Namespace) -> FlowResult:
    """
    Build a state from CLI options and run it for the requested frames.

    Receipts stream to --receipts as JSONL when given.
    """
    config = resolve_config(args)
    state = initialize_state(config)

    sink = open(args.receipts, "w") if args.receipts else None
    try:
        state.receipt_sink = sink
        if args.complexity is not None:
            set_complexity(state, args.complexity, config)
        for pair_index, value in enumerate(args.coupling or []):
            set_coupling(state, pair_index, value, config)
        return run_frames(config, args.frames, modes=args.mode or [],
                          frame_ms=args.frame_ms, state=state)
    finally:
        state.receipt_sink = None
        if sink is not None:
            sink.close()


def _add_session_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--frames",
        type=int,
        default=600,
        help="Frames to simulate (default: 600, ~10s at 60fps)",
    )
    parser.add_argument(
        "--mode",
        action="append",
        choices=[r.value for r in FlowRegime],
        help="Flow regime to activate (repeatable)",
    )
    parser.add_argument(
        "--complexity",
        type=int,
        default=None,
        help="Nodes per level (default: from config)",
    )
    parser.add_argument(
        "--coupling",
        type=float,
        nargs=3,
        metavar=("Q_M", "M_C", "C_O"),
        default=None,
        help="Coupling for the three adjacent level pairs",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--config", type=str, default=None, help="JSON/YAML config file")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="DEFAULT",
        help="Config preset when no --config is given",
    )
    parser.add_argument("--strict", action="store_true", help="Reject invalid config")
    parser.add_argument(
        "--frame-ms",
        type=float,
        default=FRAME_MS,
        help="Simulated frame interval in milliseconds",
    )
    parser.add_argument(
        "--receipts",
        type=str,
        default=None,
        help="Write receipts as JSONL to this path",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Multi-level information-flow simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python flow_cli.py run --mode Emergence --frames 900
  python flow_cli.py run --mode "Feedback Loop" --coupling 2 2 2 --json
  python flow_cli.py frame --mode "Energy Flow" --output frame.json
  python flow_cli.py svg --mode Emergence --output frame.svg
  python flow_cli.py explain-config --preset CRITICAL
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run a session and print a report")
    _add_session_args(run_parser)
    run_parser.add_argument("--json", action="store_true", help="Output run summary as JSON")
    run_parser.add_argument("--output", type=str, default=None, help="Write run summary JSON")

    frame_parser = subparsers.add_parser("frame", help="Dump the final frame as JSON")
    _add_session_args(frame_parser)
    frame_parser.add_argument("--output", type=str, default=None, help="Write frame JSON here")

    svg_parser = subparsers.add_parser("svg", help="Render the final frame as SVG")
    _add_session_args(svg_parser)
    svg_parser.add_argument("--output", type=str, required=True, help="SVG output path")

    explain_parser = subparsers.add_parser("explain-config", help="Explain a config")
    explain_parser.add_argument("--config", type=str, default=None, help="JSON/YAML config file")
    explain_parser.add_argument("--preset", choices=sorted(PRESETS), default="DEFAULT")
    explain_parser.add_argument("--strict", action="store_true", help="Reject invalid config")
    explain_parser.add_argument("--schema", action="store_true", help="Print the JSON Schema")

    args = parser.parse_args(argv)

    if args.command == "run":
        result = run_session(args)
        if args.output:
            export_run(result, args.output)
            print(f"Results written to {args.output}")
        if args.json:
            print(json.dumps(export_run(result), indent=2))
        else:
            print(generate_report(result))

    elif args.command == "frame":
        result = run_session(args)
        frame = build_frame(result.final_state, result.config)
        text = export_frame_json(frame, args.output, pretty=True)
        if args.output:
            print(f"Frame {frame.tick} written to {args.output}")
        else:
            print(text)

    elif args.command == "svg":
        result = run_session(args)
        frame = build_frame(result.final_state, result.config)
        write_svg(frame, args.output)
        print(f"Frame {frame.tick} rendered to {args.output}")

    elif args.command == "explain-config":
        if args.schema:
            print(json.dumps(config_schema.schema(), indent=2))
        else:
            print(config_schema.explain_config(resolve_config(args)))

    else:
        parser.print_help()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
