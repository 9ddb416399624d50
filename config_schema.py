"""
Flow Configuration Schema - Self-Validating Config Loading

Loads FlowConfig from JSON or YAML files and validates it against a JSON
Schema before the simulation ever sees it.

Consumed by:
- flow_cli.py (--config)
- tests

Design Principles:
- Self-validating: Can't create invalid config
- Self-healing: Invalid input -> safe defaults + warnings
- Self-describing: Can explain itself and export schema
- Immutable: FlowConfig is frozen after load
"""

from __future__ import annotations

import json
import warnings
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from jsonschema import Draft202012Validator

from flow.constants import LEVELS, PAIR_LABELS
from flow.criticality import optimal_complexity
from flow.types_config import FlowConfig, PRESETS


__all__ = [
    'load',
    'from_dict',
    'default',
    'config_to_dict',
    'save',
    'explain_config',
    'schema',
]


# =============================================================================
# JSON Schema Definition (Draft 2020-12)
# =============================================================================

_JSON_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://flowsim.local/schemas/config/v1.0",
    "title": "FlowConfig",
    "description": "Multi-level flow simulation configuration",
    "type": "object",
    "properties": {
        "preset": {
            "type": "string",
            "description": "Preset to start from before applying overrides",
            "enum": sorted(PRESETS),
        },
        "width": {"type": "number", "exclusiveMinimum": 0, "default": 800.0},
        "height": {"type": "number", "exclusiveMinimum": 0, "default": 600.0},
        "complexity_min": {"type": "integer", "minimum": 1, "default": 2},
        "complexity_max": {"type": "integer", "minimum": 1, "default": 6},
        "default_complexity": {
            "type": "integer",
            "description": "Nodes per level after start and reset",
            "minimum": 1,
            "default": 5,
        },
        "coupling_min": {"type": "number", "exclusiveMinimum": 0, "default": 0.1},
        "coupling_max": {"type": "number", "exclusiveMinimum": 0, "default": 2.0},
        "default_coupling": {
            "type": "array",
            "description": "Coupling per adjacent level pair",
            "items": {"type": "number"},
            "minItems": 3,
            "maxItems": 3,
            "default": [1.0, 1.0, 1.0],
        },
        "max_particles": {"type": "integer", "minimum": 1, "default": 50},
        "spawn_probability": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 0.1},
        "base_step": {"type": "number", "exclusiveMinimum": 0, "maximum": 1.0, "default": 0.02},
        "trail_capacity": {"type": "integer", "minimum": 1, "default": 5},
        "memory_threshold": {"type": "integer", "minimum": 0, "default": 5},
        "oscillation_rate": {"type": "number", "minimum": 0, "default": 0.002},
        "random_seed": {"type": ["integer", "null"], "default": None},
        "ledger_limit": {"type": "integer", "minimum": 1, "default": 1000},
        "tenant_id": {"type": "string", "minLength": 1, "default": "flowsim"},
        "preset_name": {"type": "string"},
    },
    "additionalProperties": False,
}

# Compiled once at import
_COMPILED_VALIDATOR = Draft202012Validator(_JSON_SCHEMA)
Draft202012Validator.check_schema(_JSON_SCHEMA)

_FIELD_NAMES = frozenset(f.name for f in fields(FlowConfig))


# =============================================================================
# Module-Level Functions
# =============================================================================

def schema() -> Dict[str, Any]:
    """Returns JSON Schema dict for external validation."""
    return json.loads(json.dumps(_JSON_SCHEMA))


def load(path: str, validate: bool = True, strict: bool = False) -> FlowConfig:
    """
    Load config from JSON/YAML file.

    Auto-validates on load (not separate step).

    Args:
        path: Path to config file
        validate: Whether to validate (default True)
        strict: If True, raise on invalid; if False, self-heal with warnings

    Returns:
        Validated, frozen FlowConfig instance

    Raises:
        FileNotFoundError: If path doesn't exist
        ValueError: If strict=True and validation fails
    """
    path_obj = Path(path)

    if not path_obj.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    content = path_obj.read_text()

    if path_obj.suffix in ('.yaml', '.yml'):
        data = yaml.safe_load(content) or {}
    else:
        data = json.loads(content)

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

    return from_dict(data, validate, strict)


def from_dict(data: Dict[str, Any], validate: bool = True, strict: bool = False) -> FlowConfig:
    """
    Build a FlowConfig from a plain dict.

    An optional "preset" key selects the base preset; remaining keys
    override it.
    """
    return _create_config(dict(data), validate, strict)


def default() -> FlowConfig:
    """Return the default preset."""
    return PRESETS["DEFAULT"]


def config_to_dict(config: FlowConfig) -> Dict[str, Any]:
    data = asdict(config)
    data["default_coupling"] = list(config.default_coupling)
    return data


def save(config: FlowConfig, path: str) -> None:
    """Write config as JSON or YAML depending on the suffix."""
    path_obj = Path(path)
    data = config_to_dict(config)
    if path_obj.suffix in ('.yaml', '.yml'):
        path_obj.write_text(yaml.safe_dump(data, sort_keys=True))
    else:
        path_obj.write_text(json.dumps(data, indent=2, sort_keys=True))


def explain_config(config: FlowConfig) -> str:
    """
    Human-readable explanation of a config.

    Describes the network shape, flow tuning and where criticality sits.
    """
    optimal = optimal_complexity(config.default_coupling)
    lines = [
        "FlowConfig Explanation",
        "=" * 50,
        "",
        f"Preset: {config.preset_name}",
        f"Canvas: {config.width:g} x {config.height:g}",
        f"Levels: {', '.join(LEVELS)}",
        "",
        "Network:",
        f"  • Complexity: {config.default_complexity} nodes per level "
        f"(range {config.complexity_min}-{config.complexity_max})",
    ]
    for label, value in zip(PAIR_LABELS, config.default_coupling):
        lines.append(f"  • Coupling {label}: {value:.2f}")
    lines.append(
        f"  • Optimal complexity: {optimal}"
        + (" (CRITICAL at start)" if optimal == config.default_complexity else "")
    )
    lines.extend([
        "",
        "Flow:",
        f"  • Max particles: {config.max_particles}",
        f"  • Spawn probability: {config.spawn_probability:.3f} per roll",
        f"  • Base step: {config.base_step:.3f} progress per tick",
        f"  • Trail: {config.trail_capacity} samples",
        f"  • Edge memory threshold: {config.memory_threshold} traversals",
        "",
        f"Seed: {config.random_seed if config.random_seed is not None else 'unseeded'}",
    ])
    return "\n".join(lines)


# =============================================================================
# Internal Validation Functions
# =============================================================================

def _validate(data: Dict[str, Any]) -> Tuple[bool, List[str], List[str]]:
    """
    Validate config data.

    Returns: (is_valid, errors, warnings)

    Rules:
    - Types match the schema (errors)
    - Range and enum violations (warnings, healable)
    - default_complexity within [complexity_min, complexity_max]
    - coupling_min <= coupling_max
    - default_coupling within [coupling_min, coupling_max]
    """
    errors: List[str] = []
    warns: List[str] = []

    for err in _COMPILED_VALIDATOR.iter_errors(data):
        if err.validator in ('minimum', 'maximum', 'exclusiveMinimum', 'enum',
                             'additionalProperties', 'minItems', 'maxItems'):
            warns.append(f"Schema: {err.message}")
        else:
            errors.append(f"Schema: {err.message}")

    lo = data.get('complexity_min', 2)
    hi = data.get('complexity_max', 6)
    n = data.get('default_complexity', 5)
    if all(isinstance(v, int) and not isinstance(v, bool) for v in (n, lo, hi)):
        if lo > hi:
            errors.append(f"complexity_min {lo} exceeds complexity_max {hi}")
        elif not lo <= n <= hi:
            warns.append(f"default_complexity {n} out of range [{lo}, {hi}]")

    cmin = data.get('coupling_min', 0.1)
    cmax = data.get('coupling_max', 2.0)
    coupling = data.get('default_coupling')
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (cmin, cmax)) \
            and cmin > cmax:
        errors.append(f"coupling_min {cmin} exceeds coupling_max {cmax}")
    elif isinstance(coupling, list) and all(isinstance(c, (int, float)) for c in coupling):
        for i, c in enumerate(coupling):
            if not cmin <= c <= cmax:
                warns.append(f"default_coupling[{i}] {c} out of range [{cmin}, {cmax}]")

    is_valid = len(errors) == 0
    return is_valid, errors, warns


def _self_heal(data: Dict[str, Any], warns: List[str]) -> Dict[str, Any]:
    """
    Apply self-healing to config data.

    Self-healing behavior:
    - Wrong-typed field -> dropped, default used, add warning
    - Out-of-range value -> clamp to valid range, add warning
    - Unknown field -> ignore, add warning
    - Unknown preset -> DEFAULT, add warning
    """
    healed = dict(data)
    base = config_to_dict(default())

    unknown = set(healed) - _FIELD_NAMES - {"preset"}
    for field in sorted(unknown):
        del healed[field]
        warns.append(f"Ignoring unknown field: {field}")

    if "preset" in healed and healed["preset"] not in PRESETS:
        warns.append(f"Unknown preset {healed['preset']!r}, using DEFAULT")
        healed["preset"] = "DEFAULT"

    # Drop fields whose type cannot be used at all
    for field in sorted(set(healed) & _FIELD_NAMES):
        prop = _JSON_SCHEMA["properties"][field]
        if not Draft202012Validator(_type_only(prop)).is_valid(healed[field]):
            warns.append(f"Dropping {field}={healed[field]!r}, using default: {base[field]}")
            del healed[field]

    for field in sorted(set(healed) & _FIELD_NAMES):
        prop = _JSON_SCHEMA["properties"][field]
        val = healed[field]
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            continue
        if "exclusiveMinimum" in prop and val <= prop["exclusiveMinimum"]:
            healed[field] = base[field]
            warns.append(f"Reset {field} from {val} to default {base[field]}")
            continue
        low, high = prop.get("minimum"), prop.get("maximum")
        clamped = val
        if low is not None:
            clamped = max(clamped, low)
        if high is not None:
            clamped = min(clamped, high)
        if clamped != val:
            healed[field] = clamped
            warns.append(f"Clamped {field} from {val} to {clamped}")

    lo = healed.get('complexity_min', base['complexity_min'])
    hi = healed.get('complexity_max', base['complexity_max'])
    if lo > hi:
        warns.append(f"complexity bounds [{lo}, {hi}] inverted, using defaults")
        lo, hi = base['complexity_min'], base['complexity_max']
        healed['complexity_min'], healed['complexity_max'] = lo, hi
    n = healed.get('default_complexity', base['default_complexity'])
    if not lo <= n <= hi:
        healed['default_complexity'] = min(max(n, lo), hi)
        warns.append(f"Clamped default_complexity from {n} to {healed['default_complexity']}")

    cmin = healed.get('coupling_min', base['coupling_min'])
    cmax = healed.get('coupling_max', base['coupling_max'])
    if cmin > cmax:
        warns.append(f"coupling bounds [{cmin}, {cmax}] inverted, using defaults")
        cmin, cmax = base['coupling_min'], base['coupling_max']
        healed['coupling_min'], healed['coupling_max'] = cmin, cmax
    if 'default_coupling' in healed:
        coupling = list(healed['default_coupling'])
        if len(coupling) != 3:
            warns.append(f"default_coupling needs 3 values, got {len(coupling)}; using default")
            coupling = list(base['default_coupling'])
        clamped = [min(max(float(c), cmin), cmax) for c in coupling]
        if clamped != [float(c) for c in coupling]:
            warns.append(f"Clamped default_coupling from {coupling} to {clamped}")
        healed['default_coupling'] = clamped

    return healed


def _create_config(data: Dict[str, Any], validate: bool, strict: bool) -> FlowConfig:
    """
    Internal factory for creating FlowConfig from data.

    Strict mode rejects anything the validator flags, range warnings
    included, since an out-of-range value would reach the simulation as is.
    """
    all_warnings: List[str] = []

    if validate:
        is_valid, errors, warns = _validate(data)
        if strict and (errors or warns):
            raise ValueError("Config validation failed:\n" +
                             "\n".join(f"  - {e}" for e in errors + warns))
        all_warnings.extend(errors + warns)

        if all_warnings:
            data = _self_heal(data, all_warnings)
            is_valid, errors, _ = _validate(data)
            if not is_valid:
                raise ValueError("Config validation failed after self-healing:\n" +
                                 "\n".join(f"  - {e}" for e in errors))

    for w in all_warnings:
        warnings.warn(f"FlowConfig: {w}", UserWarning, stacklevel=3)

    preset_key = data.pop("preset", "DEFAULT")
    base = PRESETS.get(preset_key, PRESETS["DEFAULT"])
    overrides = {k: v for k, v in data.items() if k in _FIELD_NAMES}
    return FlowConfig(**{**config_to_dict(base), **overrides})


def _type_only(prop: Dict[str, Any]) -> Dict[str, Any]:
    """Sub-schema keeping only the type constraints of a property."""
    kept = {"type": prop["type"]} if "type" in prop else {}
    if "items" in prop:
        kept["items"] = {"type": prop["items"].get("type")}
    return kept
