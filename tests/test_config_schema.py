"""
tests/test_config_schema.py - Config Loading and Validation Tests

Validates:
- JSON and YAML loading into a frozen FlowConfig
- Preset selection with overrides
- Self-healing with warnings (unknown fields, wrong types, out of range)
- Strict mode rejection
- Schema export and config explanation
"""

import dataclasses
import json

import pytest
import yaml

import config_schema
from flow.types_config import FlowConfig, PRESET_CRITICAL


class TestFromDict:
    """Test from_dict with valid input."""

    def test_empty_is_default(self):
        assert config_schema.from_dict({}) == FlowConfig()

    def test_overrides(self):
        config = config_schema.from_dict({"default_complexity": 4, "random_seed": 7})
        assert config.default_complexity == 4
        assert config.random_seed == 7

    def test_list_coupling_becomes_tuple(self):
        config = config_schema.from_dict({"default_coupling": [0.5, 1, 1.5]})
        assert config.default_coupling == (0.5, 1.0, 1.5)

    def test_preset_base(self):
        """Preset supplies the base, other keys override it."""
        config = config_schema.from_dict({"preset": "CRITICAL", "max_particles": 10})
        assert config.default_coupling == PRESET_CRITICAL.default_coupling
        assert config.preset_name == "CRITICAL"
        assert config.max_particles == 10

    def test_frozen(self):
        config = config_schema.default()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.max_particles = 1


class TestSelfHealing:
    """Test non-strict healing paths."""

    def test_unknown_field_ignored(self):
        with pytest.warns(UserWarning, match="unknown field: colour"):
            config = config_schema.from_dict({"colour": "red"})
        assert config == FlowConfig()

    def test_wrong_type_dropped(self):
        with pytest.warns(UserWarning, match="Dropping max_particles"):
            config = config_schema.from_dict({"max_particles": "lots"})
        assert config.max_particles == 50

    def test_probability_clamped(self):
        with pytest.warns(UserWarning, match="Clamped spawn_probability"):
            config = config_schema.from_dict({"spawn_probability": 1.5})
        assert config.spawn_probability == 1.0

    def test_coupling_clamped(self):
        with pytest.warns(UserWarning, match="default_coupling"):
            config = config_schema.from_dict({"default_coupling": [3.0, 1.0, 0.0]})
        assert config.default_coupling == (2.0, 1.0, 0.1)

    def test_complexity_clamped_to_bounds(self):
        with pytest.warns(UserWarning, match="default_complexity"):
            config = config_schema.from_dict({"default_complexity": 9})
        assert config.default_complexity == 6

    def test_inverted_bounds_reset(self):
        with pytest.warns(UserWarning):
            config = config_schema.from_dict({"complexity_min": 6, "complexity_max": 2})
        assert (config.complexity_min, config.complexity_max) == (2, 6)

    def test_inverted_coupling_bounds_reset(self):
        """coupling_min above coupling_max falls back to the default bounds."""
        with pytest.warns(UserWarning, match="coupling bounds"):
            config = config_schema.from_dict({"coupling_min": 1.5, "coupling_max": 0.5})
        assert (config.coupling_min, config.coupling_max) == (0.1, 2.0)
        assert config.default_coupling == (1.0, 1.0, 1.0)

    def test_unknown_preset(self):
        with pytest.warns(UserWarning, match="preset"):
            config = config_schema.from_dict({"preset": "TURBO"})
        assert config.preset_name == "DEFAULT"

    def test_validate_false_skips_checks(self):
        """validate=False passes values through untouched."""
        config = config_schema.from_dict({"spawn_probability": 1.5}, validate=False)
        assert config.spawn_probability == 1.5


class TestStrict:
    """Test strict mode."""

    @pytest.mark.parametrize("data", [
        {"max_particles": "lots"},
        {"spawn_probability": 1.5},
        {"colour": "red"},
        {"default_coupling": [3.0, 1.0, 1.0]},
        {"coupling_min": 1.5, "coupling_max": 0.5},
    ])
    def test_rejects(self, data):
        with pytest.raises(ValueError, match="Config validation failed"):
            config_schema.from_dict(data, strict=True)

    def test_accepts_valid(self):
        config = config_schema.from_dict({"default_complexity": 3}, strict=True)
        assert config.default_complexity == 3


class TestLoad:
    """Test file loading."""

    def test_json(self, tmp_path):
        path = tmp_path / "flow.json"
        path.write_text(json.dumps({"default_complexity": 4, "random_seed": 1}))
        config = config_schema.load(str(path))
        assert config.default_complexity == 4

    def test_yaml(self, tmp_path):
        path = tmp_path / "flow.yaml"
        path.write_text(yaml.safe_dump({"preset": "CALM", "default_coupling": [1, 1, 1]}))
        config = config_schema.load(str(path))
        assert config.preset_name == "CALM"
        assert config.max_particles == 20
        assert config.default_coupling == (1.0, 1.0, 1.0)

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert config_schema.load(str(path)) == FlowConfig()

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            config_schema.load(str(tmp_path / "missing.json"))

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError, match="mapping"):
            config_schema.load(str(path))

    @pytest.mark.parametrize("suffix", [".json", ".yaml"])
    def test_save_then_load(self, tmp_path, suffix):
        path = tmp_path / f"saved{suffix}"
        config_schema.save(PRESET_CRITICAL, str(path))
        assert config_schema.load(str(path), strict=True) == PRESET_CRITICAL


class TestDescribe:
    """Test schema export and explanation."""

    def test_schema_copy(self):
        """schema() returns an independent copy."""
        s = config_schema.schema()
        s["properties"].clear()
        assert config_schema.schema()["properties"]

    def test_explain_default(self):
        text = config_schema.explain_config(config_schema.default())
        assert "Optimal complexity: 4" in text
        assert "CRITICAL at start" not in text

    def test_explain_critical(self):
        text = config_schema.explain_config(PRESET_CRITICAL)
        assert "Optimal complexity: 5 (CRITICAL at start)" in text
