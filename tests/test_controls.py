"""
tests/test_controls.py - Control Event Tests

Validates:
- toggle_mode membership, description and phase transitions
- set_complexity / set_coupling validation and criticality refresh
- Particles beyond a shrunken complexity are dropped
- reset restores a clean IDLE state
"""

import pytest

from flow.constants import MODE_DESCRIPTIONS, FlowPhase, FlowRegime
from flow.controls import parse_regime, reset, set_complexity, set_coupling, toggle_mode
from flow.cycle import initialize_state
from flow.edge_memory import record_traffic
from flow.ledger import receipts_of_type
from flow.particles import spawn_particle
from flow.types_config import FlowConfig


@pytest.fixture
def config():
    return FlowConfig(random_seed=42)


@pytest.fixture
def state(config):
    return initialize_state(config)


class TestParseRegime:
    """Test parse_regime function."""

    def test_display_name(self):
        assert parse_regime("Energy Flow") == FlowRegime.ENERGY_FLOW

    def test_enum_name(self):
        assert parse_regime("FEEDBACK_LOOP") == FlowRegime.FEEDBACK_LOOP

    def test_unknown(self):
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown mode"):
            parse_regime("Turbulence")


class TestToggleMode:
    """Test toggle_mode function."""

    def test_toggle_on_and_off(self, state):
        """Two toggles restore the initial membership."""
        assert toggle_mode(state, FlowRegime.EMERGENCE) is True
        assert FlowRegime.EMERGENCE in state.active_regimes
        assert toggle_mode(state, FlowRegime.EMERGENCE) is False
        assert state.active_regimes == set()

    def test_description_follows_last_toggle(self, state):
        """Description is the toggled mode's text, even when turning off."""
        toggle_mode(state, "Energy Flow")
        toggle_mode(state, "Emergence")
        toggle_mode(state, "Energy Flow")
        assert state.description == MODE_DESCRIPTIONS[FlowRegime.ENERGY_FLOW]
        assert state.active_regimes == {FlowRegime.EMERGENCE}

    def test_phase_transitions(self, state):
        """IDLE -> RUNNING on first mode, back to IDLE when none remain."""
        assert state.phase == FlowPhase.IDLE
        toggle_mode(state, FlowRegime.ENERGY_FLOW)
        assert state.phase == FlowPhase.RUNNING
        toggle_mode(state, FlowRegime.EMERGENCE)
        toggle_mode(state, FlowRegime.ENERGY_FLOW)
        assert state.phase == FlowPhase.RUNNING
        toggle_mode(state, FlowRegime.EMERGENCE)
        assert state.phase == FlowPhase.IDLE
        assert len(receipts_of_type(state, "phase_change")) == 2

    def test_receipt(self, state):
        """Every toggle emits a mode_toggle receipt."""
        toggle_mode(state, FlowRegime.FEEDBACK_LOOP)
        (receipt,) = receipts_of_type(state, "mode_toggle")
        assert receipt["mode"] == "Feedback Loop"
        assert receipt["active"] is True
        assert receipt["tenant_id"] == "flowsim"


class TestSetComplexity:
    """Test set_complexity function."""

    @pytest.mark.parametrize("bad", [1, 7, 0, -3])
    def test_out_of_range(self, state, config, bad):
        with pytest.raises(ValueError, match="out of range"):
            set_complexity(state, bad, config)

    @pytest.mark.parametrize("bad", [4.0, "4", True])
    def test_non_integer(self, state, config, bad):
        with pytest.raises(ValueError, match="integer"):
            set_complexity(state, bad, config)

    def test_refreshes_criticality(self, state, config):
        """Complexity 4 at unit coupling is critical."""
        set_complexity(state, 4, config)
        assert state.is_critical
        assert state.optimal_complexity == 4

    def test_shrink_drops_out_of_range_particles(self, state, config):
        """Particles touching removed nodes are dropped, others kept."""
        keep = spawn_particle(0, 1, 1, 2, "#fff")
        drop_start = spawn_particle(0, 4, 1, 0, "#fff")
        drop_end = spawn_particle(2, 0, 3, 3, "#fff")
        state.particles = [keep, drop_start, drop_end]

        dropped = set_complexity(state, 3, config)

        assert dropped == 2
        assert state.particles == [keep]
        assert state.pruned == 2
        (receipt,) = receipts_of_type(state, "particle_pruned")
        assert receipt["dropped"] == 2 and receipt["remaining"] == 1

    def test_grow_keeps_particles(self, state, config):
        """Growing never drops particles."""
        state.particles = [spawn_particle(0, 4, 1, 4, "#fff")]
        assert set_complexity(state, 6, config) == 0
        assert len(state.particles) == 1


class TestSetCoupling:
    """Test set_coupling function."""

    def test_sets_pair(self, state, config):
        set_coupling(state, 1, 1.7, config)
        assert state.coupling == [1.0, 1.7, 1.0]

    @pytest.mark.parametrize("index", [-1, 3, True, "0"])
    def test_bad_index(self, state, config, index):
        with pytest.raises(ValueError, match="pair index"):
            set_coupling(state, index, 1.0, config)

    @pytest.mark.parametrize("value", [0.05, 2.01, -1.0])
    def test_bad_value(self, state, config, value):
        with pytest.raises(ValueError, match="out of range"):
            set_coupling(state, 0, value, config)

    def test_bounds_inclusive(self, state, config):
        """Both slider ends are accepted."""
        set_coupling(state, 0, 0.1, config)
        set_coupling(state, 2, 2.0, config)
        assert state.coupling == [0.1, 1.0, 2.0]

    def test_refreshes_optimal(self, state, config):
        """Raising all pairs to 1.5 moves the optimum to 5."""
        for i in range(3):
            set_coupling(state, i, 1.5, config)
        assert state.optimal_complexity == 5
        assert state.is_critical


class TestReset:
    """Test reset function."""

    def test_restores_defaults(self, state, config):
        """Reset after arbitrary changes returns to a clean IDLE state."""
        for mode in FlowRegime:
            toggle_mode(state, mode)
        set_complexity(state, 3, config)
        set_coupling(state, 0, 2.0, config)
        state.particles = [spawn_particle(0, 0, 1, 1, "#fff")]
        record_traffic(state.edge_memory, state.particles[0].edge_key, "#fff")

        reset(state, config)

        assert state.active_regimes == set()
        assert state.particles == []
        assert state.edge_memory == {}
        assert state.complexity == 5
        assert state.coupling == [1.0, 1.0, 1.0]
        assert state.description == ""
        assert state.phase == FlowPhase.IDLE
        assert not state.is_critical

    def test_keeps_ledger(self, state, config):
        """The receipt ledger survives reset."""
        toggle_mode(state, FlowRegime.EMERGENCE)
        reset(state, config)
        assert receipts_of_type(state, "mode_toggle")
        (receipt,) = receipts_of_type(state, "flow_reset")
        assert receipt["modes"] == ["Emergence"]

    def test_uses_config_defaults(self):
        """Defaults come from the config, not module constants."""
        config = FlowConfig(default_complexity=3, default_coupling=(0.5, 0.5, 0.5))
        state = initialize_state(config)
        set_complexity(state, 6, config)
        reset(state, config)
        assert state.complexity == 3
        assert state.coupling == [0.5, 0.5, 0.5]
