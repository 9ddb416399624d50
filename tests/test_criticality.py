"""
tests/test_criticality.py - Criticality Evaluator Tests

Validates:
- optimal_complexity formula and half-up rounding
- Critical exactly at the optimal complexity
- Oscillation bounds and zero when not critical
- criticality_change receipts on flag flips
"""

import math

import pytest

from flow.criticality import (
    background_alpha,
    is_critical,
    optimal_complexity,
    oscillation,
    refresh_criticality,
    update_oscillation,
)
from flow.cycle import initialize_state
from flow.ledger import receipts_of_type
from flow.types_config import FlowConfig


class TestOptimalComplexity:
    """Test optimal_complexity function."""

    def test_unit_coupling(self):
        """Mean 1.0 gives 4."""
        assert optimal_complexity((1.0, 1.0, 1.0)) == 4

    @pytest.mark.parametrize("coupling,expected", [
        ((0.1, 0.1, 0.1), 2),
        ((1.5, 1.5, 1.5), 5),
        ((2.0, 2.0, 2.0), 6),
        ((0.5, 1.0, 1.5), 4),
    ])
    def test_formula(self, coupling, expected):
        """round(mean * 2 + 2) across the slider range."""
        assert optimal_complexity(coupling) == expected

    def test_half_rounds_up(self):
        """mean 1.25 -> 4.5 rounds to 5, not 4."""
        assert optimal_complexity((1.25, 1.25, 1.25)) == 5


class TestIsCritical:
    """Test is_critical function."""

    def test_only_at_optimum(self):
        """At unit coupling only complexity 4 is critical."""
        flags = {n: is_critical(n, (1.0, 1.0, 1.0)) for n in range(2, 7)}
        assert flags == {2: False, 3: False, 4: True, 5: False, 6: False}


class TestOscillation:
    """Test oscillation and background pulse."""

    def test_zero_when_not_critical(self):
        """Non-critical networks have no banner."""
        assert oscillation(1234.0, False) == 0.0

    def test_midpoint_at_zero_time(self):
        """sin(0) maps to 0.5."""
        assert oscillation(0.0, True) == pytest.approx(0.5)

    def test_peak(self):
        """Quarter period peaks at 1.0."""
        t = (math.pi / 2) / 0.002
        assert oscillation(t, True) == pytest.approx(1.0)

    def test_bounded(self):
        """Intensity stays in [0, 1]."""
        for t in range(0, 20000, 37):
            assert 0.0 <= oscillation(float(t), True) <= 1.0

    def test_background_alpha_bounds(self):
        """Background pulse stays in [0.05, 0.15]."""
        for t in range(0, 20000, 41):
            assert 0.05 - 1e-9 <= background_alpha(float(t)) <= 0.15 + 1e-9


class TestRefreshCriticality:
    """Test refresh_criticality on FlowState."""

    def test_initial_state_not_critical(self):
        """Default complexity 5 at unit coupling is not critical."""
        state = initialize_state(FlowConfig(random_seed=1))
        assert state.optimal_complexity == 4
        assert not state.is_critical
        assert receipts_of_type(state, "criticality_change") == []

    def test_flip_records_receipt(self):
        """Entering and leaving criticality emit one receipt each."""
        state = initialize_state(FlowConfig(random_seed=1))
        state.complexity = 4
        receipt = refresh_criticality(state)
        assert receipt is not None and receipt["is_critical"] is True
        assert refresh_criticality(state) is None, "No receipt without a flip"

        state.complexity = 5
        refresh_criticality(state)
        assert len(receipts_of_type(state, "criticality_change")) == 2

    def test_leaving_zeroes_intensity(self):
        """Intensity drops to 0 when criticality is lost."""
        state = initialize_state(FlowConfig(random_seed=1))
        state.complexity = 4
        refresh_criticality(state)
        update_oscillation(state, 500.0)
        assert state.criticality_intensity > 0.0
        state.complexity = 6
        refresh_criticality(state)
        assert state.criticality_intensity == 0.0

    def test_critical_preset(self):
        """The CRITICAL preset starts at the critical point."""
        from flow.types_config import PRESET_CRITICAL
        state = initialize_state(PRESET_CRITICAL)
        assert state.is_critical
