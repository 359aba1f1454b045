"""
Unit Tests for Progression Formulas
===================================

Test Coverage
-------------
- Experience threshold curve
- Level-up resolution with carried-over experience
- Objective progress clamping
"""

import pytest

from hunter.core.exceptions import ConfigurationError, HunterInfrastructureException
from hunter.modules.progression.formulas import (
    clamp_progress,
    experience_threshold,
    resolve_level_ups,
)


# ============================================================================
# THRESHOLD TESTS
# ============================================================================


@pytest.mark.unit
class TestExperienceThreshold:
    def test_threshold_is_linear_in_level(self):
        for level in range(1, 50):
            assert experience_threshold(level) == 100 + 100 * level

    def test_threshold_uses_custom_tunables(self):
        assert experience_threshold(3, base=50, per_level=25) == 125


# ============================================================================
# LEVEL RESOLUTION TESTS
# ============================================================================


@pytest.mark.unit
class TestResolveLevelUps:
    def test_single_level_up_carries_excess(self):
        """250 XP at level 1 (threshold 100) lands on level 2 with 150/300."""
        level, level_exp, threshold, steps = resolve_level_ups(1, 250, 100)

        assert (level, level_exp, threshold) == (2, 150, 300)
        assert steps == [(2, 100)]

    def test_multiple_level_ups_in_one_pass(self):
        level, level_exp, threshold, steps = resolve_level_ups(1, 400, 100)

        assert (level, level_exp, threshold) == (3, 0, 400)
        assert steps == [(2, 100), (3, 300)]

    def test_exact_threshold_levels_up_with_zero_remaining(self):
        level, level_exp, threshold, _ = resolve_level_ups(1, 100, 100)

        assert (level, level_exp, threshold) == (2, 0, 300)

    def test_below_threshold_is_unchanged(self):
        assert resolve_level_ups(4, 99, 500) == (4, 99, 500, [])

    def test_result_is_always_below_threshold(self):
        for gain in (0, 1, 99, 100, 299, 1000, 12345):
            _, level_exp, threshold, _ = resolve_level_ups(1, gain, 100)
            assert level_exp < threshold

    def test_non_positive_threshold_rejected(self):
        with pytest.raises(ConfigurationError):
            resolve_level_ups(1, 10, 0)

    def test_non_positive_recomputed_threshold_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_level_ups(1, 100, 100, base=-300, per_level=100)

        assert exc_info.value.config_key == "progression.threshold_base"
        assert isinstance(exc_info.value, HunterInfrastructureException)


# ============================================================================
# PROGRESS CLAMPING TESTS
# ============================================================================


@pytest.mark.unit
class TestClampProgress:
    def test_overshoot_is_clamped(self):
        assert clamp_progress(2, 5, 3) == 3

    def test_partial_progress(self):
        assert clamp_progress(1, 1, 5) == 2

    def test_zero_delta(self):
        assert clamp_progress(2, 0, 3) == 2
