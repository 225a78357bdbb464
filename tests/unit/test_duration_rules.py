"""
Unit tests for the duration rule table.
"""

import pytest

from backend.services.domain_rule_service import DomainRuleService
from domain.models import InsightType, Interaction, InteractionAction
from domain.rules.duration import DURATION_RULES, FOCUS_WINDOWS

pytestmark = pytest.mark.unit


@pytest.fixture
def service():
    return DomainRuleService(DURATION_RULES)


def _evaluate(service, context):
    return {insight.id: insight for insight in service.evaluate(context.current_selections, context)}


def _duration_history(values):
    return [
        Interaction(component="duration", action=InteractionAction.APPLIED, value=value)
        for value in values
    ]


# =============================================================================
# Validation
# =============================================================================


class TestDurationValidation:
    @pytest.mark.parametrize("minutes", [0, 4, 241, 600])
    def test_out_of_range(self, service, make_context, minutes):
        context = make_context({"duration": minutes, "focus": "strength"})
        insights = _evaluate(service, context)

        assert list(insights) == ["duration_invalid_value"]
        assert insights["duration_invalid_value"].actionable is False
        assert insights["duration_invalid_value"].metadata.expected_range == "5-240"

    @pytest.mark.parametrize("minutes", [5, 240])
    def test_bounds_are_valid(self, service, make_context, minutes):
        context = make_context({"duration": minutes})
        assert "duration_invalid_value" not in _evaluate(service, context)


# =============================================================================
# Base and contextual rules
# =============================================================================


class TestDurationBaseRules:
    def test_very_short(self, service, make_context):
        context = make_context({"duration": 15})
        assert "duration_very_short" in _evaluate(service, context)

    def test_structured_duration(self, service, make_context):
        context = make_context({"duration": {"totalDuration": 10}})
        assert "duration_very_short" in _evaluate(service, context)

    def test_moderate_duration_without_context_is_silent(self, service, make_context):
        context = make_context({"duration": 40})
        assert _evaluate(service, context) == {}

    def test_long_for_beginner(self, service, make_context):
        context = make_context({"duration": 90}, fitness_level="beginner")
        assert "duration_long_for_beginner" in _evaluate(service, context)


class TestDurationContextualRules:
    def test_long_with_low_energy(self, service, make_context):
        context = make_context({"duration": 90, "energy": 2})
        insight = _evaluate(service, context)["duration_long_low_energy"]
        assert insight.type == InsightType.WARNING
        assert insight.confidence == 0.95

    def test_long_with_widespread_soreness(self, service, make_context):
        context = make_context({"duration": 60, "soreness": ["Back", "Core", "Arms"]})
        assert "duration_long_with_soreness" in _evaluate(service, context)

    def test_long_in_the_evening(self, service, make_context):
        context = make_context({"duration": 90}, time_of_day="evening")
        assert "duration_long_evening" in _evaluate(service, context)

    def test_long_new_to_exercise(self, service, make_context):
        context = make_context({"duration": 90}, fitness_level="new to exercise")
        assert "duration_long_new_to_exercise" in _evaluate(service, context)


# =============================================================================
# Cross-component rules
# =============================================================================


class TestDurationCrossComponentRules:
    def test_too_short_for_strength(self, service, make_context):
        context = make_context({"duration": 30, "focus": "strength"})
        insight = _evaluate(service, context)["duration_too_short_for_focus"]

        low, optimal, high = FOCUS_WINDOWS["strength"]
        assert insight.metadata.min_duration == low
        assert insight.metadata.optimal_duration == optimal
        assert insight.related_fields == ["duration", "focus"]

    def test_fits_focus(self, service, make_context):
        context = make_context({"duration": 60, "focus": "strength"})
        insights = _evaluate(service, context)

        assert insights["duration_fits_focus"].actionable is False
        assert "duration_too_short_for_focus" not in insights
        assert "duration_too_long_for_focus" not in insights

    def test_too_long_for_cardio(self, service, make_context):
        context = make_context({"duration": 90, "focus": "cardio"})
        assert "duration_too_long_for_focus" in _evaluate(service, context)

    def test_unknown_focus_has_no_window(self, service, make_context):
        context = make_context({"duration": 40, "focus": "yoga"})
        assert _evaluate(service, context) == {}

    def test_short_with_much_equipment(self, service, make_context):
        context = make_context(
            {"duration": 20, "equipment": ["Dumbbells", "Kettlebells", "Yoga Mat", "Jump Rope"]}
        )
        assert "duration_short_with_equipment" in _evaluate(service, context)

    def test_exceeds_available_time(self, service, make_context):
        context = make_context({"duration": 45}, available_time=30)
        insight = _evaluate(service, context)["duration_exceeds_available_time"]

        assert insight.confidence == 0.95
        assert insight.metadata.available_time == 30


# =============================================================================
# Learning rules
# =============================================================================


class TestDurationLearningRules:
    def test_inconsistent_history(self, service, make_context):
        context = make_context({"duration": 45}, history=_duration_history([30, 30, 90]))
        insights = _evaluate(service, context)

        assert insights["duration_inconsistent_duration"].metadata.average_duration == 50.0
        assert "duration_typical_duration_deviation" not in insights

    def test_deviation_from_typical(self, service, make_context):
        context = make_context({"duration": 60}, history=_duration_history([30, 30, 30]))
        insights = _evaluate(service, context)

        assert "duration_typical_duration_deviation" in insights
        assert "longer" in insights["duration_typical_duration_deviation"].message
        assert "duration_inconsistent_duration" not in insights

    def test_too_little_history(self, service, make_context):
        context = make_context({"duration": 90}, history=_duration_history([30, 30]))
        assert "duration_typical_duration_deviation" not in _evaluate(service, context)
