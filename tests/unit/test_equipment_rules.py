"""
Unit tests for the equipment rule table.
"""

import pytest

from backend.services.domain_rule_service import DomainRuleService
from domain.models import InsightType, Interaction, InteractionAction
from domain.rules.equipment import EQUIPMENT_RULES, aligned_items, selected_combinations

pytestmark = pytest.mark.unit


@pytest.fixture
def service():
    return DomainRuleService(EQUIPMENT_RULES)


def _evaluate(service, context):
    return {insight.id: insight for insight in service.evaluate(context.current_selections, context)}


# =============================================================================
# Base rules
# =============================================================================


class TestEquipmentBaseRules:
    def test_empty_equipment_warns(self, service, make_context):
        context = make_context({"equipment": [], "focus": "strength"})
        insights = _evaluate(service, context)

        assert list(insights) == ["equipment_no_equipment"]
        warning = insights["equipment_no_equipment"]
        assert warning.type == InsightType.WARNING
        assert warning.confidence == 0.9
        assert "Body Weight" in warning.recommendation

    def test_not_selected_yields_nothing(self, service, make_context):
        context = make_context({"focus": "strength"})
        assert service.evaluate(context.current_selections, context) == []

    def test_too_many_items(self, service, make_context):
        items = ["Dumbbells", "Kettlebells", "Yoga Mat", "Jump Rope", "Treadmill", "Foam Roller"]
        context = make_context({"equipment": items})
        insights = _evaluate(service, context)

        assert insights["equipment_too_many_items"].metadata.count == 6
        assert "equipment_focused_selection" not in insights

    def test_focused_selection_and_dumbbells(self, service, make_context):
        context = make_context({"equipment": ["Dumbbells"]})
        insights = _evaluate(service, context)

        assert insights["equipment_focused_selection"].actionable is False
        assert "equipment_dumbbell_versatility" in insights

    def test_structured_equipment(self, service, make_context):
        context = make_context({"equipment": {"categories": ["Yoga Mat"]}})
        assert "equipment_focused_selection" in _evaluate(service, context)


# =============================================================================
# Contextual rules
# =============================================================================


class TestEquipmentContextualRules:
    def test_focus_mismatch(self, service, make_context):
        context = make_context({"equipment": ["Yoga Mat"], "focus": "strength"})
        mismatch = _evaluate(service, context)["equipment_focus_mismatch"]

        assert mismatch.is_warning
        assert mismatch.metadata.suggested == ["Dumbbells", "Barbells & Weight Plates", "Kettlebells"]

    def test_focus_aligned(self, service, make_context):
        context = make_context({"equipment": ["Dumbbells", "Yoga Mat"], "focus": "strength"})
        insights = _evaluate(service, context)

        assert insights["equipment_focus_aligned"].metadata.matched == ["Dumbbells"]
        assert "equipment_focus_mismatch" not in insights

    def test_complex_setup_with_low_energy(self, service, make_context):
        items = ["Dumbbells", "Kettlebells", "Yoga Mat", "Jump Rope"]
        context = make_context({"equipment": items, "energy": 1})
        assert "equipment_complex_setup_low_energy" in _evaluate(service, context)

    def test_home_cardio_machine(self, service, make_context):
        context = make_context({"equipment": ["Treadmill"]}, location="Home")
        insight = _evaluate(service, context)["equipment_home_cardio_machine"]
        assert insight.metadata.matched == ["Treadmill"]

    def test_barbell_for_new_exerciser(self, service, make_context):
        context = make_context(
            {"equipment": ["Barbells & Weight Plates"]}, fitness_level="new to exercise"
        )
        insights = _evaluate(service, context)

        assert "equipment_barbell_beginner" in insights
        assert "equipment_heavy_equipment_safety" in insights


# =============================================================================
# Cross-component rules
# =============================================================================


class TestEquipmentCrossComponentRules:
    def test_too_many_for_short_session(self, service, make_context):
        items = ["Dumbbells", "Kettlebells", "Yoga Mat", "Jump Rope", "Treadmill"]
        context = make_context({"equipment": items, "duration": 30})
        assert "equipment_too_many_for_duration" in _evaluate(service, context)

    def test_dumbbells_for_upper_body(self, service, make_context):
        context = make_context({"equipment": ["Dumbbells"], "areas": ["Upper Body"]})
        assert "equipment_dumbbells_upper_body" in _evaluate(service, context)

    def test_foam_roller_with_soreness(self, service, make_context):
        context = make_context({"equipment": ["Foam Roller"], "soreness": ["Back"]})
        insight = _evaluate(service, context)["equipment_foam_roller_soreness"]
        assert insight.confidence == 0.95


# =============================================================================
# Learning rules
# =============================================================================


class TestEquipmentLearningRules:
    def test_missing_favorite_equipment(self, service, make_context):
        history = [
            Interaction(component="equipment", action=InteractionAction.APPLIED, value=["Kettlebells"])
            for _ in range(3)
        ]
        context = make_context({"equipment": ["Dumbbells"]}, history=history)
        insight = _evaluate(service, context)["equipment_favorite_equipment"]
        assert insight.metadata.suggested == ["Kettlebells"]

    def test_favorite_already_selected(self, service, make_context):
        history = [
            Interaction(component="equipment", action=InteractionAction.APPLIED, value=["Dumbbells"])
            for _ in range(3)
        ]
        context = make_context({"equipment": ["Dumbbells"]}, history=history)
        assert "equipment_favorite_equipment" not in _evaluate(service, context)

    def test_synergistic_combination(self, service, make_context):
        context = make_context({"equipment": ["Resistance Bands", "Dumbbells"]})
        insight = _evaluate(service, context)["equipment_synergistic_combination"]

        assert insight.actionable is False
        assert insight.metadata.matched == ["Dumbbells", "Resistance Bands"]


# =============================================================================
# Helpers
# =============================================================================


class TestEquipmentHelpers:
    def test_aligned_items(self):
        assert aligned_items(["Dumbbells", "Treadmill"], "strength") == ["Dumbbells"]
        assert aligned_items(["Dumbbells"], "yoga") == []

    def test_selected_combinations(self):
        assert selected_combinations(["Kettlebells", "Yoga Mat"]) == [("Kettlebells", "Yoga Mat")]
        assert selected_combinations(["Kettlebells"]) == []
