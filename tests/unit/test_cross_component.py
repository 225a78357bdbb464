"""
Unit tests for CrossComponentAnalyzer.

Tests cover:
- Conflict and synergy detection
- Conversion to insights and selection-level optimizations
- Configuration validation
- Single-slot change previews
- Error isolation
"""

import pytest

from application.exceptions import RuleEvaluationError
from backend.services.cross_component import (
    CrossComponentAnalyzer,
    conflict_to_insight,
    synergy_to_insight,
)
from domain.models import InsightType, Severity
from domain.rules import CONFLICT_RULES, ConflictRule

pytestmark = pytest.mark.unit


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def analyzer():
    return CrossComponentAnalyzer()


def _detect(analyzer, context):
    return analyzer.detect_conflicts(context.current_selections, context)


# =============================================================================
# Conflicts
# =============================================================================


class TestDetectConflicts:
    def test_no_conflicts_for_balanced_selection(self, analyzer, make_context):
        context = make_context({"energy": 4, "focus": "cardio", "duration": 40, "equipment": ["Treadmill"]})
        assert _detect(analyzer, context) == []

    def test_low_energy_long_strength_session(self, analyzer, make_context):
        """Every matching rule fires, sorted by severity then confidence."""
        context = make_context({"energy": 2, "focus": "strength", "duration": 90})
        conflicts = _detect(analyzer, context)

        assert [c.id for c in conflicts] == ["conflict_energy_intensity", "conflict_energy_duration"]
        assert all(c.severity == Severity.HIGH for c in conflicts)
        assert conflicts[1].components == ["energy", "duration"]

    def test_soreness_target_overlap(self, analyzer, make_context):
        context = make_context({"soreness": ["Back"], "areas": ["Back", "Core"]})
        conflicts = _detect(analyzer, context)

        assert [c.id for c in conflicts] == ["conflict_soreness_target_overlap"]
        assert conflicts[0].severity == Severity.MEDIUM
        assert conflicts[0].metadata["overlapping_areas"] == ["Back"]

    def test_soreness_intensity(self, analyzer, make_context):
        context = make_context({"soreness": ["Back", "Core", "Arms"], "focus": "endurance"})
        assert "conflict_soreness_intensity" in [c.id for c in _detect(analyzer, context)]

    def test_strength_conflicts(self, analyzer, make_context):
        context = make_context({"focus": "strength", "duration": 20, "equipment": []})
        ids = [c.id for c in _detect(analyzer, context)]
        assert "conflict_strength_short_duration" in ids
        assert "conflict_strength_no_equipment" in ids

    def test_equipment_duration(self, analyzer, make_context):
        items = ["Dumbbells", "Kettlebells", "Yoga Mat", "Jump Rope", "Treadmill"]
        context = make_context({"equipment": items, "duration": 30})
        assert "conflict_equipment_duration" in [c.id for c in _detect(analyzer, context)]

    def test_profile_and_environment_conflicts(self, analyzer, make_context):
        context = make_context(
            {"focus": "strength", "duration": 75, "energy": 4},
            goals=["weight loss"],
            time_of_day="evening",
        )
        conflicts = _detect(analyzer, context)

        assert [c.id for c in conflicts] == [
            "conflict_evening_intensity",
            "conflict_weight_loss_goal_alignment",
        ]

    def test_beginner_intensity(self, analyzer, make_context):
        context = make_context({"focus": "power"}, fitness_level="new to exercise")
        assert [c.id for c in _detect(analyzer, context)] == ["conflict_beginner_intensity"]

    def test_counts_calls(self, analyzer, make_context):
        context = make_context({"energy": 3})
        _detect(analyzer, context)
        _detect(analyzer, context)
        assert analyzer.call_count == 2


# =============================================================================
# Synergies
# =============================================================================


class TestFindSynergies:
    def test_strength_with_dumbbells(self, analyzer, make_context):
        context = make_context({"focus": "strength", "equipment": ["Dumbbells"]})
        synergies = analyzer.find_synergies(context.current_selections, context)
        assert [s.id for s in synergies] == ["synergy_strength_dumbbells"]

    def test_recovery_with_foam_roller(self, analyzer, make_context):
        context = make_context(
            {"focus": "recovery", "soreness": ["Back"], "equipment": ["Foam Roller"]}
        )
        synergies = analyzer.find_synergies(context.current_selections, context)
        assert synergies[0].id == "synergy_recovery_foam_roller"
        assert synergies[0].confidence == 0.95

    def test_cardio_moderate_session(self, analyzer, make_context):
        context = make_context({"focus": "cardio", "energy": 3, "duration": 30})
        synergies = analyzer.find_synergies(context.current_selections, context)
        assert [s.id for s in synergies] == ["synergy_cardio_moderate_session"]


# =============================================================================
# Interactions and conversions
# =============================================================================


class TestAnalyzeInteractions:
    def test_conflicts_become_insights(self, analyzer, make_context):
        context = make_context({"energy": 2, "focus": "cardio", "duration": 90})
        result = analyzer.analyze_interactions(context.current_selections, context)
        insights = {i.id: i for i in result.recommendations}

        insight = insights["cross_component_conflict_energy_duration"]
        assert insight.type == InsightType.WARNING
        assert insight.recommendation == result.conflicts[0].suggested_resolution
        assert insight.metadata.conflict_id == "conflict_energy_duration"

    def test_synergies_become_encouragement(self, analyzer, make_context):
        context = make_context({"focus": "strength", "equipment": ["Dumbbells"], "duration": 60})
        result = analyzer.analyze_interactions(context.current_selections, context)
        insights = {i.id: i for i in result.recommendations}

        synergy = insights["cross_component_synergy_strength_dumbbells"]
        assert synergy.type == InsightType.ENCOURAGEMENT
        assert synergy.actionable is False

    def test_optimizations_are_merged(self, analyzer, make_context):
        context = make_context({"focus": "strength", "equipment": ["Jump Rope"], "duration": 60})
        ids = [i.id for i in analyzer.analyze_interactions(context.current_selections, context).recommendations]

        assert "cross_component_add_resistance" in ids
        assert "cross_component_add_mobility" in ids

    def test_mobility_equipment_suppresses_mobility_suggestion(self, analyzer, make_context):
        context = make_context({"focus": "strength", "equipment": ["Dumbbells", "Foam Roller"], "duration": 60})
        insights = analyzer.suggest_optimizations(context.current_selections, context)
        assert insights == []

    def test_medium_conflict_becomes_optimization(self, make_context):
        analyzer = CrossComponentAnalyzer()
        context = make_context({"soreness": ["Back"], "areas": ["Back"]})
        conflict = analyzer.detect_conflicts(context.current_selections, context)[0]

        assert conflict_to_insight(conflict).type == InsightType.OPTIMIZATION

    def test_synergy_to_insight_keeps_components(self, analyzer, make_context):
        context = make_context({"focus": "strength", "equipment": ["Dumbbells"]})
        synergy = analyzer.find_synergies(context.current_selections, context)[0]
        assert synergy_to_insight(synergy).related_fields == ["focus", "equipment"]


# =============================================================================
# Configuration validation
# =============================================================================


class TestValidateConfiguration:
    def test_high_and_medium_conflicts_are_warnings(self, analyzer, make_context):
        context = make_context({"energy": 2, "focus": "strength", "duration": 20})
        result = analyzer.validate_configuration(context.current_selections, context)

        assert result.is_valid is True
        assert result.conflicts == []
        warning_ids = [c.id for c in result.warnings]
        assert "conflict_energy_intensity" in warning_ids
        assert "conflict_strength_short_duration" in warning_ids

    def test_low_conflicts_are_not_warnings(self, analyzer, make_context):
        context = make_context(
            {"focus": "strength", "duration": 75, "energy": 4, "equipment": ["Dumbbells"]},
            time_of_day="evening",
        )
        result = analyzer.validate_configuration(context.current_selections, context)
        assert result.warnings == []

    def test_suggestions_are_optimizations(self, analyzer, make_context):
        context = make_context({"focus": "strength", "equipment": ["Jump Rope"], "duration": 60})
        result = analyzer.validate_configuration(context.current_selections, context)

        assert result.suggestions
        assert all(s.type == InsightType.OPTIMIZATION for s in result.suggestions)


# =============================================================================
# Component change preview
# =============================================================================


class TestAnalyzeComponentChange:
    def test_shorter_duration_resolves_conflict(self, analyzer, make_context):
        context = make_context({"energy": 2, "focus": "cardio", "duration": 90})
        impact = analyzer.analyze_component_change("duration", 30, context.current_selections, context)

        assert [c.id for c in impact.resolved_conflicts] == ["conflict_energy_duration"]
        assert impact.new_conflicts == []
        assert impact.severity_change == "improved"
        assert impact.affected_components == ["energy", "focus", "equipment"]

    def test_lower_energy_worsens(self, analyzer, make_context):
        context = make_context({"energy": 3, "focus": "strength", "duration": 45})
        impact = analyzer.analyze_component_change("energy", 1, context.current_selections, context)

        assert [c.id for c in impact.new_conflicts] == ["conflict_energy_intensity"]
        assert impact.severity_change == "worsened"

    def test_synergy_gained_and_lost(self, analyzer, make_context):
        context = make_context({"focus": "cardio", "energy": 4, "duration": 30, "equipment": ["Dumbbells"]})
        impact = analyzer.analyze_component_change("focus", "strength", context.current_selections, context)

        assert [s.id for s in impact.lost_synergies] == ["synergy_cardio_moderate_session"]
        assert [s.id for s in impact.new_synergies] == ["synergy_strength_dumbbells"]

    def test_preview_does_not_change_selections(self, analyzer, make_context):
        context = make_context({"energy": 2, "duration": 90})
        analyzer.analyze_component_change("duration", 30, context.current_selections, context)
        assert context.current_selections.duration == 90

    def test_component_dependencies(self):
        dependencies = CrossComponentAnalyzer.component_dependencies()
        assert dependencies["equipment"] == ["focus", "duration"]
        assert set(dependencies) >= {"energy", "soreness", "focus", "duration", "equipment"}


# =============================================================================
# Error isolation
# =============================================================================


class TestErrorIsolation:
    def test_failing_rule_is_reported_and_skipped(self, make_context, monkeypatch):
        def boom(view, context):
            raise RuntimeError("conflict rule exploded")

        monkeypatch.setattr(
            "backend.services.cross_component.CONFLICT_RULES",
            (ConflictRule("broken", boom, boom),) + CONFLICT_RULES,
        )
        errors = []
        analyzer = CrossComponentAnalyzer(on_error=lambda source, error: errors.append((source, error)))
        context = make_context({"energy": 2, "duration": 90})

        conflicts = analyzer.detect_conflicts(context.current_selections, context)

        assert [c.id for c in conflicts] == ["conflict_energy_duration"]
        assert analyzer.error_count == 1
        assert errors[0][0] == "cross_component"
        assert isinstance(errors[0][1], RuleEvaluationError)

    def test_reset(self, analyzer, make_context):
        context = make_context({"energy": 3})
        analyzer.detect_conflicts(context.current_selections, context)
        analyzer.reset()
        assert analyzer.call_count == 0
