"""
Unit tests for domain models.

These tests verify:
- Model validation
- Selection merging and slot aliases
- Metadata discriminated union
- Computed properties
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError


@pytest.mark.unit
class TestWorkoutSelections:
    """Tests for the WorkoutSelections value object."""

    def test_plain_values(self):
        """Plain slot values are stored as given."""
        from domain.models import WorkoutSelections

        selections = WorkoutSelections(energy=2, focus="strength", duration=60)
        assert selections.energy == 2
        assert selections.focus == "strength"
        assert selections.duration == 60
        assert selections.soreness is None

    def test_structured_values(self):
        """Structured widget values parse into their models."""
        from domain.models import DurationSelection, RatedSelection, WorkoutSelections

        selections = WorkoutSelections.model_validate(
            {
                "energy": {"rating": 4, "categories": []},
                "duration": {"totalDuration": 45},
                "equipment": {"categories": ["Dumbbells"]},
            }
        )
        assert isinstance(selections.energy, RatedSelection)
        assert selections.energy.rating == 4
        assert isinstance(selections.duration, DurationSelection)
        assert selections.duration.total_duration == 45
        assert selections.equipment.categories == ["Dumbbells"]

    def test_unknown_slots_are_kept(self):
        """Extra slots are allowed and preserved."""
        from domain.models import WorkoutSelections

        selections = WorkoutSelections(energy=3, mood="great")
        assert selections.model_dump()["mood"] == "great"

    def test_merged_without_override_returns_self(self):
        from domain.models import WorkoutSelections

        selections = WorkoutSelections(energy=3)
        assert selections.merged(None) is selections
        assert selections.merged({}) is selections

    def test_merged_does_not_mutate(self):
        """Override applies to the copy only."""
        from domain.models import WorkoutSelections

        selections = WorkoutSelections(energy=3, duration=30)
        merged = selections.merged({"duration": 90})

        assert merged.duration == 90
        assert merged.energy == 3
        assert selections.duration == 30

    def test_merged_sets_unset_slot(self):
        from domain.models import WorkoutSelections

        merged = WorkoutSelections(energy=3).merged({"areas": ["Upper Body"]})
        assert merged.areas == ["Upper Body"]

    def test_merged_explicit_none_clears_slot(self):
        from domain.models import WorkoutSelections

        merged = WorkoutSelections(energy=3, focus="cardio").merged({"focus": None})
        assert merged.focus is None

    def test_selections_are_frozen(self):
        from domain.models import WorkoutSelections

        selections = WorkoutSelections(energy=3)
        with pytest.raises(ValidationError):
            selections.energy = 4


@pytest.mark.unit
class TestInsightModel:
    """Tests for the Insight value object."""

    def test_insight_creation(self):
        from domain.models import EnergyMetadata, Insight, InsightType

        insight = Insight(
            id="energy_low_energy",
            type=InsightType.WARNING,
            message="Low energy",
            recommendation="Go lighter",
            confidence=0.85,
            related_fields=["energy"],
            metadata=EnergyMetadata(energy_level=2),
        )
        assert insight.is_warning is True
        assert insight.actionable is True
        assert insight.metadata.energy_level == 2

    def test_critical_warning_is_warning(self):
        from domain.models import Insight, InsightType

        insight = Insight(id="x", type=InsightType.CRITICAL_WARNING, message="m", confidence=1.0)
        assert insight.is_warning is True

    def test_encouragement_is_not_warning(self):
        from domain.models import Insight, InsightType

        insight = Insight(id="x", type=InsightType.ENCOURAGEMENT, message="m", confidence=0.5)
        assert insight.is_warning is False

    @pytest.mark.parametrize("confidence", [-0.1, 1.01])
    def test_confidence_out_of_range_rejected(self, confidence):
        from domain.models import Insight, InsightType

        with pytest.raises(ValidationError):
            Insight(id="x", type=InsightType.WARNING, message="m", confidence=confidence)

    def test_unknown_type_rejected(self):
        from domain.models import Insight

        with pytest.raises(ValidationError):
            Insight(id="x", type="panic", message="m", confidence=0.5)

    def test_metadata_discriminated_by_domain(self):
        """Metadata dicts parse into the variant named by their domain."""
        from domain.models import DurationMetadata, Insight, SorenessMetadata

        soreness = Insight.model_validate(
            {
                "id": "soreness_mild_soreness",
                "type": "optimization",
                "message": "m",
                "confidence": 0.8,
                "metadata": {"domain": "soreness", "areas": ["Back"], "affectedCount": 1},
            }
        )
        duration = Insight.model_validate(
            {
                "id": "duration_very_short",
                "type": "optimization",
                "message": "m",
                "confidence": 0.8,
                "metadata": {"domain": "duration", "duration": 10},
            }
        )
        assert isinstance(soreness.metadata, SorenessMetadata)
        assert soreness.metadata.affected_count == 1
        assert isinstance(duration.metadata, DurationMetadata)

    def test_metadata_unknown_domain_rejected(self):
        from domain.models import Insight

        with pytest.raises(ValidationError):
            Insight.model_validate(
                {
                    "id": "x",
                    "type": "warning",
                    "message": "m",
                    "confidence": 0.5,
                    "metadata": {"domain": "mood"},
                }
            )

    def test_serializes_with_camel_case_aliases(self):
        from domain.models import Insight, InsightType

        insight = Insight(id="x", type=InsightType.WARNING, message="m", confidence=0.5, related_fields=["energy"])
        data = insight.model_dump(by_alias=True)
        assert data["relatedFields"] == ["energy"]


@pytest.mark.unit
class TestConflictModels:
    """Tests for Conflict, Synergy and their enums."""

    def test_severity_rank_ordering(self):
        from domain.models import Severity

        ranks = [s.rank for s in (Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4

    def test_conflict_requires_two_components(self):
        from domain.models import Conflict, ConflictType, Severity

        with pytest.raises(ValidationError):
            Conflict(
                id="conflict_x",
                components=["energy"],
                type=ConflictType.SAFETY,
                severity=Severity.HIGH,
                description="d",
                suggested_resolution="r",
                confidence=0.9,
            )

    def test_synergy_creation(self):
        from domain.models import Synergy

        synergy = Synergy(
            id="synergy_x",
            components=["focus", "equipment"],
            type="performance",
            description="d",
            benefit="b",
            confidence=0.9,
        )
        assert synergy.components == ["focus", "equipment"]

    def test_priority_rank_most_urgent_first(self):
        from domain.models import Priority

        assert Priority.CRITICAL.rank < Priority.HIGH.rank < Priority.MEDIUM.rank < Priority.LOW.rank


@pytest.mark.unit
class TestInteractionModel:
    """Tests for the Interaction record."""

    def test_defaults(self):
        from domain.models import Interaction, InteractionAction

        interaction = Interaction(component="energy", action=InteractionAction.SHOWN)
        assert interaction.id.startswith("interaction_")
        assert interaction.timestamp.tzinfo is not None
        assert interaction.value is None

    def test_naive_timestamp_treated_as_utc(self):
        from domain.models import Interaction

        interaction = Interaction(
            component="energy",
            action="recommendation_dismissed",
            timestamp=datetime(2024, 1, 1, 9, 0),
        )
        assert interaction.timestamp.tzinfo == timezone.utc
        assert interaction.timestamp.hour == 9

    def test_action_values(self):
        from domain.models import Interaction, InteractionAction

        interaction = Interaction.model_validate(
            {"component": "focus", "action": "recommendation_applied", "userFeedback": "helpful"}
        )
        assert interaction.action == InteractionAction.APPLIED
        assert interaction.user_feedback.value == "helpful"

    def test_invalid_action_rejected(self):
        from domain.models import Interaction

        with pytest.raises(ValidationError):
            Interaction(component="focus", action="clicked")


@pytest.mark.unit
class TestAnalysisContext:
    """Tests for AnalysisContext helpers."""

    def _history(self, count):
        from domain.models import Interaction

        return [
            Interaction(component="energy", action="recommendation_shown", value=i)
            for i in range(count)
        ]

    def test_recent_history_returns_last_entries(self):
        from domain.models import AnalysisContext, UserProfile

        context = AnalysisContext(user_profile=UserProfile(), session_history=self._history(8))
        recent = context.recent_history(3)

        assert [entry.value for entry in recent] == [5, 6, 7]

    def test_recent_history_zero_limit(self):
        from domain.models import AnalysisContext

        context = AnalysisContext(session_history=self._history(2))
        assert context.recent_history(0) == []

    def test_with_selections_copies(self):
        from domain.models import AnalysisContext, UserProfile, WorkoutSelections

        context = AnalysisContext(
            user_profile=UserProfile(fitness_level="beginner"),
            current_selections=WorkoutSelections(energy=3),
        )
        changed = context.with_selections(WorkoutSelections(energy=5))

        assert changed.current_selections.energy == 5
        assert context.current_selections.energy == 3
        assert changed.user_profile == context.user_profile

    def test_parses_camel_case_payload(self):
        from domain.models import AnalysisContext

        context = AnalysisContext.model_validate(
            {
                "userProfile": {"fitnessLevel": "advanced athlete", "goals": ["strength"]},
                "currentSelections": {"energy": 4, "focus": "strength"},
                "environmentalFactors": {"timeOfDay": "morning", "availableTime": 45},
            }
        )
        assert context.user_profile.fitness_level == "advanced athlete"
        assert context.environmental_factors.available_time == 45
        assert context.current_selections.focus == "strength"


@pytest.mark.unit
class TestAnalysisModel:
    """Tests for the Analysis result."""

    def test_defaults(self):
        from domain.models import Analysis

        analysis = Analysis()
        assert analysis.id.startswith("analysis_")
        assert analysis.timestamp is not None
        assert analysis.confidence == 0.5

    def test_all_insights_in_domain_order(self):
        from domain.models import Analysis, Insight, InsightType

        def insight(id):
            return Insight(id=id, type=InsightType.OPTIMIZATION, message="m", confidence=0.5)

        analysis = Analysis(
            insights={
                "equipment": [insight("equipment_a")],
                "energy": [insight("energy_a")],
                "focus": [],
            }
        )
        assert [i.id for i in analysis.all_insights()] == ["energy_a", "equipment_a"]

    def test_confidence_bounds(self):
        from domain.models import Analysis

        with pytest.raises(ValidationError):
            Analysis(confidence=1.5)
