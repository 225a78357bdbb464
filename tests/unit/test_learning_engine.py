"""
Unit tests for the learning engine.

Tests cover:
- Weight steps per feedback value and their bounds
- Interactions without feedback are ignored
- Metrics, insights and trend
- Applying weights to recommendations
"""

from datetime import datetime, timedelta, timezone

import pytest

from backend.services.learning_engine import (
    MAX_WEIGHT,
    MIN_WEIGHT,
    LearningEngine,
    LearningTrend,
)
from backend.services.recommendation_engine import RecommendationEngine
from domain.models import (
    Interaction,
    Priority,
    Recommendation,
    RecommendationCategory,
    UserFeedback,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def engine():
    return LearningEngine()


def _feedback(feedback, recommendation_id="rec_energy_low_energy", **kwargs):
    return Interaction(
        component="energy",
        action="recommendation_shown",
        recommendation_id=recommendation_id,
        user_feedback=feedback,
        **kwargs,
    )


def _recommendation(id, confidence):
    return Recommendation(
        id=id,
        priority=Priority.MEDIUM,
        category=RecommendationCategory.OPTIMIZATION,
        target_component="energy",
        title="t",
        description="d",
        confidence=confidence,
    )


# =============================================================================
# Weights
# =============================================================================


class TestWeights:
    def test_default_weight(self, engine):
        assert engine.weight("rec_unknown") == 1.0
        assert engine.weights() == {}

    @pytest.mark.parametrize(
        "feedback,expected",
        [
            (UserFeedback.HELPFUL, 1.1),
            (UserFeedback.NOT_HELPFUL, 0.9),
            (UserFeedback.PARTIALLY_HELPFUL, 1.05),
            (UserFeedback.NEUTRAL, 1.0),
        ],
    )
    def test_step_per_feedback(self, engine, feedback, expected):
        assert engine.update_weights(_feedback(feedback)) is True
        assert engine.weight("rec_energy_low_energy") == expected

    def test_weight_is_capped(self, engine):
        for _ in range(15):
            engine.update_weights(_feedback(UserFeedback.HELPFUL))
        assert engine.weight("rec_energy_low_energy") == MAX_WEIGHT

    def test_weight_has_a_floor(self, engine):
        for _ in range(15):
            engine.update_weights(_feedback(UserFeedback.NOT_HELPFUL))
        assert engine.weight("rec_energy_low_energy") == MIN_WEIGHT

    def test_weights_are_per_recommendation(self, engine):
        engine.update_weights(_feedback(UserFeedback.HELPFUL, "rec_a"))
        engine.update_weights(_feedback(UserFeedback.NOT_HELPFUL, "rec_b"))
        assert engine.weights() == {"rec_a": 1.1, "rec_b": 0.9}

    def test_interaction_without_feedback_ignored(self, engine):
        assert engine.update_weights(_feedback(None)) is False
        assert engine.update_weights(_feedback(UserFeedback.HELPFUL, None)) is False
        assert engine.metrics().total_learning_events == 0

    def test_learn_from_feedback_builds_interaction(self, engine):
        interaction = engine.learn_from_feedback("not_helpful", "rec_a", "focus")

        assert interaction.component == "focus"
        assert interaction.user_feedback == UserFeedback.NOT_HELPFUL
        assert engine.weight("rec_a") == 0.9

    def test_learn_from_feedback_rejects_unknown_value(self, engine):
        with pytest.raises(ValueError):
            engine.learn_from_feedback("amazing", "rec_a")

    def test_reset(self, engine):
        engine.update_weights(_feedback(UserFeedback.HELPFUL))
        engine.reset()
        assert engine.weights() == {}
        assert engine.metrics().total_learning_events == 0
        assert engine.feedback_history() == []


# =============================================================================
# Metrics & insights
# =============================================================================


class TestMetrics:
    def test_counts(self, engine):
        engine.update_weights(_feedback(UserFeedback.HELPFUL))
        engine.update_weights(_feedback(UserFeedback.PARTIALLY_HELPFUL))
        engine.update_weights(_feedback(UserFeedback.NOT_HELPFUL))

        metrics = engine.metrics()
        assert metrics.total_learning_events == 3
        assert metrics.positive_feedback_count == 1.5
        assert metrics.negative_feedback_count == 1
        assert metrics.improvement_rate == pytest.approx(2 / 3)
        assert metrics.last_update is not None
        assert metrics.to_dict()["improvement_rate"] == 0.6667

    def test_metrics_snapshot_is_a_copy(self, engine):
        snapshot = engine.metrics()
        snapshot.total_learning_events = 99
        assert engine.metrics().total_learning_events == 0

    def test_old_feedback_outside_improvement_window(self, engine):
        old = datetime.now(timezone.utc) - timedelta(days=2)
        engine.update_weights(_feedback(UserFeedback.HELPFUL, timestamp=old))
        assert engine.metrics().improvement_rate == 0.0

    def test_insights(self, engine):
        engine.update_weights(_feedback(UserFeedback.HELPFUL, "rec_good"))
        engine.update_weights(_feedback(UserFeedback.NOT_HELPFUL, "rec_bad"))

        insights = engine.insights()

        assert insights["top_performing"][0] == {"id": "rec_good", "weight": 1.1, "feedback": 1}
        assert [r["id"] for r in insights["needs_improvement"]] == ["rec_bad"]
        assert insights["overall_satisfaction"] == 0.5
        assert insights["trend"] == "stable"

    @pytest.mark.parametrize(
        "feedback,expected",
        [
            (UserFeedback.HELPFUL, LearningTrend.IMPROVING),
            (UserFeedback.NOT_HELPFUL, LearningTrend.DECLINING),
            (UserFeedback.NEUTRAL, LearningTrend.DECLINING),
        ],
    )
    def test_trend(self, engine, feedback, expected):
        for _ in range(5):
            engine.update_weights(_feedback(feedback))
        assert engine.trend() == expected

    def test_trend_needs_enough_feedback(self, engine):
        for _ in range(4):
            engine.update_weights(_feedback(UserFeedback.HELPFUL))
        assert engine.trend() == LearningTrend.STABLE


# =============================================================================
# Applying weights
# =============================================================================


class TestApplyWeights:
    def test_scales_confidence(self):
        recs = [_recommendation("rec_a", 0.8), _recommendation("rec_b", 0.6)]

        weighted = RecommendationEngine().apply_weights(recs, {"rec_a": 0.5, "rec_b": 2.0})

        assert [r.confidence for r in weighted] == [0.4, 1.0]
        assert recs[0].confidence == 0.8

    def test_unweighted_recommendations_untouched(self):
        rec = _recommendation("rec_a", 0.8)
        assert RecommendationEngine().apply_weights([rec], {})[0] is rec

    def test_lower_weight_reorders_within_priority(self):
        engine = RecommendationEngine()
        recs = [_recommendation("rec_a", 0.9), _recommendation("rec_b", 0.7)]

        ranked = engine.prioritize(engine.apply_weights(recs, {"rec_a": 0.5}))

        assert [r.id for r in ranked] == ["rec_b", "rec_a"]
