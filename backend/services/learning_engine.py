"""
Learning engine: per-recommendation weights learned from user feedback.

Every recommendation id starts at weight 1.0. Helpful feedback raises the
weight by LEARNING_RATE and not-helpful feedback lowers it by the same step.
Partially-helpful feedback raises it by half a step. Neutral feedback is
recorded but leaves the weight unchanged. Weights stay within
[MIN_WEIGHT, MAX_WEIGHT].

The orchestrator scales recommendation confidence by these weights, so a
recommendation the user keeps rejecting sinks within its priority band.
"""

import logging
from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

from domain.models import Interaction, InteractionAction, UserFeedback

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1.0
LEARNING_RATE = 0.1
MIN_WEIGHT = 0.1
MAX_WEIGHT = 2.0
FEEDBACK_HISTORY_MAX = 1000

IMPROVEMENT_WINDOW = timedelta(hours=24)
TREND_WINDOW = timedelta(days=7)
MIN_TREND_FEEDBACK = 5
IMPROVING_SATISFACTION = 0.7
DECLINING_SATISFACTION = 0.3
TOP_RECOMMENDATIONS = 5

_POSITIVE = (UserFeedback.HELPFUL, UserFeedback.PARTIALLY_HELPFUL)


class LearningTrend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass(frozen=True)
class FeedbackEvent:
    """One piece of feedback on one recommendation."""

    timestamp: datetime
    recommendation_id: str
    feedback: UserFeedback
    component: str


@dataclass
class LearningMetrics:
    """Aggregate learning counters."""

    total_learning_events: int = 0
    positive_feedback_count: float = 0.0
    negative_feedback_count: int = 0
    improvement_rate: float = 0.0
    last_update: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_learning_events": self.total_learning_events,
            "positive_feedback_count": self.positive_feedback_count,
            "negative_feedback_count": self.negative_feedback_count,
            "improvement_rate": round(self.improvement_rate, 4),
            "last_update": self.last_update.isoformat() if self.last_update else None,
        }


def _step(weight: float, feedback: UserFeedback) -> float:
    if feedback == UserFeedback.HELPFUL:
        weight += LEARNING_RATE
    elif feedback == UserFeedback.NOT_HELPFUL:
        weight -= LEARNING_RATE
    elif feedback == UserFeedback.PARTIALLY_HELPFUL:
        weight += LEARNING_RATE * 0.5
    return round(max(MIN_WEIGHT, min(MAX_WEIGHT, weight)), 4)


class LearningEngine:
    """
    Learns recommendation weights from feedback-carrying interactions.

    Args:
        max_history: Maximum feedback events kept for rates and trends.
    """

    def __init__(self, max_history: int = FEEDBACK_HISTORY_MAX):
        self._weights: Dict[str, float] = {}
        self._history: Deque[FeedbackEvent] = deque(maxlen=max_history)
        self._metrics = LearningMetrics()

    # -------------------------------------------------------------------------
    # Learning
    # -------------------------------------------------------------------------

    def update_weights(self, interaction: Interaction) -> bool:
        """
        Adjust the weight of the recommendation an interaction rated.

        Args:
            interaction: Any recorded interaction. Only those carrying both
                user_feedback and recommendation_id teach anything.

        Returns:
            True if the interaction was learned from.
        """
        feedback = interaction.user_feedback
        recommendation_id = interaction.recommendation_id
        if feedback is None or not recommendation_id:
            return False

        old_weight = self.weight(recommendation_id)
        new_weight = _step(old_weight, feedback)
        self._weights[recommendation_id] = new_weight

        if feedback == UserFeedback.HELPFUL:
            self._metrics.positive_feedback_count += 1
        elif feedback == UserFeedback.PARTIALLY_HELPFUL:
            self._metrics.positive_feedback_count += 0.5
        elif feedback == UserFeedback.NOT_HELPFUL:
            self._metrics.negative_feedback_count += 1

        self._history.append(
            FeedbackEvent(
                timestamp=interaction.timestamp,
                recommendation_id=recommendation_id,
                feedback=feedback,
                component=interaction.component,
            )
        )
        self._metrics.total_learning_events += 1
        self._metrics.last_update = datetime.now(timezone.utc)
        self._metrics.improvement_rate = self._positive_share(IMPROVEMENT_WINDOW)

        logger.info(
            f"Recommendation {recommendation_id} weight {old_weight} -> {new_weight} "
            f"({feedback.value})"
        )
        return True

    def learn_from_feedback(
        self,
        feedback: UserFeedback,
        recommendation_id: str,
        component: Optional[str] = None,
    ) -> Interaction:
        """
        Learn from feedback given outside an interaction record.

        Returns:
            The synthetic interaction that was learned from.
        """
        interaction = Interaction(
            component=component or "unknown",
            action=InteractionAction.SHOWN,
            recommendation_id=recommendation_id,
            user_feedback=UserFeedback(feedback),
        )
        self.update_weights(interaction)
        return interaction

    def reset(self) -> None:
        self._weights.clear()
        self._history.clear()
        self._metrics = LearningMetrics()
        logger.info("Learning data reset")

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def weight(self, recommendation_id: str) -> float:
        return self._weights.get(recommendation_id, DEFAULT_WEIGHT)

    def weights(self) -> Dict[str, float]:
        return dict(self._weights)

    def metrics(self) -> LearningMetrics:
        m = self._metrics
        return LearningMetrics(
            total_learning_events=m.total_learning_events,
            positive_feedback_count=m.positive_feedback_count,
            negative_feedback_count=m.negative_feedback_count,
            improvement_rate=m.improvement_rate,
            last_update=m.last_update,
        )

    def feedback_history(self) -> List[FeedbackEvent]:
        return list(self._history)

    def insights(self) -> Dict[str, Any]:
        """
        Summarize what has been learned.

        Returns:
            Dictionary with the highest-weighted recommendations, rated
            recommendations that fell below the default weight, overall
            satisfaction and the recent trend.
        """
        counts = Counter(event.recommendation_id for event in self._history)
        ranked = sorted(
            (
                {"id": rec_id, "weight": weight, "feedback": counts[rec_id]}
                for rec_id, weight in self._weights.items()
            ),
            key=lambda r: -r["weight"],
        )
        total = max(self._metrics.total_learning_events, 1)
        return {
            "top_performing": ranked[:TOP_RECOMMENDATIONS],
            "needs_improvement": [
                r for r in ranked if r["weight"] < DEFAULT_WEIGHT and r["feedback"] > 0
            ][:TOP_RECOMMENDATIONS],
            "overall_satisfaction": round(self._metrics.positive_feedback_count / total, 4),
            "trend": self.trend().value,
        }

    def trend(self) -> LearningTrend:
        """Direction of satisfaction over the past week."""
        recent = self._recent(TREND_WINDOW)
        if len(recent) < MIN_TREND_FEEDBACK:
            return LearningTrend.STABLE
        share = self._positive_share(TREND_WINDOW)
        if share > IMPROVING_SATISFACTION:
            return LearningTrend.IMPROVING
        if share < DECLINING_SATISFACTION:
            return LearningTrend.DECLINING
        return LearningTrend.STABLE

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _recent(self, window: timedelta) -> List[FeedbackEvent]:
        cutoff = datetime.now(timezone.utc) - window
        return [event for event in self._history if event.timestamp >= cutoff]

    def _positive_share(self, window: timedelta) -> float:
        recent = self._recent(window)
        if not recent:
            return 0.0
        return sum(1 for event in recent if event.feedback in _POSITIVE) / len(recent)
