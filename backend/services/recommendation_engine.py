"""
Recommendation engine: turns conflicts and actionable insights into
prioritized recommendations and summarizes an analysis.
"""

import logging
from typing import Dict, List, Mapping

from domain.models import (
    Conflict,
    ConflictType,
    Insight,
    InsightType,
    Priority,
    Recommendation,
    RecommendationCategory,
    Risk,
    Severity,
)

logger = logging.getLogger(__name__)


def _category_for_insight(insight: Insight) -> RecommendationCategory:
    if insight.is_warning:
        return RecommendationCategory.SAFETY
    if insight.type == InsightType.EDUCATION:
        return RecommendationCategory.EDUCATION
    if insight.type == InsightType.ENCOURAGEMENT:
        return RecommendationCategory.MOTIVATION
    return RecommendationCategory.OPTIMIZATION


def _priority_for_insight(insight: Insight) -> Priority:
    if insight.type == InsightType.CRITICAL_WARNING:
        return Priority.CRITICAL
    if insight.type == InsightType.WARNING:
        return Priority.HIGH
    if insight.type == InsightType.EDUCATION:
        return Priority.LOW
    return Priority.MEDIUM


class RecommendationEngine:
    """Derives recommendations; holds no state."""

    def from_conflicts(self, conflicts: List[Conflict]) -> List[Recommendation]:
        recommendations = []
        for conflict in conflicts:
            critical = conflict.severity == Severity.CRITICAL
            safety = conflict.type == ConflictType.SAFETY
            recommendations.append(
                Recommendation(
                    id=f"rec_{conflict.id}",
                    priority=Priority.CRITICAL if critical else Priority.HIGH,
                    category=RecommendationCategory.SAFETY if safety else RecommendationCategory.OPTIMIZATION,
                    target_component=conflict.components[0],
                    title=f"{conflict.type.value.replace('_', ' ').title()} Issue Detected",
                    description=conflict.description,
                    reasoning=conflict.suggested_resolution,
                    confidence=conflict.confidence,
                    risk=Risk.HIGH if critical or safety else Risk.MEDIUM,
                )
            )
        return recommendations

    def from_insights(self, insights: Dict[str, List[Insight]]) -> List[Recommendation]:
        """
        Recommendations for the actionable insights of each domain.

        Args:
            insights: Mapping of target component to its insights.
        """
        recommendations = []
        for component, domain_insights in insights.items():
            for insight in domain_insights:
                if not insight.actionable:
                    continue
                recommendations.append(
                    Recommendation(
                        id=f"rec_{insight.id}",
                        priority=_priority_for_insight(insight),
                        category=_category_for_insight(insight),
                        target_component=component,
                        title=insight.message,
                        description=insight.recommendation or insight.message,
                        reasoning=f"Based on {component} analysis",
                        confidence=insight.confidence,
                        risk=Risk.MEDIUM if insight.is_warning else Risk.LOW,
                    )
                )
        return recommendations

    def apply_weights(
        self, recommendations: List[Recommendation], weights: Mapping[str, float]
    ) -> List[Recommendation]:
        """Scale each recommendation's confidence by its learned weight, capped at 1.0."""
        weighted = []
        for rec in recommendations:
            weight = weights.get(rec.id)
            if weight is not None and weight != 1.0:
                rec = rec.model_copy(update={"confidence": round(min(1.0, rec.confidence * weight), 4)})
            weighted.append(rec)
        return weighted

    def prioritize(self, recommendations: List[Recommendation]) -> List[Recommendation]:
        """De-duplicate by id (first wins) and sort by priority then confidence."""
        unique: Dict[str, Recommendation] = {}
        for rec in recommendations:
            unique.setdefault(rec.id, rec)
        return sorted(unique.values(), key=lambda r: (r.priority.rank, -r.confidence))

    def overall_confidence(
        self, insights: List[Insight], recommendations: List[Recommendation]
    ) -> float:
        """Mean confidence of everything produced; 0.5 when nothing was."""
        values = [i.confidence for i in insights] + [r.confidence for r in recommendations]
        if not values:
            return 0.5
        return round(sum(values) / len(values), 4)

    def build_reasoning(
        self,
        conflicts: List[Conflict],
        recommendations: List[Recommendation],
        domains: List[str],
    ) -> str:
        """
        One-paragraph summary of an analysis.

        Args:
            conflicts: Cross-component conflicts found.
            recommendations: Final recommendations.
            domains: Domains that produced at least one insight.
        """
        parts = []
        if conflicts:
            parts.append(f"Detected {len(conflicts)} cross-component issue(s) requiring attention.")
        critical = sum(1 for r in recommendations if r.priority == Priority.CRITICAL)
        if critical:
            parts.append(f"{critical} critical recommendation(s) for immediate action.")
        if domains:
            parts.append(f"Analysis based on {', '.join(domains)} parameters.")
        return " ".join(parts) if parts else "Comprehensive analysis completed successfully."
