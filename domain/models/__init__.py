"""
Domain models for the workout selection analysis engine.

This package contains pure domain models that are independent of
infrastructure concerns (HTTP, caching, monitoring).

These models represent the core concepts:
- AnalysisContext: profile, current selections, session history, environment
- Insight: a categorized observation about one selection domain
- Conflict / Synergy: negative or positive combinations of selections
- Recommendation: a prioritized change derived from conflicts and insights
- Analysis: the unified, cacheable result of one analysis run

Usage:
    >>> from domain.models import AnalysisContext, UserProfile, WorkoutSelections

    >>> context = AnalysisContext(
    ...     user_profile=UserProfile(fitness_level="intermediate"),
    ...     current_selections=WorkoutSelections(energy=2, focus="strength"),
    ... )
"""

from domain.models.analysis import DOMAINS, Analysis, AnalysisMetrics, new_analysis_id
from domain.models.conflict import Conflict, ConflictType, Severity, Synergy
from domain.models.context import (
    AnalysisContext,
    AssistanceLevel,
    DurationSelection,
    EnvironmentalFactors,
    Interaction,
    InteractionAction,
    Preferences,
    RatedSelection,
    UserFeedback,
    UserProfile,
    WorkoutSelections,
)
from domain.models.insight import (
    CrossComponentMetadata,
    DurationMetadata,
    EnergyMetadata,
    EquipmentMetadata,
    FocusMetadata,
    Insight,
    InsightType,
    SorenessMetadata,
)
from domain.models.recommendation import (
    Priority,
    Recommendation,
    RecommendationCategory,
    Risk,
)

__all__ = [
    "DOMAINS",
    "Analysis",
    "AnalysisContext",
    "AnalysisMetrics",
    "AssistanceLevel",
    "Conflict",
    "ConflictType",
    "CrossComponentMetadata",
    "DurationMetadata",
    "DurationSelection",
    "EnergyMetadata",
    "EnvironmentalFactors",
    "EquipmentMetadata",
    "FocusMetadata",
    "Insight",
    "InsightType",
    "Interaction",
    "InteractionAction",
    "Preferences",
    "Priority",
    "RatedSelection",
    "Recommendation",
    "RecommendationCategory",
    "Risk",
    "Severity",
    "SorenessMetadata",
    "Synergy",
    "UserFeedback",
    "UserProfile",
    "WorkoutSelections",
    "new_analysis_id",
]
