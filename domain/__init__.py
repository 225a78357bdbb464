"""
Domain layer for the workout insights engine.

This package contains pure domain models and rule tables that are
independent of infrastructure concerns (HTTP, caching, monitoring).
"""

from domain.models import (
    DOMAINS,
    Analysis,
    AnalysisContext,
    Conflict,
    Insight,
    Interaction,
    Recommendation,
    Synergy,
    WorkoutSelections,
)

__all__ = [
    "DOMAINS",
    "Analysis",
    "AnalysisContext",
    "Conflict",
    "Insight",
    "Interaction",
    "Recommendation",
    "Synergy",
    "WorkoutSelections",
]
