"""
External Strategy Interface (Port).

Defines the narrow interface the engine uses to call an optional external
augmentation collaborator, for example an LLM-backed service. The engine
works without one; when set, its results enrich the locally computed
analysis.
"""

from typing import Any, Dict, List, Protocol

from domain.models import AnalysisContext, Insight, Recommendation

# Methods an external strategy must expose
REQUIRED_METHODS = (
    "enhance_insights",
    "generate_recommendations",
    "analyze_user_preferences",
    "generate_workout",
)


class ExternalStrategy(Protocol):
    """Abstract interface for external insight augmentation."""

    async def enhance_insights(
        self, insights: List[Insight], context: AnalysisContext
    ) -> List[Insight]:
        """
        Rewrite or extend insights of one domain.

        Args:
            insights: Locally generated insights of a single domain
            context: Context the insights were generated for

        Returns:
            Replacement insight list for that domain
        """
        ...

    async def generate_recommendations(self, context: AnalysisContext) -> List[Recommendation]:
        """Produce additional recommendations for the context."""
        ...

    async def analyze_user_preferences(self, context: AnalysisContext) -> Dict[str, Any]:
        """Summarize the user's preferences and patterns."""
        ...

    async def generate_workout(self, context: AnalysisContext) -> Dict[str, Any]:
        """Generate a workout plan for the context."""
        ...
