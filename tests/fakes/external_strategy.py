"""
Fake external strategy for testing.

This fake implementation provides deterministic responses without calling
any external service. Failures and delays can be injected per operation.
"""

import asyncio
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from domain.models import AnalysisContext, Insight, Recommendation

ENHANCED_PREFIX = "[enhanced] "


class FakeExternalStrategy:
    """
    Deterministic fake for an ExternalStrategy.

    enhance_insights prefixes every message with ENHANCED_PREFIX so tests can
    tell enhanced insights from local ones.
    """

    def __init__(self, recommendations: Optional[List[Recommendation]] = None):
        self._recommendations = list(recommendations or [])
        self._errors: Dict[str, List[BaseException]] = {}
        self._delay = 0.0
        self._calls: Counter = Counter()
        self._last_context: Optional[AnalysisContext] = None

    # -------------------------------------------------------------------------
    # Test Helpers
    # -------------------------------------------------------------------------

    def call_count(self, operation: Optional[str] = None) -> int:
        """Number of calls to one operation, or to all of them."""
        if operation is None:
            return sum(self._calls.values())
        return self._calls[operation]

    @property
    def last_context(self) -> Optional[AnalysisContext]:
        return self._last_context

    def set_error(self, error: BaseException, operations: Iterable[str] = (), times: int = 1000) -> None:
        """
        Make operations raise `error` for the next `times` calls.

        Args:
            error: Exception to raise.
            operations: Operation names; all four when empty.
            times: How many calls fail before the fake recovers.
        """
        names = list(operations) or [
            "enhance_insights",
            "generate_recommendations",
            "analyze_user_preferences",
            "generate_workout",
        ]
        for name in names:
            self._errors[name] = [error] * times

    def set_delay(self, seconds: float) -> None:
        self._delay = seconds

    def set_recommendations(self, recommendations: List[Recommendation]) -> None:
        self._recommendations = list(recommendations)

    def reset(self) -> None:
        self._errors.clear()
        self._delay = 0.0
        self._calls.clear()
        self._last_context = None

    async def _enter(self, operation: str, context: AnalysisContext) -> None:
        self._calls[operation] += 1
        self._last_context = context
        if self._delay:
            await asyncio.sleep(self._delay)
        pending = self._errors.get(operation)
        if pending:
            raise pending.pop()

    # -------------------------------------------------------------------------
    # ExternalStrategy
    # -------------------------------------------------------------------------

    async def enhance_insights(self, insights: List[Insight], context: AnalysisContext) -> List[Insight]:
        await self._enter("enhance_insights", context)
        return [
            insight.model_copy(update={"message": ENHANCED_PREFIX + insight.message})
            for insight in insights
        ]

    async def generate_recommendations(self, context: AnalysisContext) -> List[Recommendation]:
        await self._enter("generate_recommendations", context)
        return list(self._recommendations)

    async def analyze_user_preferences(self, context: AnalysisContext) -> Dict[str, Any]:
        await self._enter("analyze_user_preferences", context)
        return {
            "fitness_level": context.user_profile.fitness_level if context.user_profile else None,
            "interaction_count": len(context.session_history),
        }

    async def generate_workout(self, context: AnalysisContext) -> Dict[str, Any]:
        await self._enter("generate_workout", context)
        return {"title": "Fake Workout", "blocks": []}


class IncompleteStrategy:
    """Strategy missing most required methods."""

    async def enhance_insights(self, insights, context):
        return insights
