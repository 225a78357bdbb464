"""
Context store: the current analysis context and interaction tracking.

The store holds exactly one current AnalysisContext. Contexts are immutable,
so recording an interaction replaces the current context with a copy whose
session history has the interaction appended and is trimmed to the
configured maximum. Interactions are also kept in the store's own bounded
log so statistics survive context replacement.
"""

import logging
from collections import Counter, deque
from enum import Enum
from typing import Any, Deque, Dict, Optional

from domain.models import AnalysisContext, Interaction, InteractionAction, UserFeedback

logger = logging.getLogger(__name__)

SESSION_HISTORY_MAX = 100


class ContextStatus(str, Enum):
    SET = "set"
    NOT_SET = "not_set"
    INVALID = "invalid"


class ContextStore:
    """
    Holds the current context and the interaction log.

    Args:
        max_history: Maximum interactions kept in session history.
    """

    def __init__(self, max_history: int = SESSION_HISTORY_MAX):
        self._max_history = max_history
        self._context: Optional[AnalysisContext] = None
        self._interactions: Deque[Interaction] = deque(maxlen=max_history)

    @property
    def current(self) -> Optional[AnalysisContext]:
        return self._context

    @property
    def status(self) -> ContextStatus:
        if self._context is None:
            return ContextStatus.NOT_SET
        if self._context.user_profile is None:
            return ContextStatus.INVALID
        return ContextStatus.SET

    def replace(self, context: AnalysisContext) -> AnalysisContext:
        """
        Make `context` current, trimming its session history.

        Returns:
            The stored context.
        """
        history = context.session_history
        if len(history) > self._max_history:
            context = context.model_copy(update={"session_history": history[-self._max_history:]})
        self._context = context
        logger.info(
            f"Analysis context set ({len(context.session_history)} history entries)"
        )
        return context

    def record(self, interaction: Interaction) -> None:
        """Append an interaction to the log and, when a context is set, to its history."""
        self._interactions.append(interaction)
        if self._context is None:
            return
        history = list(self._context.session_history)
        history.append(interaction)
        if len(history) > self._max_history:
            history = history[-self._max_history:]
        self._context = self._context.model_copy(update={"session_history": history})

    def clear(self) -> None:
        self._context = None

    def clear_interactions(self) -> None:
        self._interactions.clear()

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def interaction_stats(self) -> Dict[str, Any]:
        """
        Summarize recorded interactions.

        Returns:
            Counts per action and feedback, per-component counts and the
            share of shown recommendations that were applied.
        """
        actions = Counter(i.action for i in self._interactions)
        feedback = Counter(i.user_feedback for i in self._interactions if i.user_feedback)
        shown = actions[InteractionAction.SHOWN]
        applied = actions[InteractionAction.APPLIED]
        dismissed = actions[InteractionAction.DISMISSED]
        responded = applied + dismissed
        return {
            "total": len(self._interactions),
            "shown": shown,
            "applied": applied,
            "dismissed": dismissed,
            "errors": actions[InteractionAction.ERROR],
            "helpful": feedback[UserFeedback.HELPFUL],
            "not_helpful": feedback[UserFeedback.NOT_HELPFUL],
            "partially_helpful": feedback[UserFeedback.PARTIALLY_HELPFUL],
            "neutral": feedback[UserFeedback.NEUTRAL],
            "acceptance_rate": round(applied / responded, 4) if responded else 0.0,
            "by_component": dict(Counter(i.component for i in self._interactions)),
        }
