"""
Domain rule service: evaluates one domain's rule table.

The evaluator is shared by all five domains; what differs between domains
is the DomainRuleSet it is built with. Evaluation is synchronous and has no
side effects beyond error reporting.

Order of evaluation:
1. Validation. An out-of-range value short-circuits with a single
   non-actionable warning.
2. Base, contextual and cross-component rules, in table order.
3. Learning pass over the most recent session history.

Insights with an id already collected are dropped (first wins). The result
is sorted actionable-first, then by confidence descending, keeping table
order for ties.
"""

import logging
from typing import Any, Callable, List, Optional

from application.exceptions import RuleEvaluationError
from domain.models import AnalysisContext, Insight
from domain.rules import DomainRuleSet, Rule, RuleGroup

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, BaseException], Any]

_RULE_GROUPS = (RuleGroup.BASE, RuleGroup.CONTEXTUAL, RuleGroup.CROSS_COMPONENT)


def sort_insights(insights: List[Insight]) -> List[Insight]:
    """Actionable first, then confidence descending; stable for ties."""
    return sorted(insights, key=lambda i: (not i.actionable, -i.confidence))


class DomainRuleService:
    """
    Evaluates one domain's rule table against a value and context.

    Args:
        rule_set: The domain's rule table.
        on_error: Called as on_error(source, error) for every rule that raises.
    """

    def __init__(self, rule_set: DomainRuleSet, on_error: Optional[ErrorCallback] = None):
        self.rule_set = rule_set
        self._on_error = on_error
        self.call_count = 0
        self.error_count = 0

    @property
    def name(self) -> str:
        return self.rule_set.name

    def select(self, selections) -> Any:
        """Plain domain value from the effective selections."""
        return self.rule_set.select(selections)

    def evaluate(self, selections, context: AnalysisContext) -> List[Insight]:
        """Select the domain value from `selections` and analyze it."""
        try:
            value = self.select(selections)
        except Exception as e:
            self.call_count += 1
            self._report(RuleEvaluationError(self.name, "select", e))
            return []
        return self.analyze(value, context)

    def analyze(self, value: Any, context: AnalysisContext) -> List[Insight]:
        """
        Evaluate the domain's rules.

        Args:
            value: Plain domain value; None means the slot was not selected.
            context: Context whose current_selections are the effective
                selections of this analysis.

        Returns:
            Sorted, de-duplicated insights.
        """
        self.call_count += 1
        if value is None:
            return []

        if self.rule_set.validate is not None:
            invalid = self._safe_validate(value)
            if invalid is not None:
                return [invalid]

        collected: List[Insight] = []
        seen = set()

        for group in _RULE_GROUPS:
            for rule in self.rule_set.group(group):
                self._apply(rule, value, context, collected, seen)

        learning_context = context.model_copy(
            update={"session_history": context.recent_history(self.rule_set.history_window)}
        )
        for rule in self.rule_set.group(RuleGroup.LEARNING):
            self._apply(rule, value, learning_context, collected, seen)

        return sort_insights(collected)

    def reset(self) -> None:
        """Reset call and error counters (used by recovery)."""
        self.call_count = 0
        self.error_count = 0

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _apply(self, rule: Rule, value, context, collected: List[Insight], seen: set) -> None:
        try:
            if not rule.predicate(value, context):
                return
            insight = rule.generate(value, context)
        except Exception as e:
            self._report(RuleEvaluationError(self.name, rule.key, e))
            return

        if insight.id in seen:
            logger.debug(f"Dropping duplicate insight {insight.id} from rule {rule.key}")
            return
        seen.add(insight.id)
        collected.append(insight)

    def _safe_validate(self, value) -> Optional[Insight]:
        try:
            return self.rule_set.validate(value)
        except Exception as e:
            self._report(RuleEvaluationError(self.name, "validate", e))
            return None

    def _report(self, error: RuleEvaluationError) -> None:
        self.error_count += 1
        if self._on_error is not None:
            self._on_error(f"domain.{self.name}", error)
        else:
            logger.warning(str(error))
