"""
Rule records shared by the per-domain rule tables.

A rule is plain data: a key, the group it belongs to, a predicate and a
generator. Tables are ordered tuples of rules so evaluation order and rule
provenance can be inspected and tested without running the evaluator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from domain.models import AnalysisContext, Insight, InsightType


class RuleGroup(str, Enum):
    """Rule groups, listed in evaluation order."""

    BASE = "base"
    CONTEXTUAL = "contextual"
    CROSS_COMPONENT = "cross_component"
    LEARNING = "learning"


Predicate = Callable[[Any, AnalysisContext], bool]
Generator = Callable[[Any, AnalysisContext], Insight]


@dataclass(frozen=True)
class Rule:
    """One (predicate, generator) pair of a domain rule table."""

    key: str
    group: RuleGroup
    predicate: Predicate
    generate: Generator
    description: str = ""


@dataclass(frozen=True)
class DomainRuleSet:
    """
    The complete rule table of one selection domain.

    Attributes:
        name: Domain name, also the insight id prefix.
        select: Extracts the plain domain value from the effective selections.
        validate: Returns an invalid-value insight, or None when the value is
            within its declared range.
        rules: Ordered rules of all four groups.
        history_window: Most recent interactions the learning pass may read.
    """

    name: str
    select: Callable[[Any], Any]
    rules: Tuple[Rule, ...]
    validate: Optional[Callable[[Any], Optional[Insight]]] = None
    history_window: int = 10

    def group(self, group: RuleGroup) -> List[Rule]:
        """Rules of one group, in table order."""
        return [rule for rule in self.rules if rule.group == group]


def make_insight(
    domain: str,
    key: str,
    type: InsightType,
    message: str,
    recommendation: str,
    confidence: float,
    actionable: bool = True,
    related_fields: Optional[List[str]] = None,
    metadata: Any = None,
) -> Insight:
    """Build an Insight whose id is derived from the domain and rule key."""
    return Insight(
        id=f"{domain}_{key}",
        type=type,
        message=message,
        recommendation=recommendation,
        confidence=confidence,
        actionable=actionable,
        related_fields=related_fields or [domain],
        metadata=metadata,
    )
