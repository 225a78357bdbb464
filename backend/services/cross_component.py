"""
Cross-component analyzer.

Evaluates the conflict and synergy tables over the whole selection set,
independent of the per-domain rule services, and turns the results into
insights and configuration checks.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from application.exceptions import RuleEvaluationError
from backend.services.domain_rule_service import sort_insights
from domain.models import (
    AnalysisContext,
    Conflict,
    CrossComponentMetadata,
    Insight,
    InsightType,
    Severity,
    Synergy,
    WorkoutSelections,
)
from domain.rules import COMPONENT_DEPENDENCIES, CONFLICT_RULES, SYNERGY_RULES
from domain.rules import selection as sel
from domain.rules.equipment import EQUIPMENT_CATEGORIES

logger = logging.getLogger(__name__)

ERROR_SOURCE = "cross_component"


@dataclass
class InteractionAnalysis:
    """Conflicts, synergies and the insights synthesized from them."""

    conflicts: List[Conflict] = field(default_factory=list)
    synergies: List[Synergy] = field(default_factory=list)
    recommendations: List[Insight] = field(default_factory=list)


@dataclass
class ConfigurationValidation:
    """Quick verdict over a selection set."""

    is_valid: bool
    conflicts: List[Conflict] = field(default_factory=list)
    warnings: List[Conflict] = field(default_factory=list)
    suggestions: List[Insight] = field(default_factory=list)


@dataclass
class ComponentChangeImpact:
    """Difference in conflicts and synergies caused by changing one slot."""

    component: str
    new_value: Any
    new_conflicts: List[Conflict] = field(default_factory=list)
    resolved_conflicts: List[Conflict] = field(default_factory=list)
    new_synergies: List[Synergy] = field(default_factory=list)
    lost_synergies: List[Synergy] = field(default_factory=list)
    affected_components: List[str] = field(default_factory=list)
    severity_change: str = "unchanged"


def sort_conflicts(conflicts: List[Conflict]) -> List[Conflict]:
    """Severity descending, then confidence descending."""
    return sorted(conflicts, key=lambda c: (-c.severity.rank, -c.confidence))


def _max_severity(conflicts: List[Conflict]) -> int:
    return max((c.severity.rank for c in conflicts), default=0)


class CrossComponentAnalyzer:
    """
    Detects conflicts and synergies across selection slots.

    Args:
        on_error: Called as on_error(source, error) for every rule that raises.
    """

    def __init__(self, on_error: Optional[Callable[[str, BaseException], Any]] = None):
        self._on_error = on_error
        self.call_count = 0
        self.error_count = 0

    # -------------------------------------------------------------------------
    # Detection
    # -------------------------------------------------------------------------

    def detect_conflicts(
        self, selections: WorkoutSelections, context: AnalysisContext
    ) -> List[Conflict]:
        """
        Evaluate every conflict rule; all matching rules fire.

        Returns:
            Conflicts sorted by severity then confidence, both descending.
        """
        self.call_count += 1
        view = sel.view(selections)
        context = context.with_selections(selections)
        conflicts = []
        for rule in CONFLICT_RULES:
            try:
                if rule.predicate(view, context):
                    conflicts.append(rule.generate(view, context))
            except Exception as e:
                self._report(RuleEvaluationError(ERROR_SOURCE, rule.key, e))
        return sort_conflicts(conflicts)

    def find_synergies(
        self, selections: WorkoutSelections, context: AnalysisContext
    ) -> List[Synergy]:
        """Evaluate every synergy rule, highest confidence first."""
        view = sel.view(selections)
        context = context.with_selections(selections)
        synergies = []
        for rule in SYNERGY_RULES:
            try:
                if rule.predicate(view, context):
                    synergies.append(rule.generate(view, context))
            except Exception as e:
                self._report(RuleEvaluationError(ERROR_SOURCE, rule.key, e))
        return sorted(synergies, key=lambda s: -s.confidence)

    def analyze_interactions(
        self, selections: WorkoutSelections, context: AnalysisContext
    ) -> InteractionAnalysis:
        """
        Full cross-component pass.

        Conflicts become warning or optimization insights carrying their
        suggested resolution, synergies become non-actionable encouragement,
        and selection-level optimizations are merged in.
        """
        conflicts = self.detect_conflicts(selections, context)
        synergies = self.find_synergies(selections, context)

        recommendations = [conflict_to_insight(c) for c in conflicts]
        recommendations.extend(synergy_to_insight(s) for s in synergies)
        recommendations.extend(self.suggest_optimizations(selections, context))

        return InteractionAnalysis(
            conflicts=conflicts,
            synergies=synergies,
            recommendations=sort_insights(recommendations),
        )

    def suggest_optimizations(
        self, selections: WorkoutSelections, context: AnalysisContext
    ) -> List[Insight]:
        """Selection-level optimization insights not tied to a conflict."""
        view = sel.view(selections)
        insights = []
        resistance = EQUIPMENT_CATEGORIES["strength"]
        stretching = EQUIPMENT_CATEGORIES["flexibility"]

        if (
            view.focus == "strength"
            and view.equipment is not None
            and not any(item in resistance for item in view.equipment)
        ):
            insights.append(
                Insight(
                    id="cross_component_add_resistance",
                    type=InsightType.OPTIMIZATION,
                    message="Your equipment set has no resistance items for a strength focus.",
                    recommendation="Adding resistance equipment such as dumbbells or bands "
                    "would allow progressive overload.",
                    confidence=0.8,
                    actionable=True,
                    related_fields=["equipment", "focus"],
                    metadata=CrossComponentMetadata(),
                )
            )

        if (
            view.focus == "strength"
            and (view.duration or 0) >= 45
            and not any(item in stretching for item in (view.equipment or ()))
        ):
            insights.append(
                Insight(
                    id="cross_component_add_mobility",
                    type=InsightType.OPTIMIZATION,
                    message="A long strength session benefits from mobility work.",
                    recommendation="Add a yoga mat or foam roller to include a mobility cool-down.",
                    confidence=0.75,
                    actionable=True,
                    related_fields=["equipment", "duration"],
                    metadata=CrossComponentMetadata(),
                )
            )
        return insights

    # -------------------------------------------------------------------------
    # Convenience views
    # -------------------------------------------------------------------------

    def validate_configuration(
        self, selections: WorkoutSelections, context: AnalysisContext
    ) -> ConfigurationValidation:
        """
        Verdict over a selection set.

        The configuration is invalid when any critical conflict exists.
        High and medium conflicts are returned as warnings; only
        optimization-typed insights are returned as suggestions.
        """
        analysis = self.analyze_interactions(selections, context)
        critical = [c for c in analysis.conflicts if c.severity == Severity.CRITICAL]
        warnings = [
            c for c in analysis.conflicts
            if c.severity in (Severity.HIGH, Severity.MEDIUM)
        ]
        suggestions = [
            i for i in analysis.recommendations if i.type == InsightType.OPTIMIZATION
        ]
        return ConfigurationValidation(
            is_valid=not critical,
            conflicts=critical,
            warnings=warnings,
            suggestions=suggestions,
        )

    def analyze_component_change(
        self,
        component: str,
        new_value: Any,
        current_selections: WorkoutSelections,
        context: AnalysisContext,
    ) -> ComponentChangeImpact:
        """
        Preview the effect of changing a single slot without committing it.

        Args:
            component: Slot name, e.g. "duration".
            new_value: Hypothetical value for the slot.
            current_selections: Selections before the change.
            context: Current analysis context.

        Returns:
            ComponentChangeImpact listing conflicts and synergies that appear
            or disappear.
        """
        changed = current_selections.merged({component: new_value})

        before = self.detect_conflicts(current_selections, context)
        after = self.detect_conflicts(changed, context)
        synergies_before = self.find_synergies(current_selections, context)
        synergies_after = self.find_synergies(changed, context)

        before_ids = {c.id for c in before}
        after_ids = {c.id for c in after}
        syn_before_ids = {s.id for s in synergies_before}
        syn_after_ids = {s.id for s in synergies_after}

        worst_before = _max_severity(before)
        worst_after = _max_severity(after)
        if worst_after < worst_before:
            severity_change = "improved"
        elif worst_after > worst_before:
            severity_change = "worsened"
        else:
            severity_change = "unchanged"

        return ComponentChangeImpact(
            component=component,
            new_value=new_value,
            new_conflicts=[c for c in after if c.id not in before_ids],
            resolved_conflicts=[c for c in before if c.id not in after_ids],
            new_synergies=[s for s in synergies_after if s.id not in syn_before_ids],
            lost_synergies=[s for s in synergies_before if s.id not in syn_after_ids],
            affected_components=list(COMPONENT_DEPENDENCIES.get(component, ())),
            severity_change=severity_change,
        )

    @staticmethod
    def component_dependencies() -> Dict[str, List[str]]:
        """Which slots each slot's analysis depends on."""
        return {name: list(deps) for name, deps in COMPONENT_DEPENDENCIES.items()}

    def reset(self) -> None:
        self.call_count = 0
        self.error_count = 0

    def _report(self, error: RuleEvaluationError) -> None:
        self.error_count += 1
        if self._on_error is not None:
            self._on_error(ERROR_SOURCE, error)
        else:
            logger.warning(str(error))


# =============================================================================
# Conversions
# =============================================================================


def conflict_to_insight(conflict: Conflict) -> Insight:
    severe = conflict.severity in (Severity.HIGH, Severity.CRITICAL)
    return Insight(
        id=f"cross_component_{conflict.id}",
        type=InsightType.WARNING if severe else InsightType.OPTIMIZATION,
        message=conflict.description,
        recommendation=conflict.suggested_resolution,
        confidence=conflict.confidence,
        actionable=True,
        related_fields=list(conflict.components),
        metadata=CrossComponentMetadata(
            conflict_id=conflict.id,
            severity=conflict.severity.value,
            resolution=conflict.suggested_resolution,
        ),
    )


def synergy_to_insight(synergy: Synergy) -> Insight:
    return Insight(
        id=f"cross_component_{synergy.id}",
        type=InsightType.ENCOURAGEMENT,
        message=synergy.description,
        recommendation=synergy.benefit,
        confidence=synergy.confidence,
        actionable=False,
        related_fields=list(synergy.components),
        metadata=CrossComponentMetadata(synergy_id=synergy.id),
    )
