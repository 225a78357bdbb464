"""
Analysis Orchestrator.

Composes the domain rule services, the cross-component analyzer, the result
cache, the validator, the monitors and the optional external strategy into
the engine's public surface.

Lifecycle:
    NO_CONTEXT -> CONTEXT_SET -> ANALYZING -> ANALYSIS_READY
    Every analyze() starts from CONTEXT_SET or ANALYSIS_READY; only
    teardown() returns to NO_CONTEXT. The state is ANALYZING while any
    analysis of the current context is in flight, and settles once the
    last one finishes: to ANALYSIS_READY if an analysis of the current
    context completed, otherwise to CONTEXT_SET.

Concurrency:
    Rule evaluation is synchronous. A single asyncio.Lock guards context
    replacement, cache access and lifecycle state. set_context() and
    record_interaction() take the lock, so any analyze() that starts after
    they return sees the new context and the cleared cache. Analyses
    computed against a context that was replaced meanwhile are returned but
    not cached.
"""

import asyncio
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from application.exceptions import (
    ContextNotSet,
    ExternalStrategyError,
    ExternalStrategyNotConfigured,
    MissingProfile,
    ValidationDiscrepancy,
)
from application.ports import ExternalStrategy
from backend.services.analysis_cache import AnalysisCache
from backend.services.analysis_validator import AnalysisValidator, ValidationReport
from backend.services.context_store import ContextStore
from backend.services.cross_component import (
    ComponentChangeImpact,
    ConfigurationValidation,
    CrossComponentAnalyzer,
)
from backend.services.domain_rule_service import DomainRuleService, sort_insights
from backend.services.error_handler import ErrorHandler
from backend.services.external_strategy import ExternalStrategyGateway
from backend.services.health_checker import (
    HealthChecker,
    HealthCheckReport,
    HealthStatus,
    RecoveryReport,
)
from backend.services.learning_engine import LearningEngine, LearningMetrics
from backend.services.performance_monitor import PerformanceMetrics, PerformanceMonitor
from backend.services.recommendation_engine import RecommendationEngine
from domain.models import (
    DOMAINS,
    Analysis,
    AnalysisContext,
    AnalysisMetrics,
    Insight,
    Interaction,
    Recommendation,
    UserFeedback,
)

logger = logging.getLogger(__name__)

CROSS_COMPONENT = "cross_component"


class OrchestratorState(str, Enum):
    NO_CONTEXT = "no_context"
    CONTEXT_SET = "context_set"
    ANALYZING = "analyzing"
    ANALYSIS_READY = "analysis_ready"


@dataclass
class OrchestratorServices:
    """Named service handles owned by one orchestrator."""

    domains: Dict[str, DomainRuleService]
    cross_component: CrossComponentAnalyzer
    cache: AnalysisCache
    validator: AnalysisValidator
    monitor: PerformanceMonitor
    errors: ErrorHandler
    context_store: ContextStore
    recommendations: RecommendationEngine
    gateway: ExternalStrategyGateway
    health: HealthChecker
    learning: LearningEngine


class AnalysisOrchestrator:
    """
    Public surface of the analysis engine.

    Args:
        services: Service handles, created once (see backend.engine).
        strict_validation: Record failed validations as errors.
    """

    def __init__(self, services: OrchestratorServices, strict_validation: bool = False):
        self._services = services
        self._strict_validation = strict_validation
        self._lock = asyncio.Lock()
        self._generation = 0
        self._ready_generation = -1
        self._in_flight: Counter = Counter()
        self._state = OrchestratorState.NO_CONTEXT
        self.last_validation: Optional[ValidationReport] = None

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def context(self) -> Optional[AnalysisContext]:
        return self._services.context_store.current

    # =========================================================================
    # Context lifecycle
    # =========================================================================

    async def set_context(self, context: AnalysisContext) -> None:
        """
        Replace the current context and clear the cache.

        Raises:
            MissingProfile: If the context has no user profile.
        """
        if context.user_profile is None:
            raise MissingProfile()

        async with self._lock:
            self._services.context_store.replace(context)
            self._invalidate()
        logger.info("Context replaced; analysis cache cleared")

    async def teardown(self) -> None:
        """Forget the context and every cached analysis."""
        async with self._lock:
            self._services.context_store.clear()
            self._invalidate()
        logger.info("Orchestrator torn down")

    async def record_interaction(self, interaction: Union[Interaction, Dict[str, Any]]) -> Interaction:
        """
        Append an interaction to session history for the learning rules.

        Feedback on a recommendation also adjusts that recommendation's
        learned weight. The history changes either way, so cached analyses
        are dropped.
        """
        if not isinstance(interaction, Interaction):
            interaction = Interaction.model_validate(interaction)
        async with self._lock:
            self._services.context_store.record(interaction)
            self._services.learning.update_weights(interaction)
            self._invalidate()
        return interaction

    def get_interaction_stats(self) -> Dict[str, Any]:
        return self._services.context_store.interaction_stats()

    # =========================================================================
    # Feedback learning
    # =========================================================================

    async def learn_from_feedback(
        self,
        feedback: Union[UserFeedback, str],
        recommendation_id: str,
        component: Optional[str] = None,
    ) -> float:
        """
        Learn from feedback on one recommendation.

        Returns:
            The recommendation's new weight.

        Raises:
            ValueError: If `feedback` is not a known feedback value.
        """
        feedback = UserFeedback(feedback)
        learning = self._services.learning
        async with self._lock:
            learning.learn_from_feedback(feedback, recommendation_id, component)
            self._invalidate()
        return learning.weight(recommendation_id)

    def get_recommendation_weight(self, recommendation_id: str) -> float:
        return self._services.learning.weight(recommendation_id)

    def get_learning_metrics(self) -> LearningMetrics:
        return self._services.learning.metrics()

    def get_learning_insights(self) -> Dict[str, Any]:
        return self._services.learning.insights()

    # =========================================================================
    # Analysis
    # =========================================================================

    async def analyze(self, override: Optional[Dict[str, Any]] = None) -> Analysis:
        """
        Analyze the current selections, merged with an optional override.

        Args:
            override: Partial slot mapping applied for this call only.

        Returns:
            The cached Analysis for these effective selections, or a newly
            computed one.

        Raises:
            ContextNotSet: If set_context() has not been called.
        """
        monitor = self._services.monitor
        with monitor.timer() as timing:
            async with self._lock:
                context = self._require_context()
                generation = self._generation
                selections = context.current_selections.merged(override)
                fingerprint = AnalysisCache.fingerprint(selections)
                analysis = self._services.cache.get(fingerprint)
                if analysis is not None:
                    self._ready_generation = generation
                    self._settle_state()
                else:
                    self._in_flight[generation] += 1
                    self._state = OrchestratorState.ANALYZING

            if analysis is None:
                try:
                    effective_context = context.with_selections(selections)
                    computed = self._compute(effective_context, fingerprint)
                    self._validate(computed, effective_context)
                    analysis = await self._augment(computed, effective_context)
                finally:
                    async with self._lock:
                        self._finish(generation, fingerprint, analysis)

        monitor.record_analysis(timing["elapsed_ms"])
        return analysis

    def validate_configuration(
        self, override: Optional[Dict[str, Any]] = None
    ) -> ConfigurationValidation:
        """Configuration verdict for the current (optionally overridden) selections."""
        context = self._require_context()
        selections = context.current_selections.merged(override)
        return self._services.cross_component.validate_configuration(selections, context)

    def analyze_component_change(self, component: str, new_value: Any) -> ComponentChangeImpact:
        """Preview the conflicts a single-slot change would add or resolve."""
        context = self._require_context()
        return self._services.cross_component.analyze_component_change(
            component, new_value, context.current_selections, context
        )

    # =========================================================================
    # Health & performance
    # =========================================================================

    def get_health_status(self) -> HealthStatus:
        return self._services.health.get_health_status()

    def get_performance_metrics(self) -> PerformanceMetrics:
        cache = self._services.cache
        return self._services.monitor.snapshot(cache.hit_rate, cache.estimated_bytes())

    def get_detailed_performance_metrics(self) -> PerformanceMetrics:
        cache = self._services.cache
        return self._services.monitor.snapshot(
            cache.hit_rate, cache.estimated_bytes(), detailed=True
        )

    async def perform_health_check(self) -> HealthCheckReport:
        async with self._lock:
            return self._services.health.perform_health_check()

    async def force_recovery(self) -> RecoveryReport:
        async with self._lock:
            return self._services.health.force_recovery()

    # =========================================================================
    # External strategy
    # =========================================================================

    def set_external_strategy(self, strategy: Optional[ExternalStrategy]) -> None:
        """
        Install (or remove, with None) the external augmentation strategy.

        Raises:
            InvalidExternalStrategy: If a required method is missing.
        """
        self._services.gateway.set_strategy(strategy)

    async def generate_workout(self) -> Dict[str, Any]:
        """
        Ask the external strategy for a workout plan.

        Raises:
            ContextNotSet: If no context is set.
            ExternalStrategyNotConfigured: If no strategy is set.
            ExternalStrategyError: If the strategy failed.
        """
        context = self._require_context()
        return await self._call_external("generate_workout", context)

    async def analyze_user_preferences(self) -> Dict[str, Any]:
        """Ask the external strategy to analyze the user's preferences."""
        context = self._require_context()
        return await self._call_external("analyze_user_preferences", context)

    async def generate_recommendations(self) -> List[Recommendation]:
        """
        External recommendations, falling back to the local ones when no
        strategy is set or it fails.
        """
        context = self._require_context()
        if self._services.gateway.is_configured:
            try:
                result = await self._call_external("generate_recommendations", context)
                return self._services.recommendations.apply_weights(
                    [_as_recommendation(r) for r in result],
                    self._services.learning.weights(),
                )
            except (ExternalStrategyError, ValueError, TypeError) as e:
                logger.info(f"Falling back to local recommendations: {e}")
        analysis = await self.analyze()
        return list(analysis.recommendations)

    async def enhance_insights(
        self, insights: List[Insight], context: Optional[AnalysisContext] = None
    ) -> List[Insight]:
        """External enhancement of `insights`; returns them unchanged on failure."""
        context = context or self._require_context()
        if not self._services.gateway.is_configured:
            return list(insights)
        try:
            result = await self._call_external("enhance_insights", list(insights), context)
            return [_as_insight(i) for i in result]
        except (ExternalStrategyError, ValueError, TypeError) as e:
            logger.info(f"Falling back to unenhanced insights: {e}")
            return list(insights)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _require_context(self) -> AnalysisContext:
        context = self._services.context_store.current
        if context is None:
            raise ContextNotSet()
        return context

    def _invalidate(self) -> None:
        """Drop cached analyses after the context changed. Caller holds the lock."""
        self._services.cache.clear()
        self._generation += 1
        self._settle_state()

    def _finish(self, generation: int, fingerprint: str, analysis: Optional[Analysis]) -> None:
        """Bookkeeping for a finished analysis. Caller holds the lock."""
        self._in_flight[generation] -= 1
        if self._in_flight[generation] <= 0:
            del self._in_flight[generation]
        if analysis is not None:
            if generation == self._generation:
                self._services.cache.set(fingerprint, analysis)
                self._ready_generation = generation
            else:
                logger.debug("Context replaced during analysis; result not cached")
        self._settle_state()

    def _settle_state(self) -> None:
        if self._services.context_store.current is None:
            self._state = OrchestratorState.NO_CONTEXT
        elif self._in_flight[self._generation]:
            self._state = OrchestratorState.ANALYZING
        elif self._ready_generation == self._generation:
            self._state = OrchestratorState.ANALYSIS_READY
        else:
            self._state = OrchestratorState.CONTEXT_SET

    def _compute(self, context: AnalysisContext, fingerprint: str) -> Analysis:
        services = self._services
        monitor = services.monitor
        selections = context.current_selections

        insights: Dict[str, List[Insight]] = {}
        domain_times: Dict[str, float] = {}
        rule_errors = 0

        with monitor.timer() as total:
            for name in DOMAINS:
                service = services.domains[name]
                errors_before = service.error_count
                with monitor.timer() as timing:
                    insights[name] = service.evaluate(selections, context)
                errors = service.error_count - errors_before
                rule_errors += errors
                domain_times[name] = round(timing["elapsed_ms"], 3)
                monitor.record_service(name, timing["elapsed_ms"], errors)

            analyzer = services.cross_component
            errors_before = analyzer.error_count
            with monitor.timer() as cross_timing:
                interactions = analyzer.analyze_interactions(selections, context)
            errors = analyzer.error_count - errors_before
            rule_errors += errors
            monitor.record_service(CROSS_COMPONENT, cross_timing["elapsed_ms"], errors)

            optimizations = defaultdict(list)
            for insight in interactions.recommendations:
                meta = insight.metadata
                derived = getattr(meta, "conflict_id", None) or getattr(meta, "synergy_id", None)
                if insight.actionable and not derived:
                    optimizations[insight.related_fields[0]].append(insight)

            engine = services.recommendations
            recommendations = engine.prioritize(
                engine.apply_weights(
                    engine.from_conflicts(interactions.conflicts)
                    + engine.from_insights(insights)
                    + engine.from_insights(optimizations),
                    services.learning.weights(),
                )
            )
            all_insights = [i for name in DOMAINS for i in insights[name]]
            confidence = engine.overall_confidence(all_insights, recommendations)
            reasoning = engine.build_reasoning(
                interactions.conflicts,
                recommendations,
                [name for name in DOMAINS if insights[name]],
            )

        if rule_errors:
            monitor.record_error()
            logger.warning(f"{rule_errors} rule evaluation error(s) during analysis")

        return Analysis(
            fingerprint=fingerprint,
            insights=insights,
            cross_component_conflicts=interactions.conflicts,
            synergies=interactions.synergies,
            recommendations=recommendations,
            confidence=confidence,
            reasoning=reasoning,
            performance_metrics=AnalysisMetrics(
                total_time_ms=round(total["elapsed_ms"], 3),
                domain_times_ms=domain_times,
                cross_component_time_ms=round(cross_timing["elapsed_ms"], 3),
                rule_errors=rule_errors,
            ),
        )

    def _validate(self, analysis: Analysis, context: AnalysisContext) -> None:
        report = self._services.validator.validate_analysis(
            analysis, context.current_selections, context
        )
        self.last_validation = report
        if report.is_valid:
            return
        logger.warning(
            f"Analysis {analysis.id} failed validation: "
            f"{len(report.discrepancies)} discrepancies, score {report.consistency_score}"
        )
        if self._strict_validation:
            self._services.monitor.record_error()
            self._services.errors.record(
                "validator",
                ValidationDiscrepancy(report.discrepancies, report.consistency_score),
            )

    async def _augment(self, analysis: Analysis, context: AnalysisContext) -> Analysis:
        """Enrich with the external strategy; the local analysis is the fallback."""
        gateway = self._services.gateway
        if not gateway.is_configured:
            return analysis

        try:
            enhanced = await asyncio.gather(
                *(
                    gateway.call("enhance_insights", list(analysis.insights[name]), context)
                    for name in DOMAINS
                )
            )
            extra = await gateway.call("generate_recommendations", context)
            insights = {
                name: sort_insights([_as_insight(i) for i in result])
                for name, result in zip(DOMAINS, enhanced)
            }
            extra_recommendations = self._services.recommendations.apply_weights(
                [_as_recommendation(r) for r in extra or []],
                self._services.learning.weights(),
            )
        except (ExternalStrategyError, ExternalStrategyNotConfigured, ValueError, TypeError) as e:
            self._services.monitor.record_error()
            self._services.errors.record("external_strategy", e)
            logger.info("External augmentation failed; returning local analysis")
            return analysis

        engine = self._services.recommendations
        return analysis.model_copy(
            update={
                "insights": insights,
                "recommendations": engine.prioritize(
                    list(analysis.recommendations) + extra_recommendations
                ),
                "performance_metrics": analysis.performance_metrics.model_copy(
                    update={"augmented": True}
                ),
            }
        )

    async def _call_external(self, operation: str, *args: Any) -> Any:
        try:
            return await self._services.gateway.call(operation, *args)
        except ExternalStrategyError as e:
            self._services.errors.record("external_strategy", e)
            raise


def _as_insight(value: Any) -> Insight:
    return value if isinstance(value, Insight) else Insight.model_validate(value)


def _as_recommendation(value: Any) -> Recommendation:
    return value if isinstance(value, Recommendation) else Recommendation.model_validate(value)
