"""
Composition root for the analysis engine.

Builds one AnalysisOrchestrator with its service handles, configured from
Settings. Nothing here is global; callers that need a shared instance
(api.deps) cache the result themselves.

Usage:
    from backend.engine import build_orchestrator
    from backend.settings import Settings

    orchestrator = build_orchestrator(Settings(environment="test", _env_file=None))
"""

from typing import Optional

from application.orchestrator import (
    CROSS_COMPONENT,
    AnalysisOrchestrator,
    OrchestratorServices,
)
from backend.services.analysis_cache import AnalysisCache
from backend.services.analysis_validator import AnalysisValidator
from backend.services.context_store import ContextStore
from backend.services.cross_component import CrossComponentAnalyzer
from backend.services.domain_rule_service import DomainRuleService
from backend.services.error_handler import ErrorHandler
from backend.services.external_strategy import ExternalStrategyGateway
from backend.services.health_checker import HealthChecker
from backend.services.learning_engine import LearningEngine
from backend.services.performance_monitor import PerformanceMonitor
from backend.services.recommendation_engine import RecommendationEngine
from backend.settings import Settings, get_settings
from domain.rules import DOMAIN_RULE_SETS


def build_services(settings: Settings) -> OrchestratorServices:
    """Create every service handle once, wired to a shared error handler."""
    errors = ErrorHandler(max_history=settings.error_history_max)
    domains = {
        rule_set.name: DomainRuleService(rule_set, on_error=errors.record)
        for rule_set in DOMAIN_RULE_SETS
    }
    cross_component = CrossComponentAnalyzer(on_error=errors.record)
    cache = AnalysisCache(max_size=settings.cache_max_entries)
    monitor = PerformanceMonitor(list(domains) + [CROSS_COMPONENT])
    context_store = ContextStore(max_history=settings.session_history_max)
    gateway = ExternalStrategyGateway(
        timeout_seconds=settings.external_strategy_timeout_seconds,
        max_attempts=settings.external_strategy_max_attempts,
        backoff_seconds=settings.external_strategy_backoff_seconds,
    )
    health = HealthChecker(
        services={**domains, CROSS_COMPONENT: cross_component},
        monitor=monitor,
        cache=cache,
        errors=errors,
        context_store=context_store,
        gateway=gateway,
    )
    return OrchestratorServices(
        domains=domains,
        cross_component=cross_component,
        cache=cache,
        validator=AnalysisValidator(enabled=settings.enable_validation),
        monitor=monitor,
        errors=errors,
        context_store=context_store,
        recommendations=RecommendationEngine(),
        gateway=gateway,
        health=health,
        learning=LearningEngine(),
    )


def build_orchestrator(settings: Optional[Settings] = None) -> AnalysisOrchestrator:
    """
    Create a fully wired orchestrator.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings().

    Returns:
        AnalysisOrchestrator in the NO_CONTEXT state.
    """
    if settings is None:
        settings = get_settings()
    return AnalysisOrchestrator(
        build_services(settings),
        strict_validation=settings.strict_validation,
    )
