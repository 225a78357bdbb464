"""
Health checker for the analysis engine.

Aggregates per-service status, cache statistics, error rate, response
time, context state and external strategy state into one health status,
and performs lightweight recovery.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from backend.services.analysis_cache import AnalysisCache
from backend.services.context_store import ContextStatus, ContextStore
from backend.services.error_handler import ErrorHandler
from backend.services.external_strategy import ExternalStrategyGateway, StrategyStatus
from backend.services.performance_monitor import SLOW_SERVICE_MS, PerformanceMonitor, ServiceStatus

logger = logging.getLogger(__name__)

MAX_RECOVERY_ATTEMPTS = 3


@dataclass
class HealthStatus:
    status: ServiceStatus
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "details": self.details}


@dataclass
class HealthCheckReport:
    status: ServiceStatus
    details: Dict[str, Any] = field(default_factory=dict)
    recommendations: List[str] = field(default_factory=list)
    healed_cache_entries: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "details": self.details,
            "recommendations": self.recommendations,
            "healed_cache_entries": self.healed_cache_entries,
        }


@dataclass
class RecoveryReport:
    recovered: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "recovered": self.recovered,
            "failed": self.failed,
            "errors": self.errors,
        }


class HealthChecker:
    """
    Computes engine health from its collaborators.

    Args:
        services: Resettable services by name. Each must expose reset().
        monitor: Performance monitor holding per-service stats.
        cache: Result cache.
        errors: Error handler.
        context_store: Context store.
        gateway: External strategy gateway.
    """

    def __init__(
        self,
        services: Dict[str, Any],
        monitor: PerformanceMonitor,
        cache: AnalysisCache,
        errors: ErrorHandler,
        context_store: ContextStore,
        gateway: ExternalStrategyGateway,
    ):
        self._services = services
        self._monitor = monitor
        self._cache = cache
        self._errors = errors
        self._context_store = context_store
        self._gateway = gateway

    def get_health_status(self) -> HealthStatus:
        service_status = {name: self._monitor.service_status(name) for name in self._services}
        context_status = self._context_store.status
        strategy_status = self._gateway.status

        statuses = set(service_status.values())
        if ServiceStatus.UNHEALTHY in statuses or context_status == ContextStatus.INVALID:
            overall = ServiceStatus.UNHEALTHY
        elif ServiceStatus.DEGRADED in statuses or strategy_status == StrategyStatus.ERROR:
            overall = ServiceStatus.DEGRADED
        else:
            overall = ServiceStatus.HEALTHY

        last_error = self._errors.last_error
        details = {
            "services": {name: status.value for name, status in service_status.items()},
            "cache": {
                "size": self._cache.size,
                "hit_rate": round(self._cache.hit_rate, 4),
            },
            "error_rate": round(self._monitor.error_rate, 4),
            "average_response_ms": round(self._monitor.average_response_ms, 3),
            "context": context_status.value,
            "external_strategy": strategy_status.value,
            "last_error": last_error.to_dict() if last_error else None,
        }
        return HealthStatus(status=overall, details=details)

    def perform_health_check(self) -> HealthCheckReport:
        """
        Health status plus cache self-heal and textual recommendations.
        """
        healed = self._cache.heal()
        health = self.get_health_status()
        return HealthCheckReport(
            status=health.status,
            details=health.details,
            recommendations=self._recommendations(health),
            healed_cache_entries=healed,
        )

    def force_recovery(self) -> RecoveryReport:
        """
        Reset every service and clear the cache.

        Each reset is attempted up to MAX_RECOVERY_ATTEMPTS times; a service
        that keeps failing is reported in `failed`.
        """
        report = RecoveryReport()
        targets = dict(self._services)
        targets["cache"] = self._cache
        targets["external_strategy"] = self._gateway

        for name, service in targets.items():
            for attempt in range(1, MAX_RECOVERY_ATTEMPTS + 1):
                try:
                    if name == "cache":
                        service.clear()
                    else:
                        service.reset()
                    if name in self._services:
                        self._monitor.reset_service(name)
                    self._errors.clear(_error_source(name))
                    report.recovered.append(name)
                    break
                except Exception as e:
                    logger.warning(f"Recovery attempt {attempt}/{MAX_RECOVERY_ATTEMPTS} for {name} failed: {e}")
                    if attempt == MAX_RECOVERY_ATTEMPTS:
                        report.failed.append(name)
                        report.errors.append(f"{name}: {e}")

        logger.info(f"Recovery finished: recovered={report.recovered} failed={report.failed}")
        return report

    def _recommendations(self, health: HealthStatus) -> List[str]:
        services = health.details["services"]
        unhealthy = [n for n, s in services.items() if s == ServiceStatus.UNHEALTHY.value]
        degraded = [n for n, s in services.items() if s == ServiceStatus.DEGRADED.value]
        slow = [
            name for name, stats in self._monitor.service_stats().items()
            if stats.average_ms > SLOW_SERVICE_MS
        ]

        recommendations = []
        if unhealthy:
            recommendations.append(f"Restart unhealthy services: {', '.join(unhealthy)}")
        if degraded:
            recommendations.append(f"Monitor degraded services: {', '.join(degraded)}")
        if slow:
            recommendations.append(f"Investigate slow services: {', '.join(slow)}")
        if health.details["context"] != ContextStatus.SET.value:
            recommendations.append("Set an analysis context before analyzing")
        if health.details["external_strategy"] == StrategyStatus.ERROR.value:
            recommendations.append("Check the external strategy; analyses fall back to local results")
        return recommendations


def _error_source(name: str) -> str:
    if name in ("cache", "cross_component", "external_strategy"):
        return name
    return f"domain.{name}"
