"""
Performance monitor for the analysis engine.

Tracks analysis timings, per-domain-service timings and error counts.
Cache hit and miss counts are read from the cache itself.
"""

import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, Iterator, List, Optional

# Thresholds used to derive a service status from its stats
SLOW_SERVICE_MS = 1000.0
DEGRADED_ERROR_RATE = 0.1
UNHEALTHY_ERROR_RATE = 0.5
MIN_CALLS_FOR_UNHEALTHY = 3
RESPONSE_TIME_WINDOW = 100


class ServiceStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ServiceStats:
    """Counters for one domain service (or the cross-component analyzer)."""

    calls: int = 0
    errors: int = 0
    total_ms: float = 0.0

    @property
    def average_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0

    @property
    def error_rate(self) -> float:
        return self.errors / self.calls if self.calls else 0.0

    @property
    def status(self) -> ServiceStatus:
        if self.calls >= MIN_CALLS_FOR_UNHEALTHY and self.error_rate > UNHEALTHY_ERROR_RATE:
            return ServiceStatus.UNHEALTHY
        if self.error_rate > DEGRADED_ERROR_RATE or self.average_ms > SLOW_SERVICE_MS:
            return ServiceStatus.DEGRADED
        return ServiceStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calls": self.calls,
            "errors": self.errors,
            "total_ms": round(self.total_ms, 3),
            "average_ms": round(self.average_ms, 3),
            "error_rate": round(self.error_rate, 4),
            "status": self.status.value,
        }


@dataclass
class PerformanceMetrics:
    """Aggregate engine performance."""

    analysis_count: int = 0
    total_execution_ms: float = 0.0
    average_response_ms: float = 0.0
    cache_hit_rate: float = 0.0
    error_rate: float = 0.0
    memory_usage_estimate_bytes: int = 0
    services: Optional[Dict[str, Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "analysis_count": self.analysis_count,
            "total_execution_ms": round(self.total_execution_ms, 3),
            "average_response_ms": round(self.average_response_ms, 3),
            "cache_hit_rate": round(self.cache_hit_rate, 4),
            "error_rate": round(self.error_rate, 4),
            "memory_usage_estimate_bytes": self.memory_usage_estimate_bytes,
        }
        if self.services is not None:
            data["services"] = self.services
        return data


class PerformanceMonitor:
    """Collects timings and error counts for the orchestrator."""

    def __init__(self, service_names: List[str]):
        self._services: Dict[str, ServiceStats] = {name: ServiceStats() for name in service_names}
        self._response_times: Deque[float] = deque(maxlen=RESPONSE_TIME_WINDOW)
        self.analysis_count = 0
        self.error_count = 0
        self.total_execution_ms = 0.0

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    @contextmanager
    def timer(self) -> Iterator[Dict[str, float]]:
        """Measure a block; the yielded dict gets an "elapsed_ms" key on exit."""
        result: Dict[str, float] = {}
        start = time.perf_counter()
        try:
            yield result
        finally:
            result["elapsed_ms"] = (time.perf_counter() - start) * 1000

    def record_service(self, name: str, elapsed_ms: float, errors: int = 0) -> None:
        stats = self._services.setdefault(name, ServiceStats())
        stats.calls += 1
        stats.errors += errors
        stats.total_ms += elapsed_ms

    def record_analysis(self, elapsed_ms: float) -> None:
        """Record one analyze() call, cached or computed."""
        self.analysis_count += 1
        self.total_execution_ms += elapsed_ms
        self._response_times.append(elapsed_ms)

    def record_error(self) -> None:
        self.error_count += 1

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    @property
    def average_response_ms(self) -> float:
        if not self._response_times:
            return 0.0
        return sum(self._response_times) / len(self._response_times)

    @property
    def error_rate(self) -> float:
        return self.error_count / self.analysis_count if self.analysis_count else 0.0

    def service_stats(self) -> Dict[str, ServiceStats]:
        return dict(self._services)

    def service_status(self, name: str) -> ServiceStatus:
        stats = self._services.get(name)
        return stats.status if stats is not None else ServiceStatus.HEALTHY

    def snapshot(self, cache_hit_rate: float, memory_bytes: int, detailed: bool = False) -> PerformanceMetrics:
        """
        Build a metrics snapshot.

        Args:
            cache_hit_rate: Hit rate reported by the result cache.
            memory_bytes: Memory estimate reported by the result cache.
            detailed: Include a per-service breakdown.
        """
        return PerformanceMetrics(
            analysis_count=self.analysis_count,
            total_execution_ms=self.total_execution_ms,
            average_response_ms=self.average_response_ms,
            cache_hit_rate=cache_hit_rate,
            error_rate=self.error_rate,
            memory_usage_estimate_bytes=memory_bytes,
            services={name: s.to_dict() for name, s in self._services.items()} if detailed else None,
        )

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------

    def reset_service(self, name: str) -> None:
        self._services[name] = ServiceStats()

    def reset(self) -> None:
        for name in list(self._services):
            self._services[name] = ServiceStats()
        self._response_times.clear()
        self.analysis_count = 0
        self.error_count = 0
        self.total_execution_ms = 0.0
