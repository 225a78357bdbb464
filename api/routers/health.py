"""
Health check router.

This router provides the liveness endpoint for load balancers and the
engine health, recovery and performance endpoints for monitoring.
"""

import logging

from fastapi import APIRouter, Depends

from api.deps import get_orchestrator, get_settings
from application.orchestrator import AnalysisOrchestrator
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health"],
)


# =============================================================================
# Health Check Endpoints
# =============================================================================


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    """
    Simple liveness endpoint.

    Returns:
        dict: Status indicator for health checks
    """
    return {"status": "ok", "service": settings.service_name}


@router.get("/health/engine")
def engine_health(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """
    Analysis engine health.

    Returns:
        dict: Overall status (healthy, degraded, unhealthy) and details per
        domain service, cache, context and external strategy.
    """
    return orchestrator.get_health_status().to_dict()


@router.post("/health/engine/check")
async def engine_health_check(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """
    Run a health check with cache self-heal.

    Returns:
        dict: Health status plus actionable recommendations.
    """
    return (await orchestrator.perform_health_check()).to_dict()


@router.post("/health/engine/recover")
async def engine_recover(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """
    Reset domain services, the cache and the external strategy state.

    Returns:
        dict: Which services recovered and which failed.
    """
    report = await orchestrator.force_recovery()
    logger.info(f"Forced recovery via API: {report.to_dict()}")
    return report.to_dict()


# =============================================================================
# Metrics Endpoints
# =============================================================================


@router.get("/metrics")
def metrics(
    detailed: bool = False,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Engine performance metrics.

    Args:
        detailed: Include a per-domain-service breakdown.
    """
    if detailed:
        return orchestrator.get_detailed_performance_metrics().to_dict()
    return orchestrator.get_performance_metrics().to_dict()
