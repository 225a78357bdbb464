"""
FastAPI Dependency Providers for the Workout Insights API.

This module provides FastAPI dependency injection functions for settings
and the analysis orchestrator.

Architecture:
- Settings are cached per-process (lru_cache in backend.settings)
- One orchestrator is built per process; it owns the context, cache and
  monitors, so every request must see the same instance

Usage in routers:
    from api.deps import get_orchestrator
    from application.orchestrator import AnalysisOrchestrator

    @router.post("/analysis")
    async def analyze(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
        return await orchestrator.analyze()

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_orchestrator] = lambda: build_orchestrator(test_settings)
"""

from functools import lru_cache

from application.orchestrator import AnalysisOrchestrator
from backend.engine import build_orchestrator
from backend.settings import Settings, get_settings as _get_settings


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    Use this as a FastAPI dependency for settings access.

    Returns:
        Settings: Application settings instance
    """
    return _get_settings()


# =============================================================================
# Orchestrator Provider
# =============================================================================


@lru_cache
def get_orchestrator() -> AnalysisOrchestrator:
    """
    Get the process-wide analysis orchestrator (cached).

    Returns:
        AnalysisOrchestrator: Orchestrator built from the current settings
    """
    return build_orchestrator(_get_settings())
