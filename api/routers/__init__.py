"""
Router package for the Workout Insights API.

This package contains all API routers organized by domain:
- health: Liveness, engine health, recovery and metrics endpoints
- analysis: Context, analysis, interaction and configuration endpoints
"""

from api.routers.analysis import router as analysis_router
from api.routers.health import router as health_router

__all__ = [
    "analysis_router",
    "health_router",
]
