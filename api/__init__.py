"""
API package for the Workout Insights API.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
- schemas/: Request and response models
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_orchestrator,
    get_settings,
)

__all__ = [
    # Settings
    "get_settings",
    # Engine
    "get_orchestrator",
]
