"""
Pydantic schemas for API requests and responses.

Organized by feature/domain:
- analysis: Context, analysis, interaction and configuration models
"""

from api.schemas.analysis import (
    AnalyzeRequest,
    ComponentChangeRequest,
    ComponentChangeResponse,
    ConfigurationValidationResponse,
    InteractionResponse,
    InteractionStatsResponse,
    SetContextResponse,
    ValidateConfigurationRequest,
)

__all__ = [
    "AnalyzeRequest",
    "ComponentChangeRequest",
    "ComponentChangeResponse",
    "ConfigurationValidationResponse",
    "InteractionResponse",
    "InteractionStatsResponse",
    "SetContextResponse",
    "ValidateConfigurationRequest",
]
