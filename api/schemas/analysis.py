"""
Pydantic models for the analysis API.

Request and response models for:
1. Context - Replace the analysis context
2. Analyze - Run an analysis with an optional selection override
3. Interactions - Record interactions and read their statistics
4. Learning - Feedback on recommendations and what was learned from it
5. Configuration - Validate a selection set and preview single-slot changes
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from domain.models import Conflict, Insight, Synergy, UserFeedback

_CAMEL = {"populate_by_name": True, "alias_generator": to_camel}


class AnalyzeRequest(BaseModel):
    """Optional partial selection override for one analysis."""

    override: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Slot values that replace the current selections for this call",
    )

    model_config = _CAMEL


class SetContextResponse(BaseModel):
    status: str = "context_set"
    state: str
    history_entries: int = 0

    model_config = _CAMEL


class InteractionResponse(BaseModel):
    id: str
    recorded: bool = True

    model_config = _CAMEL


class InteractionStatsResponse(BaseModel):
    total: int
    shown: int
    applied: int
    dismissed: int
    errors: int
    helpful: int
    not_helpful: int
    partially_helpful: int
    neutral: int
    acceptance_rate: float
    by_component: Dict[str, int] = Field(default_factory=dict)

    model_config = _CAMEL


class FeedbackRequest(BaseModel):
    """Feedback on one recommendation."""

    recommendation_id: str = Field(..., description="Id of the rated recommendation")
    feedback: UserFeedback
    component: Optional[str] = Field(default=None, description="Slot the recommendation targets")

    model_config = _CAMEL


class FeedbackResponse(BaseModel):
    recommendation_id: str
    weight: float

    model_config = _CAMEL


class RecommendationWeight(BaseModel):
    id: str
    weight: float
    feedback: int = Field(default=0, description="Feedback events received")


class LearningResponse(BaseModel):
    metrics: Dict[str, Any] = Field(default_factory=dict)
    top_performing: List[RecommendationWeight] = Field(default_factory=list)
    needs_improvement: List[RecommendationWeight] = Field(default_factory=list)
    overall_satisfaction: float = 0.0
    trend: str = "stable"

    model_config = _CAMEL


class ValidateConfigurationRequest(BaseModel):
    override: Optional[Dict[str, Any]] = None

    model_config = _CAMEL


class ConfigurationValidationResponse(BaseModel):
    is_valid: bool
    conflicts: List[Conflict] = Field(default_factory=list)
    warnings: List[Conflict] = Field(default_factory=list)
    suggestions: List[Insight] = Field(default_factory=list)

    model_config = _CAMEL


class ComponentChangeRequest(BaseModel):
    """Hypothetical change of one selection slot."""

    component: str = Field(..., description="Slot name, e.g. 'duration'")
    value: Any = Field(default=None, description="New value for the slot")

    model_config = _CAMEL


class ComponentChangeResponse(BaseModel):
    component: str
    new_value: Any = None
    new_conflicts: List[Conflict] = Field(default_factory=list)
    resolved_conflicts: List[Conflict] = Field(default_factory=list)
    new_synergies: List[Synergy] = Field(default_factory=list)
    lost_synergies: List[Synergy] = Field(default_factory=list)
    affected_components: List[str] = Field(default_factory=list)
    severity_change: str = "unchanged"

    model_config = _CAMEL
