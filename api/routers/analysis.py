"""
Analysis router.

Endpoints for the UI form layer:
- PUT  /analysis/context                  Replace the analysis context
- POST /analysis                          Analyze current selections
- POST /analysis/interactions             Record a session interaction
- GET  /analysis/interactions/stats       Interaction statistics
- POST /analysis/feedback                 Learn from feedback on a recommendation
- GET  /analysis/learning                 Learned weights, metrics and trend
- POST /analysis/validate-configuration   Quick configuration verdict
- POST /analysis/what-if                  Preview a single-slot change
- POST /analysis/recommendations          External or local recommendations
- POST /analysis/workout                  Workout plan from the external strategy
- POST /analysis/preferences              Preference analysis from the external strategy
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from api.deps import get_orchestrator
from api.schemas.analysis import (
    AnalyzeRequest,
    ComponentChangeRequest,
    ComponentChangeResponse,
    ConfigurationValidationResponse,
    FeedbackRequest,
    FeedbackResponse,
    InteractionResponse,
    InteractionStatsResponse,
    LearningResponse,
    SetContextResponse,
    ValidateConfigurationRequest,
)
from application.exceptions import (
    ContextNotSet,
    ExternalStrategyError,
    ExternalStrategyNotConfigured,
    MissingProfile,
)
from application.orchestrator import AnalysisOrchestrator
from domain.models import Analysis, AnalysisContext, Interaction, Recommendation

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/analysis",
    tags=["Analysis"],
)


def _context_not_set(e: ContextNotSet) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


def _invalid_selections(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=e.errors(include_url=False))


# =============================================================================
# Context
# =============================================================================


@router.put("/context", response_model=SetContextResponse)
async def set_context(
    context: AnalysisContext,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Replace the current analysis context. Clears every cached analysis.

    Raises:
        HTTPException: 400 if the context has no user profile
    """
    try:
        await orchestrator.set_context(context)
    except MissingProfile as e:
        raise HTTPException(status_code=400, detail=str(e))

    stored = orchestrator.context
    return SetContextResponse(
        state=orchestrator.state.value,
        history_entries=len(stored.session_history) if stored else 0,
    )


# =============================================================================
# Analysis
# =============================================================================


@router.post("", response_model=Analysis)
async def analyze(
    request: Optional[AnalyzeRequest] = None,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Analyze the current selections, optionally overriding some slots.

    Raises:
        HTTPException: 409 if no context is set, 422 for invalid override values
    """
    try:
        return await orchestrator.analyze(request.override if request else None)
    except ContextNotSet as e:
        raise _context_not_set(e)
    except ValidationError as e:
        raise _invalid_selections(e)


# =============================================================================
# Interactions
# =============================================================================


@router.post("/interactions", response_model=InteractionResponse)
async def record_interaction(
    interaction: Interaction,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """Record a session interaction for the learning rules."""
    recorded = await orchestrator.record_interaction(interaction)
    return InteractionResponse(id=recorded.id)


@router.get("/interactions/stats", response_model=InteractionStatsResponse)
def interaction_stats(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Counts of shown, applied and dismissed recommendations and feedback."""
    return InteractionStatsResponse(**orchestrator.get_interaction_stats())


@router.post("/feedback", response_model=FeedbackResponse)
async def learn_from_feedback(
    request: FeedbackRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """Adjust a recommendation's learned weight from user feedback."""
    weight = await orchestrator.learn_from_feedback(
        request.feedback, request.recommendation_id, request.component
    )
    return FeedbackResponse(recommendation_id=request.recommendation_id, weight=weight)


@router.get("/learning", response_model=LearningResponse)
def learning(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Learning metrics, highest and lowest weighted recommendations, and trend."""
    return LearningResponse(
        metrics=orchestrator.get_learning_metrics().to_dict(),
        **orchestrator.get_learning_insights(),
    )


# =============================================================================
# Configuration
# =============================================================================


@router.post("/validate-configuration", response_model=ConfigurationValidationResponse)
def validate_configuration(
    request: Optional[ValidateConfigurationRequest] = None,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Check the selections for critical conflicts.

    Raises:
        HTTPException: 409 if no context is set
    """
    try:
        result = orchestrator.validate_configuration(request.override if request else None)
    except ContextNotSet as e:
        raise _context_not_set(e)
    except ValidationError as e:
        raise _invalid_selections(e)
    return ConfigurationValidationResponse(
        is_valid=result.is_valid,
        conflicts=result.conflicts,
        warnings=result.warnings,
        suggestions=result.suggestions,
    )


@router.post("/what-if", response_model=ComponentChangeResponse)
def what_if(
    request: ComponentChangeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Preview how changing one slot would change conflicts and synergies.

    Raises:
        HTTPException: 409 if no context is set
    """
    try:
        impact = orchestrator.analyze_component_change(request.component, request.value)
    except ContextNotSet as e:
        raise _context_not_set(e)
    except ValidationError as e:
        raise _invalid_selections(e)
    return ComponentChangeResponse(**{
        field: getattr(impact, field) for field in ComponentChangeResponse.model_fields
    })


# =============================================================================
# External Strategy
# =============================================================================


def _strategy_unavailable(e: ExternalStrategyNotConfigured) -> HTTPException:
    return HTTPException(status_code=503, detail=str(e))


def _strategy_failed(e: ExternalStrategyError) -> HTTPException:
    return HTTPException(status_code=502, detail=str(e))


@router.post("/recommendations", response_model=List[Recommendation])
async def recommendations(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """
    Recommendations from the external strategy, or the local ones when no
    strategy is set or it fails.

    Raises:
        HTTPException: 409 if no context is set
    """
    try:
        return await orchestrator.generate_recommendations()
    except ContextNotSet as e:
        raise _context_not_set(e)


@router.post("/workout")
async def generate_workout(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """
    Generate a workout plan through the external strategy.

    Raises:
        HTTPException: 409 if no context is set, 503 if no strategy is
            configured, 502 if the strategy failed
    """
    try:
        return await orchestrator.generate_workout()
    except ContextNotSet as e:
        raise _context_not_set(e)
    except ExternalStrategyNotConfigured as e:
        raise _strategy_unavailable(e)
    except ExternalStrategyError as e:
        raise _strategy_failed(e)


@router.post("/preferences")
async def analyze_user_preferences(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """
    Analyze the user's preferences through the external strategy.

    Raises:
        HTTPException: 409 if no context is set, 503 if no strategy is
            configured, 502 if the strategy failed
    """
    try:
        return await orchestrator.analyze_user_preferences()
    except ContextNotSet as e:
        raise _context_not_set(e)
    except ExternalStrategyNotConfigured as e:
        raise _strategy_unavailable(e)
    except ExternalStrategyError as e:
        raise _strategy_failed(e)
