"""
Analysis context: user profile, current selections, session history,
environmental factors and preferences.

Exactly one AnalysisContext is current per orchestrator. The context is
immutable; callers replace it wholesale (set_context) and the context store
appends interactions by producing a copy.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


_CAMEL_CONFIG = {
    "populate_by_name": True,
    "alias_generator": to_camel,
}


# =============================================================================
# Selection slots
# =============================================================================


class RatedSelection(BaseModel):
    """Structured slot value used by rating widgets: {rating, categories}."""

    rating: Optional[float] = None
    categories: List[str] = Field(default_factory=list)

    model_config = {**_CAMEL_CONFIG, "frozen": True}


class DurationSelection(BaseModel):
    """Structured duration value: {totalDuration}."""

    total_duration: float = Field(..., description="Minutes")

    model_config = {**_CAMEL_CONFIG, "frozen": True}


class WorkoutSelections(BaseModel):
    """
    The user's in-progress selections, keyed by slot name.

    Each slot accepts the plain value or the structured form the form
    layer produces. Unknown slots are kept but ignored by the rules.

    Examples:
        >>> WorkoutSelections(energy=2, focus="strength", duration=60)
        >>> WorkoutSelections(energy={"rating": 4, "categories": []},
        ...                   duration={"totalDuration": 45})
    """

    energy: Optional[Union[int, float, RatedSelection]] = Field(
        default=None, description="Energy rating, 1-5"
    )
    soreness: Optional[Union[List[str], RatedSelection]] = Field(
        default=None, description="Sore body areas"
    )
    focus: Optional[Union[str, RatedSelection]] = Field(
        default=None, description="Workout focus, e.g. strength or cardio"
    )
    duration: Optional[Union[int, float, DurationSelection]] = Field(
        default=None, description="Workout duration in minutes"
    )
    equipment: Optional[Union[List[str], RatedSelection]] = Field(
        default=None, description="Available equipment"
    )
    areas: Optional[List[str]] = Field(
        default=None, description="Target body areas"
    )

    model_config = {**_CAMEL_CONFIG, "frozen": True, "extra": "allow"}

    def merged(self, override: Optional[Dict[str, Any]] = None) -> "WorkoutSelections":
        """
        Return the effective selections for one analysis.

        Args:
            override: Partial slot mapping. Keys present in the override
                replace the current value, including explicit None.

        Returns:
            New WorkoutSelections; self is left untouched.
        """
        if not override:
            return self
        data = self.model_dump(by_alias=False)
        for key, value in override.items():
            data[_slot_name(key)] = value
        return WorkoutSelections.model_validate(data)


def _slot_name(key: str) -> str:
    """Map camelCase override keys to slot attribute names."""
    for name, field in WorkoutSelections.model_fields.items():
        if key == name or key == field.alias:
            return name
    return key


# =============================================================================
# Profile, environment, preferences
# =============================================================================


class UserProfile(BaseModel):
    """The user the analysis is performed for."""

    fitness_level: str = Field(default="", description="e.g. 'new to exercise'")
    goals: List[str] = Field(default_factory=list)
    preferences: Dict[str, Any] = Field(default_factory=dict)
    limitations: Dict[str, Any] = Field(default_factory=dict)
    workout_history: List[Dict[str, Any]] = Field(default_factory=list)
    learning_profile: Dict[str, Any] = Field(default_factory=dict)

    model_config = {**_CAMEL_CONFIG, "frozen": True}


class EnvironmentalFactors(BaseModel):
    time_of_day: Optional[str] = Field(
        default=None, description="morning, afternoon or evening"
    )
    location: Optional[str] = Field(default=None, description="e.g. home or gym")
    available_time: Optional[float] = Field(
        default=None, description="Minutes the user has available"
    )

    model_config = {**_CAMEL_CONFIG, "frozen": True}


class AssistanceLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class Preferences(BaseModel):
    assistance_level: AssistanceLevel = AssistanceLevel.MODERATE
    show_learning_insights: bool = True
    auto_apply_low_risk: bool = False

    model_config = {**_CAMEL_CONFIG, "frozen": True}


# =============================================================================
# Interactions
# =============================================================================


class InteractionAction(str, Enum):
    SHOWN = "recommendation_shown"
    APPLIED = "recommendation_applied"
    DISMISSED = "recommendation_dismissed"
    ERROR = "error_occurred"


class UserFeedback(str, Enum):
    HELPFUL = "helpful"
    NOT_HELPFUL = "not_helpful"
    PARTIALLY_HELPFUL = "partially_helpful"
    NEUTRAL = "neutral"


class Interaction(BaseModel):
    """
    One entry of session history.

    `component` names the selection domain the interaction concerns and
    `value` holds that slot's value at the time (an energy rating, a focus
    name, a duration in minutes, a list of areas or equipment). Learning
    rules read only these fields.
    """

    id: str = Field(default_factory=lambda: f"interaction_{uuid.uuid4().hex}")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    component: str
    action: InteractionAction
    recommendation_id: Optional[str] = None
    user_feedback: Optional[UserFeedback] = None
    value: Optional[Any] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    model_config = {**_CAMEL_CONFIG, "frozen": True}


# =============================================================================
# Context
# =============================================================================


class AnalysisContext(BaseModel):
    """Everything the engine knows about the current workout session."""

    user_profile: Optional[UserProfile] = Field(
        default=None,
        description="Required by set_context; Optional so the check raises MissingProfile",
    )
    current_selections: WorkoutSelections = Field(default_factory=WorkoutSelections)
    session_history: List[Interaction] = Field(default_factory=list)
    environmental_factors: EnvironmentalFactors = Field(
        default_factory=EnvironmentalFactors
    )
    preferences: Preferences = Field(default_factory=Preferences)

    model_config = {**_CAMEL_CONFIG, "frozen": True}

    def with_selections(self, selections: WorkoutSelections) -> "AnalysisContext":
        """Copy of this context evaluated against other selections."""
        return self.model_copy(update={"current_selections": selections})

    def recent_history(self, limit: int) -> List[Interaction]:
        """The most recent `limit` interactions, oldest first."""
        if limit <= 0:
            return []
        return list(self.session_history[-limit:])
