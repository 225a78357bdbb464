"""
Insight value object and per-domain metadata variants.

An Insight is a single categorized observation about one selection domain
(energy, soreness, focus, duration, equipment) together with the
recommendation that follows from it. Insights are generated fresh for each
analysis and are immutable once created.

Usage:
    >>> insight = Insight(
    ...     id="energy_low_energy",
    ...     type=InsightType.WARNING,
    ...     message="Low energy detected",
    ...     recommendation="Consider a lighter session",
    ...     confidence=0.85,
    ...     actionable=True,
    ...     related_fields=["energy"],
    ...     metadata=EnergyMetadata(energy_level=2),
    ... )
    >>> insight.is_warning
    True
"""

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class InsightType(str, Enum):
    """Closed set of insight categories."""

    WARNING = "warning"
    CRITICAL_WARNING = "critical_warning"
    OPTIMIZATION = "optimization"
    ENCOURAGEMENT = "encouragement"
    EDUCATION = "education"
    OPPORTUNITY = "opportunity"


# =============================================================================
# Metadata variants
# =============================================================================

_METADATA_CONFIG = {
    "frozen": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class EnergyMetadata(BaseModel):
    """Metadata attached to energy insights."""

    domain: Literal["energy"] = "energy"
    energy_level: Optional[float] = None
    provided_value: Optional[Any] = None
    expected_range: Optional[str] = None
    time_of_day: Optional[str] = None
    recommended_intensity: Optional[str] = None
    recommended_duration: Optional[int] = None
    dismissal_rate: Optional[float] = None
    pattern_count: Optional[int] = None

    model_config = _METADATA_CONFIG


class SorenessMetadata(BaseModel):
    """Metadata attached to soreness insights."""

    domain: Literal["soreness"] = "soreness"
    areas: List[str] = Field(default_factory=list)
    affected_count: Optional[int] = None
    overlapping_areas: List[str] = Field(default_factory=list)
    pattern_count: Optional[int] = None

    model_config = _METADATA_CONFIG


class FocusMetadata(BaseModel):
    """Metadata attached to focus insights."""

    domain: Literal["focus"] = "focus"
    focus: Optional[str] = None
    dominant_focus: Optional[str] = None
    alignment_score: Optional[float] = None
    suggested_focus: List[str] = Field(default_factory=list)
    pattern_count: Optional[int] = None

    model_config = _METADATA_CONFIG


class DurationMetadata(BaseModel):
    """Metadata attached to duration insights."""

    domain: Literal["duration"] = "duration"
    duration: Optional[float] = None
    provided_value: Optional[Any] = None
    expected_range: Optional[str] = None
    min_duration: Optional[float] = None
    optimal_duration: Optional[float] = None
    max_duration: Optional[float] = None
    average_duration: Optional[float] = None
    available_time: Optional[float] = None

    model_config = _METADATA_CONFIG


class EquipmentMetadata(BaseModel):
    """Metadata attached to equipment insights."""

    domain: Literal["equipment"] = "equipment"
    equipment: List[str] = Field(default_factory=list)
    count: Optional[int] = None
    matched: List[str] = Field(default_factory=list)
    suggested: List[str] = Field(default_factory=list)

    model_config = _METADATA_CONFIG


class CrossComponentMetadata(BaseModel):
    """Metadata attached to insights synthesized from conflicts or synergies."""

    domain: Literal["cross_component"] = "cross_component"
    conflict_id: Optional[str] = None
    synergy_id: Optional[str] = None
    severity: Optional[str] = None
    resolution: Optional[str] = None

    model_config = _METADATA_CONFIG


InsightMetadata = Annotated[
    Union[
        EnergyMetadata,
        SorenessMetadata,
        FocusMetadata,
        DurationMetadata,
        EquipmentMetadata,
        CrossComponentMetadata,
    ],
    Field(discriminator="domain"),
]


# =============================================================================
# Insight
# =============================================================================


class Insight(BaseModel):
    """
    A categorized observation and recommendation about one selection domain.

    Insight ids are deterministic (``{domain}_{rule_key}``) so that the same
    rule firing twice within one evaluation collapses to one insight.
    """

    id: str = Field(..., description="Identifier, unique within one analysis")
    type: InsightType = Field(..., description="Insight category")
    message: str = Field(..., description="Human readable observation")
    recommendation: str = Field(default="", description="Suggested next step")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence 0-1")
    actionable: bool = Field(default=True, description="Whether the user can act on it")
    related_fields: List[str] = Field(
        default_factory=list,
        description="Selection slot names this insight concerns",
    )
    metadata: Optional[InsightMetadata] = Field(
        default=None,
        description="Domain-specific detail",
    )

    @property
    def is_warning(self) -> bool:
        """True for warning and critical_warning insights."""
        return self.type in (InsightType.WARNING, InsightType.CRITICAL_WARNING)

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }
