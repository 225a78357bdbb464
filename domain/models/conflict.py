"""
Conflict and Synergy value objects produced by the cross-component analyzer.
"""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Conflict severity, ordered low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class ConflictType(str, Enum):
    """What kind of problem a conflict represents."""

    SAFETY = "safety"
    EFFICIENCY = "efficiency"
    GOAL_ALIGNMENT = "goal_alignment"
    USER_EXPERIENCE = "user_experience"


class Conflict(BaseModel):
    """An incompatibility between two or more selections or context fields."""

    id: str = Field(..., description="Conflict identifier (conflict_<rule key>)")
    components: List[str] = Field(
        ...,
        min_length=2,
        description="Selection slot or context field names involved",
    )
    type: ConflictType
    severity: Severity
    description: str
    suggested_resolution: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class Synergy(BaseModel):
    """A positive combination of selections."""

    id: str = Field(..., description="Synergy identifier (synergy_<rule key>)")
    components: List[str] = Field(..., min_length=2)
    type: str = Field(..., description="Benefit category, e.g. performance or recovery")
    description: str
    benefit: str
    confidence: float = Field(..., ge=0.0, le=1.0)

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }
