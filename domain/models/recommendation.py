"""
Recommendation value object.

Recommendations are derived from conflicts and actionable domain insights;
they are never authored independently.
"""

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Priority(str, Enum):
    """Recommendation priority, most urgent first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, 0 for the most urgent."""
        return list(Priority).index(self)


class RecommendationCategory(str, Enum):
    SAFETY = "safety"
    OPTIMIZATION = "optimization"
    EDUCATION = "education"
    MOTIVATION = "motivation"


class Risk(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Recommendation(BaseModel):
    """A prioritized suggestion for changing one selection."""

    id: str
    priority: Priority
    category: RecommendationCategory
    target_component: str = Field(..., description="Selection slot to change")
    title: str
    description: str
    reasoning: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)
    risk: Risk = Risk.LOW

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }
