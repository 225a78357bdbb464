"""
Analysis: the unit of engine output and of caching.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from domain.models.conflict import Conflict, Synergy
from domain.models.insight import Insight
from domain.models.recommendation import Recommendation


# The five independently evaluated selection domains, in evaluation order.
DOMAINS = ("energy", "soreness", "focus", "duration", "equipment")


def new_analysis_id() -> str:
    """Content-independent analysis identifier."""
    return f"analysis_{uuid.uuid4().hex}"


class AnalysisMetrics(BaseModel):
    """Timing captured while producing one analysis."""

    total_time_ms: float = 0.0
    domain_times_ms: Dict[str, float] = Field(default_factory=dict)
    cross_component_time_ms: float = 0.0
    rule_errors: int = 0
    augmented: bool = False

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class Analysis(BaseModel):
    """
    Unified result of analyzing one set of effective selections.

    `insights` always carries the five domain keys; a domain with nothing to
    say maps to an empty list.
    """

    id: str = Field(default_factory=new_analysis_id)
    timestamp: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    fingerprint: str = Field(default="", description="Cache key of the selections")
    insights: Dict[str, List[Insight]] = Field(default_factory=dict)
    cross_component_conflicts: List[Conflict] = Field(default_factory=list)
    synergies: List[Synergy] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reasoning: str = ""
    performance_metrics: AnalysisMetrics = Field(default_factory=AnalysisMetrics)

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }

    def all_insights(self) -> List[Insight]:
        """Insights of every domain, in domain order."""
        return [
            insight
            for domain in DOMAINS
            for insight in self.insights.get(domain, [])
        ]
