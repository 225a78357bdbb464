"""
Analysis validator for structural and consistency checks.

Validates a produced analysis against:
- Structure (id and timestamp present)
- Domain coverage (every domain key present and a list)
- Insight completeness (id, type, message)
- Recommendation completeness and priority values
- Confidence ranges

Validation never raises. Disabled validators report success without
inspecting the analysis.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from domain.models import DOMAINS, Priority

logger = logging.getLogger(__name__)

SCORE_PENALTY = 0.1
_VALID_PRIORITIES = {p.value for p in Priority}


class DiscrepancySeverity(str, Enum):
    """Severity level for validation discrepancies."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class Discrepancy:
    """A single validation discrepancy."""

    component: str
    severity: DiscrepancySeverity
    message: str

    def to_dict(self) -> dict:
        return {
            "component": self.component,
            "severity": self.severity.value,
            "message": self.message,
        }


@dataclass
class ValidationReport:
    """Result of analysis validation."""

    is_valid: bool
    consistency_score: float
    discrepancies: List[Discrepancy] = field(default_factory=list)

    @property
    def high_severity(self) -> List[Discrepancy]:
        return [d for d in self.discrepancies if d.severity == DiscrepancySeverity.HIGH]


def _value(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value.value if isinstance(value, Enum) else str(value)


class AnalysisValidator:
    """
    Validates analyses produced by the orchestrator.

    Args:
        enabled: When False, validate_analysis is a no-op success.
    """

    def __init__(self, enabled: bool = False):
        self.enabled = enabled

    def validate_analysis(self, analysis: Any, selections: Any = None, context: Any = None) -> ValidationReport:
        """
        Validate an analysis.

        Args:
            analysis: The analysis to check. Plain dicts are accepted too.
            selections: Effective selections the analysis was produced for.
            context: Context the analysis was produced for.

        Returns:
            ValidationReport with consistency score max(0, 1 - 0.1 * n).
        """
        if not self.enabled:
            return ValidationReport(is_valid=True, consistency_score=1.0)

        try:
            discrepancies = self._check(analysis)
        except Exception as e:
            logger.error(f"Analysis validation failed: {e}")
            return ValidationReport(
                is_valid=False,
                consistency_score=0.0,
                discrepancies=[
                    Discrepancy(
                        component="validation_error",
                        severity=DiscrepancySeverity.HIGH,
                        message=f"Validation raised {type(e).__name__}: {e}",
                    )
                ],
            )

        score = max(0.0, 1.0 - SCORE_PENALTY * len(discrepancies))
        if discrepancies:
            logger.info(
                f"Analysis {_value(analysis, 'id')!r} has {len(discrepancies)} discrepancies "
                f"(score {score:.2f})"
            )
        return ValidationReport(
            is_valid=not discrepancies,
            consistency_score=round(score, 4),
            discrepancies=discrepancies,
        )

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def _check(self, analysis: Any) -> List[Discrepancy]:
        issues: List[Discrepancy] = []
        issues.extend(self._check_structure(analysis))
        issues.extend(self._check_insights(analysis))
        issues.extend(self._check_recommendations(analysis))
        issues.extend(self._check_confidence(analysis))
        return issues

    def _check_structure(self, analysis) -> List[Discrepancy]:
        issues = []
        if not _value(analysis, "id"):
            issues.append(Discrepancy("analysis_structure", DiscrepancySeverity.HIGH, "Analysis is missing an id"))
        if not _value(analysis, "timestamp"):
            issues.append(
                Discrepancy("analysis_structure", DiscrepancySeverity.HIGH, "Analysis is missing a timestamp")
            )
        return issues

    def _check_insights(self, analysis) -> List[Discrepancy]:
        issues = []
        insights = _value(analysis, "insights") or {}
        for domain in DOMAINS:
            component = f"insights.{domain}"
            if domain not in insights:
                issues.append(Discrepancy(component, DiscrepancySeverity.HIGH, f"Missing insights for {domain}"))
                continue
            entries = insights[domain]
            if not isinstance(entries, (list, tuple)):
                issues.append(Discrepancy(component, DiscrepancySeverity.HIGH, f"Insights for {domain} are not a list"))
                continue
            for index, insight in enumerate(entries):
                missing = [name for name in ("id", "type", "message") if not _value(insight, name)]
                if missing:
                    issues.append(
                        Discrepancy(
                            component,
                            DiscrepancySeverity.MEDIUM,
                            f"Insight {index} is missing: {', '.join(missing)}",
                        )
                    )
        return issues

    def _check_recommendations(self, analysis) -> List[Discrepancy]:
        issues = []
        for index, rec in enumerate(_value(analysis, "recommendations") or []):
            missing = [name for name in ("id", "priority", "title") if not _value(rec, name)]
            if missing:
                issues.append(
                    Discrepancy(
                        "recommendations",
                        DiscrepancySeverity.MEDIUM,
                        f"Recommendation {index} is missing: {', '.join(missing)}",
                    )
                )
            priority = _as_str(_value(rec, "priority"))
            if priority is not None and priority not in _VALID_PRIORITIES:
                issues.append(
                    Discrepancy(
                        "recommendations",
                        DiscrepancySeverity.MEDIUM,
                        f"Recommendation {index} has invalid priority '{priority}'",
                    )
                )
        return issues

    def _check_confidence(self, analysis) -> List[Discrepancy]:
        issues = []
        values = [("analysis", _value(analysis, "confidence"))]
        insights = _value(analysis, "insights") or {}
        for domain in DOMAINS:
            entries = insights.get(domain) if isinstance(insights, dict) else None
            if isinstance(entries, (list, tuple)):
                values.extend((f"insights.{domain}", _value(i, "confidence")) for i in entries)
        values.extend(
            ("recommendations", _value(r, "confidence"))
            for r in _value(analysis, "recommendations") or []
        )
        for source, confidence in values:
            if confidence is None:
                continue
            if not 0.0 <= float(confidence) <= 1.0:
                issues.append(
                    Discrepancy(
                        "confidence",
                        DiscrepancySeverity.LOW,
                        f"Confidence {confidence} in {source} is outside [0, 1]",
                    )
                )
        return issues
