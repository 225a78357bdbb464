"""
Application-layer exceptions.

Only ContextNotSet and MissingProfile ever reach callers of the
orchestrator. The remaining errors are raised inside the engine, recorded by
the error handler and absorbed so the caller still gets a complete
Analysis.
"""

from typing import Any, List, Optional


class AnalysisEngineError(Exception):
    """Base class for all engine errors."""

    pass


class ContextNotSet(AnalysisEngineError):
    """An operation that needs a context was called before set_context."""

    def __init__(self, message: str = "No analysis context set. Call set_context() first."):
        super().__init__(message)


class MissingProfile(AnalysisEngineError):
    """set_context was called with a context that has no user profile."""

    def __init__(self, message: str = "Analysis context requires a user profile."):
        super().__init__(message)


class RuleEvaluationError(AnalysisEngineError):
    """A single rule raised while evaluating.

    The rule is skipped and its insight omitted; evaluation of the other
    rules continues.
    """

    def __init__(self, domain: str, rule_key: str, cause: BaseException):
        self.domain = domain
        self.rule_key = rule_key
        self.cause = cause
        super().__init__(f"Rule '{rule_key}' in domain '{domain}' failed: {cause}")


class ValidationDiscrepancy(AnalysisEngineError):
    """A produced analysis failed validation (strict mode only)."""

    def __init__(self, discrepancies: List[Any], consistency_score: float):
        self.discrepancies = discrepancies
        self.consistency_score = consistency_score
        super().__init__(
            f"Analysis failed validation with {len(discrepancies)} discrepancies "
            f"(consistency score {consistency_score:.2f})"
        )


class ExternalStrategyError(AnalysisEngineError):
    """The external augmentation strategy failed or timed out."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"External strategy '{operation}' failed{detail}")


class ExternalStrategyNotConfigured(AnalysisEngineError):
    """A pass-through operation needs an external strategy but none is set."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"No external strategy configured for '{operation}'")


class InvalidExternalStrategy(AnalysisEngineError, ValueError):
    """The object passed to set_external_strategy lacks required methods."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(
            f"External strategy is missing required methods: {', '.join(missing)}"
        )
