"""
Error handler for errors the engine absorbs instead of raising.

Rule failures, external strategy failures and strict-mode validation
failures are recorded here, logged, and forwarded to Sentry. The health
checker reads the counts to decide service status.
"""

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

import sentry_sdk

logger = logging.getLogger(__name__)


@dataclass
class ErrorRecord:
    """One absorbed error."""

    source: str
    message: str
    error_type: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "message": self.message,
            "error_type": self.error_type,
            "timestamp": self.timestamp.isoformat(),
        }


class ErrorHandler:
    """
    Records absorbed errors in a bounded history.

    Args:
        max_history: Number of most recent errors kept for inspection.
            Counts are kept for every error regardless.
    """

    def __init__(self, max_history: int = 100):
        self._history: Deque[ErrorRecord] = deque(maxlen=max_history)
        self._counts: Counter = Counter()

    def record(self, source: str, error: BaseException) -> ErrorRecord:
        """
        Record an error raised while evaluating `source`.

        Args:
            source: Where the error happened, e.g. "domain.energy" or
                "external_strategy".
            error: The exception that was caught.

        Returns:
            The stored ErrorRecord.
        """
        record = ErrorRecord(
            source=source,
            message=str(error),
            error_type=type(error).__name__,
        )
        self._history.append(record)
        self._counts[source] += 1

        logger.warning(f"Absorbed error in {source}: {error}", exc_info=error)
        sentry_sdk.capture_exception(error)
        return record

    @property
    def total_errors(self) -> int:
        return sum(self._counts.values())

    @property
    def last_error(self) -> Optional[ErrorRecord]:
        return self._history[-1] if self._history else None

    def count_for(self, source: str) -> int:
        return self._counts[source]

    def counts_by_source(self) -> Dict[str, int]:
        return dict(self._counts)

    def recent(self, limit: int = 10) -> List[ErrorRecord]:
        """Most recent errors, newest last."""
        return list(self._history)[-limit:]

    def clear(self, source: Optional[str] = None) -> None:
        """Forget all errors, or only those of one source."""
        if source is None:
            self._history.clear()
            self._counts.clear()
            return
        self._counts.pop(source, None)
        kept = [r for r in self._history if r.source != source]
        self._history.clear()
        self._history.extend(kept)
