"""
Gateway to the optional external augmentation strategy.

Every call is time-boxed with asyncio.wait_for and retried with tenacity
on transient errors. Failures surface as ExternalStrategyError; callers
decide whether to fall back.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from application.exceptions import (
    ExternalStrategyError,
    ExternalStrategyNotConfigured,
    InvalidExternalStrategy,
)
from application.ports import REQUIRED_METHODS, ExternalStrategy

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 0.5
MAX_BACKOFF_SECONDS = 5.0


class StrategyStatus(str, Enum):
    CONFIGURED = "configured"
    NOT_CONFIGURED = "not_configured"
    ERROR = "error"


def is_retryable_error(exception: BaseException) -> bool:
    """
    Determine if an external strategy failure is worth retrying.

    Timeouts and connection problems are transient; anything else (bad
    input, programming errors) will fail again.
    """
    if isinstance(exception, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True
    error_str = str(exception).lower()
    if "rate" in error_str and "limit" in error_str:
        return True
    if any(code in error_str for code in ["429", "500", "502", "503", "504"]):
        return True
    return "timeout" in error_str or "timed out" in error_str


def missing_methods(strategy: Any) -> list:
    return [name for name in REQUIRED_METHODS if not callable(getattr(strategy, name, None))]


class ExternalStrategyGateway:
    """
    Wraps an ExternalStrategy with validation, timeouts and retries.

    Args:
        timeout_seconds: Timeout for a single attempt.
        max_attempts: Attempts per call, including the first.
        backoff_seconds: Base wait for exponential backoff between attempts.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    ):
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._strategy: Optional[ExternalStrategy] = None
        self._failed = False
        self.call_count = 0
        self.failure_count = 0

    @property
    def strategy(self) -> Optional[ExternalStrategy]:
        return self._strategy

    @property
    def is_configured(self) -> bool:
        return self._strategy is not None

    @property
    def status(self) -> StrategyStatus:
        if self._strategy is None:
            return StrategyStatus.NOT_CONFIGURED
        if self._failed:
            return StrategyStatus.ERROR
        return StrategyStatus.CONFIGURED

    def set_strategy(self, strategy: Optional[ExternalStrategy]) -> None:
        """
        Install or remove the external strategy.

        Raises:
            InvalidExternalStrategy: If the strategy lacks a required method.
        """
        if strategy is not None:
            missing = missing_methods(strategy)
            if missing:
                raise InvalidExternalStrategy(missing)
        self._strategy = strategy
        self._failed = False
        logger.info(
            "External strategy %s",
            f"set to {type(strategy).__name__}" if strategy is not None else "removed",
        )

    def reset(self) -> None:
        """Clear the error state (used by recovery)."""
        self._failed = False
        self.failure_count = 0

    async def call(self, operation: str, *args: Any) -> Any:
        """
        Call one strategy method with timeout and retries.

        Args:
            operation: Method name, one of REQUIRED_METHODS.
            *args: Arguments for the method.

        Returns:
            Whatever the strategy returned.

        Raises:
            ExternalStrategyNotConfigured: If no strategy is set.
            ExternalStrategyError: If every attempt failed or timed out.
        """
        if self._strategy is None:
            raise ExternalStrategyNotConfigured(operation)

        method = getattr(self._strategy, operation)
        self.call_count += 1
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_retryable_error),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.backoff_seconds,
                min=0,
                max=max(self.backoff_seconds, MAX_BACKOFF_SECONDS),
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await asyncio.wait_for(method(*args), timeout=self.timeout_seconds)
        except Exception as e:
            self._failed = True
            self.failure_count += 1
            raise ExternalStrategyError(operation, e) from e

        self._failed = False
        return result
