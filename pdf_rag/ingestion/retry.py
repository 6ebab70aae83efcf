"""
Retry policy for per-fragment embedding calls.

A ``RetryPolicy`` is a plain value object; ``build()`` turns it into a
tenacity ``AsyncRetrying`` controller whose sleep function is injectable so
tests can run without real delays.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from pdf_rag.config.settings import IngestionSettings
from pdf_rag.utils.logging import get_logger

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def _log_retry(retry_state: RetryCallState) -> None:
    """tenacity ``before_sleep`` hook."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "embedding_retry_scheduled",
        attempt=retry_state.attempt_number,
        wait_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(exc) if exc else None,
    )


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff.

    Attributes:
        max_attempts: Total attempts, including the first one (>= 1)
        initial_backoff: Wait before the second attempt, in seconds
        max_backoff: Upper bound for any single wait, in seconds
        multiplier: Growth factor between consecutive waits
    """
    max_attempts: int = 3
    initial_backoff: float = 1.0
    max_backoff: float = 10.0
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_backoff < 0 or self.max_backoff < 0:
            raise ValueError("backoff values must not be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

    @classmethod
    def from_settings(cls, settings: IngestionSettings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.embed_max_attempts,
            initial_backoff=settings.embed_initial_backoff,
            max_backoff=settings.embed_max_backoff,
        )

    def build(self, sleep: SleepFunc = asyncio.sleep) -> AsyncRetrying:
        """
        Create a tenacity controller for one protected call.

        The final exception is re-raised unchanged once attempts run out.
        """
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.initial_backoff,
                max=self.max_backoff,
                exp_base=self.multiplier,
            ),
            sleep=sleep,
            before_sleep=_log_retry,
            reraise=True,
        )


NO_RETRY = RetryPolicy(max_attempts=1, initial_backoff=0.0, max_backoff=0.0)
