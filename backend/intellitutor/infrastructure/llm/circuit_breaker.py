"""
Async circuit breaker for the model provider.

A dead provider should fail fast into the pipeline's fallback reply instead
of holding a conversation lock for a full request timeout.
"""

import asyncio
import logging
import time

from openai import (
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from intellitutor.domain.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)

_TRANSIENT = (APIConnectionError, APITimeoutError, InternalServerError, RateLimitError)


class CircuitOpenError(ProviderUnavailableError):
    """LLM provider is down; fail fast into the fallback reply."""

    pass


class AsyncCircuitBreaker:
    """CLOSED → (N failures) → OPEN → (cooldown) → HALF_OPEN → (1 test) → CLOSED."""

    def __init__(self, threshold: int = 5, recovery: int = 30):
        self._threshold = threshold
        self._recovery = recovery
        self._failures = 0
        self._opened_at: float = 0.0
        self._probe_started_at: float = 0.0
        self._state = "closed"
        self._lock = asyncio.Lock()

    @property
    def state(self) -> str:
        return self._state

    async def check(self) -> None:
        async with self._lock:
            if self._state == "closed":
                return
            now = time.monotonic()
            if self._state == "open":
                if now - self._opened_at >= self._recovery:
                    self._state = "half_open"
                    self._probe_started_at = now
                    logger.info("[CircuitBreaker] OPEN → HALF_OPEN (allowing one test request)")
                    return
                raise CircuitOpenError(f"LLM circuit open ({self._failures} failures)")
            # half_open: one probe at a time; a probe that never reported back
            # (cancelled by a timeout) is replaced after another cooldown
            if now - self._probe_started_at >= self._recovery:
                self._probe_started_at = now
                return
            raise CircuitOpenError("LLM circuit half-open, test request in progress")

    async def record_success(self) -> None:
        async with self._lock:
            if self._state == "half_open":
                logger.info("[CircuitBreaker] HALF_OPEN → CLOSED")
            self._failures = 0
            self._state = "closed"

    async def record_failure(self, error: Exception) -> None:
        async with self._lock:
            # Any failure during HALF_OPEN probe → back to OPEN immediately
            if self._state == "half_open":
                self._state = "open"
                self._opened_at = time.monotonic()
                logger.warning(
                    "[CircuitBreaker] HALF_OPEN → OPEN (probe failed: %s)",
                    type(error).__name__,
                )
                return
            if not isinstance(error, _TRANSIENT):
                return
            self._failures += 1
            if self._failures >= self._threshold and self._state == "closed":
                self._state = "open"
                self._opened_at = time.monotonic()
                logger.warning("[CircuitBreaker] → OPEN (%d failures)", self._failures)
