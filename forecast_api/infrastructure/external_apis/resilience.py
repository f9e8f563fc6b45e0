"""Resilience for upstream HTTP calls: retry with backoff, circuit breaker, timeouts.

A ResilientCaller wraps one provider. Each call gets:
- a circuit breaker check (fail fast while open)
- up to ``max_attempts`` attempts with exponential backoff (1s, 2s, ...)
  on transport errors, timeouts, HTTP 408/429 and 5xx
- a total time budget across all attempts (asyncio.wait_for)

Per-attempt timeouts are enforced by the httpx client itself.
"""
import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Deque, Optional, Tuple

import httpx

from forecast_api.config import Settings
from forecast_api.domain.exceptions import UpstreamTimeoutError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429})


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Failure-ratio circuit breaker over a sliding sampling window.

    Opens when at least ``minimum_throughput`` calls were sampled within
    ``sampling_duration`` seconds and the failure ratio reaches
    ``failure_ratio``. After ``break_duration`` seconds one probe call is
    let through: success closes the circuit, failure re-opens it.
    """

    def __init__(
        self,
        name: str,
        failure_ratio: float = 0.5,
        minimum_throughput: int = 10,
        sampling_duration: float = 30.0,
        break_duration: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_ratio = failure_ratio
        self.minimum_throughput = minimum_throughput
        self.sampling_duration = sampling_duration
        self.break_duration = break_duration
        self._clock = clock
        self._outcomes: Deque[Tuple[float, bool]] = deque()
        self._opened_at: Optional[float] = None
        self._probe_started_at: Optional[float] = None

    @property
    def state(self) -> CircuitState:
        if self._opened_at is None:
            return CircuitState.CLOSED
        if self._clock() - self._opened_at >= self.break_duration:
            return CircuitState.HALF_OPEN
        return CircuitState.OPEN

    def allow_request(self) -> bool:
        state = self.state
        if state == CircuitState.CLOSED:
            return True
        if state == CircuitState.OPEN:
            return False
        # half-open: one probe at a time; a probe that never reported back
        # (e.g. cancelled) is superseded after another break_duration
        now = self._clock()
        if self._probe_started_at is None or now - self._probe_started_at >= self.break_duration:
            self._probe_started_at = now
            return True
        return False

    def record_success(self):
        if self._opened_at is not None:
            logger.info(f"Circuit '{self.name}' closed after successful probe")
            self._reset()
            return
        self._record(True)

    def record_failure(self):
        if self._opened_at is not None:
            logger.warning(f"Circuit '{self.name}' probe failed, re-opening")
            self._open()
            return
        self._record(False)
        total = len(self._outcomes)
        if total < self.minimum_throughput:
            return
        failures = sum(1 for _, ok in self._outcomes if not ok)
        if failures / total >= self.failure_ratio:
            logger.warning(
                f"Circuit '{self.name}' opened: {failures}/{total} failures "
                f"in the last {self.sampling_duration}s"
            )
            self._open()

    def _record(self, success: bool):
        now = self._clock()
        self._outcomes.append((now, success))
        while self._outcomes and now - self._outcomes[0][0] > self.sampling_duration:
            self._outcomes.popleft()

    def _open(self):
        self._opened_at = self._clock()
        self._probe_started_at = None
        self._outcomes.clear()

    def _reset(self):
        self._opened_at = None
        self._probe_started_at = None
        self._outcomes.clear()


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff."""
    max_attempts: int = 3
    base_delay: float = 1.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    def delay_for(self, attempt: int) -> float:
        """Delay after the given zero-based failed attempt."""
        return self.base_delay * (2 ** attempt)


class ResilientCaller:
    """Runs an HTTP request through the circuit breaker, retries and total timeout."""

    def __init__(
        self,
        name: str,
        retry_policy: Optional[RetryPolicy] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        total_timeout: float = 15.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.name = name
        self.retry_policy = retry_policy or RetryPolicy()
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name)
        self.total_timeout = total_timeout
        self._sleep = sleep

    @classmethod
    def from_settings(cls, name: str, settings: Settings) -> "ResilientCaller":
        return cls(
            name=name,
            retry_policy=RetryPolicy(
                max_attempts=settings.HTTP_RETRY_MAX_ATTEMPTS,
                base_delay=settings.HTTP_RETRY_BASE_DELAY_SECONDS,
            ),
            circuit_breaker=CircuitBreaker(
                name=name,
                failure_ratio=settings.CIRCUIT_BREAKER_FAILURE_RATIO,
                minimum_throughput=settings.CIRCUIT_BREAKER_MINIMUM_THROUGHPUT,
                sampling_duration=settings.CIRCUIT_BREAKER_SAMPLING_SECONDS,
                break_duration=settings.CIRCUIT_BREAKER_BREAK_SECONDS,
            ),
            total_timeout=settings.HTTP_TOTAL_TIMEOUT_SECONDS,
        )

    async def call(self, request: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        """Return the first successful (non-error) response.

        Raises:
            UpstreamUnavailableError: circuit open, non-retryable HTTP error,
                or every attempt failed
            UpstreamTimeoutError: total budget exceeded, or the last attempt timed out
        """
        try:
            return await asyncio.wait_for(self._call_with_retry(request), timeout=self.total_timeout)
        except asyncio.TimeoutError:
            logger.error(f"{self.name} did not answer within {self.total_timeout}s")
            raise UpstreamTimeoutError(
                f"{self.name} did not answer within {self.total_timeout}s", provider=self.name
            )

    async def _call_with_retry(self, request: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        max_attempts = self.retry_policy.max_attempts
        last_error: Optional[Exception] = None

        for attempt in range(max_attempts):
            if not self.circuit_breaker.allow_request():
                raise UpstreamUnavailableError(f"{self.name} circuit is open", provider=self.name)

            try:
                response = await request()
            except httpx.TimeoutException as e:
                self.circuit_breaker.record_failure()
                last_error = UpstreamTimeoutError(f"{self.name} request timed out: {e}", provider=self.name)
            except httpx.TransportError as e:
                self.circuit_breaker.record_failure()
                last_error = UpstreamUnavailableError(f"{self.name} is unreachable: {e}", provider=self.name)
            else:
                status = response.status_code
                if status in RETRYABLE_STATUS_CODES or status >= 500:
                    self.circuit_breaker.record_failure()
                    last_error = UpstreamUnavailableError(
                        f"{self.name} returned HTTP {status}", provider=self.name
                    )
                elif status >= 400:
                    self.circuit_breaker.record_success()
                    raise UpstreamUnavailableError(
                        f"{self.name} rejected the request with HTTP {status}", provider=self.name
                    )
                else:
                    self.circuit_breaker.record_success()
                    return response

            if attempt < max_attempts - 1:
                delay = self.retry_policy.delay_for(attempt)
                logger.warning(
                    f"Attempt {attempt + 1}/{max_attempts} to {self.name} failed: {last_error}. "
                    f"Retrying in {delay}s..."
                )
                await self._sleep(delay)
            else:
                logger.error(f"All {max_attempts} attempts to {self.name} failed: {last_error}")

        raise last_error
