"""Service for executing API operations with automatic retries.

Implements exponential backoff for transient failures (rate limits, network
errors, timeouts). Terminal failures (authentication, not found, validation,
unknown) are returned to the caller on the first occurrence.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from shopsavvy.domain.errors import ApiTimeoutError, ShopSavvyApiError
from shopsavvy.domain.events.api_events import (
    DomainEvent,
    EventListener,
    RequestDeferred,
    RequestFailed,
    RequestInitiated,
    RequestSucceeded,
    RetryScheduled,
)
from shopsavvy.domain.models.common import RetryPolicyConfig
from shopsavvy.domain.models.results import Outcome
from shopsavvy.infrastructure.resilience.error_classifier import classify_exception
from shopsavvy.infrastructure.resilience.rate_limiter import RateLimiter
from shopsavvy.infrastructure.resilience.retry_policy import decide

T = TypeVar("T")

# A zero-argument coroutine factory; called once per attempt.
Operation = Callable[[], Awaitable[T]]
Sleeper = Callable[[float], Awaitable[Any]]

logger = logging.getLogger(__name__)


class RequestExecutor:
    """Runs operations to a value or a classified error, retrying transient failures."""

    def __init__(
        self,
        policy: Optional[RetryPolicyConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        event_listener: Optional[EventListener] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        """Initializes the RequestExecutor.

        Args:
            policy: Default retry policy, shared read-only by all operations.
            rate_limiter: Optional client-side pacing awaited before every attempt.
            event_listener: Optional callback receiving domain events.
            sleep: Non-blocking delay primitive (replaceable in tests).
        """
        self.policy = policy or RetryPolicyConfig()
        self.rate_limiter = rate_limiter
        self.event_listener = event_listener
        self._sleep = sleep

        logger.info(
            f"RequestExecutor initialized: max_attempts={self.policy.max_attempts}, "
            f"initial_delay={self.policy.initial_delay}s, max_delay={self.policy.max_delay}s, "
            f"multiplier={self.policy.backoff_multiplier}, "
            f"rate_limiter={'on' if rate_limiter else 'off'}"
        )

    def dispatch_event(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self.event_listener is None:
            return
        try:
            self.event_listener(event)
        except Exception as e:
            logger.warning(f"Event listener failed on {type(event).__name__}: {e}", exc_info=True)

    async def execute(
        self,
        op: Operation[T],
        *,
        endpoint: Optional[str] = None,
        deadline: Optional[float] = None,
        policy: Optional[RetryPolicyConfig] = None,
    ) -> T:
        """Executes `op` with retries and returns its value.

        Args:
            op: The operation to run.
            endpoint: Label used in logs and events (defaults to the callable's name).
            deadline: Optional budget in seconds for the sum of retry waits.
            policy: Overrides the executor's default retry policy for this call.

        Returns:
            The operation's value.

        Raises:
            ShopSavvyApiError: The terminal error, or the last transient error
                once attempts are exhausted, or ApiTimeoutError when the
                deadline would be exceeded.
        """
        outcome = await self.execute_outcome(op, endpoint=endpoint, deadline=deadline, policy=policy)
        return outcome.unwrap()

    async def execute_outcome(
        self,
        op: Operation[T],
        *,
        endpoint: Optional[str] = None,
        deadline: Optional[float] = None,
        policy: Optional[RetryPolicyConfig] = None,
    ) -> Outcome[T]:
        """Same loop as `execute`, but captures the result in an Outcome instead of raising."""
        config = policy or self.policy
        name = endpoint or getattr(op, "__name__", "operation")
        waited_total = 0.0
        attempt = 0

        while True:
            attempt += 1

            # 1. Wait for client-side pacing permission
            if self.rate_limiter is not None:
                deferred = await self.rate_limiter.wait_for_permission()
                if deferred > 0:
                    self.dispatch_event(RequestDeferred(endpoint=name, wait_time_seconds=deferred))

            # 2. Execute the operation
            self.dispatch_event(RequestInitiated(endpoint=name, attempt_number=attempt))
            start_time = time.perf_counter()
            try:
                value = await op()
            except Exception as e:
                error = classify_exception(e)
            else:
                latency_ms = (time.perf_counter() - start_time) * 1000
                self.dispatch_event(RequestSucceeded(endpoint=name, attempt_number=attempt, latency_ms=latency_ms))
                if attempt > 1:
                    logger.info(f"{name} succeeded on attempt {attempt}")
                return Outcome(value=value, attempts=attempt)

            # 3. Decide whether to retry
            decision = decide(error, attempt, config)
            if not decision.should_retry:
                if error.is_transient:
                    logger.error(f"Max attempts ({config.max_attempts}) reached for {name}. Last error: {error}")
                else:
                    logger.error(f"Non-retryable {error.kind.value} error calling {name} on attempt {attempt}: {error}")
                return self._fail(name, attempt, error)

            if deadline is not None and waited_total + decision.delay > deadline:
                timeout = ApiTimeoutError(
                    f"Retry deadline of {deadline:.2f}s exceeded for {name} after {attempt} attempts "
                    f"(last error: {error})"
                )
                timeout.__cause__ = error
                logger.error(str(timeout))
                return self._fail(name, attempt, timeout)

            logger.warning(
                f"Retryable {error.kind.value} error calling {name} on attempt {attempt}/{config.max_attempts}: "
                f"{error}. Waiting {decision.delay:.2f}s..."
            )
            self.dispatch_event(RetryScheduled(
                endpoint=name,
                attempt_number=attempt,
                delay_seconds=decision.delay,
                error_kind=error.kind.value,
            ))
            await self._sleep(decision.delay)
            waited_total += decision.delay

    def _fail(self, name: str, attempts: int, error: ShopSavvyApiError) -> Outcome[Any]:
        self.dispatch_event(RequestFailed(
            endpoint=name,
            attempts=attempts,
            error_kind=error.kind.value,
            error_message=error.message,
        ))
        return Outcome(error=error, attempts=attempts)
