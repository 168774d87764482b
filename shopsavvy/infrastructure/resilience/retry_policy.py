"""Retry policy: decides whether a failed attempt is retried and after how long.

`decide` is a pure function of the error, the attempt number and the policy
configuration, so the same inputs always yield the same decision.
"""

import math

from shopsavvy.domain.errors import ErrorKind, RateLimitError, ShopSavvyApiError
from shopsavvy.domain.models.common import RetryDecision, RetryPolicyConfig

RETRYABLE_KINDS = frozenset({ErrorKind.RATE_LIMIT, ErrorKind.NETWORK, ErrorKind.TIMEOUT})

NO_RETRY = RetryDecision(should_retry=False, delay=0.0)


def backoff_delay(attempt: int, config: RetryPolicyConfig) -> float:
    """Exponential backoff for the given 1-based attempt, capped at max_delay."""
    if config.initial_delay == 0 or config.backoff_multiplier == 1:
        return min(config.initial_delay, config.max_delay)
    # Compare exponents so large attempt numbers never build an overflowing power
    if (attempt - 1) * math.log(config.backoff_multiplier) >= math.log(config.max_delay / config.initial_delay):
        return config.max_delay
    try:
        delay = config.initial_delay * (config.backoff_multiplier ** (attempt - 1))
    except OverflowError:
        return config.max_delay
    return min(delay, config.max_delay)


def decide(error: ShopSavvyApiError, attempt: int, config: RetryPolicyConfig) -> RetryDecision:
    """Decides what to do after `attempt` (1-based) failed with `error`.

    Args:
        error: The classified error of the failed attempt.
        attempt: Number of the attempt that just failed, starting at 1.
        config: Retry policy configuration.

    Returns:
        A RetryDecision. A server-provided Retry-After on a rate limit
        overrides the computed backoff verbatim.
    """
    if error.kind not in RETRYABLE_KINDS:
        return NO_RETRY
    if attempt >= config.max_attempts:
        return NO_RETRY

    if isinstance(error, RateLimitError) and error.retry_after is not None:
        return RetryDecision(should_retry=True, delay=error.retry_after)

    return RetryDecision(should_retry=True, delay=backoff_delay(attempt, config))
