"""Configuration for the ShopSavvy API client."""

from dataclasses import dataclass, field
from typing import Optional

from shopsavvy.domain.models.common import RetryPolicyConfig

DEFAULT_BASE_URL = "https://api.shopsavvy.com/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CONCURRENCY_LIMIT = 5


@dataclass(frozen=True)
class RateLimitSettings:
    """Client-side pacing: at most `max_requests` attempts per `time_window` seconds."""
    max_requests: int
    time_window: float = 60.0


@dataclass(frozen=True)
class ClientConfig:
    """Everything needed to build a ShopSavvyClient.

    Attributes:
        api_key: ShopSavvy API key (ss_live_... or ss_test_...).
        base_url: API root URL.
        timeout: Per-request timeout in seconds.
        retry: Retry policy shared by every request of the client.
        concurrency_limit: Default in-flight cap for fan-out helpers.
        rate_limit: Optional client-side pacing; None disables it.
    """
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    retry: RetryPolicyConfig = field(default_factory=RetryPolicyConfig)
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT
    rate_limit: Optional[RateLimitSettings] = None
