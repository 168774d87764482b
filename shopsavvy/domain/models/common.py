"""Defines common Value Objects used across the SDK.

These objects represent simple values or concepts like product identifiers,
retailer names and retry configuration, ensuring consistency and type safety.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
ProductIdentifier = NewType("ProductIdentifier", str)  # Barcode, ASIN, URL, model number or ShopSavvy ID
RetailerName = NewType("RetailerName", str)            # e.g. 'amazon', 'walmart'
IsoDate = NewType("IsoDate", str)                      # YYYY-MM-DD
EndpointName = NewType("EndpointName", str)            # Logical endpoint label used in logs/events

# All durations in the SDK are float seconds.
Seconds = NewType("Seconds", float)


class OutputFormat(str, Enum):
    """Available output formats."""
    JSON = "json"
    CSV = "csv"

    def __str__(self) -> str:
        return self.value


class MonitoringFrequency(str, Enum):
    """Available monitoring frequencies."""
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"

    def __str__(self) -> str:
        return self.value


# --- Resilience Value Objects ---

@dataclass(frozen=True)
class RetryPolicyConfig:
    """Value Object representing retry backoff configuration.

    Immutable once constructed, so a single instance can be shared by every
    concurrent operation of a client without locking.

    Attributes:
        max_attempts: Total attempts allowed per operation (first call included).
        initial_delay: Delay in seconds before the first retry.
        max_delay: Upper bound for any computed backoff delay.
        backoff_multiplier: Growth factor applied per attempt.
    """
    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("Delays must be non-negative")
        if self.max_delay < self.initial_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= initial_delay ({self.initial_delay})"
            )
        if self.backoff_multiplier < 1:
            raise ValueError(f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}")


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of consulting the retry policy after a failed attempt."""
    should_retry: bool
    delay: float = 0.0
