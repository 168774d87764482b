"""Domain Events related to API calls and resilience.

Examples include events for when calls are deferred, retried, fail, or succeed,
and for the start and end of a batch.
"""

from dataclasses import dataclass, field
import time
from typing import Callable, Optional

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

EventListener = Callable[[DomainEvent], None]

# --- Single request events ---

@dataclass
class RequestInitiated(DomainEvent):
    """Event triggered when an attempt is about to be made."""
    endpoint: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestSucceeded(DomainEvent):
    """Event triggered when an attempt succeeds."""
    endpoint: str
    attempt_number: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestFailed(DomainEvent):
    """Event triggered when an operation fails definitively (terminal or retries exhausted)."""
    endpoint: str
    attempts: int
    error_kind: str
    error_message: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestDeferred(DomainEvent):
    """Event triggered when an attempt is deferred by the client-side rate limiter."""
    endpoint: str
    wait_time_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed attempt."""
    endpoint: str
    attempt_number: int
    delay_seconds: float
    error_kind: str
    timestamp: float = field(default_factory=time.time)

# --- Batch events ---

@dataclass
class BatchStarted(DomainEvent):
    """Event triggered when a batch run begins."""
    size: int
    concurrency_limit: int
    batch_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class BatchCompleted(DomainEvent):
    """Event triggered when every operation of a batch has settled."""
    size: int
    succeeded: int
    failed: int
    duration_ms: float
    batch_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
