"""Error taxonomy of the ShopSavvy Data API SDK.

Every failure of a remote operation is expressed as exactly one subclass of
`ShopSavvyApiError`, each tagged with an `ErrorKind`. The hierarchy is
closed: callers can branch on either the class or the `kind` attribute.
Only `RateLimitError` carries a server-provided retry delay.

Configuration problems (a missing or malformed API key, an unusable batch
input) are not API errors: they derive from `ConfigurationError` and are
raised before any request is made.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of a failed operation."""
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


# --- API errors (per-operation outcomes) ---

class ShopSavvyApiError(Exception):
    """Base class for classified operation failures."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    default_message = "Unknown API error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def is_transient(self) -> bool:
        """True for kinds that the retry policy may retry."""
        return self.kind in (ErrorKind.RATE_LIMIT, ErrorKind.NETWORK, ErrorKind.TIMEOUT)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r}, status_code={self.status_code!r})"


class AuthenticationError(ShopSavvyApiError):
    kind = ErrorKind.AUTHENTICATION
    default_message = "Authentication failed. Check your API key."


class NotFoundError(ShopSavvyApiError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"


class ValidationError(ShopSavvyApiError):
    kind = ErrorKind.VALIDATION
    default_message = "Request validation failed. Check your parameters."


class RateLimitError(ShopSavvyApiError):
    """HTTP 429. `retry_after` is the server-requested wait in seconds, if any."""
    kind = ErrorKind.RATE_LIMIT
    default_message = "Rate limit exceeded. Please slow down your requests."

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = 429,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, status_code)
        self.retry_after = retry_after


class NetworkError(ShopSavvyApiError):
    kind = ErrorKind.NETWORK
    default_message = "Network error"


class ApiTimeoutError(ShopSavvyApiError):
    kind = ErrorKind.TIMEOUT
    default_message = "Request timeout"


class UnknownApiError(ShopSavvyApiError):
    kind = ErrorKind.UNKNOWN


class ResponseParseError(UnknownApiError):
    """A successful HTTP response whose body could not be decoded."""
    default_message = "Could not parse API response"


# --- Configuration errors (raised before anything runs) ---

class ConfigurationError(Exception):
    """Raised when the SDK or a batch call is misconfigured."""


class MissingApiKeyError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("API key is required. Get one at https://shopsavvy.com/data")


class InvalidApiKeyError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("Invalid API key format. API keys should start with ss_live_ or ss_test_")


class BatchConfigurationError(ConfigurationError):
    """The batch call itself could not start (bad input sequence or limit)."""
