"""Maps raw failures onto the SDK error taxonomy.

Two entry points:
- `error_from_response` turns a non-2xx HTTP response into the matching
  ShopSavvyApiError subclass.
- `classify_exception` turns anything raised by an operation into a
  ShopSavvyApiError (already-classified errors pass through unchanged).

Retry-After parsing contract: the header value is either a non-negative
number of seconds (integer or decimal) or an HTTP-date. Dates are converted
to the number of seconds from now, clamped at zero. Any other value is
ignored, and the retry policy falls back to exponential backoff.
"""

import asyncio
import json
import logging
import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Mapping, Optional

import httpx

from shopsavvy.domain.errors import (
    ApiTimeoutError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ShopSavvyApiError,
    UnknownApiError,
    ValidationError,
)

logger = logging.getLogger(__name__)

RETRY_AFTER_HEADER = "Retry-After"


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[float]:
    """Parses a Retry-After header value into seconds.

    Args:
        value: Raw header value, or None when the header is absent.
        now: Reference time for HTTP-date values (defaults to current UTC time).

    Returns:
        Seconds to wait, or None if the value is missing or unparsable.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        seconds = None
    if seconds is not None:
        if seconds < 0 or not math.isfinite(seconds):
            logger.debug(f"Ignoring invalid Retry-After value: {value!r}")
            return None
        return seconds

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        logger.debug(f"Ignoring unparsable Retry-After value: {value!r}")
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    reference = now or datetime.now(timezone.utc)
    return max(0.0, (retry_at - reference).total_seconds())


def _extract_message(body: str) -> str:
    """Pulls the server's error message out of a JSON body, else returns the text."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body
    if isinstance(payload, dict):
        for key in ("error", "message"):
            if isinstance(payload.get(key), str):
                return payload[key]
    return body


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    # httpx.Headers is case-insensitive already; plain dicts are not.
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, header_value in headers.items():
        if key.lower() == lowered:
            return header_value
    return None


def error_from_response(status_code: int, headers: Mapping[str, str], body: str) -> ShopSavvyApiError:
    """Classifies a non-successful HTTP response."""
    server_message = _extract_message(body) or None

    if status_code in (401, 403):
        return AuthenticationError(status_code=status_code)
    if status_code == 404:
        return NotFoundError(server_message, status_code=status_code)
    if status_code in (400, 422):
        return ValidationError(server_message, status_code=status_code)
    if status_code == 429:
        retry_after = parse_retry_after(_header(headers, RETRY_AFTER_HEADER))
        return RateLimitError(status_code=status_code, retry_after=retry_after)
    return UnknownApiError(f"API error ({status_code}): {server_message or 'no details'}", status_code=status_code)


def classify_exception(exc: BaseException) -> ShopSavvyApiError:
    """Maps an exception raised by an operation onto the error taxonomy."""
    if isinstance(exc, ShopSavvyApiError):
        return exc
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        error: ShopSavvyApiError = ApiTimeoutError(f"Request timeout: {exc}" if str(exc) else None)
    elif isinstance(exc, (httpx.TransportError, OSError)):
        error = NetworkError(f"Network error: {exc}")
    else:
        error = UnknownApiError(f"Unexpected error: {type(exc).__name__}: {exc}")
    error.__cause__ = exc
    return error
