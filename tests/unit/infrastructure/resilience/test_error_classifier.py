import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from shopsavvy.domain.errors import (
    ApiTimeoutError,
    AuthenticationError,
    ErrorKind,
    NetworkError,
    NotFoundError,
    RateLimitError,
    UnknownApiError,
    ValidationError,
)
from shopsavvy.infrastructure.resilience.error_classifier import (
    classify_exception,
    error_from_response,
    parse_retry_after,
)

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("status_code, expected", [
    (401, AuthenticationError),
    (403, AuthenticationError),
    (404, NotFoundError),
    (400, ValidationError),
    (422, ValidationError),
    (429, RateLimitError),
    (500, UnknownApiError),
    (503, UnknownApiError),
    (418, UnknownApiError),
])
def test_status_codes_map_to_error_kinds(status_code, expected):
    error = error_from_response(status_code, {}, "")
    assert type(error) is expected
    assert error.status_code == status_code


def test_server_message_is_used_for_not_found():
    error = error_from_response(404, {}, '{"success": false, "error": "Product not found"}')
    assert error.message == "Product not found"
    assert error.kind is ErrorKind.NOT_FOUND


def test_server_message_falls_back_to_raw_body():
    error = error_from_response(422, {}, "bad identifier")
    assert error.message == "bad identifier"


def test_server_error_is_unknown_and_includes_status():
    error = error_from_response(502, {}, "")
    assert error.kind is ErrorKind.UNKNOWN
    assert "502" in error.message


def test_rate_limit_reads_retry_after_header_case_insensitively():
    error = error_from_response(429, {"retry-after": "7"}, "")
    assert isinstance(error, RateLimitError)
    assert error.retry_after == 7.0


def test_rate_limit_without_header_has_no_retry_after():
    error = error_from_response(429, {}, "")
    assert error.retry_after is None


@pytest.mark.parametrize("value, expected", [
    ("5", 5.0),
    ("0", 0.0),
    ("1.5", 1.5),
    (" 3 ", 3.0),
    ("-1", None),
    ("nan", None),
    ("inf", None),
    ("soon", None),
    ("", None),
    (None, None),
])
def test_parse_retry_after_seconds(value, expected):
    assert parse_retry_after(value, now=NOW) == expected


def test_parse_retry_after_http_date():
    assert parse_retry_after("Mon, 01 Jan 2024 12:00:30 GMT", now=NOW) == 30.0


def test_parse_retry_after_past_http_date_clamps_to_zero():
    assert parse_retry_after("Mon, 01 Jan 2024 11:00:00 GMT", now=NOW) == 0.0


def test_classify_passes_through_classified_errors():
    error = NotFoundError()
    assert classify_exception(error) is error


@pytest.mark.parametrize("exc, expected", [
    (httpx.ReadTimeout("read timed out"), ApiTimeoutError),
    (asyncio.TimeoutError(), ApiTimeoutError),
    (httpx.ConnectError("connection refused"), NetworkError),
    (ConnectionResetError("reset by peer"), NetworkError),
    (KeyError("surprise"), UnknownApiError),
])
def test_classify_exception_maps_transport_failures(exc, expected):
    error = classify_exception(exc)
    assert type(error) is expected
    assert error.__cause__ is exc


def test_transient_flag_matches_retryable_kinds():
    assert NetworkError().is_transient
    assert ApiTimeoutError().is_transient
    assert RateLimitError().is_transient
    assert not NotFoundError().is_transient
    assert not UnknownApiError().is_transient
