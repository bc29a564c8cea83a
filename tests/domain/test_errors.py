"""Provider error classification tests"""

import httpx
import pytest

from rosie.domain import (
    ProviderError,
    ProviderErrorKind,
    classify_provider_error,
    error_kind_for,
    friendly_provider_message,
)


@pytest.mark.parametrize(
    "status_code,message,expected",
    [
        (401, "nope", ProviderErrorKind.AUTHENTICATION),
        (403, "forbidden", ProviderErrorKind.AUTHENTICATION),
        (None, "Invalid API key provided", ProviderErrorKind.AUTHENTICATION),
        (429, "slow down", ProviderErrorKind.RATE_LIMITED),
        (None, "Too Many Requests", ProviderErrorKind.RATE_LIMITED),
        (529, "busy", ProviderErrorKind.OVERLOADED),
        (503, "unavailable", ProviderErrorKind.OVERLOADED),
        (None, "overloaded_error", ProviderErrorKind.OVERLOADED),
        (500, "internal server error", ProviderErrorKind.GENERIC),
        (None, "connection reset", ProviderErrorKind.GENERIC),
    ],
)
def test_error_kind_for(status_code, message, expected):
    assert error_kind_for(status_code, message) == expected


def test_friendly_messages():
    assert friendly_provider_message(ProviderErrorKind.RATE_LIMITED, "x").startswith("Rate limited")
    assert friendly_provider_message(ProviderErrorKind.CANCELLED, "x") == "Request cancelled."
    assert friendly_provider_message(ProviderErrorKind.GENERIC, "socket closed") == "socket closed"


class TestClassifyProviderError:
    def test_uses_response_status(self):
        request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
        response = httpx.Response(429, request=request)
        exc = httpx.HTTPStatusError("boom", request=request, response=response)

        error = classify_provider_error(exc)

        assert error.kind == ProviderErrorKind.RATE_LIMITED
        assert error.status_code == 429
        assert error.recoverable

    def test_plain_exception_falls_back_to_message(self):
        error = classify_provider_error(RuntimeError("authentication failed"))
        assert error.kind == ProviderErrorKind.AUTHENTICATION
        assert error.status_code is None
        assert not error.recoverable

    def test_provider_error_passes_through(self):
        original = ProviderError("x", kind=ProviderErrorKind.OVERLOADED)
        assert classify_provider_error(original) is original

    def test_empty_message_uses_type_name(self):
        error = classify_provider_error(TimeoutError())
        assert str(error) == "TimeoutError"
