"""Exceptions raised by the Google REST API clients.

Every failure is scoped to the single request (or pagination run) that
produced it. Nothing is retried; the caller decides whether to try again.
"""

from typing import Any

import httpx


class ApiClientError(Exception):
    """Base class of all errors raised by this package."""


class HttpAbortError(ApiClientError):
    """The request was aborted before a response was received."""

    def __init__(self, message: str = "The request has been aborted", request: httpx.Request | None = None):
        super().__init__(message)
        self.request = request


class HttpNetworkError(ApiClientError):
    """A transport-level failure (DNS, connect, read, write, protocol)."""

    def __init__(self, message: str, request: httpx.Request | None = None):
        super().__init__(message)
        self.request = request


class HttpTimeoutError(ApiClientError):
    """The request did not complete within the configured timeout."""

    def __init__(self, timeout: float, request: httpx.Request | None = None):
        super().__init__(f"The request has timed out, the timeout is set to {timeout} s")
        self.timeout = timeout
        self.request = request


class GoogleApiError(ApiClientError):
    """The Google API answered with a non-200 status code.

    Attributes:
        response: The raw httpx response
        status_code: HTTP status code of the response
        api_message: The ``error.message`` of Google's JSON error body, if any
    """

    def __init__(self, response: httpx.Response):
        self.response = response
        self.status_code = response.status_code
        self.api_message = _extract_api_message(response)

        message = (
            f"The Google API rejected the request with {response.status_code} "
            f"({response.reason_phrase}) code"
        )
        if self.api_message:
            message = f"{message}: {self.api_message}"
        super().__init__(message)

    @property
    def request(self) -> httpx.Request:
        return self.response.request


class HttpBodyParseError(ApiClientError):
    """The response had a 200 status but its body is not valid JSON."""

    def __init__(self, response: httpx.Response, parse_error: ValueError):
        super().__init__(f"Cannot parse response body: {response.text[:500]}")
        self.response = response
        self.parse_error = parse_error


class OAuthError(ApiClientError):
    """A token provider failed to produce an OAuth 2.0 access token."""

    def __init__(self, message: str = "Unknown OAuth2 API error"):
        super().__init__(message)


def _extract_api_message(response: httpx.Response) -> str | None:
    """Pull the human-readable message out of a Google API error body."""
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
        return message if isinstance(message, str) else None
    return None
