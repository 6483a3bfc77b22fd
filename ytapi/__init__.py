"""Async client library for the YouTube Data REST API."""

from ytapi.api import ApiClient
from ytapi.errors import (
    ApiClientError,
    GoogleApiError,
    HttpAbortError,
    HttpBodyParseError,
    HttpNetworkError,
    HttpTimeoutError,
    OAuthError,
)
from ytapi.factory import create_youtube_client
from ytapi.youtube import YouTubeApiClient, list_all

__version__ = "1.0.0"

__all__ = [
    "ApiClient",
    "ApiClientError",
    "GoogleApiError",
    "HttpAbortError",
    "HttpBodyParseError",
    "HttpNetworkError",
    "HttpTimeoutError",
    "OAuthError",
    "YouTubeApiClient",
    "create_youtube_client",
    "list_all",
]
