"""Construction of ready-to-use clients from settings."""

import logging

import httpx

from ytapi.api.client import ApiClient
from ytapi.auth.tokens import (
    RefreshTokenProvider,
    StaticTokenProvider,
    TokenProvider,
    UnavailableTokenProvider,
)
from ytapi.config import Settings, get_settings
from ytapi.youtube.client import YouTubeApiClient

logger = logging.getLogger(__name__)


def create_token_provider(settings: Settings) -> TokenProvider:
    """Pick the token provider matching the configured credentials.

    A sealed refresh token (with the OAuth client and sealing key) wins over
    a plain access token. With neither, authorized requests fail with
    ``OAuthError`` while API-key requests keep working.
    """
    if (
        settings.sealed_refresh_token
        and settings.token_enc_key
        and settings.google_client_id
        and settings.google_client_secret
    ):
        return RefreshTokenProvider.from_sealed(
            settings.google_client_id,
            settings.google_client_secret,
            settings.token_enc_key,
            settings.sealed_refresh_token,
            timeout=settings.load_timeout,
        )
    if settings.access_token:
        return StaticTokenProvider(settings.access_token)

    logger.info("No OAuth2 credentials configured, authorized requests will fail")
    return UnavailableTokenProvider()


def create_youtube_client(
    settings: Settings | None = None,
    token_provider: TokenProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> YouTubeApiClient:
    """Create a :class:`YouTubeApiClient` wired according to ``settings``."""
    settings = settings or get_settings()
    if token_provider is None:
        token_provider = create_token_provider(settings)

    api_client = ApiClient(
        settings.service,
        settings.api_version,
        settings.api_key,
        token_provider,
        settings.load_timeout,
        api_base=settings.api_base,
        transport=transport,
    )
    return YouTubeApiClient(api_client, page_size=settings.page_size)
