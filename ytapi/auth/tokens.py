"""OAuth 2.0 access token providers used for authorized API requests."""

import asyncio
import base64
import logging
import time
from typing import Protocol, runtime_checkable

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import AsyncOAuth2Client

from ytapi.auth.crypto import unseal_refresh_token, validate_encryption_key
from ytapi.errors import OAuthError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"


@runtime_checkable
class TokenProvider(Protocol):
    """Anything able to produce an OAuth 2.0 bearer token on demand."""

    async def generate(self) -> str:
        """Return the access token to use now.

        Raises:
            OAuthError: If no token can be produced
        """
        ...


class StaticTokenProvider:
    """Hands out a token obtained elsewhere (CLI flag, environment, tests)."""

    def __init__(self, token: str):
        self._token = token

    async def generate(self) -> str:
        if not self._token:
            raise OAuthError("No OAuth2 access token configured")
        return self._token


class UnavailableTokenProvider:
    """Provider for clients configured with an API key only."""

    async def generate(self) -> str:
        raise OAuthError("Authorized requests require OAuth2 credentials")


class RefreshTokenProvider:
    """Exchanges a long-lived refresh token for short-lived access tokens.

    The access token is cached until ``expiry_margin`` seconds before Google
    reports it expires. Concurrent callers share a single refresh.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        *,
        token_endpoint: str = GOOGLE_TOKEN_ENDPOINT,
        expiry_margin: float = 60.0,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._token_endpoint = token_endpoint
        self._expiry_margin = expiry_margin
        self._timeout = timeout
        self._transport = transport

        self._access_token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    @classmethod
    def from_sealed(
        cls,
        client_id: str,
        client_secret: str,
        enc_key: str | bytes,
        sealed_token: str | bytes,
        **kwargs,
    ) -> "RefreshTokenProvider":
        """Build a provider from an AES-GCM sealed refresh token.

        Args:
            client_id: Google OAuth client ID
            client_secret: Google OAuth client secret
            enc_key: Base64 string or raw 32-byte sealing key
            sealed_token: Raw blob, or its base64 encoding
            **kwargs: Forwarded to the constructor

        Raises:
            ValueError: If the key or the blob is invalid
        """
        if isinstance(sealed_token, str):
            sealed_token = base64.b64decode(sealed_token, validate=True)
        refresh_token = unseal_refresh_token(validate_encryption_key(enc_key), sealed_token)
        return cls(client_id, client_secret, refresh_token, **kwargs)

    async def generate(self) -> str:
        async with self._lock:
            if self._access_token and time.monotonic() < self._expires_at:
                return self._access_token
            return await self._refresh()

    async def _refresh(self) -> str:
        logger.debug("Refreshing OAuth2 access token")
        try:
            async with AsyncOAuth2Client(
                self._client_id,
                self._client_secret,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                token = await client.refresh_token(
                    self._token_endpoint, refresh_token=self._refresh_token
                )
        except AuthlibBaseError as e:
            logger.warning(f"OAuth2 token refresh rejected: {e.error}")
            raise OAuthError(e.description or e.error or "Unknown OAuth2 API error") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"OAuth2 token refresh failed: {e}")
            raise OAuthError(f"Token endpoint request failed: {e}") from e

        access_token = token.get("access_token")
        if not access_token:
            raise OAuthError("Token endpoint response did not contain an access token")

        # Google may rotate the refresh token
        if token.get("refresh_token"):
            self._refresh_token = token["refresh_token"]

        expires_in = float(token.get("expires_in") or 0)
        self._access_token = access_token
        self._expires_at = time.monotonic() + max(expires_in - self._expiry_margin, 0)
        return access_token
