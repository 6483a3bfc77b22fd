"""Tests for OAuth token providers and refresh token sealing."""

import asyncio
import base64
import secrets
from urllib.parse import parse_qs
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from authlib.integrations.base_client import OAuthError as AuthlibOAuthError

from ytapi.auth import (
    GOOGLE_TOKEN_ENDPOINT,
    RefreshTokenProvider,
    StaticTokenProvider,
    TokenProvider,
    UnavailableTokenProvider,
    seal_refresh_token,
    unseal_refresh_token,
    validate_encryption_key,
)
from ytapi.errors import OAuthError


@pytest.fixture
def key():
    return secrets.token_bytes(32)


@pytest.fixture
def oauth_client():
    """Patch authlib's AsyncOAuth2Client and return the client instance mock."""
    with patch("ytapi.auth.tokens.AsyncOAuth2Client") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client.__aexit__.return_value = None
        mock_client.refresh_token = AsyncMock(
            return_value={"access_token": "access-1", "expires_in": 3600}
        )
        mock_client_class.return_value = mock_client
        mock_client.client_class = mock_client_class
        yield mock_client


class TestStaticProviders:
    @pytest.mark.asyncio
    async def test_static_token(self):
        assert await StaticTokenProvider("abc").generate() == "abc"

    @pytest.mark.asyncio
    async def test_static_empty_token(self):
        with pytest.raises(OAuthError):
            await StaticTokenProvider("").generate()

    @pytest.mark.asyncio
    async def test_unavailable(self):
        with pytest.raises(OAuthError, match="OAuth2 credentials"):
            await UnavailableTokenProvider().generate()

    def test_protocol(self):
        assert isinstance(StaticTokenProvider("abc"), TokenProvider)
        assert isinstance(UnavailableTokenProvider(), TokenProvider)
        assert isinstance(RefreshTokenProvider("id", "secret", "refresh"), TokenProvider)


class TestRefreshTokenProvider:
    @pytest.mark.asyncio
    async def test_refreshes_and_caches(self, oauth_client):
        provider = RefreshTokenProvider("client-id", "client-secret", "refresh-1")

        assert await provider.generate() == "access-1"
        assert await provider.generate() == "access-1"

        oauth_client.refresh_token.assert_awaited_once_with(
            GOOGLE_TOKEN_ENDPOINT, refresh_token="refresh-1"
        )
        oauth_client.client_class.assert_called_once_with(
            "client-id", "client-secret", timeout=15.0, transport=None
        )

    @pytest.mark.asyncio
    async def test_refreshes_again_near_expiry(self, oauth_client):
        oauth_client.refresh_token.side_effect = [
            {"access_token": "access-1", "expires_in": 30},
            {"access_token": "access-2", "expires_in": 3600},
        ]
        provider = RefreshTokenProvider("id", "secret", "refresh-1", expiry_margin=60)

        assert await provider.generate() == "access-1"
        assert await provider.generate() == "access-2"

    @pytest.mark.asyncio
    async def test_rotated_refresh_token_is_used(self, oauth_client):
        oauth_client.refresh_token.side_effect = [
            {"access_token": "access-1", "expires_in": 0, "refresh_token": "refresh-2"},
            {"access_token": "access-2", "expires_in": 3600},
        ]
        provider = RefreshTokenProvider("id", "secret", "refresh-1")

        await provider.generate()
        await provider.generate()

        second = oauth_client.refresh_token.call_args_list[1]
        assert second.kwargs["refresh_token"] == "refresh-2"

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_refresh(self, oauth_client):
        provider = RefreshTokenProvider("id", "secret", "refresh-1")

        tokens = await asyncio.gather(provider.generate(), provider.generate(), provider.generate())

        assert tokens == ["access-1"] * 3
        assert oauth_client.refresh_token.await_count == 1

    @pytest.mark.asyncio
    async def test_rejected_refresh(self, oauth_client):
        oauth_client.refresh_token.side_effect = AuthlibOAuthError(
            error="invalid_grant", description="Token has been expired or revoked."
        )
        provider = RefreshTokenProvider("id", "secret", "refresh-1")

        with pytest.raises(OAuthError, match="expired or revoked") as exc_info:
            await provider.generate()

        assert isinstance(exc_info.value.__cause__, AuthlibOAuthError)

    @pytest.mark.asyncio
    async def test_network_failure(self, oauth_client):
        oauth_client.refresh_token.side_effect = httpx.ConnectError("no route to host")
        provider = RefreshTokenProvider("id", "secret", "refresh-1")

        with pytest.raises(OAuthError, match="Token endpoint request failed"):
            await provider.generate()

    @pytest.mark.asyncio
    async def test_missing_access_token(self, oauth_client):
        oauth_client.refresh_token.return_value = {"token_type": "Bearer"}
        provider = RefreshTokenProvider("id", "secret", "refresh-1")

        with pytest.raises(OAuthError, match="did not contain an access token"):
            await provider.generate()

    @pytest.mark.asyncio
    async def test_from_sealed(self, oauth_client, key):
        sealed = base64.b64encode(seal_refresh_token(key, "stored-refresh")).decode()

        provider = RefreshTokenProvider.from_sealed(
            "id", "secret", base64.b64encode(key).decode(), sealed
        )
        await provider.generate()

        assert oauth_client.refresh_token.call_args.kwargs["refresh_token"] == "stored-refresh"

    def test_from_sealed_wrong_key(self, key):
        sealed = seal_refresh_token(key, "stored-refresh")

        with pytest.raises(ValueError):
            RefreshTokenProvider.from_sealed("id", "secret", secrets.token_bytes(32), sealed)


class TestRefreshGrant:
    """The refresh grant as authlib sends it, against a fake token endpoint."""

    @staticmethod
    def make_provider(handler) -> RefreshTokenProvider:
        return RefreshTokenProvider(
            "client-id",
            "client-secret",
            "refresh-1",
            transport=httpx.MockTransport(handler),
        )

    @pytest.mark.asyncio
    async def test_token_response(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={"access_token": "ya29.fresh", "expires_in": 3599, "token_type": "Bearer"},
            )

        provider = self.make_provider(handler)

        assert await provider.generate() == "ya29.fresh"
        assert await provider.generate() == "ya29.fresh"

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == GOOGLE_TOKEN_ENDPOINT
        form = parse_qs(request.content.decode())
        assert form["grant_type"] == ["refresh_token"]
        assert form["refresh_token"] == ["refresh-1"]
        credentials = base64.b64encode(b"client-id:client-secret").decode()
        assert request.headers["Authorization"] == f"Basic {credentials}"

    @pytest.mark.asyncio
    async def test_invalid_grant(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={
                    "error": "invalid_grant",
                    "error_description": "Token has been expired or revoked.",
                },
            )

        provider = self.make_provider(handler)

        with pytest.raises(OAuthError, match="Token has been expired or revoked."):
            await provider.generate()

    @pytest.mark.asyncio
    async def test_server_error_page(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                500, text="<html>Internal Server Error</html>", headers={"Content-Type": "text/html"}
            )

        provider = self.make_provider(handler)

        with pytest.raises(OAuthError, match="Token endpoint request failed") as exc_info:
            await provider.generate()

        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)


class TestSealing:
    def test_round_trip(self, key):
        blob = seal_refresh_token(key, "1//refresh-token")

        assert blob != b"1//refresh-token"
        assert unseal_refresh_token(key, blob) == "1//refresh-token"

    def test_nonce_is_random(self, key):
        assert seal_refresh_token(key, "same") != seal_refresh_token(key, "same")

    def test_tampered_blob(self, key):
        blob = bytearray(seal_refresh_token(key, "token"))
        blob[-1] ^= 0x01

        with pytest.raises(ValueError, match="could not be authenticated"):
            unseal_refresh_token(key, bytes(blob))

    def test_short_blob(self, key):
        with pytest.raises(ValueError, match="too short"):
            unseal_refresh_token(key, b"short")

    def test_validate_key_from_base64(self, key):
        assert validate_encryption_key(base64.b64encode(key).decode()) == key

    def test_validate_key_not_base64(self):
        with pytest.raises(ValueError, match="base64"):
            validate_encryption_key("not base64!!")

    def test_validate_key_wrong_length(self):
        with pytest.raises(ValueError, match="exactly 32 bytes"):
            validate_encryption_key(secrets.token_bytes(16))

