"""OAuth 2.0 token providers."""

from ytapi.auth.crypto import seal_refresh_token, unseal_refresh_token, validate_encryption_key
from ytapi.auth.tokens import (
    GOOGLE_TOKEN_ENDPOINT,
    RefreshTokenProvider,
    StaticTokenProvider,
    TokenProvider,
    UnavailableTokenProvider,
)

__all__ = [
    "GOOGLE_TOKEN_ENDPOINT",
    "RefreshTokenProvider",
    "StaticTokenProvider",
    "TokenProvider",
    "UnavailableTokenProvider",
    "seal_refresh_token",
    "unseal_refresh_token",
    "validate_encryption_key",
]
