"""Configuration management for the YouTube Data API client."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="YT_", extra="ignore")

    # REST API
    api_key: str = ""
    api_base: str = "https://www.googleapis.com/"
    service: str = "youtube"
    api_version: int = 3
    load_timeout: float = Field(default=15.0, gt=0)  # seconds

    # Pagination
    page_size: int = Field(default=50, ge=1, le=50)

    # OAuth
    access_token: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    token_enc_key: str = ""
    sealed_refresh_token: str = ""  # base64 of the AES-GCM blob

    # Environment
    env: str = Field(default="dev", pattern="^(dev|prod)$")
    log_level: str = "INFO"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
