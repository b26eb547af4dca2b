"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Identity provider (Auth0-compatible JWTs)
    auth0_domain: str = Field(default="", validation_alias="AUTH0_DOMAIN")
    auth0_audience: str = Field(default="", validation_alias="AUTH0_AUDIENCE")

    # Development mode - bypasses auth for local development
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    # Jina AI reader - the API key is a server-held secret and is optional at startup;
    # a missing key is reported per request by the process-url endpoint.
    jina_api_key: str | None = Field(default=None, validation_alias="JINA_API_KEY")
    jina_reader_url: str = Field(
        default="https://r.jina.ai/", validation_alias="JINA_READER_URL",
    )
    jina_timeout: float = Field(default=30.0, validation_alias="JINA_TIMEOUT")
    jina_max_retries: int = Field(default=1, ge=0, validation_alias="JINA_MAX_RETRIES")

    favicon_service_url: str = Field(
        default="https://www.google.com/s2/favicons",
        validation_alias="FAVICON_SERVICE_URL",
    )

    # Field length limits
    summary_max_length: int = Field(default=1000, validation_alias="SUMMARY_MAX_LENGTH")
    max_title_length: int = Field(default=500, validation_alias="MAX_TITLE_LENGTH")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE bypasses authentication, so it is only allowed with local
        databases (localhost or a SQLite file).
        """
        if not self.dev_mode:
            return self

        parsed = urlparse(self.database_url)
        if parsed.scheme.startswith("sqlite"):
            return self

        hostname = parsed.hostname or ""
        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def auth0_issuer(self) -> str:
        """Get the Auth0 issuer URL."""
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        """Get the Auth0 JWKS URL for fetching public keys."""
        return f"https://{self.auth0_domain}/.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
