"""
Application configuration using Pydantic Settings.
"""
from functools import lru_cache

import pytz
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


# Placeholder keys that must never guard a real till
INSECURE_API_KEYS = {
    "changeme",
    "secret",
    "test",
    "password",
    "default_key",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Kasir API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Storage
    DATABASE_URL: str = "sqlite:///./data/kasir.db"
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 2 * 1024 * 1024

    # Store clock
    TIMEZONE: str = "Asia/Jakarta"

    # Access gate bootstrap
    DEFAULT_API_KEY: str | None = None
    DEFAULT_API_USER: str = "admin"

    # Sale pipeline / reports
    REPORT_TOP_N: int = 10
    COMMIT_RETRIES: int = 5

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names pytz does not know."""
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"TIMEZONE '{v}' is not a known IANA timezone")
        return v

    @field_validator("REPORT_TOP_N", "COMMIT_RETRIES", "MAX_UPLOAD_BYTES")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_default_key(self) -> "Settings":
        """
        A seeded API key is the only thing standing between the network and
        the till, so placeholder values are refused unless DEBUG is on.
        """
        key = self.DEFAULT_API_KEY
        if key and not self.DEBUG and key.lower() in INSECURE_API_KEYS:
            raise ValueError(
                "DEFAULT_API_KEY is set to an insecure placeholder. "
                "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(24))'"
            )
        return self

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
