"""
Configuration management for oktasource.

This module provides centralized configuration management using Pydantic
for validation and type safety.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


OKTA_HOSTED_SUFFIXES = (".okta.com", ".oktapreview.com", ".okta-emea.com")


class OktaSettings(BaseSettings):
    """Okta API configuration settings."""

    domain: Optional[str] = Field(default=None, description="Okta domain")
    api_token: Optional[str] = Field(default=None, description="Okta API token")
    page_limit: int = Field(default=200, ge=1, description="Page size for list requests")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: Optional[str]) -> Optional[str]:
        """Validate Okta domain format."""
        if v is None:
            return v
        v = v.strip().removeprefix("https://").rstrip("/")
        if not v.endswith(OKTA_HOSTED_SUFFIXES):
            raise ValueError(
                "Okta domain must end with one of: " + ", ".join(OKTA_HOSTED_SUFFIXES)
            )
        return v

    model_config = SettingsConfigDict(
        env_prefix="OKTA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: str = Field(default="INFO")
    file: Optional[Path] = Field(default=None)
    structured: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Configuration sections
    okta: OktaSettings = Field(default_factory=OktaSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment setting."""
        valid_envs = {"development", "testing", "staging", "production"}
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from environment
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: The application configuration
    """
    return Settings()
