"""
Configuration management for the scheduler console.

Provides centralized, validated configuration from environment variables
with proper type checking and defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.navigation import VIEWS

DEFAULT_TOKEN_FILE = Path.home() / ".config" / "scheduler-console" / "token"


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: str = Field(default="production", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # API
    api_base_url: str = Field(
        default="http://localhost:8080/api/v1", alias="SCHEDULER_API_BASE_URL"
    )
    request_timeout: float = Field(default=30.0, gt=0, alias="SCHEDULER_REQUEST_TIMEOUT")

    # Session persistence
    token_file: Path = Field(default=DEFAULT_TOKEN_FILE, alias="SCHEDULER_TOKEN_FILE")

    # Navigation
    login_path: str = Field(default="/login", alias="SCHEDULER_LOGIN_PATH")
    landing_path: str = Field(default="/dashboard", alias="SCHEDULER_LANDING_PATH")

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("token_file", mode="before")
    @classmethod
    def expand_token_file(cls, v):
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def validate_required_settings() -> List[str]:
    """
    Validate that the settings needed to reach the API are usable.

    Returns:
        List of problems found, empty when the configuration is usable
    """
    missing = []
    try:
        config = get_settings()

        if not config.api_base_url.startswith(("http://", "https://")):
            missing.append("SCHEDULER_API_BASE_URL must be an absolute http(s) URL")
        if not config.login_path.startswith("/"):
            missing.append("SCHEDULER_LOGIN_PATH must start with '/'")
        if not config.landing_path.startswith("/"):
            missing.append("SCHEDULER_LANDING_PATH must start with '/'")
        if config.login_path == config.landing_path:
            missing.append("SCHEDULER_LANDING_PATH must differ from SCHEDULER_LOGIN_PATH")

        view_paths = [view.path for view in VIEWS]
        if config.login_path in view_paths:
            missing.append(f"SCHEDULER_LOGIN_PATH must not reuse the {config.login_path} view")
        if config.landing_path not in view_paths:
            missing.append(f"SCHEDULER_LANDING_PATH must be one of: {', '.join(view_paths)}")

    except Exception as e:
        missing.append(f"Configuration error: {e}")

    return missing


def print_configuration_summary():
    """Print a summary of the current configuration for debugging."""
    try:
        config = get_settings()
        print("=== Scheduler Console Configuration ===")
        print(f"Environment: {config.environment}")
        print(f"Debug Mode: {config.debug}")
        print(f"API Base URL: {config.api_base_url}")
        print(f"Request Timeout: {config.request_timeout}s")
        print(f"Token File: {config.token_file}")
        print(f"Stored Token: {'✓' if config.token_file.exists() else '✗'}")
        print(f"Login Route: {config.login_path}")
        print(f"Landing Route: {config.landing_path}")
        print("=" * 39)
    except Exception as e:
        print(f"Error loading configuration: {e}")
