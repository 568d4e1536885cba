"""Mini README: Centralised configuration models and helpers for the portal.

Structure:
    * PortalSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read ``KPIR_PORTAL_*`` environment variables
    (or a local ``.env`` file). The configuration is cached so validation
    runs once per process; tests construct ``PortalSettings`` directly.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PortalSettings(BaseSettings):
    """Runtime configuration for the recovery and account-security service."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the web service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the web service exposes.",
        ge=1,
        le=65535,
    )
    app_base_url: str = Field(
        "http://127.0.0.1:8000",
        description=(
            "Public origin used when building password reset links. Links point at"
            " the root with a query token because some hosts lack SPA rewrites."
        ),
    )
    reset_path: str = Field(
        "/reset-password",
        description="Canonical route that completes a password reset.",
    )
    reset_token_ttl_minutes: int = Field(
        60,
        description="Lifetime of a password reset token.",
        ge=1,
    )
    min_password_length: int = Field(
        8,
        description="Minimum accepted length for a new password.",
        ge=1,
    )
    failed_login_window_minutes: int = Field(
        15,
        description="Window inspected when deciding whether an account is locked out.",
        ge=1,
    )
    max_failed_logins: int = Field(
        5,
        description="Failed attempts within the window that trigger a lockout.",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="KPIR_PORTAL_",
        env_file=".env",
        case_sensitive=False,
    )

    @field_validator("reset_path")
    @classmethod
    def check_reset_path(cls, value: str) -> str:
        """Reset path must be an absolute route without query or fragment."""

        if not value.startswith("/") or "?" in value or "#" in value:
            raise ValueError("reset_path must be an absolute path such as '/reset-password'")
        return value

    @field_validator("app_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache()
def get_settings() -> PortalSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return PortalSettings()
