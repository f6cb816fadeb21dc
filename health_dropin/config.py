"""Standalone server configuration using Pydantic Settings.

Values are loaded from environment variables and .env files. Variable names
are matched exactly, so the listening port is read from lowercase ``port``
and falls back to 3000 when it is missing or not a usable TCP port number.
"""

from __future__ import annotations

from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 3000


class HealthSettings(BaseSettings):
    """Settings for the standalone health server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # ── General ───────────────────────────────
    environment: str = "development"
    log_level: str = "INFO"
    service_name: str = "health-dropin"

    # ── Server ────────────────────────────────
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    startup_timeout: float = 5.0

    @field_validator("port", mode="before")
    @classmethod
    def _fallback_port(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not (value.isascii() and value.isdecimal()):
                return DEFAULT_PORT
            value = int(value)
        if isinstance(value, int) and not 0 <= value <= 65535:
            return DEFAULT_PORT
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def json_logs(self) -> bool:
        return self.is_production
