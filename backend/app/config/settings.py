"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_YAHOO_API_URL = "https://query1.finance.yahoo.com"


class AppSettings(BaseSettings):
    """Configuration options for the portfolio simulator collaborators."""

    app_name: str = Field(default="Investment Portfolio Simulator")
    log_level: str = Field(default="INFO")

    yahoo_api_url: str = Field(
        default=DEFAULT_YAHOO_API_URL,
        description="Base URL of the Yahoo Finance API or a proxy in front of it.",
    )
    yahoo_timeout_seconds: float = Field(default=15.0, gt=0)
    yahoo_user_agent: str = Field(default="Mozilla/5.0 (portfolio-simulator)")

    default_projection_years: int = Field(default=10, ge=1, le=100)
    default_annual_return_rate: float = Field(
        default=7.0,
        description="Annual return (percent) used when no historical performance is available.",
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a dict suitable for logging."""

        return self.model_dump()


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_YAHOO_API_URL",
    "get_settings",
]
