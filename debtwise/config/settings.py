"""
Configuration Management for DebtWise

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The fee and scoring constants are NOT configurable: they are module
constants of the engines so that outputs are reproducible everywhere.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Where the ledger lives and how backups are stamped."""

    model_config = SettingsConfigDict(
        env_prefix="DEBTWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_file: Path = Field(
        default=Path("debtwise_ledger.json"),
        description="Path of the JSON ledger snapshot"
    )
    audit_file: Optional[Path] = Field(
        default=None,
        description="Path of the JSON-lines audit trail (None = local log only)"
    )
    export_version: str = Field(
        default="1.0.0",
        description="Version string written into backup files"
    )
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Display currency (hint only, no conversion)"
    )

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the optional insight agent."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key (absent = insights always use fallbacks)"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=512,
        ge=64,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Default temperature for insight text"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Upper bound for a single insight call, retries included"
    )
    max_retries: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Attempts per insight call"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "gemini"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
