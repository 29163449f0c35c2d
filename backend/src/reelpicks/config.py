"""reelpicks — Application Configuration."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reelpicks.domain.enums import ProviderFamily
from reelpicks.shared.providers.types import DEFAULT_CATALOG, BackendDescriptor, validate_catalog


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class BackendSpec(BaseModel):
    """One catalog entry as written in ``MODEL_CATALOG`` (JSON list)."""

    name: str = Field(..., min_length=1)
    rpd: int = Field(..., gt=0)
    rpm: int = Field(..., gt=0)
    provider: ProviderFamily

    def to_descriptor(self) -> BackendDescriptor:
        return BackendDescriptor(
            name=self.name,
            daily_budget=self.rpd,
            minute_budget=self.rpm,
            family=self.provider,
        )


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    # ── Application ──────────────────────────────────────────
    app_name: str = "reelpicks"
    app_env: Environment = Environment.DEVELOPMENT
    app_debug: bool = False
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # ── Provider credentials ─────────────────────────────────
    gemini_api_key: str = ""
    openrouter_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    # ── Model catalog (priority order) ───────────────────────
    # JSON list of {"name", "rpd", "rpm", "provider"}; empty = built-in catalog
    model_catalog: list[BackendSpec] = Field(default_factory=list)

    # ── Dispatch ─────────────────────────────────────────────
    max_attempts: int = Field(4, ge=1)
    cooldown_seconds: float = Field(60.0, gt=0)
    retry_after_seconds: int = Field(60, ge=0)
    provider_timeout_seconds: float = Field(60.0, gt=0)

    # ── Derived helpers ──────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    def backend_catalog(self) -> tuple[BackendDescriptor, ...]:
        if not self.model_catalog:
            return DEFAULT_CATALOG
        return tuple(spec.to_descriptor() for spec in self.model_catalog)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def _validate_catalog(self) -> Settings:
        validate_catalog(self.backend_catalog())
        return self


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
