"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUDIT_",
        extra="ignore",
    )

    environment: Literal["local", "test", "staging", "production"] = Field(default="local")
    service_name: str = Field(default="audit-service")
    database_url: str = Field(default="sqlite:///./data/audit.db")
    sql_echo: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)
    auto_create_schema: bool = Field(default=False)
    default_per_page: int = Field(default=25, ge=1)
    max_per_page: int = Field(default=100, ge=1)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("default_per_page", "max_per_page", mode="before")
    @classmethod
    def ensure_int_page_size(cls, value: int | str | None, info: ValidationInfo) -> int | str:
        if value in (None, ""):
            return 25 if info.field_name == "default_per_page" else 100
        return value


@lru_cache
def get_settings() -> AppSettings:
    """Return cached application settings instance."""

    return AppSettings()
