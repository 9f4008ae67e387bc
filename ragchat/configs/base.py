"""
Shared settings plumbing.

Every section reads the same ``.env`` file with case-insensitive keys and
ignores variables it does not own; only the environment prefix differs.
The root settings object also carries the process-wide runtime flags.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

ENV_FILE = ".env"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def section_config(env_prefix: str = "") -> SettingsConfigDict:
    """Settings source config for one section, e.g. ``section_config("LLM_")``."""
    return SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        env_prefix=env_prefix,
        case_sensitive=False,
        extra="ignore",
    )


class BaseSettings(PydanticBaseSettings):
    """Runtime flags shared by the API server and the ingest CLI."""

    model_config = section_config()

    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Deployment environment name, reported in startup logs",
    )
    debug: bool = Field(default=False, description="Run FastAPI in debug mode")
    log_level: LogLevel = Field(default="INFO", description="Root logger level")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        return value.upper() if isinstance(value, str) else value
