from __future__ import annotations
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Editor settings, overridable through DXT_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_diagram_name: str = "Untitled Diagram"
    paste_offset: float = 40.0          # both axes, relative to the copied position
    id_strategy: Literal["uuid", "sequential"] = "uuid"
    json_indent: int = 2
    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    return Settings()
