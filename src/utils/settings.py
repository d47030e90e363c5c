"""Lightweight settings layer wrapping environment variables with validation.

Does not replace AppConfig; augments it. Every field can be set through an
``ASSAY_EXPLORER_`` prefixed environment variable (or a ``.env`` file), e.g.
``ASSAY_EXPLORER_LOG_LEVEL=DEBUG``.
"""
from __future__ import annotations
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ASSAY_EXPLORER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field("INFO")
    json_logging: bool = Field(False)
    log_file: Optional[str] = Field(None)
    # Resource locations; empty means "use AppConfig defaults"
    assay_base: Optional[str] = Field(None)
    pdb_base_url: Optional[str] = Field(None)
    default_protein: Optional[str] = Field(None)
    request_timeout: float = Field(30.0, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
