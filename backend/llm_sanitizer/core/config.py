"""
LLM JSON Sanitizer - Configuration Module
=========================================
Tunables are loaded from environment variables (prefix ``LLM_SANITIZER_``)
or an optional ``.env`` file. Every field has a safe default.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Sanitizer settings loaded from environment variables and .env."""

    # Pipeline
    max_fixpoint_iterations: int = Field(default=50, ge=1, le=1000)
    max_diagnostics_per_step: int = Field(default=20, ge=1, le=1000)
    parse_after_each_step: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    debug: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "LLM_SANITIZER_"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
