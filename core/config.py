"""
Pydantic-based configuration for the scanner.

All knobs are exposed via environment variables (or a local .env file) so
the CLI and the API share the same defaults without extra plumbing.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, env_file=".env")

    # Scope enforcement
    safe_mode: bool = Field(True, description="require targets to be allowlisted")
    allowlist_cidrs: List[str] = Field(default_factory=lambda: ["127.0.0.0/8", "::1/128"])
    allowlist_domains: List[str] = Field(default_factory=lambda: ["localhost"])

    # Concurrency and timeouts
    scan_concurrency: int = Field(256, description="max simultaneous probes")
    probe_timeout_s: float = Field(1.0, description="per-probe connect deadline")
    scan_deadline_s: Optional[float] = Field(None, description="overall scan deadline")

    # Port selection used when the caller gives none
    default_ports: str = Field("1-65535")

    log_level: str = Field("INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
