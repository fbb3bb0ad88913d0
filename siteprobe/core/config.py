"""
Application Settings

All runtime configuration is resolved here from environment variables or a
``.env`` file. Probe components never read settings directly: the app builds a
:class:`~siteprobe.probes.http_client.ProbeConfig` once and hands it to each
component at construction time.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from siteprobe.probes.http_client import DEFAULT_USER_AGENT, ProbeConfig


class Settings(BaseSettings):
    """Environment-driven settings for the API, CLI and probes."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Probing
    # ------------------------------------------------------------------
    PROBE_TIMEOUT: float = Field(default=10.0, gt=0)
    LINK_TIMEOUT: float = Field(default=3.0, gt=0)
    MAX_REDIRECTS: int = Field(default=10, ge=1, le=50)
    MAX_CONCURRENCY: int = Field(default=10, ge=1, le=200)
    PAGE_LINK_LIMIT: int = Field(default=20, ge=1)
    WEBSITE_LINK_LIMIT: Optional[int] = Field(default=None, ge=1)
    USER_AGENT: str = DEFAULT_USER_AGENT
    RDAP_BASE_URL: str = "https://rdap.org"

    # ------------------------------------------------------------------
    # AI summary
    # ------------------------------------------------------------------
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o"

    # ------------------------------------------------------------------
    # API
    # ------------------------------------------------------------------
    RATE_LIMIT_CALLS: int = Field(default=100, ge=1)
    RATE_LIMIT_PERIOD: int = Field(default=60, ge=1)
    RECENT_DOMAINS_LIMIT: int = Field(default=10, ge=1)
    DATABASE_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level: {v}")
        return level

    @field_validator("RDAP_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    def probe_config(self) -> ProbeConfig:
        """Build the immutable probe configuration handed to every component."""
        return ProbeConfig(
            timeout=self.PROBE_TIMEOUT,
            link_timeout=self.LINK_TIMEOUT,
            max_redirects=self.MAX_REDIRECTS,
            max_concurrency=self.MAX_CONCURRENCY,
            page_link_limit=self.PAGE_LINK_LIMIT,
            website_link_limit=self.WEBSITE_LINK_LIMIT,
            user_agent=self.USER_AGENT,
            rdap_base_url=self.RDAP_BASE_URL,
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process settings (parsed once)."""
    return Settings()
