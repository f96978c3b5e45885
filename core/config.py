from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DashboardSettings(BaseSettings):
    """Runtime settings, overridable via ``DASHBOARD_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DASHBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    user_count: int = Field(default=50, ge=0)
    seed: Optional[int] = None

    # Simulated latency (seconds) of the fake API calls.
    load_latency: float = Field(default=1.0, ge=0)
    apply_latency: float = Field(default=0.8, ge=0)
    refresh_latency: float = Field(default=1.2, ge=0)
    auto_refresh_interval: float = Field(default=30.0, gt=0)

    report_title: str = "Insights Dashboard"
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])


@lru_cache
def get_settings() -> DashboardSettings:
    return DashboardSettings()
