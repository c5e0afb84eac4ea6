"""Environment-driven configuration helpers for BetCaddies."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TierPolicy = Literal["odds_band", "edge_threshold"]


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: AnyUrl | str = Field(default="sqlite:///./betcaddies.db")
    log_level: str = Field(default="INFO")

    tier_size: int = Field(default=10, ge=1, le=100)
    max_bets_per_player: int = Field(default=2, ge=1)
    tour_minimum: int = Field(default=2, ge=0)
    max_alt_offers: int = Field(default=5, ge=0)
    # odds_band is the published scheme; edge_threshold is kept as an opt-in alternative
    tier_policy: TierPolicy = Field(default="odds_band")

    betcaddies_api_key: str = Field(default="", validation_alias="BETCADDIES_API_KEY")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def get_api_access_key() -> str:
    key = os.getenv("BETCADDIES_API_KEY") or get_settings().betcaddies_api_key
    if not key:
        raise RuntimeError(
            "BETCADDIES_API_KEY is not configured. Set it in your environment or .env file."
        )
    return key
