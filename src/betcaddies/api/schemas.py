"""Pydantic schemas for the BetCaddies API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class AltOfferOut(BaseModel):
    bookmaker: str
    odds_decimal: float


class RecommendationOut(BaseModel):
    tier: str
    tour: str
    tour_event_id: str
    market_key: str
    selection: str
    confidence: int = Field(ge=1, le=5)
    best_bookmaker: str
    best_odds: float
    model_prob: float
    implied_prob: float
    edge: float
    alt_offers: list[AltOfferOut] = Field(default_factory=list)
    analysis_paragraph: str
    analysis_bullets: list[str] = Field(default_factory=list)


class RecommendationsRequest(BaseModel):
    """Loose wire payload; events and odds are normalized server-side."""

    events: list[dict[str, Any]]
    odds: list[dict[str, Any]]
    run_key: str | None = None
    persist: bool = False


class RecommendationsResponse(BaseModel):
    run_key: str
    input_hash: str
    tiers: dict[str, list[RecommendationOut]]
    selection_run_id: int | None = None


class RunResponse(BaseModel):
    run_key: str
    status: str
    input_hash: str | None
    tours_processed: list[str]
    created_at: datetime
    completed_at: datetime | None
    results: list[RecommendationOut]
