"""Dataclasses for tour events, odds and scored selections."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Tuple


class Tour(str, Enum):
    PGA = "PGA"
    DPWT = "DPWT"
    LPGA = "LPGA"
    LIV = "LIV"
    KFT = "KFT"


class Tier(str, Enum):
    PAR = "PAR"
    BIRDIE = "BIRDIE"
    EAGLE = "EAGLE"
    LONG_SHOT = "LONG_SHOT"


@dataclass(frozen=True)
class TourEvent:
    id: str
    tour: Tour
    event_name: str
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(frozen=True)
class OddsOffer:
    selection_name: str
    bookmaker: str
    odds_decimal: float


@dataclass(frozen=True)
class Market:
    key: str
    offers: Tuple[OddsOffer, ...] = ()


@dataclass(frozen=True)
class EventOdds:
    """Odds snapshot for one tour event."""

    tour_event_id: str
    markets: Tuple[Market, ...] = ()


@dataclass(frozen=True)
class AltOffer:
    bookmaker: str
    odds_decimal: float


@dataclass(frozen=True)
class Candidate:
    """One scored (event, market, selection) opportunity priced at the best book."""

    tour_event: TourEvent
    market_key: str
    selection: str
    tour: Tour
    model_prob: float
    implied_prob: float
    edge: float
    best_bookmaker: str
    best_odds: float
    alt_offers: Tuple[AltOffer, ...] = ()

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.tour_event.id, self.market_key, self.selection)


Portfolio = Dict[str, List[Candidate]]


@dataclass
class Recommendation:
    tier: str
    tour_event_id: str
    market_key: str
    selection: str
    tour: str
    confidence: int
    best_bookmaker: str
    best_odds: float
    model_prob: float
    implied_prob: float
    edge: float
    alt_offers: List[AltOffer] = field(default_factory=list)
    analysis_paragraph: str = ""
    analysis_bullets: List[str] = field(default_factory=list)
