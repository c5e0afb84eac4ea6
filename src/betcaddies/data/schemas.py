"""Pydantic schemas that normalize incoming tour events and odds snapshots."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from betcaddies.selection.types import EventOdds, Market, OddsOffer, Tour, TourEvent

logger = logging.getLogger(__name__)


class TourEventSchema(BaseModel):
    id: str = Field(validation_alias=AliasChoices("id", "eventId", "tourEventId"))
    tour: Tour
    event_name: str = Field(validation_alias=AliasChoices("event_name", "eventName", "name"))
    start_date: datetime | None = Field(
        default=None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: datetime | None = Field(
        default=None, validation_alias=AliasChoices("end_date", "endDate")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("tour", mode="before")
    @classmethod
    def _upper_tour(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    def to_domain(self) -> TourEvent:
        return TourEvent(
            id=self.id,
            tour=self.tour,
            event_name=self.event_name,
            start_date=self.start_date,
            end_date=self.end_date,
        )


class OddsOfferSchema(BaseModel):
    selection_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("selection_name", "selectionName", "selection", "player"),
    )
    bookmaker: str = Field(validation_alias=AliasChoices("bookmaker", "book"))
    odds_decimal: float = Field(
        ge=1.0, validation_alias=AliasChoices("odds_decimal", "oddsDecimal", "odds")
    )

    def to_domain(self) -> OddsOffer:
        return OddsOffer(
            selection_name=self.selection_name,
            bookmaker=self.bookmaker,
            odds_decimal=self.odds_decimal,
        )


class MarketSchema(BaseModel):
    key: str = Field(validation_alias=AliasChoices("key", "marketKey", "market_key"))
    offers: list[Any] = Field(default_factory=list)


class EventOddsSchema(BaseModel):
    tour_event_id: str = Field(
        validation_alias=AliasChoices("tour_event_id", "tourEventId", "eventId")
    )
    markets: list[MarketSchema] = Field(default_factory=list)

    @field_validator("tour_event_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("markets", mode="before")
    @classmethod
    def _markets_from_mapping(cls, value: Any) -> Any:
        # {"win": [offers...]} is accepted alongside [{"key": "win", "offers": [...]}]
        if isinstance(value, Mapping):
            return [{"key": key, "offers": offers} for key, offers in value.items()]
        return value


def parse_offers(raw_offers: Iterable[Any], market_key: str) -> tuple[OddsOffer, ...]:
    """Validate offers one by one, logging and skipping malformed entries."""

    offers: list[OddsOffer] = []
    for raw in raw_offers:
        if not isinstance(raw, Mapping):
            logger.warning("Skipping malformed offer in market %s: expected an object, got %r", market_key, raw)
            continue
        try:
            offers.append(OddsOfferSchema.model_validate(raw).to_domain())
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed offer in market %s: %s",
                market_key,
                exc.errors(include_url=False),
            )
    return tuple(offers)


def parse_tour_events(payload: Iterable[Mapping[str, Any]]) -> list[TourEvent]:
    return [TourEventSchema.model_validate(raw).to_domain() for raw in payload]


def parse_odds_snapshot(payload: Iterable[Mapping[str, Any]]) -> list[EventOdds]:
    """Normalize loosely-shaped per-event odds into the internal schema."""

    snapshots: list[EventOdds] = []
    for raw in payload:
        event = EventOddsSchema.model_validate(raw)
        markets = tuple(
            Market(key=market.key, offers=parse_offers(market.offers, market.key))
            for market in event.markets
        )
        snapshots.append(EventOdds(tour_event_id=event.tour_event_id, markets=markets))
    return snapshots
