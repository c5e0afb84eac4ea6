"""Ingestion boundary tests."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from betcaddies.data.schemas import parse_odds_snapshot, parse_tour_events
from betcaddies.selection.types import Market, OddsOffer, Tour


def test_tour_events_accept_camel_case_and_lower_tour() -> None:
    (event,) = parse_tour_events(
        [
            {
                "eventId": 401,
                "tour": "pga",
                "eventName": "Genesis Invitational",
                "startDate": "2026-02-19T00:00:00Z",
            }
        ]
    )
    assert event.id == "401"
    assert event.tour is Tour.PGA
    assert event.event_name == "Genesis Invitational"
    assert event.start_date == datetime(2026, 2, 19, tzinfo=timezone.utc)
    assert event.end_date is None


def test_unknown_tour_is_rejected() -> None:
    with pytest.raises(ValidationError):
        parse_tour_events([{"id": "x", "tour": "SENIORS", "event_name": "?"}])


def test_odds_field_name_variants_are_normalized() -> None:
    (snapshot,) = parse_odds_snapshot(
        [
            {
                "tourEventId": "evt_1",
                "markets": [
                    {
                        "marketKey": "win",
                        "offers": [
                            {"selectionName": "Ludvig Aberg", "bookmaker": "BookA", "oddsDecimal": 21.0},
                            {"selection": "Ludvig Aberg", "book": "BookB", "odds": 19},
                        ],
                    },
                    {"key": "top_5", "offers": []},
                ],
            }
        ]
    )
    assert snapshot.tour_event_id == "evt_1"
    assert snapshot.markets == (
        Market(
            key="win",
            offers=(
                OddsOffer("Ludvig Aberg", "BookA", 21.0),
                OddsOffer("Ludvig Aberg", "BookB", 19.0),
            ),
        ),
        Market(key="top_5", offers=()),
    )


def test_markets_mapping_shape() -> None:
    (snapshot,) = parse_odds_snapshot(
        [{"eventId": "evt_1", "markets": {"win": [{"player": "Min Woo Lee", "book": "BookA", "odds": 41}]}}]
    )
    assert snapshot.markets[0].key == "win"
    assert snapshot.markets[0].offers[0].selection_name == "Min Woo Lee"


def test_malformed_offers_are_skipped(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        (snapshot,) = parse_odds_snapshot(
            [
                {
                    "tourEventId": "evt_1",
                    "markets": [
                        {
                            "key": "win",
                            "offers": [
                                {"selectionName": "", "bookmaker": "BookA", "oddsDecimal": 5.0},
                                {"selectionName": "Sub One", "bookmaker": "BookA", "oddsDecimal": 0.5},
                                {"bookmaker": "BookA", "oddsDecimal": 5.0},
                                {"selectionName": "Valid", "bookmaker": "BookA", "oddsDecimal": 5.0},
                            ],
                        }
                    ],
                }
            ]
        )
    assert [offer.selection_name for offer in snapshot.markets[0].offers] == ["Valid"]
    assert caplog.text.count("Skipping malformed offer in market win") == 3


def test_non_object_offers_are_skipped_not_fatal(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        (snapshot,) = parse_odds_snapshot(
            [
                {
                    "tourEventId": "evt_1",
                    "markets": {"win": [None, "junk", 7, {"player": "Valid", "book": "BookA", "odds": 5.0}]},
                }
            ]
        )
    assert [offer.selection_name for offer in snapshot.markets[0].offers] == ["Valid"]
    assert caplog.text.count("Skipping malformed offer in market win") == 3
