"""Candidate construction from per-event odds snapshots."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from betcaddies.config import get_settings
from betcaddies.selection.probability import ProbabilityModel, hash_probability
from betcaddies.selection.types import AltOffer, Candidate, EventOdds, Market, OddsOffer, TourEvent

logger = logging.getLogger(__name__)
settings = get_settings()

NameNormalizer = Callable[[str], str]


def _identity(name: str) -> str:
    return name


def best_offer(offers: Sequence[OddsOffer]) -> OddsOffer:
    """Return the offer with the strictly greatest decimal odds; ties keep the first seen."""

    best = offers[0]
    for offer in offers[1:]:
        if offer.odds_decimal > best.odds_decimal:
            best = offer
    return best


def alternate_offers(
    offers: Sequence[OddsOffer],
    best: OddsOffer,
    limit: int = settings.max_alt_offers,
) -> tuple[AltOffer, ...]:
    alts = [
        AltOffer(bookmaker=offer.bookmaker, odds_decimal=offer.odds_decimal)
        for offer in offers
        if offer.bookmaker != best.bookmaker
    ]
    return tuple(alts[:limit])


def _group_offers(
    market: Market,
    normalizer: NameNormalizer,
) -> dict[str, list[OddsOffer]]:
    groups: dict[str, list[OddsOffer]] = {}
    for offer in market.offers:
        try:
            name = normalizer(offer.selection_name)
        except Exception as exc:
            logger.error("Failed to normalize selection %r: %s", offer.selection_name, exc)
            continue
        groups.setdefault(name, []).append(offer)
    return groups


def create_candidate(
    tour_event: TourEvent,
    market_key: str,
    selection: str,
    offers: Sequence[OddsOffer],
    probability_model: ProbabilityModel = hash_probability,
    max_alt_offers: int = settings.max_alt_offers,
) -> Candidate:
    if not selection or not selection.strip():
        raise ValueError("selection name is empty")
    best = best_offer(offers)
    model_prob = probability_model(tour_event, selection)
    implied_prob = 1 / best.odds_decimal
    return Candidate(
        tour_event=tour_event,
        market_key=market_key,
        selection=selection,
        tour=tour_event.tour,
        model_prob=model_prob,
        implied_prob=implied_prob,
        edge=model_prob - implied_prob,
        best_bookmaker=best.bookmaker,
        best_odds=best.odds_decimal,
        alt_offers=alternate_offers(offers, best, max_alt_offers),
    )


def build_candidates(
    tour_events: Iterable[TourEvent],
    odds_data: Iterable[EventOdds],
    player_normalizer: NameNormalizer | None = None,
    require_positive_edge: bool = True,
    probability_model: ProbabilityModel = hash_probability,
    max_alt_offers: int = settings.max_alt_offers,
) -> list[Candidate]:
    """Score one candidate per (event, market, selection), in build order."""

    normalizer = player_normalizer or _identity
    odds_by_event: dict[str, EventOdds] = {}
    for snapshot in odds_data:
        odds_by_event.setdefault(snapshot.tour_event_id, snapshot)

    candidates: list[Candidate] = []
    for tour_event in tour_events:
        event_odds = odds_by_event.get(tour_event.id)
        if event_odds is None:
            continue
        for market in event_odds.markets:
            for selection, offers in _group_offers(market, normalizer).items():
                try:
                    candidate = create_candidate(
                        tour_event,
                        market.key,
                        selection,
                        offers,
                        probability_model=probability_model,
                        max_alt_offers=max_alt_offers,
                    )
                except Exception as exc:
                    logger.error(
                        "Failed to create bet candidate for %s (%s/%s): %s",
                        selection,
                        tour_event.id,
                        market.key,
                        exc,
                    )
                    continue
                if require_positive_edge and candidate.edge <= 0:
                    continue
                candidates.append(candidate)
    return candidates
