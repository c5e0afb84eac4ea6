"""Input fingerprinting so every published run is traceable to its inputs."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Sequence
from typing import Any

from betcaddies.selection.types import EventOdds, TourEvent

logger = logging.getLogger(__name__)


class GoldenRunInvariantError(RuntimeError):
    """Raised when a run's recorded inputs cannot be reproduced."""


def build_input_summary(
    events: Sequence[TourEvent],
    odds_snapshot: Sequence[EventOdds],
) -> dict[str, Any]:
    """Return a deterministic, JSON-serializable summary of the run inputs."""

    return {
        "events": [
            {
                "id": event.id,
                "tour": event.tour.value,
                "event_name": event.event_name,
                "start_date": event.start_date.isoformat() if event.start_date else None,
                "end_date": event.end_date.isoformat() if event.end_date else None,
            }
            for event in events
        ],
        "tours": sorted({event.tour.value for event in events}),
        "markets": sorted({market.key for snapshot in odds_snapshot for market in snapshot.markets}),
        "odds": [
            {
                "tour_event_id": snapshot.tour_event_id,
                "markets": [
                    {
                        "key": market.key,
                        "offers": [
                            [offer.selection_name, offer.bookmaker, offer.odds_decimal]
                            for offer in market.offers
                        ],
                    }
                    for market in snapshot.markets
                ],
            }
            for snapshot in odds_snapshot
        ],
    }


def build_input_fingerprint(summary: dict[str, Any]) -> str:
    canonical = json.dumps(summary, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def enforce_golden_run_invariant(
    run_key: str,
    selection_run_id: str | int | None,
    input_hash: str | None,
    input_summary: dict[str, Any] | None,
    odds_snapshot: Sequence[EventOdds] | None,
) -> None:
    """Fail loudly unless the run carries a valid fingerprint and an odds snapshot."""

    problems: list[str] = []
    if not run_key or not run_key.strip():
        problems.append("missing run key")
    if not input_hash:
        problems.append("missing input hash")
    if input_summary is None:
        problems.append("missing input summary")
    else:
        if not input_summary.get("events"):
            problems.append("no tour events in input summary")
        if input_hash and build_input_fingerprint(input_summary) != input_hash:
            problems.append("input hash does not match input summary")
    if odds_snapshot is None:
        problems.append("missing odds snapshot")
    elif not any(market.offers for snapshot in odds_snapshot for market in snapshot.markets):
        problems.append("empty odds snapshot")
    if problems:
        message = f"Golden run invariant violated for {run_key!r} (run {selection_run_id}): " + "; ".join(problems)
        logger.error(message)
        raise GoldenRunInvariantError(message)
    logger.info("Golden run invariant satisfied for %s (hash %s)", run_key, input_hash)
