"""Scheduling entry points."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from betcaddies.config import get_settings
from betcaddies.data.schemas import parse_odds_snapshot, parse_tour_events
from betcaddies.db.database import get_session, init_db
from betcaddies.db.models import SelectionResult, SelectionRun
from betcaddies.pipeline.golden_run import (
    GoldenRunInvariantError,
    build_input_fingerprint,
    build_input_summary,
    enforce_golden_run_invariant,
)
from betcaddies.players.normalizer import PlayerNormalizer, SessionFactory
from betcaddies.selection.candidates import NameNormalizer
from betcaddies.selection.explanation import format_portfolio
from betcaddies.selection.portfolio import generate_recommendations
from betcaddies.selection.types import EventOdds, Recommendation, TourEvent

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class RunOutcome:
    run_key: str
    input_hash: str
    recommendations: Dict[str, List[Recommendation]] = field(default_factory=dict)
    selection_run_id: int | None = None

    def counts(self) -> Dict[str, int]:
        return {tier: len(picks) for tier, picks in self.recommendations.items()}


def default_run_key(now: datetime | None = None) -> str:
    now = now or datetime.utcnow()
    return f"weekly_{now:%Y%m%d_%H%M%S}"


def _persist_run(
    session: Session,
    run_key: str,
    input_hash: str,
    events: Sequence[TourEvent],
    recommendations: Dict[str, List[Recommendation]],
) -> SelectionRun:
    run = SelectionRun(
        run_key=run_key,
        status="running",
        input_hash=input_hash,
        tours_processed=sorted({event.tour.value for event in events}),
    )
    session.add(run)
    session.flush()
    for picks in recommendations.values():
        for rec in picks:
            session.add(
                SelectionResult(
                    selection_run_id=run.id,
                    tier=rec.tier,
                    tour=rec.tour,
                    tour_event_id=rec.tour_event_id,
                    market_key=rec.market_key,
                    selection=rec.selection,
                    model_prob=rec.model_prob,
                    implied_prob=rec.implied_prob,
                    edge=rec.edge,
                    confidence=rec.confidence,
                    best_bookmaker=rec.best_bookmaker,
                    best_odds=rec.best_odds,
                    alt_offers=[asdict(alt) for alt in rec.alt_offers],
                    analysis_paragraph=rec.analysis_paragraph,
                    analysis_bullets=rec.analysis_bullets,
                )
            )
    run.status = "completed"
    run.completed_at = datetime.utcnow()
    session.flush()
    return run


def run_selection(
    events: Sequence[TourEvent],
    odds: Sequence[EventOdds],
    *,
    run_key: str | None = None,
    player_normalizer: NameNormalizer | None = None,
    session_factory: SessionFactory | None = None,
) -> RunOutcome:
    """Fingerprint inputs, select the weekly portfolio and optionally persist it.

    Re-running a persisted ``run_key`` with identical inputs returns the stored
    run; different inputs under the same key raise ``GoldenRunInvariantError``.
    """

    run_key = run_key or default_run_key()
    summary = build_input_summary(events, odds)
    input_hash = build_input_fingerprint(summary)
    enforce_golden_run_invariant(run_key, None, input_hash, summary, odds)

    portfolio = generate_recommendations(events, odds, player_normalizer)
    outcome = RunOutcome(run_key=run_key, input_hash=input_hash, recommendations=format_portfolio(portfolio))
    logger.info("Run %s selected %s", run_key, outcome.counts())

    if session_factory is not None:
        with session_factory() as session:
            existing = load_run_results(session, run_key)
            if existing is None:
                run = _persist_run(session, run_key, input_hash, events, outcome.recommendations)
            elif existing.input_hash != input_hash:
                message = (
                    f"Golden run invariant violated for {run_key!r} (run {existing.id}): "
                    "input hash differs from the persisted run"
                )
                logger.error(message)
                raise GoldenRunInvariantError(message)
            else:
                logger.info("Run %s already persisted as %s; reusing it", run_key, existing.id)
                run = existing
            outcome.selection_run_id = run.id
    return outcome


def load_run_results(session: Session, run_key: str) -> SelectionRun | None:
    stmt = select(SelectionRun).where(SelectionRun.run_key == run_key)
    return session.scalars(stmt).first()


def run_snapshot_file(path: Path, run_key: str | None = None, persist: bool = True) -> Dict[str, Any]:
    """Run the weekly selection over a JSON file holding ``events`` and ``odds``."""

    payload = json.loads(path.read_text())
    events = parse_tour_events(payload.get("events", []))
    odds = parse_odds_snapshot(payload.get("odds", []))
    session_factory = get_session if persist else None
    if persist:
        init_db()
    outcome = run_selection(
        events,
        odds,
        run_key=run_key,
        player_normalizer=PlayerNormalizer(session_factory),
        session_factory=session_factory,
    )
    return {"run_key": outcome.run_key, "input_hash": outcome.input_hash, **outcome.counts()}


def main() -> None:  # pragma: no cover - CLI convenience
    parser = argparse.ArgumentParser(description="Select the weekly BetCaddies portfolio.")
    parser.add_argument("--snapshot", type=Path, required=True, help="JSON file with events and odds.")
    parser.add_argument("--run-key", default=None)
    parser.add_argument("--no-persist", action="store_true", help="Skip writing results to the database.")
    args = parser.parse_args()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    summary = run_snapshot_file(args.snapshot, run_key=args.run_key, persist=not args.no_persist)
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
