"""FastAPI backend for BetCaddies."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import asdict
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Header, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.orm import Session

from betcaddies import __version__
from betcaddies.api.schemas import (
    RecommendationOut,
    RecommendationsRequest,
    RecommendationsResponse,
    RunResponse,
)
from betcaddies.config import get_api_access_key, get_settings
from betcaddies.data.schemas import parse_odds_snapshot, parse_tour_events
from betcaddies.db.database import SessionLocal, get_session
from betcaddies.db.models import SelectionResult
from betcaddies.players.normalizer import PlayerNormalizer
from betcaddies.pipeline.golden_run import GoldenRunInvariantError
from betcaddies.scheduling.jobs import load_run_results, run_selection

settings = get_settings()

app = FastAPI(
    title="BetCaddies API",
    version=__version__,
    description="Weekly tiered golf picks (PAR / BIRDIE / EAGLE).",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    try:
        expected = get_api_access_key()
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    if not x_api_key or x_api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def get_session_factory() -> Any:
    return get_session


SessionDep = Annotated[Session, Depends(get_db)]
APIKeyDep = Annotated[None, Depends(require_api_key)]
SessionFactoryDep = Annotated[Any, Depends(get_session_factory)]


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, Any]:
    return {
        "name": "betcaddies",
        "version": __version__,
        "tier_policy": settings.tier_policy,
    }


@app.post("/recommendations", response_model=RecommendationsResponse)
def recommendations(
    payload: RecommendationsRequest,
    _: APIKeyDep,
    session_factory: SessionFactoryDep,
) -> RecommendationsResponse:
    try:
        events = parse_tour_events(payload.events)
        odds = parse_odds_snapshot(payload.odds)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False),
        ) from exc

    factory = session_factory if payload.persist else None
    try:
        outcome = run_selection(
            events,
            odds,
            run_key=payload.run_key,
            player_normalizer=PlayerNormalizer(factory),
            session_factory=factory,
        )
    except GoldenRunInvariantError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return RecommendationsResponse(
        run_key=outcome.run_key,
        input_hash=outcome.input_hash,
        selection_run_id=outcome.selection_run_id,
        tiers={
            tier: [RecommendationOut.model_validate(asdict(rec)) for rec in picks]
            for tier, picks in outcome.recommendations.items()
        },
    )


@app.get("/runs/{run_key}", response_model=RunResponse)
def get_run(run_key: str, _: APIKeyDep, session: SessionDep) -> RunResponse:
    run = load_run_results(session, run_key)
    if run is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown run {run_key}")
    return RunResponse(
        run_key=run.run_key,
        status=run.status,
        input_hash=run.input_hash,
        tours_processed=list(run.tours_processed or []),
        created_at=run.created_at,
        completed_at=run.completed_at,
        results=[_result_to_response(row) for row in run.results],
    )


def _result_to_response(row: SelectionResult) -> RecommendationOut:
    return RecommendationOut(
        tier=row.tier,
        tour=row.tour,
        tour_event_id=row.tour_event_id,
        market_key=row.market_key,
        selection=row.selection,
        confidence=row.confidence,
        best_bookmaker=row.best_bookmaker,
        best_odds=row.best_odds,
        model_prob=row.model_prob,
        implied_prob=row.implied_prob,
        edge=row.edge,
        alt_offers=row.alt_offers or [],
        analysis_paragraph=row.analysis_paragraph,
        analysis_bullets=row.analysis_bullets or [],
    )
