"""ORM models for BetCaddies."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base declarative class."""


class SelectionRun(Base):
    """One weekly pipeline run and the fingerprint of its inputs."""

    __tablename__ = "selection_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    run_key: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(32), default="running")
    input_hash: Mapped[str | None] = mapped_column(String(64))
    tours_processed: Mapped[list[str]] = mapped_column(JSON, default=list)
    failure_reason: Mapped[str | None] = mapped_column(String(512))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)

    results: Mapped[list[SelectionResult]] = relationship(
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="SelectionResult.id",
    )


class Player(Base):
    """Canonical golfer identity with the raw name variants seen in odds feeds."""

    __tablename__ = "players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    canonical_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    aliases: Mapped[list[str]] = mapped_column(JSON, default=list)
    tour_ids: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class SelectionResult(Base):
    """A published pick within a run."""

    __tablename__ = "selection_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    selection_run_id: Mapped[int] = mapped_column(ForeignKey("selection_runs.id"), nullable=False)
    tier: Mapped[str] = mapped_column(String(16), nullable=False)
    tour: Mapped[str] = mapped_column(String(16), nullable=False)
    tour_event_id: Mapped[str] = mapped_column(String(128), nullable=False)
    market_key: Mapped[str] = mapped_column(String(64), nullable=False)
    selection: Mapped[str] = mapped_column(String(255), nullable=False)
    model_prob: Mapped[float] = mapped_column(Float, nullable=False)
    implied_prob: Mapped[float] = mapped_column(Float, nullable=False)
    edge: Mapped[float] = mapped_column(Float, nullable=False)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False)
    best_bookmaker: Mapped[str] = mapped_column(String(64), nullable=False)
    best_odds: Mapped[float] = mapped_column(Float, nullable=False)
    alt_offers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    analysis_paragraph: Mapped[str] = mapped_column(Text, default="")
    analysis_bullets: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    run: Mapped[SelectionRun] = relationship(back_populates="results")
