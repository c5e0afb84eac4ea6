"""Confidence ratings and analysis copy for published picks."""

from __future__ import annotations

from typing import List

from betcaddies.selection.types import Candidate, Portfolio, Recommendation

# (exclusive lower edge bound, rating) checked in order
CONFIDENCE_THRESHOLDS = ((0.10, 5), (0.07, 4), (0.05, 3), (0.03, 2))


def calculate_confidence(edge: float) -> int:
    """Map an edge estimate onto a 1-5 confidence rating."""

    if edge <= 0:
        return 1
    for threshold, rating in CONFIDENCE_THRESHOLDS:
        if edge > threshold:
            return rating
    return 1


def analysis_paragraph(candidate: Candidate) -> str:
    player = candidate.selection
    odds = f"{candidate.best_odds:.2f}"
    edge = f"{candidate.edge * 100:.1f}"
    model = f"{candidate.model_prob:.3f}"
    implied = f"{candidate.implied_prob:.3f}"

    if candidate.edge <= 0:
        return (
            f"{player} is included as a fallback pick without a positive edge ({edge}%) at {odds} odds. "
            f"Our model gives them a {model} probability of winning, "
            f"compared to the {implied} implied by the odds. "
            f"No selection cleared the edge bar this week, so the best available price from "
            f"{candidate.best_bookmaker} is listed for completeness."
        )
    return (
        f"{player} represents a {edge}% edge opportunity at {odds} odds. "
        f"Our model gives them a {model} probability of winning, "
        f"compared to the {implied} implied by the odds. "
        f"This value bet is available from {candidate.best_bookmaker} with competitive odds."
    )


def analysis_bullets(candidate: Candidate) -> List[str]:
    bullets = [
        f"Model probability: {candidate.model_prob * 100:.1f}%",
        f"Market probability: {candidate.implied_prob * 100:.1f}%",
        f"Edge: {candidate.edge * 100:.1f}%",
        f"Best odds: {candidate.best_odds:.2f} ({candidate.best_bookmaker})",
        f"Alternative bookmakers available: {len(candidate.alt_offers)}",
    ]
    if candidate.edge <= 0:
        bullets.append("Fallback inclusion: no positive edge")
    return bullets


def format_recommendation(candidate: Candidate, tier: str) -> Recommendation:
    return Recommendation(
        tier=tier,
        tour_event_id=candidate.tour_event.id,
        market_key=candidate.market_key,
        selection=candidate.selection,
        tour=candidate.tour.value,
        confidence=calculate_confidence(candidate.edge),
        best_bookmaker=candidate.best_bookmaker,
        best_odds=candidate.best_odds,
        model_prob=candidate.model_prob,
        implied_prob=candidate.implied_prob,
        edge=candidate.edge,
        alt_offers=list(candidate.alt_offers),
        analysis_paragraph=analysis_paragraph(candidate),
        analysis_bullets=analysis_bullets(candidate),
    )


def format_portfolio(portfolio: Portfolio) -> dict[str, list[Recommendation]]:
    return {
        tier: [format_recommendation(candidate, tier) for candidate in picks]
        for tier, picks in portfolio.items()
    }
