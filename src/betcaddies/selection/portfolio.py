"""Tiered portfolio selection."""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from betcaddies.config import TierPolicy, get_settings
from betcaddies.selection.candidates import NameNormalizer, build_candidates
from betcaddies.selection.probability import ProbabilityModel, hash_probability
from betcaddies.selection.types import Candidate, EventOdds, Portfolio, Tier, Tour, TourEvent

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class OddsBand:
    """Half-open decimal odds range ``[min_odds, max_odds)``."""

    min_odds: float
    max_odds: float = math.inf

    def contains(self, odds: float) -> bool:
        return self.min_odds <= odds < self.max_odds


# odds in [5, 6) and [10, 11) belong to no tier
TIER_BANDS: dict[Tier, OddsBand] = {
    Tier.PAR: OddsBand(1, 5),
    Tier.BIRDIE: OddsBand(6, 10),
    Tier.EAGLE: OddsBand(11),
}

# edge-threshold alternative: (tier, exclusive lower bound) checked in order
EDGE_THRESHOLDS: tuple[tuple[Tier, float], ...] = (
    (Tier.PAR, 0.08),
    (Tier.BIRDIE, 0.05),
    (Tier.EAGLE, 0.03),
)

TOUR_MINIMUM_TIERS = frozenset({Tier.PAR, Tier.BIRDIE})
TOUR_MINIMUM_TOURS: tuple[Tour, ...] = (Tour.PGA, Tour.LPGA)


@dataclass
class TierFill:
    """Accumulator for a single tier fill; never shared between tiers or runs."""

    count: int
    max_per_player: int
    selected: list[Candidate] = field(default_factory=list)
    keys: set[tuple[str, str, str]] = field(default_factory=set)
    player_counts: Counter[str] = field(default_factory=Counter)
    tour_counts: Counter[Tour] = field(default_factory=Counter)

    @property
    def full(self) -> bool:
        return len(self.selected) >= self.count

    def can_add(self, candidate: Candidate) -> bool:
        if candidate.key in self.keys:
            return False
        return self.player_counts[candidate.selection] < self.max_per_player

    def add(self, candidate: Candidate) -> None:
        self.selected.append(candidate)
        self.keys.add(candidate.key)
        self.player_counts[candidate.selection] += 1
        self.tour_counts[candidate.tour] += 1


def _tier_name(tier: Tier | str) -> str:
    return tier.value if isinstance(tier, Tier) else str(tier)


def select_from_tier(
    candidates: Sequence[Candidate],
    count: int = settings.tier_size,
    tier: Tier | str = Tier.PAR,
    max_per_player: int = settings.max_bets_per_player,
    tour_minimum: int = settings.tour_minimum,
) -> list[Candidate]:
    """Greedily fill one tier: per-tour minimums first, then best remaining edge."""

    fill = TierFill(count=count, max_per_player=max_per_player)
    tier_name = _tier_name(tier)

    if tier_name in {t.value for t in TOUR_MINIMUM_TIERS}:
        for tour in TOUR_MINIMUM_TOURS:
            for candidate in candidates:
                if fill.full or fill.tour_counts[tour] >= tour_minimum:
                    break
                if candidate.tour == tour and fill.can_add(candidate):
                    fill.add(candidate)

    for candidate in candidates:
        if fill.full:
            break
        if fill.can_add(candidate):
            fill.add(candidate)

    if not fill.full:
        logger.warning(
            "Only found %s candidates for %s tier, needed %s",
            len(fill.selected),
            tier_name,
            count,
        )
    return fill.selected


def assign_odds_tier(odds: float) -> Tier | None:
    for tier, band in TIER_BANDS.items():
        if band.contains(odds):
            return tier
    return None


def assign_edge_tier(edge: float) -> Tier:
    for tier, threshold in EDGE_THRESHOLDS:
        if edge > threshold:
            return tier
    return Tier.LONG_SHOT


def partition_tiers(
    candidates: Iterable[Candidate],
    policy: TierPolicy = "odds_band",
) -> dict[Tier, list[Candidate]]:
    """Split candidates into tier pools, preserving input order within each pool."""

    if policy == "edge_threshold":
        pools: dict[Tier, list[Candidate]] = {tier: [] for tier, _ in EDGE_THRESHOLDS}
        pools[Tier.LONG_SHOT] = []
        for candidate in candidates:
            pools[assign_edge_tier(candidate.edge)].append(candidate)
        return pools
    if policy != "odds_band":
        raise ValueError(f"Unknown tier policy: {policy!r}")

    pools = {tier: [] for tier in TIER_BANDS}
    for candidate in candidates:
        tier = assign_odds_tier(candidate.best_odds)
        if tier is not None:
            pools[tier].append(candidate)
    return pools


def select_portfolio(
    candidates: Sequence[Candidate],
    count: int = settings.tier_size,
    policy: TierPolicy | None = None,
) -> Portfolio:
    """Fill every tier of the active policy from an edge-ordered candidate list."""

    pools = partition_tiers(candidates, policy or settings.tier_policy)
    return {
        tier.value: select_from_tier(pool, count=count, tier=tier)
        for tier, pool in pools.items()
    }


def sort_by_edge(candidates: Iterable[Candidate]) -> list[Candidate]:
    return sorted(candidates, key=lambda c: c.edge, reverse=True)


def generate_recommendations(
    tour_events: Sequence[TourEvent],
    odds_data: Sequence[EventOdds],
    player_normalizer: NameNormalizer | None = None,
    probability_model: ProbabilityModel = hash_probability,
    count: int = settings.tier_size,
    policy: TierPolicy | None = None,
) -> Portfolio:
    """Build, rank and tier candidates for one pipeline run."""

    candidates = build_candidates(
        tour_events,
        odds_data,
        player_normalizer,
        require_positive_edge=True,
        probability_model=probability_model,
    )
    if not candidates:
        logger.warning("No positive-edge candidates; rebuilding without the edge filter")
        candidates = build_candidates(
            tour_events,
            odds_data,
            player_normalizer,
            require_positive_edge=False,
            probability_model=probability_model,
        )
    logger.info("Selecting portfolio from %s candidates", len(candidates))
    return select_portfolio(sort_by_edge(candidates), count=count, policy=policy)
