"""Player name canonicalization."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager

from sqlalchemy import select
from sqlalchemy.orm import Session

from betcaddies.db.models import Player

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_SPECIAL = re.compile(r"[^\w\s-]", re.ASCII)

SessionFactory = Callable[[], AbstractContextManager[Session]]


def clean_player_name(name: str) -> str:
    """Trim, collapse whitespace, strip punctuation and accents, lower-case."""

    cleaned = _WHITESPACE.sub(" ", name.strip())
    return _SPECIAL.sub("", cleaned).lower()


class PlayerNormalizer:
    """Resolve raw odds-feed names to canonical player names.

    Without a session factory the cleaned name is the canonical name. With
    one, players are looked up (and created) in the ``players`` table and
    unseen raw variants are recorded as aliases.
    """

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self.session_factory = session_factory
        self.cache: dict[str, str] = {}

    def __call__(self, raw_name: str) -> str:
        return self.normalize_player_name(raw_name)

    def normalize_player_name(self, raw_name: str) -> str:
        if raw_name in self.cache:
            return self.cache[raw_name]
        cleaned = clean_player_name(raw_name)
        if not cleaned:
            raise ValueError(f"Player name {raw_name!r} is empty after cleaning")
        canonical = cleaned
        if self.session_factory is not None:
            with self.session_factory() as session:
                canonical = self._resolve(session, raw_name, cleaned).canonical_name
        self.cache[raw_name] = canonical
        return canonical

    def _resolve(self, session: Session, raw_name: str, cleaned: str) -> Player:
        player = session.scalars(select(Player).where(Player.canonical_name == cleaned)).first()
        if player is None:
            player = next(
                (p for p in session.scalars(select(Player)) if cleaned in p.aliases),
                None,
            )
        if player is None:
            player = Player(canonical_name=cleaned, aliases=[raw_name], tour_ids={})
            session.add(player)
            session.flush()
            logger.info("Created new player: %s", cleaned)
        elif raw_name not in player.aliases:
            player.aliases = [*player.aliases, raw_name]
        return player

    def match_player_to_odds(self, player_name: str, odds_selections: Iterable[str]) -> str | None:
        """Return the first odds selection that cleans to the player's canonical name."""

        canonical = self.normalize_player_name(player_name)
        for selection in odds_selections:
            if clean_player_name(selection) == canonical:
                return selection
        return None
