"""Score awarded for ruling out innocent suspects."""

from __future__ import annotations

import logging

from artsus.persistence.db import GameStore

logger = logging.getLogger(__name__)


def score_amount(level: int, eliminations_in_round: int) -> int:
    """Level rewards longevity, the per-round count rewards eliminating before the answer."""
    if level < 1 or eliminations_in_round < 0:
        raise ValueError(f"invalid scoring input level={level} count={eliminations_in_round}")
    return level * eliminations_in_round


def award_score(store: GameStore, game_uuid: str, round_uuid: str) -> int:
    """Add the score for the latest elimination of ``round_uuid``; returns the amount.

    Callers hold the game's lock and an open store transaction so the
    elimination and the score change commit together.
    """
    with store.transaction():
        level = store.count_investigations(game_uuid)
        count = store.count_eliminations(round_uuid)
        amount = score_amount(level, count)
        store.add_score(game_uuid, amount)
    logger.info("Score of game %s increased by %d", game_uuid, amount)
    return amount
