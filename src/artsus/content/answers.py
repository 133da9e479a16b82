"""Answering a round's question from a description of the criminal."""

from __future__ import annotations

import logging
import re
from typing import Protocol

from artsus.domain.models import Game
from artsus.errors import NotFound, UpstreamFailure
from artsus.investigation.rounds import AnswerWaiter, record_answer
from artsus.investigation.selection import pick_index
from artsus.persistence.db import GameStore

logger = logging.getLogger(__name__)

_YES_NO = re.compile(r"^\W*(yes|no)\b", re.IGNORECASE)


class AnswerGenerator(Protocol):
    def generate(self, question: str, description: str, model: str) -> str:
        ...


def normalize_answer(text: str) -> str:
    """Reduce model output to ``yes``/``no`` when it starts with either."""
    cleaned = text.strip()
    match = _YES_NO.match(cleaned)
    if match:
        return match.group(1).lower()
    return cleaned


def answer_for_round(
    store: GameStore,
    game: Game,
    generator: AnswerGenerator,
    waiter: AnswerWaiter | None = None,
) -> str:
    investigation = game.investigation
    if investigation is None or investigation.current_round is None:
        raise NotFound(f"game {game.uuid} has no round to answer")
    round_ = investigation.current_round
    if round_.has_answer:
        return round_.answer

    descriptions = store.descriptions_for_suspect(investigation.criminal_uuid, game.model)
    if not descriptions:
        raise NotFound(f"no descriptions of the criminal in investigation {investigation.uuid}")
    description = descriptions[pick_index(investigation.uuid, len(descriptions))]

    try:
        raw = generator.generate(round_.question.english, description.description, game.model)
    except Exception as exc:
        logger.error("Answer generation failed for round %s: %s", round_.uuid, exc)
        raise UpstreamFailure(f"answer generation failed: {exc}") from exc
    answer = normalize_answer(raw or "")
    if not answer:
        raise UpstreamFailure(f"model {game.model} returned an empty answer")
    return record_answer(store, round_.uuid, answer, waiter=waiter)
