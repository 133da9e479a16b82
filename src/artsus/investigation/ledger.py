"""Elimination bookkeeping and the end-of-investigation rules."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from artsus.domain.enums import InvestigationOutcome, SuspectStatus
from artsus.domain.models import Elimination, Investigation, Suspect
from artsus.errors import Conflict, ValidationError
from artsus.investigation.scoring import award_score
from artsus.persistence.db import GameStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EliminationResult:
    elimination: Elimination
    score_delta: int
    outcome: InvestigationOutcome

    @property
    def game_over(self) -> bool:
        return self.outcome == InvestigationOutcome.FAILED


def eliminated_uuids(investigation: Investigation) -> set[str]:
    return {
        elimination.suspect_uuid
        for round_ in investigation.rounds
        for elimination in round_.eliminations
    }


def compute_status(investigation: Investigation) -> dict[str, SuspectStatus]:
    eliminated = eliminated_uuids(investigation)
    statuses: dict[str, SuspectStatus] = {}
    for suspect_uuid in investigation.suspect_uuids:
        if suspect_uuid not in eliminated:
            statuses[suspect_uuid] = SuspectStatus.NEITHER
        elif suspect_uuid == investigation.criminal_uuid:
            statuses[suspect_uuid] = SuspectStatus.FLED
        else:
            statuses[suspect_uuid] = SuspectStatus.FREE
    return statuses


def annotate_suspects(investigation: Investigation) -> list[Suspect]:
    statuses = compute_status(investigation)
    return [
        suspect.model_copy(
            update={
                "free": statuses[suspect.uuid] == SuspectStatus.FREE,
                "fled": statuses[suspect.uuid] == SuspectStatus.FLED,
            }
        )
        for suspect in investigation.suspects
    ]


def is_game_over(investigation: Investigation) -> bool:
    return investigation.criminal_uuid in eliminated_uuids(investigation)


def investigation_outcome(investigation: Investigation) -> InvestigationOutcome:
    eliminated = eliminated_uuids(investigation)
    if investigation.criminal_uuid in eliminated:
        return InvestigationOutcome.FAILED
    innocent = eliminated & set(investigation.suspect_uuids)
    if len(innocent) >= len(investigation.suspects) - 1:
        return InvestigationOutcome.SOLVED
    return InvestigationOutcome.OPEN


def is_investigation_over(investigation: Investigation) -> bool:
    return investigation_outcome(investigation) != InvestigationOutcome.OPEN


def refresh(investigation: Investigation) -> Investigation:
    """Return a copy with suspect flags and outcome derived from its eliminations."""
    return investigation.model_copy(
        update={
            "suspects": annotate_suspects(investigation),
            "outcome": investigation_outcome(investigation),
        }
    )


def eliminate(
    store: GameStore, suspect_uuid: str, round_uuid: str, investigation_uuid: str
) -> EliminationResult:
    """Record one elimination and settle its score in a single transaction.

    The caller serializes calls for the same game.
    """
    if not suspect_uuid or not round_uuid or not investigation_uuid:
        raise ValidationError("suspect, round and investigation identifiers are required")
    with store.transaction():
        investigation = store.get_investigation(investigation_uuid)
        if suspect_uuid not in investigation.suspect_uuids:
            raise ValidationError(
                f"suspect {suspect_uuid} is not part of investigation {investigation_uuid}"
            )
        if investigation.find_round(round_uuid) is None:
            raise ValidationError(
                f"round {round_uuid} does not belong to investigation {investigation_uuid}"
            )
        if suspect_uuid in eliminated_uuids(investigation):
            raise Conflict(f"suspect {suspect_uuid} was already eliminated")
        if is_investigation_over(investigation):
            raise Conflict(f"investigation {investigation_uuid} is already over")

        elimination = Elimination(round_uuid=round_uuid, suspect_uuid=suspect_uuid)
        store.save_elimination(elimination, investigation_uuid)

        if suspect_uuid == investigation.criminal_uuid:
            logger.info("Criminal was released in investigation %s", investigation_uuid)
            score_delta = 0
        else:
            score_delta = award_score(store, investigation.game_uuid, round_uuid)

        outcome = investigation_outcome(store.get_investigation(investigation_uuid))
    return EliminationResult(elimination=elimination, score_delta=score_delta, outcome=outcome)
