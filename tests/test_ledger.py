from __future__ import annotations

import pytest

from artsus.domain.enums import InvestigationOutcome, SuspectStatus
from artsus.domain.models import Elimination, Investigation, Question, Round, Suspect
from artsus.errors import Conflict, ValidationError
from artsus.investigation import ledger

from conftest import innocents


def _investigation(pool_size: int = 5) -> Investigation:
    suspects = [Suspect(image=f"img/{n}.png") for n in range(pool_size)]
    return Investigation(
        game_uuid="g1",
        suspects=suspects,
        criminal_uuid=suspects[0].uuid,
        rounds=[Round(investigation_uuid="i1", question=Question(english="Glasses?"))],
    )


def _with_eliminations(investigation: Investigation, suspect_uuids: list[str]) -> Investigation:
    round_ = investigation.rounds[0]
    eliminations = [Elimination(round_uuid=round_.uuid, suspect_uuid=uuid) for uuid in suspect_uuids]
    rounds = [round_.model_copy(update={"eliminations": eliminations})]
    return investigation.model_copy(update={"rounds": rounds})


def test_compute_status_marks_free_and_fled():
    investigation = _investigation()
    criminal, first, second = investigation.suspect_uuids[:3]
    investigation = _with_eliminations(investigation, [first, criminal])

    statuses = ledger.compute_status(investigation)

    assert statuses[first] == SuspectStatus.FREE
    assert statuses[criminal] == SuspectStatus.FLED
    assert statuses[second] == SuspectStatus.NEITHER


def test_compute_status_does_not_touch_suspects():
    investigation = _investigation()
    investigation = _with_eliminations(investigation, investigation.suspect_uuids[:2])
    before = investigation.model_dump()
    ledger.compute_status(investigation)
    assert investigation.model_dump() == before


def test_outcome_solved_when_only_criminal_left():
    investigation = _investigation()
    innocent = investigation.suspect_uuids[1:]
    assert ledger.investigation_outcome(_with_eliminations(investigation, innocent[:-1])) == (
        InvestigationOutcome.OPEN
    )
    solved = _with_eliminations(investigation, innocent)
    assert ledger.investigation_outcome(solved) == InvestigationOutcome.SOLVED
    assert ledger.is_investigation_over(solved)
    assert not ledger.is_game_over(solved)


def test_outcome_failed_when_criminal_eliminated():
    investigation = _investigation()
    failed = _with_eliminations(investigation, [investigation.criminal_uuid])
    assert ledger.investigation_outcome(failed) == InvestigationOutcome.FAILED
    assert ledger.is_investigation_over(failed)
    assert ledger.is_game_over(failed)


def test_refresh_fills_suspect_flags(game):
    investigation = game.investigation
    assert all(suspect.status == SuspectStatus.NEITHER for suspect in investigation.suspects)
    assert investigation.outcome == InvestigationOutcome.OPEN


def test_eliminate_innocent_awards_score(engine, game):
    investigation = game.investigation
    result = engine.eliminate_suspect(
        innocents(game)[0], investigation.current_round.uuid, investigation.uuid
    )
    assert result.score_delta == 1
    assert result.outcome == InvestigationOutcome.OPEN
    assert not result.game_over

    current = engine.current_game("p1")
    assert current.score == 1
    freed = [s for s in current.investigation.suspects if s.status == SuspectStatus.FREE]
    assert [s.uuid for s in freed] == [innocents(game)[0]]


def test_eliminating_criminal_ends_game_without_score(engine, game):
    investigation = game.investigation
    engine.eliminate_suspect(innocents(game)[0], investigation.current_round.uuid, investigation.uuid)
    score_before = engine.current_game("p1").score

    result = engine.eliminate_suspect(
        investigation.criminal_uuid, investigation.current_round.uuid, investigation.uuid
    )

    current = engine.current_game("p1")
    assert result.score_delta == 0
    assert result.game_over
    assert current.game_over
    assert current.score == score_before
    fled = [s for s in current.investigation.suspects if s.status == SuspectStatus.FLED]
    assert [s.uuid for s in fled] == [investigation.criminal_uuid]


def test_duplicate_elimination_is_rejected(engine, game):
    investigation = game.investigation
    suspect_uuid = innocents(game)[0]
    engine.eliminate_suspect(suspect_uuid, investigation.current_round.uuid, investigation.uuid)

    with pytest.raises(Conflict):
        engine.eliminate_suspect(suspect_uuid, investigation.current_round.uuid, investigation.uuid)

    assert engine.current_game("p1").score == 1


def test_duplicate_elimination_in_later_round_is_rejected(engine, game):
    investigation = game.investigation
    suspect_uuid = innocents(game)[0]
    engine.eliminate_suspect(suspect_uuid, investigation.current_round.uuid, investigation.uuid)
    later = engine.advance_round("p1").investigation.current_round

    with pytest.raises(Conflict):
        engine.eliminate_suspect(suspect_uuid, later.uuid, investigation.uuid)


def test_eliminate_rejects_suspect_outside_pool(engine, store, game):
    outsider = next(s for s in store.all_suspects() if s.uuid not in game.investigation.suspect_uuids)
    with pytest.raises(ValidationError):
        engine.eliminate_suspect(
            outsider.uuid, game.investigation.current_round.uuid, game.investigation.uuid
        )


def test_eliminate_rejects_foreign_round(engine, game):
    other = engine.new_game("p2", "m1")
    with pytest.raises(ValidationError):
        engine.eliminate_suspect(
            innocents(game)[0], other.investigation.current_round.uuid, game.investigation.uuid
        )


def test_eliminate_requires_identifiers(store):
    with pytest.raises(ValidationError):
        ledger.eliminate(store, "", "r", "i")


def test_investigation_over_never_reverts(engine, game):
    investigation = game.investigation
    round_uuid = investigation.current_round.uuid
    for suspect_uuid in innocents(game):
        result = engine.eliminate_suspect(suspect_uuid, round_uuid, investigation.uuid)
    assert result.outcome == InvestigationOutcome.SOLVED

    with pytest.raises(Conflict):
        engine.eliminate_suspect(investigation.criminal_uuid, round_uuid, investigation.uuid)

    current = engine.current_game("p1")
    assert current.investigation.investigation_over
    assert current.investigation.outcome == InvestigationOutcome.SOLVED
    assert not current.game_over
