from __future__ import annotations

import pytest

from artsus.investigation.scoring import award_score, score_amount

from conftest import innocents


def test_score_amount_multiplies_level_and_round_eliminations():
    assert score_amount(1, 1) == 1
    assert score_amount(2, 3) == 6
    assert score_amount(4, 0) == 0


def test_score_amount_rejects_invalid_level():
    with pytest.raises(ValueError):
        score_amount(0, 2)


def _solve(engine, game):
    investigation = game.investigation
    for suspect_uuid in innocents(game):
        engine.eliminate_suspect(suspect_uuid, investigation.current_round.uuid, investigation.uuid)
    return engine.advance_investigation("p1")


def test_risky_round_at_level_two(engine, game):
    level_two = _solve(engine, game)
    assert level_two.level == 2
    score_before = level_two.score
    investigation = level_two.investigation
    round_uuid = investigation.current_round.uuid

    deltas = [
        engine.eliminate_suspect(suspect_uuid, round_uuid, investigation.uuid).score_delta
        for suspect_uuid in innocents(level_two)[:3]
    ]

    assert deltas == [2, 4, 6]
    assert engine.current_game("p1").score == score_before + 12


def test_round_count_is_not_cumulative(engine, game):
    investigation = game.investigation
    first_round = investigation.current_round.uuid
    engine.eliminate_suspect(innocents(game)[0], first_round, investigation.uuid)
    engine.eliminate_suspect(innocents(game)[1], first_round, investigation.uuid)

    second_round = engine.advance_round("p1").investigation.current_round.uuid
    result = engine.eliminate_suspect(innocents(game)[2], second_round, investigation.uuid)

    assert result.score_delta == 1


def test_award_score_updates_game(store, game):
    round_uuid = game.investigation.current_round.uuid
    # No elimination recorded on the round yet.
    assert award_score(store, game.uuid, round_uuid) == 0
    assert store.get_score(game.uuid) == 0
