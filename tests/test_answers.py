from __future__ import annotations

import pytest

from artsus.content.answers import answer_for_round, normalize_answer
from artsus.errors import NotFound, UpstreamFailure
from artsus.investigation.selection import pick_index

from conftest import FakeGenerator


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("YES", "yes"),
        ("  No.", "no"),
        ("Yes, they wear glasses.", "yes"),
        ("**no**", "no"),
        ("Maybe", "Maybe"),
        ("Nobody knows", "Nobody knows"),
    ],
)
def test_normalize_answer(raw, expected):
    assert normalize_answer(raw) == expected


def test_answer_uses_selected_description_of_criminal(engine, store, game):
    generator = FakeGenerator("Yes")

    answer = engine.get_or_generate_answer("p1", generator)

    investigation = game.investigation
    candidates = store.descriptions_for_suspect(investigation.criminal_uuid, "m1")
    expected = candidates[pick_index(investigation.uuid, len(candidates))]
    assert answer == "yes"
    assert generator.calls == [
        (investigation.current_round.question.english, expected.description, "m1")
    ]
    assert store.get_answer(investigation.current_round.uuid) == "yes"


def test_same_description_for_every_round_of_investigation(engine, game):
    generator = FakeGenerator("no")
    engine.get_or_generate_answer("p1", generator)
    engine.advance_round("p1")
    engine.get_or_generate_answer("p1", generator)

    assert len(generator.calls) == 2
    assert generator.calls[0][1] == generator.calls[1][1]


def test_existing_answer_is_not_regenerated(engine, game):
    engine.record_answer(game.investigation.current_round.uuid, "no")
    generator = FakeGenerator("yes")
    assert engine.get_or_generate_answer("p1", generator) == "no"
    assert generator.calls == []


def test_falls_back_to_other_models_descriptions(engine, store):
    game = engine.new_game("p3", "unknown-model")
    generator = FakeGenerator("yes")
    engine.get_or_generate_answer("p3", generator)
    fallback = store.descriptions_for_suspect(game.investigation.criminal_uuid, "unknown-model")
    assert generator.calls[0][1] in {item.description for item in fallback}
    assert len(fallback) == 3


def test_generator_failure_is_upstream_failure(engine, game):
    generator = FakeGenerator(error=RuntimeError("service down"))
    with pytest.raises(UpstreamFailure):
        engine.get_or_generate_answer("p1", generator)
    assert engine.store.get_answer(game.investigation.current_round.uuid) == ""


def test_empty_generation_is_upstream_failure(engine, game):
    with pytest.raises(UpstreamFailure):
        engine.get_or_generate_answer("p1", FakeGenerator("   "))


def test_missing_descriptions(store, game):
    investigation = game.investigation.model_copy(update={"criminal_uuid": "nobody"})
    broken = game.model_copy(update={"investigation": investigation})
    with pytest.raises(NotFound):
        answer_for_round(store, broken, FakeGenerator())


def test_chat_generator_uses_service_of_model(store, settings):
    from artsus.content.llm import ChatAnswerGenerator

    generator = ChatAnswerGenerator(settings.with_overrides(openai_api_key="sk-test"), store)
    client = generator._client("m1")
    assert client.openai_api_base == "http://localhost"
    assert client.model_name == "m1"
    assert generator._client("m1") is client
