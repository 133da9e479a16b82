from __future__ import annotations

import pytest

from artsus.config import Settings
from artsus.engine import GameEngine
from artsus.persistence.catalogue import seed_catalogue
from artsus.persistence.db import GameStore
from artsus.util.rng import Rng

SUSPECT_COUNT = 20


def catalogue_data() -> dict:
    suspects = [{"image": f"img/{n:02d}.png"} for n in range(1, SUSPECT_COUNT + 1)]
    descriptions = []
    for n in range(1, SUSPECT_COUNT + 1):
        image = f"img/{n:02d}.png"
        descriptions.append({"image": image, "model": "m1", "description": f"suspect {n} first"})
        descriptions.append({"image": image, "model": "m1", "description": f"suspect {n} second"})
        descriptions.append({"image": image, "model": "m2", "description": f"suspect {n} by m2"})
    return {
        "services": [{"name": "Local", "type": "local", "url": "http://localhost"}],
        "models": [
            {"name": "m1", "service": "Local", "allowed": True, "price": 3, "weight": 1},
            {"name": "m2", "service": "Local", "allowed": False, "price": 1, "weight": 3},
            {"name": "m3", "service": "Local", "allowed": True, "price": 2, "weight": 2},
        ],
        "suspects": suspects,
        "questions": [
            {"english": "Does the criminal wear glasses?", "topic": "appearance", "level": 1},
            {"english": "Does the criminal have a beard?", "topic": "appearance", "level": 1},
            {"english": "Is the criminal smiling?", "topic": "expression", "level": 1},
        ],
        "descriptions": descriptions,
    }


class FakeGenerator:
    def __init__(self, reply: str = "Yes.", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    def generate(self, question: str, description: str, model: str) -> str:
        self.calls.append((question, description, model))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def store():
    store = GameStore()
    seed_catalogue(store, catalogue_data())
    yield store
    store.close()


@pytest.fixture
def settings():
    return Settings(default_model="m1", answer_poll_interval=0.01, answer_timeout=0.2)


@pytest.fixture
def engine(store, settings):
    return GameEngine(store, settings, Rng(1234))


@pytest.fixture
def game(engine):
    return engine.new_game("p1", "m1")


def innocents(game) -> list[str]:
    investigation = game.investigation
    return [uuid for uuid in investigation.suspect_uuids if uuid != investigation.criminal_uuid]
