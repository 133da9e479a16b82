"""Domain models for games, investigations and the content catalogue."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from artsus.domain.enums import InvestigationOutcome, SuspectStatus
from artsus.util.ids import new_id
from artsus.util.time import timestamp_now


class Entity(BaseModel):
    model_config = ConfigDict(extra="forbid")

    uuid: str = Field(default_factory=new_id)
    timestamp: str = Field(default_factory=timestamp_now)


class Player(BaseModel):
    model_config = ConfigDict(extra="forbid")

    uuid: str = ""
    name: str = "anonymous"


class Suspect(Entity):
    image: str
    # Filled per investigation from its eliminations, never persisted.
    free: bool = False
    fled: bool = False

    @property
    def status(self) -> SuspectStatus:
        if self.fled:
            return SuspectStatus.FLED
        if self.free:
            return SuspectStatus.FREE
        return SuspectStatus.NEITHER


class Question(BaseModel):
    model_config = ConfigDict(extra="forbid")

    uuid: str = Field(default_factory=new_id)
    english: str
    czech: str = ""
    polish: str = ""
    topic: str = ""
    level: int = 0


class Elimination(Entity):
    model_config = ConfigDict(extra="forbid", frozen=True)

    round_uuid: str
    suspect_uuid: str


class Round(Entity):
    investigation_uuid: str
    question: Question
    answer: str = ""
    # Newest first.
    eliminations: List[Elimination] = Field(default_factory=list)

    @property
    def has_answer(self) -> bool:
        return self.answer != ""


class Investigation(Entity):
    game_uuid: str
    suspects: List[Suspect] = Field(default_factory=list)
    # Oldest first.
    rounds: List[Round] = Field(default_factory=list)
    criminal_uuid: str = Field(default="", exclude=True, repr=False)
    outcome: InvestigationOutcome = InvestigationOutcome.OPEN

    @property
    def investigation_over(self) -> bool:
        return self.outcome != InvestigationOutcome.OPEN

    @property
    def suspect_uuids(self) -> list[str]:
        return [suspect.uuid for suspect in self.suspects]

    @property
    def current_round(self) -> Round | None:
        return self.rounds[-1] if self.rounds else None

    def find_round(self, round_uuid: str) -> Round | None:
        return next((r for r in self.rounds if r.uuid == round_uuid), None)


class Game(Entity):
    investigator: Player = Field(default_factory=Player)
    score: int = 0
    model: str = ""
    investigation: Investigation | None = None
    level: int = 0
    game_over: bool = False


class Description(Entity):
    suspect_uuid: str
    service: str = ""
    model: str = ""
    description: str
    prompt: str = ""


class Service(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    api_style: str | None = None
    type: str = "API"
    url: str | None = None
    # Never sent to a public front end.
    token: str = Field(default="", exclude=True, repr=False)
    active: bool = True


class AIModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    service: str
    visual: bool = False
    allowed: bool = True
    historical: bool = False
    price: float = 0.0
    weight: float = 0.0


class FinalScore(BaseModel):
    model_config = ConfigDict(extra="forbid")

    position: int
    score: int
    investigator: str
    game_uuid: str
    timestamp: str = ""
