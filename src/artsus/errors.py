"""Error taxonomy raised by the engine and its collaborators."""

from __future__ import annotations


class ArtsusError(Exception):
    """Base class for all engine errors."""


class NotFound(ArtsusError):
    """Entity is absent: no game, no round, no descriptions."""


class ValidationError(ArtsusError):
    """Malformed or missing input."""


class InsufficientSuspects(ValidationError):
    def __init__(self, available: int, required: int) -> None:
        super().__init__(f"catalogue has {available} suspects, investigation needs {required}")
        self.available = available
        self.required = required


class Conflict(ArtsusError):
    """Action contradicts the current game state, e.g. a duplicate elimination."""


class Timeout(ArtsusError):
    pass


class AnswerTimeout(Timeout):
    def __init__(self, round_uuid: str, waited: float) -> None:
        super().__init__(f"no answer for round {round_uuid} after {waited:.1f}s")
        self.round_uuid = round_uuid
        self.waited = waited


class WaitCancelled(ArtsusError):
    """The caller abandoned an answer wait."""


class UpstreamFailure(ArtsusError):
    """The content-generation collaborator failed or returned unusable output."""
