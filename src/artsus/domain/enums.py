"""Shared enums for the game domain."""

from __future__ import annotations

from enum import StrEnum


class SuspectStatus(StrEnum):
    FREE = "free"
    FLED = "fled"
    NEITHER = "neither"


class InvestigationOutcome(StrEnum):
    OPEN = "open"
    SOLVED = "solved"
    FAILED = "failed"


class ModelOrder(StrEnum):
    ID = "id"
    PRICE = "price"
    WEIGHT = "weight"
