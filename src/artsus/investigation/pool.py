"""Suspect pool selection for new investigations."""

from __future__ import annotations

from typing import Sequence

from artsus.domain.models import Suspect
from artsus.errors import InsufficientSuspects, ValidationError
from artsus.util.rng import Rng


def select_pool(catalogue: Sequence[Suspect], size: int, rng: Rng) -> list[Suspect]:
    """Draw ``size`` distinct suspects uniformly, without replacement."""
    if size < 2:
        raise ValidationError(f"suspect pool needs at least 2 suspects, got {size}")
    if len(catalogue) < size:
        raise InsufficientSuspects(len(catalogue), size)
    return [suspect.model_copy() for suspect in rng.sample(catalogue, size)]


def choose_criminal(pool: Sequence[Suspect], rng: Rng) -> int:
    if not pool:
        raise ValidationError("cannot choose a criminal from an empty pool")
    return rng.randbelow(len(pool))
