from __future__ import annotations

import pytest

from artsus.domain.models import Suspect
from artsus.errors import InsufficientSuspects, ValidationError
from artsus.investigation.pool import choose_criminal, select_pool
from artsus.util.rng import Rng


def _catalogue(count: int) -> list[Suspect]:
    return [Suspect(image=f"img/{n}.png") for n in range(count)]


def test_select_pool_draws_distinct_suspects():
    pool = select_pool(_catalogue(30), 15, Rng(3))
    assert len(pool) == 15
    assert len({suspect.uuid for suspect in pool}) == 15


def test_select_pool_is_reproducible_with_seed():
    catalogue = _catalogue(30)
    first = [s.uuid for s in select_pool(catalogue, 15, Rng(9))]
    second = [s.uuid for s in select_pool(catalogue, 15, Rng(9))]
    assert first == second


def test_select_pool_rejects_small_catalogue():
    with pytest.raises(InsufficientSuspects) as excinfo:
        select_pool(_catalogue(10), 15, Rng(1))
    assert excinfo.value.available == 10
    assert excinfo.value.required == 15


def test_select_pool_rejects_degenerate_size():
    with pytest.raises(ValidationError):
        select_pool(_catalogue(10), 1, Rng(1))


def test_choose_criminal_indexes_into_pool():
    pool = _catalogue(15)
    rng = Rng(5)
    picks = {choose_criminal(pool, rng) for _ in range(500)}
    assert picks <= set(range(15))
    assert len(picks) > 10


def test_choose_criminal_requires_pool():
    with pytest.raises(ValidationError):
        choose_criminal([], Rng(1))
