from __future__ import annotations

from pathlib import Path

import pytest

from artsus import config
from artsus.config import Settings
from artsus.errors import ValidationError


def test_defaults_match_reference_rules():
    settings = Settings()
    assert settings.pool_size == config.POOL_SIZE == 15
    assert settings.answer_poll_interval == 1.0
    assert settings.answer_timeout == 60.0


def test_from_env_reads_prefixed_values():
    settings = Settings.from_env(
        {
            "ARTSUS_POOL_SIZE": "9",
            "ARTSUS_ANSWER_TIMEOUT": "5",
            "ARTSUS_DB_PATH": "/tmp/artsus.db",
            "ARTSUS_SEED": "42",
            "OPENAI_API_KEY": "sk-test",
        }
    )
    assert settings.pool_size == 9
    assert settings.answer_timeout == 5.0
    assert settings.db_path == Path("/tmp/artsus.db")
    assert settings.seed == 42
    assert settings.openai_api_key == "sk-test"


def test_from_yaml(tmp_path):
    path = tmp_path / "settings.yml"
    path.write_text("pool_size: 7\ndefault_model: gpt-4o\n", encoding="utf-8")
    settings = Settings.from_yaml(path)
    assert settings.pool_size == 7
    assert settings.default_model == "gpt-4o"


def test_from_yaml_rejects_unknown_keys(tmp_path):
    path = tmp_path / "settings.yml"
    path.write_text("pool: 7\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        Settings.from_yaml(path)


@pytest.mark.parametrize(
    "overrides",
    [{"pool_size": 1}, {"answer_timeout": 0}, {"answer_poll_interval": -1}],
)
def test_invalid_settings(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_with_overrides_coerces_types():
    settings = Settings().with_overrides(db_path="x.db", pool_size="5")
    assert settings.db_path == Path("x.db")
    assert settings.pool_size == 5
