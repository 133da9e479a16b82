"""Game constants and environment-level settings."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import os
from pathlib import Path
from typing import Any

import yaml

from artsus.errors import ValidationError

ROOT = Path(__file__).resolve().parents[2]

# There were 12 suspects in the original board game.
POOL_SIZE = 15
ANSWER_POLL_INTERVAL = 1.0
ANSWER_TIMEOUT = 60.0
DEFAULT_PLAYER_NAME = "anonymous"
DEFAULT_MODEL = "gpt-4o-mini"
DB_PATH = ROOT / "data" / "artsus.db"
CATALOGUE_PATH = ROOT / "data" / "catalogue.yml"
SEED: int | None = None

ENV_PREFIX = "ARTSUS_"


@dataclass(frozen=True)
class Settings:
    pool_size: int = POOL_SIZE
    answer_poll_interval: float = ANSWER_POLL_INTERVAL
    answer_timeout: float = ANSWER_TIMEOUT
    default_player_name: str = DEFAULT_PLAYER_NAME
    default_model: str = DEFAULT_MODEL
    db_path: Path = DB_PATH
    catalogue_path: Path = CATALOGUE_PATH
    seed: int | None = SEED
    openai_api_key: str | None = None
    openai_base_url: str | None = None

    def __post_init__(self) -> None:
        if self.pool_size < 2:
            raise ValidationError(f"pool_size must be at least 2, got {self.pool_size}")
        if self.answer_poll_interval <= 0:
            raise ValidationError("answer_poll_interval must be positive")
        if self.answer_timeout <= 0:
            raise ValidationError("answer_timeout must be positive")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for field_ in fields(cls):
            raw = env.get(ENV_PREFIX + field_.name.upper())
            if raw is not None and raw != "":
                values[field_.name] = raw
        values.setdefault("openai_api_key", env.get("OPENAI_API_KEY"))
        values.setdefault("openai_base_url", env.get("OPENAI_BASE_URL"))
        return cls(**_coerce(values))

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValidationError(f"settings file {path} must contain a mapping")
        known = {field_.name for field_ in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(f"unknown settings: {', '.join(unknown)}")
        return cls(**_coerce(data))

    def with_overrides(self, **changes: Any) -> "Settings":
        return replace(self, **_coerce(changes))


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    coerced: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            coerced[key] = None
        elif key == "pool_size":
            coerced[key] = int(value)
        elif key == "seed":
            coerced[key] = int(value)
        elif key in ("answer_poll_interval", "answer_timeout"):
            coerced[key] = float(value)
        elif key in ("db_path", "catalogue_path"):
            coerced[key] = Path(value)
        else:
            coerced[key] = value
    return coerced
