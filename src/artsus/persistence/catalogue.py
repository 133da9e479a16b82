"""Load the suspect/question catalogue from YAML into a store."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any

import yaml

from artsus import config
from artsus.domain.models import AIModel, Description, Question, Service, Suspect
from artsus.errors import ValidationError
from artsus.persistence.db import GameStore

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    suspects: int = 0
    questions: int = 0
    descriptions: int = 0
    services: int = 0
    models: int = 0


def load_catalogue(path: Path | None = None) -> dict[str, Any]:
    catalogue_path = Path(path or config.CATALOGUE_PATH)
    data = yaml.safe_load(catalogue_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValidationError(f"catalogue {catalogue_path} must contain a mapping")
    return data


def seed_catalogue(store: GameStore, data: dict[str, Any]) -> SeedReport:
    """Insert catalogue entries that are not stored yet; safe to run repeatedly."""
    report = SeedReport()
    with store.transaction():
        for entry in data.get("services", []) or []:
            store.save_service(Service(**entry))
            report.services += 1
        for entry in data.get("models", []) or []:
            store.save_model(AIModel(**entry))
            report.models += 1
        for entry in data.get("suspects", []) or []:
            if store.save_suspect(Suspect(**entry)):
                report.suspects += 1
        for entry in data.get("questions", []) or []:
            if store.save_question(Question(**entry)):
                report.questions += 1

        by_image = {suspect.image: suspect.uuid for suspect in store.all_suspects()}
        for entry in data.get("descriptions", []) or []:
            fields = dict(entry)
            image = fields.pop("image", None)
            suspect_uuid = fields.pop("suspect_uuid", None) or by_image.get(image)
            if suspect_uuid is None:
                raise ValidationError(f"description refers to unknown suspect image {image!r}")
            description = Description(suspect_uuid=suspect_uuid, **fields)
            known = store.descriptions_for_suspect(suspect_uuid, description.model, strict=True)
            if any(item.description == description.description for item in known):
                continue
            store.save_description(description)
            report.descriptions += 1
    logger.info(
        "Seeded %d suspects, %d questions, %d descriptions",
        report.suspects,
        report.questions,
        report.descriptions,
    )
    return report
