"""Deterministic choice of the description that answers an investigation's questions.

Every question in one investigation is answered from the same description of
the criminal, while different investigations spread over the candidates.
"""

from __future__ import annotations

import hashlib
import logging
from uuid import UUID

logger = logging.getLogger(__name__)


def _identity_bytes(investigation_uuid: str) -> bytes:
    try:
        return UUID(investigation_uuid).bytes
    except ValueError:
        logger.debug("Identifier %r is not a UUID, hashing it instead", investigation_uuid)
        return hashlib.sha256(investigation_uuid.encode("utf-8")).digest()


def pick_index(investigation_uuid: str, candidate_count: int) -> int:
    """Index in ``[0, candidate_count)``; 0 when there are no candidates."""
    if candidate_count <= 0:
        return 0
    value = int.from_bytes(_identity_bytes(investigation_uuid)[:8], "big", signed=False)
    return value % candidate_count
