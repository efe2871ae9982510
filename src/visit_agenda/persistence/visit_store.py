"""Persistence of the current visit plan."""

from __future__ import annotations

import logging
from typing import Sequence

from pydantic import TypeAdapter, ValidationError

from ..config import settings
from ..models.domain import Visit
from .filesystem import KeyValueStorage

logger = logging.getLogger(__name__)

_PLAN_ADAPTER = TypeAdapter(list[Visit])


class VisitStore:
    """Stores the plan as one JSON array under a fixed key.

    Writes are synchronous and best effort: a failed write is logged and the
    in-memory plan stays authoritative. There is no journal, so a crash between
    a mutation and its save loses that change.
    """

    def __init__(self, storage: KeyValueStorage | None = None, key: str | None = None) -> None:
        self.storage = storage or KeyValueStorage()
        self.key = key or settings.store_key

    def load(self) -> list[Visit]:
        try:
            raw = self.storage.read_bytes(self.key)
        except OSError as exc:
            logger.warning(f"Could not read persisted visits under '{self.key}': {exc}")
            return []
        if not raw:
            return []
        try:
            visits = _PLAN_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            logger.warning(f"Discarding corrupt visit plan under '{self.key}': {exc.error_count()} errors")
            return []
        logger.info(f"Loaded {len(visits)} persisted visits")
        return visits

    def save(self, visits: Sequence[Visit]) -> None:
        try:
            payload = _PLAN_ADAPTER.dump_json(list(visits))
            self.storage.write_bytes(self.key, payload)
        except (OSError, ValueError) as exc:
            logger.error(f"Failed to persist {len(visits)} visits under '{self.key}': {exc}")

    def clear(self) -> None:
        try:
            self.storage.remove(self.key)
        except OSError as exc:
            logger.error(f"Failed to clear persisted visits under '{self.key}': {exc}")
