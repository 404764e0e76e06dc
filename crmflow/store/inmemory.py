"""In-memory implementation of the entity store."""

from __future__ import annotations

import copy
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .base import EntityStore, RecordNotFound, matches, sort_records


class InMemoryEntityStore(EntityStore):
    """Store entities in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._entities: Dict[str, Dict[str, dict]] = defaultdict(dict)

    # ------------------------------------------------------------------
    async def create(self, entity: str, fields: dict) -> dict:
        record = copy.deepcopy(fields)
        record["id"] = str(uuid.uuid4())
        record.setdefault("created_date", datetime.now(timezone.utc).isoformat())
        self._entities[entity][record["id"]] = record
        return copy.deepcopy(record)

    async def update(self, entity: str, record_id: str, fields: dict) -> dict:
        record = self._entities[entity].get(record_id)
        if record is None:
            raise RecordNotFound(entity, record_id)
        record.update(copy.deepcopy(fields))
        return copy.deepcopy(record)

    async def get(self, entity: str, record_id: str) -> dict | None:
        record = self._entities[entity].get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def delete(self, entity: str, record_id: str) -> bool:
        return self._entities[entity].pop(record_id, None) is not None

    async def list(
        self,
        entity: str,
        filters: Optional[Mapping[str, Any]] = None,
        sort: Optional[str] = None,
    ) -> list[dict]:
        records = [
            copy.deepcopy(r)
            for r in self._entities[entity].values()
            if matches(r, filters)
        ]
        return sort_records(records, sort)
