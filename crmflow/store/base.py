"""Entity store contract consumed by the workflow engine."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol


class RecordNotFound(LookupError):
    """Raised by stores when an update targets a missing record."""

    def __init__(self, entity: str, record_id: str) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found")


class EntityStore(Protocol):
    """Protocol for CRM entity persistence backends."""

    async def create(self, entity: str, fields: dict) -> dict:
        """Persist a new record and return it with its assigned ``id``."""

    async def update(self, entity: str, record_id: str, fields: dict) -> dict:
        """Merge ``fields`` into an existing record and return it."""

    async def get(self, entity: str, record_id: str) -> dict | None:
        """Retrieve a record by id."""

    async def delete(self, entity: str, record_id: str) -> bool:
        """Remove a record. Returns ``True`` if it existed."""

    async def list(
        self,
        entity: str,
        filters: Optional[Mapping[str, Any]] = None,
        sort: Optional[str] = None,
    ) -> list[dict]:
        """Return records matching ``filters`` ordered by ``sort``."""


def matches(record: Mapping[str, Any], filters: Optional[Mapping[str, Any]]) -> bool:
    if not filters:
        return True
    return all(record.get(key) == value for key, value in filters.items())


def sort_records(records: Iterable[dict], sort: Optional[str]) -> list[dict]:
    """Order records by a field name, ``-field`` meaning descending.

    Records lacking the field go last in either direction.
    """
    records = list(records)
    if not sort:
        return records
    descending = sort.startswith("-")
    field = sort.lstrip("-")
    present = [r for r in records if r.get(field) is not None]
    missing = [r for r in records if r.get(field) is None]
    if descending:
        # equal keys keep newest-inserted first
        present.reverse()
    present.sort(key=lambda r: r[field], reverse=descending)
    return present + missing
