"""PostgreSQL implementation of the entity store."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import asyncpg

from .base import EntityStore, RecordNotFound, sort_records


def _decode(value: Any) -> dict:
    return json.loads(value) if isinstance(value, str) else dict(value)


class PostgresEntityStore(EntityStore):
    """Persist entities as JSONB documents in PostgreSQL."""

    def __init__(self, dsn: str):
        self._dsn = dsn
        self._initialized = False

    async def _connect(self) -> asyncpg.Connection:
        conn = await asyncpg.connect(self._dsn)
        if not self._initialized:
            await self._ensure_schema(conn)
            self._initialized = True
        return conn

    async def _ensure_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS entities (
                seq BIGSERIAL PRIMARY KEY,
                entity TEXT NOT NULL,
                id TEXT NOT NULL,
                data JSONB NOT NULL,
                UNIQUE (entity, id)
            )
            """
        )

    # ------------------------------------------------------------------
    async def create(self, entity: str, fields: dict) -> dict:
        record = dict(fields)
        record["id"] = str(uuid.uuid4())
        record.setdefault("created_date", datetime.now(timezone.utc).isoformat())
        conn = await self._connect()
        try:
            await conn.execute(
                "INSERT INTO entities (entity, id, data) VALUES ($1, $2, $3::jsonb)",
                entity,
                record["id"],
                json.dumps(record),
            )
        finally:
            await conn.close()
        return record

    async def update(self, entity: str, record_id: str, fields: dict) -> dict:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                """
                UPDATE entities SET data = data || $3::jsonb
                WHERE entity = $1 AND id = $2
                RETURNING data
                """,
                entity,
                record_id,
                json.dumps(fields),
            )
        finally:
            await conn.close()
        if row is None:
            raise RecordNotFound(entity, record_id)
        return _decode(row["data"])

    async def get(self, entity: str, record_id: str) -> dict | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                "SELECT data FROM entities WHERE entity = $1 AND id = $2",
                entity,
                record_id,
            )
        finally:
            await conn.close()
        return _decode(row["data"]) if row else None

    async def delete(self, entity: str, record_id: str) -> bool:
        conn = await self._connect()
        try:
            status = await conn.execute(
                "DELETE FROM entities WHERE entity = $1 AND id = $2",
                entity,
                record_id,
            )
        finally:
            await conn.close()
        return status != "DELETE 0"

    async def list(
        self,
        entity: str,
        filters: Optional[Mapping[str, Any]] = None,
        sort: Optional[str] = None,
    ) -> list[dict]:
        conn = await self._connect()
        try:
            rows = await conn.fetch(
                """
                SELECT data FROM entities
                WHERE entity = $1 AND data @> $2::jsonb
                ORDER BY seq
                """,
                entity,
                json.dumps(dict(filters or {})),
            )
        finally:
            await conn.close()
        return sort_records([_decode(r["data"]) for r in rows], sort)
