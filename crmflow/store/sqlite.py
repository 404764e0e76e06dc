"""SQLite implementation of the entity store."""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from .base import EntityStore, RecordNotFound, matches, sort_records


class SQLiteEntityStore(EntityStore):
    """Persist entities as JSON documents in SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        # One connection is shared by the to_thread workers.
        self._lock = threading.RLock()
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS entities (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                entity TEXT NOT NULL,
                id TEXT NOT NULL,
                data TEXT NOT NULL,
                UNIQUE (entity, id)
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> int:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(query, params)
            self._conn.commit()
            return cur.rowcount

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(query, params)
            return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(query, params)
            return cur.fetchall()

    def _load(self, entity: str, record_id: str) -> dict | None:
        row = self._fetchone(
            "SELECT data FROM entities WHERE entity = ? AND id = ?",
            entity,
            record_id,
        )
        return json.loads(row["data"]) if row else None

    def _update(self, entity: str, record_id: str, fields: dict) -> dict:
        # Read, merge and write as one step.
        with self._lock:
            record = self._load(entity, record_id)
            if record is None:
                raise RecordNotFound(entity, record_id)
            record.update(fields)
            self._execute(
                "UPDATE entities SET data = ? WHERE entity = ? AND id = ?",
                json.dumps(record),
                entity,
                record_id,
            )
            return record

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Store API
    async def create(self, entity: str, fields: dict) -> dict:
        record = dict(fields)
        record["id"] = str(uuid.uuid4())
        record.setdefault("created_date", datetime.now(timezone.utc).isoformat())
        await asyncio.to_thread(
            self._execute,
            "INSERT INTO entities (entity, id, data) VALUES (?, ?, ?)",
            entity,
            record["id"],
            json.dumps(record),
        )
        return record

    async def update(self, entity: str, record_id: str, fields: dict) -> dict:
        return await asyncio.to_thread(self._update, entity, record_id, fields)

    async def get(self, entity: str, record_id: str) -> dict | None:
        return await asyncio.to_thread(self._load, entity, record_id)

    async def delete(self, entity: str, record_id: str) -> bool:
        deleted = await asyncio.to_thread(
            self._execute,
            "DELETE FROM entities WHERE entity = ? AND id = ?",
            entity,
            record_id,
        )
        return deleted > 0

    async def list(
        self,
        entity: str,
        filters: Optional[Mapping[str, Any]] = None,
        sort: Optional[str] = None,
    ) -> list[dict]:
        rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT data FROM entities WHERE entity = ? ORDER BY seq",
            entity,
        )
        records = [json.loads(r["data"]) for r in rows]
        return sort_records([r for r in records if matches(r, filters)], sort)
