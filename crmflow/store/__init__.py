"""Entity stores holding workflows, executions and the CRM records actions touch.

``open_store`` turns a database URL into a backend; ``get_store`` keeps one
process-wide store built from :class:`~crmflow.config.CRMFlowConfig`.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from ..config import CRMFlowConfig, load_config
from .base import EntityStore, RecordNotFound
from .inmemory import InMemoryEntityStore
from .postgres import PostgresEntityStore
from .sqlite import SQLiteEntityStore

_BACKENDS: Dict[str, Callable[[str, str], EntityStore]] = {
    "memory": lambda url, location: InMemoryEntityStore(),
    "sqlite": lambda url, location: SQLiteEntityStore(location),
    "postgres": lambda url, location: PostgresEntityStore(url),
    "postgresql": lambda url, location: PostgresEntityStore(url),
}

_store_instance: EntityStore | None = None


def open_store(database_url: Optional[str]) -> EntityStore:
    """Build the store for ``database_url``.

    ``sqlite://<path>`` opens a SQLite file, ``postgres://`` and
    ``postgresql://`` URLs go to Postgres, and no URL (or ``memory://``)
    gives a fresh in-memory store.
    """
    if not database_url:
        return InMemoryEntityStore()
    scheme, sep, location = database_url.partition("://")
    builder = _BACKENDS.get(scheme.lower()) if sep else None
    if builder is None:
        raise ValueError(f"Unsupported database backend: {database_url}")
    return builder(database_url, location)


def get_store(config: Optional[CRMFlowConfig] = None) -> EntityStore:
    """Return the shared store, building it on first use.

    Without ``config`` the cached store is reused, or one is opened from
    :func:`~crmflow.config.load_config` (which applies the
    ``CRMFLOW_DATABASE_URL``/``DATABASE_URL`` overrides). Passing a config
    always replaces the cached store.
    """
    global _store_instance
    if config is None and _store_instance is not None:
        return _store_instance
    config = config or load_config()
    _store_instance = open_store(config.database_url)
    return _store_instance


__all__ = [
    "EntityStore",
    "RecordNotFound",
    "InMemoryEntityStore",
    "SQLiteEntityStore",
    "PostgresEntityStore",
    "get_store",
    "open_store",
]
