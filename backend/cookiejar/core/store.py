"""
Persistent store adapter — durable key-value collections.

Holds the two top-level collections (`cookies`, `projects`) as ordered
JSON arrays, one row each in the `collections` table.

SINGLE WRITER:
  Every repository operation is a full read-modify-write of a collection.
  Two UI surfaces calling in at the same time would otherwise lose
  updates, so `transaction()` holds one asyncio.Lock for its whole
  duration. All store access in this process goes through it.

ATOMICITY:
  Writes inside one transaction (e.g. deleting a project and its cookies)
  commit together or not at all. `set()` is an upsert
  (INSERT … ON CONFLICT DO UPDATE) keyed on the collection name.

FAILURES:
  Any SQLAlchemyError is rolled back and re-raised as IOFailure carrying
  the driver message. Nothing here retries.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cookiejar.core.database import async_session_factory
from cookiejar.core.errors import IOFailure
from cookiejar.models.collection import CollectionRecord

logger = logging.getLogger(__name__)

# Dialect name -> INSERT construct supporting on_conflict_do_update
_UPSERT_INSERTS: dict[str, Callable[..., Any]] = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


class CollectionTransaction:
    """Read/write handle for collections, valid inside one transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, name: str) -> list[Any]:
        """Return the stored collection, or [] when it was never written."""
        stmt = select(CollectionRecord.payload).where(CollectionRecord.name == name)
        result = await self._session.execute(stmt)
        payload = result.scalar_one_or_none()
        if not isinstance(payload, list):
            if payload is not None:
                logger.warning("Collection %r is not an array; treating as empty", name)
            return []
        return payload

    async def set(self, name: str, items: list[Any]) -> None:
        """Replace the whole collection."""
        dialect = self._session.bind.dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise IOFailure(f"Unsupported database dialect '{dialect}'")

        stmt = insert(CollectionRecord).values(name=name, payload=list(items))
        stmt = stmt.on_conflict_do_update(
            index_elements=["name"],
            set_={
                "payload": stmt.excluded.payload,
                "updated_at": func.now(),
            },
        )
        await self._session.execute(stmt)
        logger.debug("Wrote collection %r (%d records)", name, len(items))


class CollectionStore:
    """Durable collections behind a single-writer lock."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[CollectionTransaction]:
        """
        Exclusive read-modify-write scope.

        Commits on normal exit. Domain errors raised by the caller
        propagate unchanged (nothing is committed); database errors are
        converted to IOFailure.
        """
        async with self._lock:
            async with self._session_factory() as session:
                try:
                    yield CollectionTransaction(session)
                    await session.commit()
                except SQLAlchemyError as exc:
                    await session.rollback()
                    logger.exception("Collection store transaction failed")
                    raise IOFailure(str(exc)) from exc


# ── Dependency ──────────────────────────────────────────────
_default_store: CollectionStore | None = None


def get_collection_store() -> CollectionStore:
    """
    FastAPI dependency — the process-wide store.

    There must be exactly one store per process so that its lock
    serializes every writer.
    """
    global _default_store
    if _default_store is None:
        _default_store = CollectionStore(async_session_factory)
    return _default_store
