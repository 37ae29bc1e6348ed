"""
Cookie repository — CRUD over the `cookies` collection.

Stateless: every call re-reads the full collection inside one store
transaction, mutates a copy, and writes it back. The normalizer runs on
every read and every write, so callers only ever see canonical cookies.

Identity rules:
  • create() always mints a new id and createdAt, whatever the caller sent.
  • update() keeps the existing id and createdAt; other fields merge shallowly.
  • Lookups compare ids as strings.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cookiejar.core.clock import mint_cookie_id, now_ms
from cookiejar.core.errors import ValidationError
from cookiejar.core.store import CollectionStore, CollectionTransaction
from cookiejar.models.collection import COOKIES
from cookiejar.schemas.records import Cookie
from cookiejar.services.normalizer import (
    needs_migration,
    normalize_cookie,
    normalize_cookies,
)

logger = logging.getLogger(__name__)


# ── Transaction-level helpers (shared with other repositories) ──
async def load_cookies(tx: CollectionTransaction) -> list[Cookie]:
    """Read and normalize the collection, migrating it if needed."""
    raw = await tx.get(COOKIES)
    return await migrate_cookies(tx, raw)


async def migrate_cookies(tx: CollectionTransaction, raw: list[Any]) -> list[Cookie]:
    """
    Normalize `raw` and persist the result only if it changed.

    Idempotent: a canonical collection is never rewritten.
    """
    cookies = normalize_cookies(raw)
    if needs_migration(raw, cookies):
        logger.info("Migrating cookies collection (%d records)", len(cookies))
        await save_cookies(tx, cookies)
    return cookies


async def save_cookies(tx: CollectionTransaction, cookies: list[Cookie]) -> None:
    await tx.set(COOKIES, [cookie.to_record() for cookie in cookies])


async def remove_project_cookies(tx: CollectionTransaction, project_id: str) -> int:
    """Delete every cookie owned by `project_id`. Returns how many went."""
    cookies = await load_cookies(tx)
    kept = [cookie for cookie in cookies if cookie.project_id != project_id]
    removed = len(cookies) - len(kept)
    if removed:
        await save_cookies(tx, kept)
    return removed


def _find(cookies: list[Cookie], cookie_id: Any) -> int | None:
    target = str(cookie_id)
    for index, cookie in enumerate(cookies):
        if cookie.id == target:
            return index
    return None


# ── Repository ──────────────────────────────────────────────
class CookieRepository:
    """CRUD operations over the cookie collection."""

    def __init__(self, store: CollectionStore) -> None:
        self._store = store

    async def list(self) -> list[Cookie]:
        async with self._store.transaction() as tx:
            return await load_cookies(tx)

    async def get(self, cookie_id: str) -> Cookie | None:
        async with self._store.transaction() as tx:
            cookies = await load_cookies(tx)
        index = _find(cookies, cookie_id)
        return cookies[index] if index is not None else None

    async def create(self, partial: Mapping[str, Any]) -> Cookie:
        """
        Store a new cookie built from `partial`.

        The id and createdAt are always freshly minted, so a caller that
        replays an existing id still gets a distinct record.
        """
        async with self._store.transaction() as tx:
            cookies = await load_cookies(tx)
            now = now_ms()

            existing_ids = {cookie.id for cookie in cookies}
            fresh_id = mint_cookie_id(now)
            while fresh_id in existing_ids:
                fresh_id = mint_cookie_id(now)

            cookie = normalize_cookie(partial, len(cookies), now).model_copy(
                update={"id": fresh_id, "created_at": now},
            )
            cookies.append(cookie)
            await save_cookies(tx, cookies)

        logger.info("Created cookie %s (project=%s)", cookie.id, cookie.project_id)
        return cookie

    async def update(self, partial: Mapping[str, Any]) -> bool:
        """
        Merge `partial` over the stored cookie with the same id.

        Returns False (and writes nothing) when the id is unknown.

        Raises:
            ValidationError: If `partial` carries no id.
        """
        if not partial.get("id"):
            raise ValidationError("Cookie id is required for update.")

        async with self._store.transaction() as tx:
            cookies = await load_cookies(tx)
            index = _find(cookies, partial["id"])
            if index is None:
                return False

            existing = cookies[index]
            merged = {**existing.to_record(), **partial}
            # identity and creation time are not editable
            merged["id"] = existing.id
            merged["createdAt"] = existing.created_at

            now = now_ms()
            cookies[index] = normalize_cookie(merged, index, now).model_copy(
                update={"updated_at": now},
            )
            await save_cookies(tx, cookies)

        logger.info("Updated cookie %s", existing.id)
        return True

    async def delete(self, cookie_id: str) -> Cookie | None:
        """Remove the first cookie with this id; return it, or None."""
        async with self._store.transaction() as tx:
            cookies = await load_cookies(tx)
            index = _find(cookies, cookie_id)
            if index is None:
                return None
            removed = cookies.pop(index)
            await save_cookies(tx, cookies)

        logger.info("Deleted cookie %s", removed.id)
        return removed
