"""
Import/export gateway — bulk JSON in and out of the store.

IMPORT:
  • Payload must be a mapping with an array `cookies` and/or `projects`.
  • Each array present REPLACES its whole collection; a payload with only
    one of them leaves the other collection alone.
  • Cookies are normalized but keep their ids (ids that repeat within the
    file are re-minted). Projects are normalized the same way.
  • Both collections are written in one transaction.
  • Nothing raises past this boundary: every failure becomes a
    TransferResult with success=False.

EXPORT:
  Plain serialization of what the repositories currently return, plus an
  export timestamp. No filtering.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cookiejar.core.clock import now_ms, to_iso_utc
from cookiejar.core.errors import CookieJarError, InvalidData
from cookiejar.core.store import CollectionStore
from cookiejar.schemas.records import Cookie, Project
from cookiejar.schemas.results import Snapshot, TransferResult
from cookiejar.services.cookies import load_cookies, save_cookies
from cookiejar.services.normalizer import normalize_cookies, normalize_projects
from cookiejar.services.projects import load_projects, save_projects

logger = logging.getLogger(__name__)


def _invalid(message: str) -> TransferResult:
    logger.warning("Import rejected: %s", message)
    return TransferResult(success=False, error=InvalidData.code, message=message)


async def read_collections(store: CollectionStore) -> tuple[list[Cookie], list[Project]]:
    """Both collections from one consistent read."""
    async with store.transaction() as tx:
        cookies = await load_cookies(tx)
        projects = await load_projects(tx)
    return cookies, projects


async def import_data(store: CollectionStore, payload: Any) -> TransferResult:
    """Replace the collections present in `payload`."""
    if not payload:
        return _invalid("No data")
    if not isinstance(payload, Mapping):
        return _invalid("Import payload must be a JSON object.")

    raw_cookies = payload.get("cookies")
    raw_projects = payload.get("projects")
    has_cookies = isinstance(raw_cookies, list)
    has_projects = isinstance(raw_projects, list)
    if not (has_cookies or has_projects):
        return _invalid("Import payload needs a `cookies` or `projects` array.")

    result = TransferResult(success=True)
    try:
        now = now_ms()
        async with store.transaction() as tx:
            if has_cookies:
                cookies = normalize_cookies(raw_cookies, now)
                await save_cookies(tx, cookies)
                result.cookies_imported = len(cookies)
            if has_projects:
                projects = normalize_projects(raw_projects, now)
                await save_projects(tx, projects)
                result.projects_imported = len(projects)
    except CookieJarError as exc:
        logger.error("Import failed: %s", exc)
        return TransferResult(success=False, error=exc.code, message=str(exc))
    except Exception as exc:
        logger.exception("Import failed unexpectedly")
        return TransferResult(success=False, error=CookieJarError.code, message=str(exc))

    logger.info(
        "Imported %s cookie(s), %s project(s)",
        result.cookies_imported, result.projects_imported,
    )
    return result


async def export_data(store: CollectionStore) -> Snapshot:
    """Snapshot of both collections with an ISO-8601 export date."""
    cookies, projects = await read_collections(store)
    return Snapshot(
        projects=projects,
        cookies=cookies,
        export_date=to_iso_utc(now_ms()),
    )
