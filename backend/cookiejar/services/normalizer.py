"""
Record normalizer — the single coercion boundary for stored data.

Stored records come from several app versions, hand-edited backups and
imports. Instead of rejecting malformed data, every read and write passes
through here and comes out as a canonical, fully-typed record.

Normalization NEVER raises: corruption is a migration problem, not a crash.

Cookie rules, in order:
  1. id         — falsy → "<now>-<index>-<6 random>", else str(id)
  2. timestamp  — number; falsy / non-numeric / non-finite → now
  3. createdAt  — number if present, else the resolved timestamp
  4. level      — number; falsy / NaN / below 1 → 1
  5. projectId  — str if truthy, else None
  6. note       — str if truthy, else ""
Legacy keys (e.g. the retired expiresAt) are dropped silently.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from cookiejar.core.clock import mint_cookie_id, now_ms, random_suffix
from cookiejar.schemas.records import Cookie, Project

logger = logging.getLogger(__name__)

_STATUSES = ("active", "archived")


# ── Primitive coercions ─────────────────────────────────────
def _to_number(value: Any) -> float | None:
    """Lenient numeric coercion; None for anything non-numeric or non-finite."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # ints beyond float range (JSON allows arbitrary precision)
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _to_text(value: Any) -> str:
    """str() that renders integral floats without a trailing `.0`."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def clean_tags(value: Any) -> list[str]:
    """Ordered, de-duplicated, stripped non-empty tags.

    Accepts a list or a comma-separated string ("music, practice").
    """
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []

    tags: list[str] = []
    for item in items:
        if item is None:
            continue
        tag = _to_text(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


# ── Cookies ─────────────────────────────────────────────────
def normalize_cookie(
    raw: Mapping[str, Any] | Any,
    index: int = 0,
    now: int | None = None,
) -> Cookie:
    """
    Coerce one raw stored cookie into a canonical Cookie.

    Args:
        raw:   Stored record (any shape; non-mappings count as empty).
        index: Position in the collection, mixed into synthesized ids.
        now:   Current epoch-ms (injectable for tests).
    """
    if now is None:
        now = now_ms()
    if not isinstance(raw, Mapping):
        raw = {}

    raw_id = raw.get("id")
    cookie_id = _to_text(raw_id) if raw_id else mint_cookie_id(now, index)

    timestamp = _to_number(raw.get("timestamp"))
    timestamp_ms = int(timestamp) if timestamp else now

    created = _to_number(raw.get("createdAt"))
    created_ms = int(created) if created else timestamp_ms

    level = _to_number(raw.get("level"))
    level_value = int(level) if level and level >= 1 else 1

    project_id = raw.get("projectId")
    note = raw.get("note")

    updated = _to_number(raw.get("updatedAt"))

    return Cookie(
        id=cookie_id,
        project_id=_to_text(project_id) if project_id else None,
        note=_to_text(note) if note else "",
        level=level_value,
        timestamp=timestamp_ms,
        created_at=created_ms,
        updated_at=int(updated) if updated else None,
    )


def normalize_cookies(raw_items: Iterable[Any], now: int | None = None) -> list[Cookie]:
    """
    Normalize a whole cookie collection.

    Ids must be unique collection-wide: a record whose id repeats an
    earlier one gets a freshly minted id.
    """
    if now is None:
        now = now_ms()

    cookies: list[Cookie] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_items):
        cookie = normalize_cookie(raw, index, now)
        if cookie.id in seen:
            fresh = mint_cookie_id(now, index)
            while fresh in seen:
                fresh = mint_cookie_id(now, index)
            logger.warning("Duplicate cookie id %s at position %d; re-minted as %s",
                           cookie.id, index, fresh)
            cookie = cookie.model_copy(update={"id": fresh})
        seen.add(cookie.id)
        cookies.append(cookie)
    return cookies


# ── Projects ────────────────────────────────────────────────
def normalize_project(
    raw: Mapping[str, Any] | Any,
    index: int = 0,
    now: int | None = None,
) -> Project:
    """Coerce one raw stored project into a canonical Project."""
    if now is None:
        now = now_ms()
    if not isinstance(raw, Mapping):
        raw = {}

    raw_id = raw.get("id")
    name = raw.get("name")
    status = raw.get("status")
    created = _to_number(raw.get("createdAt"))

    return Project(
        id=_to_text(raw_id) if raw_id else f"{now}-{index}",
        name=_to_text(name) if name is not None else "",
        tags=clean_tags(raw.get("tags")),
        status=status if status in _STATUSES else "active",
        created_at=int(created) if created else now,
    )


def normalize_projects(raw_items: Iterable[Any], now: int | None = None) -> list[Project]:
    """Normalize a whole project collection, re-minting duplicate ids."""
    if now is None:
        now = now_ms()

    projects: list[Project] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_items):
        project = normalize_project(raw, index, now)
        if project.id in seen:
            fresh = f"{now}-{index}-{random_suffix(6)}"
            logger.warning("Duplicate project id %s at position %d; re-minted as %s",
                           project.id, index, fresh)
            project = project.model_copy(update={"id": fresh})
        seen.add(project.id)
        projects.append(project)
    return projects


# ── Migration check ─────────────────────────────────────────
def needs_migration(raw_items: list[Any], records: list[Cookie] | list[Project]) -> bool:
    """True when the normalized collection differs from what is stored."""
    return raw_items != [record.to_record() for record in records]
