"""
Project repository — CRUD over the `projects` collection.

Rules enforced:
  • Names are unique among all stored projects (active or archived),
    compared case-sensitively.
  • New projects start active; ids are the creation time in epoch-ms.
  • Deleting a project cascades to every cookie it owns, in the same
    store transaction.

create()/update() report expected failures (blank name, duplicate name,
unknown id) as a ProjectResult rather than raising, so UI surfaces can
show the message inline.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cookiejar.core.clock import now_ms
from cookiejar.core.errors import CookieJarError, DuplicateName, NotFound, ValidationError
from cookiejar.core.store import CollectionStore, CollectionTransaction
from cookiejar.models.collection import PROJECTS
from cookiejar.schemas.records import Project, ProjectStatus
from cookiejar.schemas.results import ProjectResult
from cookiejar.services.cookies import remove_project_cookies
from cookiejar.services.normalizer import (
    clean_tags,
    needs_migration,
    normalize_project,
    normalize_projects,
)

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "tags", "status")


# ── Transaction-level helpers ───────────────────────────────
async def load_projects(tx: CollectionTransaction) -> list[Project]:
    """Read and normalize the collection, migrating it if needed."""
    raw = await tx.get(PROJECTS)
    projects = normalize_projects(raw)
    if needs_migration(raw, projects):
        logger.info("Migrating projects collection (%d records)", len(projects))
        await save_projects(tx, projects)
    return projects


async def save_projects(tx: CollectionTransaction, projects: list[Project]) -> None:
    await tx.set(PROJECTS, [project.to_record() for project in projects])


def _find(projects: list[Project], project_id: Any) -> int | None:
    target = str(project_id)
    for index, project in enumerate(projects):
        if project.id == target:
            return index
    return None


def _name_taken(projects: list[Project], name: str, exclude_id: str | None = None) -> bool:
    return any(p.name == name and p.id != exclude_id for p in projects)


def _failure(error: type[CookieJarError], message: str) -> ProjectResult:
    logger.info("Project operation rejected: %s", message)
    return ProjectResult(success=False, error=error.code, message=message)


# ── Filtering (dashboard project grid) ──────────────────────
def all_tags(projects: list[Project]) -> list[str]:
    """Sorted union of every project's tags."""
    return sorted({tag for project in projects for tag in project.tags})


def filter_projects(
    projects: list[Project],
    tag: str | None = None,
    query: str = "",
) -> list[Project]:
    """
    Apply the dashboard's tag chip and search box.

    Search is case-insensitive over name and tags. Active projects sort
    before archived ones, then by name.
    """
    selected = projects
    if tag:
        selected = [p for p in selected if tag in p.tags]
    if query:
        needle = query.lower()
        selected = [
            p for p in selected
            if needle in p.name.lower() or any(needle in t.lower() for t in p.tags)
        ]
    return sorted(selected, key=lambda p: (p.status != "active", p.name.casefold()))


# ── Repository ──────────────────────────────────────────────
class ProjectRepository:
    """CRUD and status transitions over the project collection."""

    def __init__(self, store: CollectionStore) -> None:
        self._store = store

    async def list(self) -> list[Project]:
        async with self._store.transaction() as tx:
            return await load_projects(tx)

    async def get(self, project_id: str) -> Project | None:
        async with self._store.transaction() as tx:
            projects = await load_projects(tx)
        index = _find(projects, project_id)
        return projects[index] if index is not None else None

    async def create(self, data: Mapping[str, Any]) -> ProjectResult:
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            return _failure(ValidationError, "Project name is required.")

        async with self._store.transaction() as tx:
            projects = await load_projects(tx)
            if _name_taken(projects, name):
                return _failure(DuplicateName, "Project name already exists")

            created = now_ms()
            existing_ids = {p.id for p in projects}
            stamp = created
            while str(stamp) in existing_ids:
                stamp += 1

            project = Project(
                id=str(stamp),
                name=name,
                tags=clean_tags(data.get("tags")),
                status="active",
                created_at=created,
            )
            projects.append(project)
            await save_projects(tx, projects)

        logger.info("Created project %s (%r)", project.id, project.name)
        return ProjectResult(success=True, project=project)

    async def update(self, data: Mapping[str, Any]) -> ProjectResult:
        """
        Shallow-merge the editable fields of `data` over the stored project.

        Order of checks: id present → name not blank → name not used by a
        different project → project exists.
        """
        project_id = data.get("id")
        if not project_id:
            return _failure(ValidationError, "Project id is required.")
        project_id = str(project_id)

        changes = {key: data[key] for key in _EDITABLE_FIELDS if key in data}
        if "name" in changes and (
            not isinstance(changes["name"], str) or not changes["name"].strip()
        ):
            return _failure(ValidationError, "Project name is required.")

        async with self._store.transaction() as tx:
            projects = await load_projects(tx)
            if "name" in changes and _name_taken(projects, changes["name"], exclude_id=project_id):
                return _failure(DuplicateName, "Project name already exists")

            index = _find(projects, project_id)
            if index is None:
                return _failure(NotFound, "Project not found")

            merged = {**projects[index].to_record(), **changes}
            project = normalize_project(merged, index)
            projects[index] = project
            await save_projects(tx, projects)

        logger.info("Updated project %s", project.id)
        return ProjectResult(success=True, project=project)

    async def set_status(self, project_id: str, status: ProjectStatus) -> bool:
        """Archive or re-activate a project. False when the id is unknown."""
        async with self._store.transaction() as tx:
            projects = await load_projects(tx)
            index = _find(projects, project_id)
            if index is None:
                logger.info("Status change for unknown project %s ignored", project_id)
                return False
            projects[index] = projects[index].model_copy(update={"status": status})
            await save_projects(tx, projects)

        logger.info("Project %s is now %s", project_id, status)
        return True

    async def delete(self, project_id: str) -> bool:
        """Delete a project and cascade to its cookies. False when unknown."""
        async with self._store.transaction() as tx:
            projects = await load_projects(tx)
            index = _find(projects, project_id)
            if index is None:
                return False
            removed = projects.pop(index)
            await save_projects(tx, projects)
            cookies_removed = await remove_project_cookies(tx, removed.id)

        logger.info("Deleted project %s and %d cookie(s)", removed.id, cookies_removed)
        return True
