"""
Pydantic v2 schemas for structured operation results.

Expected failures (duplicate name, bad import file, …) are reported as
`{success: false, error, message}` instead of raising, so every UI surface
can show them the same way. `error` is a stable code from
cookiejar.core.errors; `message` is human-readable.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cookiejar.schemas.records import Cookie, Project


class ProjectResult(BaseModel):
    """Outcome of a project create/update."""

    success: bool
    project: Project | None = None
    error: str | None = Field(
        default=None,
        examples=["DuplicateName"],
        description="Error code when success is false.",
    )
    message: str | None = Field(
        default=None,
        examples=["Project name already exists"],
    )


class TransferResult(BaseModel):
    """Outcome of a bulk import."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    error: str | None = None
    message: str | None = None
    cookies_imported: int | None = None
    projects_imported: int | None = None


class Snapshot(BaseModel):
    """
    Full export of both collections.

    File format: {projects: [...], cookies: [...], exportDate: ISO-8601}.
    """

    model_config = ConfigDict(populate_by_name=True)

    projects: list[Project]
    cookies: list[Cookie]
    export_date: str = Field(
        ...,
        alias="exportDate",
        examples=["2026-10-19T08:30:00.000Z"],
    )
