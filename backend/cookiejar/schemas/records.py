"""
Pydantic v2 schemas for stored records and their inputs.

Separation:
  • Cookie / Project          — canonical records, exactly what is persisted.
  • CookieInput               — loose partial sent by a UI surface; every
                                field is optional and coerced by the normalizer.
  • ProjectCreate / ProjectUpdate — project form payloads.

Stored JSON uses camelCase keys (projectId, createdAt, …); Python code
uses snake_case attributes. populate_by_name lets either form in.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_serializer

ProjectStatus = Literal["active", "archived"]


# ── Canonical records ───────────────────────────────────────
class Cookie(BaseModel):
    """One logged unit of progress against a project."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    project_id: str | None = Field(default=None, alias="projectId")
    note: str = ""
    level: int = Field(default=1, ge=1)
    timestamp: int
    created_at: int = Field(..., alias="createdAt")
    updated_at: int | None = Field(default=None, alias="updatedAt")

    @model_serializer(mode="wrap")
    def _omit_missing_update(self, handler: Any) -> dict[str, Any]:
        # updatedAt is absent, not null, until the first update
        data = handler(self)
        for key in ("updatedAt", "updated_at"):
            if key in data and data[key] is None:
                del data[key]
        return data

    def to_record(self) -> dict[str, Any]:
        """Serialized form as stored in the `cookies` collection."""
        return self.model_dump(by_alias=True)


class Project(BaseModel):
    """A named, taggable tracked activity."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str
    tags: list[str] = Field(default_factory=list)
    status: ProjectStatus = "active"
    created_at: int = Field(..., alias="createdAt")

    def to_record(self) -> dict[str, Any]:
        """Serialized form as stored in the `projects` collection."""
        return self.model_dump(by_alias=True)


# ── Inputs ──────────────────────────────────────────────────
class CookieInput(BaseModel):
    """
    Partial cookie sent by the overlay (drop) or dashboard (edit).

    Types are deliberately loose: legacy clients send timestamps as
    strings and levels as floats. The normalizer owns coercion.
    Unknown fields are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | int | None = None
    project_id: str | int | None = Field(default=None, alias="projectId")
    note: str | None = None
    level: int | float | str | None = None
    timestamp: int | float | str | None = None

    def to_partial(self) -> dict[str, Any]:
        """Only the fields the client actually sent, in stored key form."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class ProjectCreate(BaseModel):
    """Payload of the "new project" form."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(
        default="",
        examples=["Piano"],
        description="Project name, unique (case-sensitive).",
    )
    tags: list[str] | str = Field(
        default_factory=list,
        examples=[["music", "practice"], "music, practice"],
        description="Tag list, or a comma-separated string.",
    )


class ProjectUpdate(BaseModel):
    """Partial project edit; absent fields are left untouched."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    tags: list[str] | str | None = None
    status: ProjectStatus | None = None

    def to_partial(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)
