"""
Pydantic v2 response schemas for the statistics engine.

Everything here is derived: recomputed from the full collections on each
read, never stored. JSON keys are camelCase to match the stored records.
"""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from cookiejar.schemas.records import Cookie, Project


class _StatsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectStats(_StatsModel):
    """Cookie count and latest cookie timestamp for one projectId bucket."""

    project_id: str | None
    cookie_count: int = 0
    last_active: int = 0


class ProjectSummary(_StatsModel):
    """A project card: the project plus its stats (zeros when unused)."""

    project: Project
    cookie_count: int
    last_active: int | None


class HeatmapCell(_StatsModel):
    date: datetime.date
    count: int
    level: int


class Heatmap(_StatsModel):
    """Week-aligned grid: `start` is always a Sunday, `end` is today."""

    start: datetime.date
    end: datetime.date
    cells: list[HeatmapCell]


class DailyRecord(_StatsModel):
    today_count: int
    previous_best: int
    is_new_record: bool


class Milestone(_StatsModel):
    kind: Literal["project", "tag"]
    key: str | None
    name: str
    total: int


class TopProject(_StatsModel):
    project_id: str | None
    name: str
    count: int


class DashboardSummary(_StatsModel):
    total_cookies: int
    active_projects: int
    days_active: int


class JarLevel(_StatsModel):
    """`count` cookies of tier `level` in the overlay jar."""

    level: int
    count: int


class ReportEntry(_StatsModel):
    cookie: Cookie
    project_name: str
    tags: list[str]


class DailyReport(_StatsModel):
    """Everything the daily log export renders for one day."""

    date: datetime.date
    total_cookies: int
    entries: list[ReportEntry]
    record: DailyRecord
    milestones: list[Milestone]
    top_project: TopProject | None


class Dashboard(_StatsModel):
    summary: DashboardSummary
    recent_activity: list[Cookie]


class JarContents(_StatsModel):
    total_saved: int
    levels: list[JarLevel]
