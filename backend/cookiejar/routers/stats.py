"""
Stats router — dashboard views, recomputed from the full collections.

Every endpoint loads both collections in one read and runs the pure
statistics engine over them; nothing is cached between calls.

  GET /stats/dashboard     — summary cards + recent activity
  GET /stats/heatmap       — week-aligned daily intensity grid
  GET /stats/projects      — per-project cookie count / last active
  GET /stats/tags          — every tag in use
  GET /stats/daily-report  — today's log, record, milestones, top project
  GET /stats/jar           — level breakdown for the overlay jar
"""

import datetime
import logging

from fastapi import APIRouter, Query

from cookiejar.core.config import settings
from cookiejar.core.dependencies import Store
from cookiejar.schemas.statistics import (
    DailyReport,
    Dashboard,
    Heatmap,
    JarContents,
    ProjectSummary,
)
from cookiejar.services import statistics
from cookiejar.services.projects import all_tags
from cookiejar.services.transfer import read_collections

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stats"])


@router.get("/dashboard", response_model=Dashboard, summary="Dashboard summary")
async def get_dashboard(store: Store) -> Dashboard:
    cookies, projects = await read_collections(store)
    return Dashboard(
        summary=statistics.dashboard_summary(cookies, projects),
        recent_activity=statistics.recent_activity(cookies, settings.RECENT_ACTIVITY_LIMIT),
    )


@router.get("/heatmap", response_model=Heatmap, summary="Activity heatmap")
async def get_heatmap(
    store: Store,
    today: datetime.date | None = Query(default=None, description="Defaults to the local date"),
) -> Heatmap:
    cookies, _ = await read_collections(store)
    return statistics.build_heatmap(cookies, today, days=settings.HEATMAP_DAYS)


@router.get(
    "/projects",
    response_model=list[ProjectSummary],
    summary="Cookie count and last activity per project",
)
async def get_project_stats(store: Store) -> list[ProjectSummary]:
    cookies, projects = await read_collections(store)
    return statistics.project_summaries(cookies, projects)


@router.get("/tags", response_model=list[str], summary="All tags in use")
async def get_tags(store: Store) -> list[str]:
    _, projects = await read_collections(store)
    return all_tags(projects)


@router.get(
    "/daily-report",
    response_model=DailyReport,
    summary="Today's log with records and milestones",
)
async def get_daily_report(
    store: Store,
    today: datetime.date | None = Query(default=None, description="Defaults to the local date"),
) -> DailyReport:
    cookies, projects = await read_collections(store)
    return statistics.daily_report(cookies, projects, today)


@router.get("/jar", response_model=JarContents, summary="Overlay jar contents")
async def get_jar(store: Store) -> JarContents:
    cookies, _ = await read_collections(store)
    return JarContents(total_saved=len(cookies), levels=statistics.jar_levels(len(cookies)))
