"""
Statistics engine — pure functions over the full collections.

Nothing here touches the store. Routers load both collections, then
recompute whatever view they need; there is no incremental state.

Calendar days are LOCAL days: two timestamps on the same local calendar
date fall in one bucket. Timestamps outside the platform's datetime range
are skipped by every day-based statistic.

Heatmap intensity (strict thresholds):
    0 → 0 | 1–2 → 1 | 3–5 → 2 | 6–8 → 3 | ≥9 → 4

Milestones: a cumulative count n is a milestone iff n == 1, or n > 0 and
n % 5 == 0. Evaluated on ALL-TIME totals, only for the projects and tags
touched by the day's cookies.
"""

from __future__ import annotations

import datetime
from collections import Counter
from collections.abc import Sequence

from cookiejar.schemas.records import Cookie, Project
from cookiejar.schemas.statistics import (
    DailyRecord,
    DailyReport,
    DashboardSummary,
    Heatmap,
    HeatmapCell,
    JarLevel,
    Milestone,
    ProjectStats,
    ProjectSummary,
    ReportEntry,
    TopProject,
)

HEATMAP_DAYS = 365
UNASSIGNED_NAME = "Unassigned"
UNKNOWN_PROJECT_NAME = "Unknown Project"

# Lower bounds (exclusive) of heatmap levels 1..4
_LEVEL_THRESHOLDS = (0, 2, 5, 8)


def day_of(timestamp_ms: int) -> datetime.date | None:
    """Local calendar day of an epoch-ms timestamp (None if unrepresentable)."""
    try:
        return datetime.datetime.fromtimestamp(timestamp_ms / 1000).date()
    except (OverflowError, OSError, ValueError):
        return None


def _today(today: datetime.date | None) -> datetime.date:
    return today if today is not None else datetime.date.today()


def _cookies_on(cookies: Sequence[Cookie], day: datetime.date) -> list[Cookie]:
    return [c for c in cookies if day_of(c.timestamp) == day]


# ── Per-project aggregation ─────────────────────────────────
def project_stats(cookies: Sequence[Cookie]) -> dict[str | None, ProjectStats]:
    """Count and last-active per projectId; unassigned cookies key on None."""
    stats: dict[str | None, ProjectStats] = {}
    for cookie in cookies:
        entry = stats.get(cookie.project_id)
        if entry is None:
            entry = stats[cookie.project_id] = ProjectStats(project_id=cookie.project_id)
        entry.cookie_count += 1
        if cookie.timestamp > entry.last_active:
            entry.last_active = cookie.timestamp
    return stats


def project_summaries(
    cookies: Sequence[Cookie],
    projects: Sequence[Project],
) -> list[ProjectSummary]:
    stats = project_stats(cookies)
    summaries = []
    for project in projects:
        entry = stats.get(project.id)
        summaries.append(ProjectSummary(
            project=project,
            cookie_count=entry.cookie_count if entry else 0,
            last_active=entry.last_active if entry else None,
        ))
    return summaries


# ── Daily buckets ───────────────────────────────────────────
def daily_counts(cookies: Sequence[Cookie]) -> Counter[datetime.date]:
    counts: Counter[datetime.date] = Counter()
    for cookie in cookies:
        day = day_of(cookie.timestamp)
        if day is not None:
            counts[day] += 1
    return counts


def heatmap_level(count: int) -> int:
    """Map a day's cookie count to an intensity level 0–4."""
    return sum(1 for threshold in _LEVEL_THRESHOLDS if count > threshold)


def heatmap_start(today: datetime.date, days: int = HEATMAP_DAYS) -> datetime.date:
    """`days` before today, snapped back to the preceding Sunday."""
    start = today - datetime.timedelta(days=days)
    # date.weekday(): Monday=0 … Sunday=6
    return start - datetime.timedelta(days=(start.weekday() + 1) % 7)


def build_heatmap(
    cookies: Sequence[Cookie],
    today: datetime.date | None = None,
    days: int = HEATMAP_DAYS,
) -> Heatmap:
    """One cell per day from the week-aligned start through today."""
    end = _today(today)
    start = heatmap_start(end, days)
    counts = daily_counts(cookies)

    cells = []
    current = start
    while current <= end:
        count = counts.get(current, 0)
        cells.append(HeatmapCell(date=current, count=count, level=heatmap_level(count)))
        current += datetime.timedelta(days=1)
    return Heatmap(start=start, end=end, cells=cells)


def daily_record(
    cookies: Sequence[Cookie],
    today: datetime.date | None = None,
) -> DailyRecord:
    """Today's count against the best single day among all OTHER days."""
    day = _today(today)
    counts = daily_counts(cookies)
    today_count = counts.get(day, 0)
    previous_best = max((n for d, n in counts.items() if d != day), default=0)
    return DailyRecord(
        today_count=today_count,
        previous_best=previous_best,
        is_new_record=today_count > previous_best,
    )


# ── Milestones ──────────────────────────────────────────────
def is_milestone(count: int) -> bool:
    return count == 1 or (count > 0 and count % 5 == 0)


def detect_milestones(
    cookies: Sequence[Cookie],
    projects: Sequence[Project],
    today: datetime.date | None = None,
) -> list[Milestone]:
    """
    Project milestones (first-touch order), then tag milestones (sorted).

    A tag's total counts every cookie logged against any project that
    carries the tag.
    """
    day = _today(today)
    by_id = {project.id: project for project in projects}

    project_totals: Counter[str | None] = Counter()
    tag_totals: Counter[str] = Counter()
    for cookie in cookies:
        project_totals[cookie.project_id] += 1
        project = by_id.get(cookie.project_id) if cookie.project_id else None
        if project is not None:
            for tag in set(project.tags):
                tag_totals[tag] += 1

    touched_projects: dict[str | None, None] = {}
    touched_tags: set[str] = set()
    for cookie in _cookies_on(cookies, day):
        touched_projects.setdefault(cookie.project_id, None)
        project = by_id.get(cookie.project_id) if cookie.project_id else None
        if project is not None:
            touched_tags.update(project.tags)

    milestones = []
    for project_id in touched_projects:
        total = project_totals[project_id]
        if is_milestone(total):
            milestones.append(Milestone(
                kind="project",
                key=project_id,
                name=_project_name(by_id, project_id, fallback=project_id),
                total=total,
            ))
    for tag in sorted(touched_tags):
        total = tag_totals[tag]
        if is_milestone(total):
            milestones.append(Milestone(kind="tag", key=tag, name=tag, total=total))
    return milestones


def _project_name(
    by_id: dict[str, Project],
    project_id: str | None,
    fallback: str | None,
) -> str:
    if project_id is None:
        return UNASSIGNED_NAME
    project = by_id.get(project_id)
    if project is not None:
        return project.name
    return fallback or UNKNOWN_PROJECT_NAME


def top_project_of_day(
    cookies: Sequence[Cookie],
    projects: Sequence[Project],
    today: datetime.date | None = None,
) -> TopProject | None:
    """
    The project with the most cookies on the day.

    Ties go to the project whose first cookie comes earliest in
    collection order.
    """
    counts: dict[str | None, int] = {}
    for cookie in _cookies_on(cookies, _today(today)):
        counts[cookie.project_id] = counts.get(cookie.project_id, 0) + 1
    if not counts:
        return None

    best_id, best_count = None, 0
    for project_id, count in counts.items():
        if count > best_count:
            best_id, best_count = project_id, count

    by_id = {project.id: project for project in projects}
    return TopProject(
        project_id=best_id,
        name=_project_name(by_id, best_id, fallback=None),
        count=best_count,
    )


# ── Dashboard ───────────────────────────────────────────────
def dashboard_summary(
    cookies: Sequence[Cookie],
    projects: Sequence[Project],
) -> DashboardSummary:
    return DashboardSummary(
        total_cookies=len(cookies),
        active_projects=sum(1 for p in projects if p.status == "active"),
        days_active=len(daily_counts(cookies)),
    )


def recent_activity(cookies: Sequence[Cookie], limit: int = 10) -> list[Cookie]:
    """Newest cookies first."""
    return sorted(cookies, key=lambda c: c.timestamp, reverse=True)[:limit]


def jar_levels(total: int) -> list[JarLevel]:
    """
    Base-5 breakdown of the saved-cookie count for the overlay jar.

    Every five cookies of one tier merge into one cookie of the next:
    23 → 3 × level 1 + 4 × level 2.
    """
    levels = []
    remaining, level = max(total, 0), 1
    while remaining > 0:
        count = remaining % 5
        if count:
            levels.append(JarLevel(level=level, count=count))
        remaining //= 5
        level += 1
    return levels


def daily_report(
    cookies: Sequence[Cookie],
    projects: Sequence[Project],
    today: datetime.date | None = None,
) -> DailyReport:
    """Data behind the daily log export: entries plus achievements."""
    day = _today(today)
    by_id = {project.id: project for project in projects}

    entries = []
    for cookie in sorted(_cookies_on(cookies, day), key=lambda c: c.timestamp):
        project = by_id.get(cookie.project_id) if cookie.project_id else None
        entries.append(ReportEntry(
            cookie=cookie,
            project_name=project.name if project else UNKNOWN_PROJECT_NAME,
            tags=list(project.tags) if project else [],
        ))

    return DailyReport(
        date=day,
        total_cookies=len(cookies),
        entries=entries,
        record=daily_record(cookies, day),
        milestones=detect_milestones(cookies, projects, day),
        top_project=top_project_of_day(cookies, projects, day),
    )
