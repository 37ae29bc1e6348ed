"""
FastAPI application entrypoint.

The privileged local process: the jar overlay and the dashboard are
clients of this app and never touch the store directly.

Lifespan:
  • On startup: create missing tables (if enabled), verify DB connectivity.
  • On shutdown: dispose the engine cleanly.

Routers:
  • /cookies  — log, edit, remove cookies
  • /projects — project CRUD, archive/activate, cascade delete
  • /data     — JSON export / import
  • /stats    — dashboard statistics
  • /events   — change notifications (server-sent events)
  • /health   — shallow liveness probe
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from cookiejar.core.config import settings
from cookiejar.core.database import create_schema, engine
from cookiejar.core.errors import IOFailure
from cookiejar.routers.cookies import router as cookies_router
from cookiejar.routers.data import router as data_router
from cookiejar.routers.events import router as events_router
from cookiejar.routers.projects import router as projects_router
from cookiejar.routers.stats import router as stats_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""

    # Startup — make sure the collections table exists
    if settings.AUTO_CREATE_SCHEMA:
        try:
            await create_schema(engine)
        except Exception:
            logger.exception("Schema creation failed (non-fatal)")

    # Startup — verify DB is reachable
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified ✓")
    except Exception:
        logger.warning(
            "Could not reach the database on startup. "
            "The app will start, but requests will fail until the DB is available."
        )

    yield  # ← application runs here

    # Shutdown — clean up connection pool
    await engine.dispose()
    logger.info("Database engine disposed ✓")


# ── App ─────────────────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        "Habit jar data service — cookies, projects, statistics "
        "and backups for the jar overlay and dashboard."
    ),
    lifespan=lifespan,
)

# Mount routers
app.include_router(cookies_router, prefix="/cookies")
app.include_router(projects_router, prefix="/projects")
app.include_router(data_router, prefix="/data")
app.include_router(stats_router, prefix="/stats")
app.include_router(events_router, prefix="/events")


# ── Error mapping ───────────────────────────────────────────
@app.exception_handler(IOFailure)
async def io_failure_handler(_request: Request, exc: IOFailure) -> JSONResponse:
    """Durable-store failures → 503 with a generic message."""
    logger.error("Store I/O failure: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "The cookie store is temporarily unavailable."},
    )


# ── Health check ────────────────────────────────────────────
@app.get(
    "/health",
    tags=["System"],
    summary="Liveness probe",
)
async def health_check() -> dict[str, str]:
    """Shallow health check — confirms the process is alive."""
    return {"status": "healthy"}


def main() -> None:
    """Console entry point: serve on localhost."""
    import uvicorn

    uvicorn.run("cookiejar.main:app", host="127.0.0.1", port=8765, log_level="info")
