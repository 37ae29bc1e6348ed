"""
Async database engine, session factory, and ORM base.

Rules enforced:
  • Every DB call goes through AsyncSession (no sync, no raw SQL).
  • Sessions are opened by the collection store, one per transaction.
  • The declarative Base is shared across all models so Alembic can
    auto-detect schema changes from a single metadata object.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cookiejar.core.config import settings


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for `url` (sqlite or postgres)."""
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,  # avoid lazy-load issues after commit
    )


# ── Engine ──────────────────────────────────────────────────
# echo: SQL logging — only in debug mode
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# ── Session factory ─────────────────────────────────────────
async_session_factory = build_session_factory(engine)


# ── ORM Base ────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Shared declarative base for all SQLAlchemy models."""


async def create_schema(bind: AsyncEngine) -> None:
    """Create any missing tables (used instead of Alembic on desktop installs)."""
    # Import models so Base.metadata is populated
    import cookiejar.models.collection  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
