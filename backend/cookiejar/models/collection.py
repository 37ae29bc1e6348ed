"""
SQLAlchemy model for the `collections` table.

The durable store is a key-value document store: each row holds one
top-level collection (`cookies`, `projects`) as a JSON array. The whole
array is read and written at once, so a row is the unit of atomicity.

Design notes:
  • `name` is the primary key, making INSERT … ON CONFLICT idempotent.
  • JSON (not JSONB) keeps the table portable between SQLite and Postgres.
  • updated_at tracks when the collection was last written.
"""

import datetime

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from cookiejar.core.database import Base

COOKIES = "cookies"
PROJECTS = "projects"


class CollectionRecord(Base):
    """One named collection of JSON records."""

    __tablename__ = "collections"

    name: Mapped[str] = mapped_column(
        String(50), primary_key=True,
    )
    payload: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<CollectionRecord name={self.name!r} size={len(self.payload or [])}>"
