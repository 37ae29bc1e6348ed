"""
Pytest configuration for the cookie jar data layer.

Every test gets its own SQLite file database under tmp_path, a fresh
CollectionStore and ChangeNotifier, and (for API tests) an httpx client
wired to the app through dependency overrides.
"""

from __future__ import annotations

import datetime

import httpx
import pytest

from cookiejar.core.database import build_engine, build_session_factory, create_schema
from cookiejar.core.store import CollectionStore, get_collection_store
from cookiejar.main import app
from cookiejar.services.notifier import ChangeNotifier, get_notifier


def local_ms(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> int:
    """Epoch-ms of a LOCAL wall-clock time (matches the statistics engine's days)."""
    moment = datetime.datetime(year, month, day, hour, minute)
    return int(moment.timestamp() * 1000)


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'cookiejar.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine) -> CollectionStore:
    return CollectionStore(build_session_factory(engine))


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier(queue_size=10)


@pytest.fixture
async def client(store, notifier):
    app.dependency_overrides[get_collection_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def seed(store: CollectionStore, cookies=None, projects=None) -> None:
    """Write raw collections straight into the store (bypassing repositories)."""
    async with store.transaction() as tx:
        if cookies is not None:
            await tx.set("cookies", cookies)
        if projects is not None:
            await tx.set("projects", projects)


async def read_raw(store: CollectionStore, name: str) -> list:
    async with store.transaction() as tx:
        return await tx.get(name)
