"""
Tests for import/export.

Validates:
1. export → import round-trips both collections with ids intact
2. A payload with one array leaves the other collection alone
3. Empty / malformed payloads are rejected without touching the store
"""

from __future__ import annotations

import re

import pytest

from conftest import read_raw, seed
from cookiejar.core.errors import IOFailure
from cookiejar.services.cookies import CookieRepository
from cookiejar.services.projects import ProjectRepository
from cookiejar.services.transfer import export_data, import_data

ISO_MS = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


async def test_export_snapshot(store):
    project = (await ProjectRepository(store).create({"name": "Piano"})).project
    cookie = await CookieRepository(store).create({"projectId": project.id})

    snapshot = await export_data(store)

    assert snapshot.projects == [project]
    assert snapshot.cookies == [cookie]
    assert ISO_MS.match(snapshot.export_date)
    dumped = snapshot.model_dump(by_alias=True)
    assert set(dumped) == {"projects", "cookies", "exportDate"}


async def test_round_trip_preserves_ids(store):
    projects = ProjectRepository(store)
    cookies = CookieRepository(store)
    piano = (await projects.create({"name": "Piano", "tags": ["music"]})).project
    for note in ("a", "b"):
        await cookies.create({"projectId": piano.id, "note": note})
    snapshot = (await export_data(store)).model_dump(mode="json", by_alias=True)

    await seed(store, cookies=[], projects=[])
    result = await import_data(store, snapshot)

    assert result.success is True
    assert (result.cookies_imported, result.projects_imported) == (2, 1)
    assert [c.to_record() for c in await cookies.list()] == snapshot["cookies"]
    assert [p.to_record() for p in await projects.list()] == snapshot["projects"]


async def test_partial_payload_keeps_other_collection(store):
    await seed(store, projects=[{"id": "p1", "name": "Piano", "tags": [], "status": "active", "createdAt": 1}])

    result = await import_data(store, {"cookies": [{"id": 9, "timestamp": "1000"}]})

    assert result.success is True
    assert result.projects_imported is None
    assert [p["id"] for p in await read_raw(store, "projects")] == ["p1"]
    stored = await read_raw(store, "cookies")
    assert stored[0]["id"] == "9"
    assert stored[0]["timestamp"] == 1000


async def test_import_normalizes_and_dedupes(store):
    result = await import_data(store, {"cookies": [{"id": "x"}, {"id": "x"}, {}]})

    assert result.cookies_imported == 3
    ids = [c["id"] for c in await read_raw(store, "cookies")]
    assert ids[0] == "x"
    assert len(set(ids)) == 3


@pytest.mark.parametrize("payload", [None, {}, []])
async def test_empty_payload_is_rejected(store, payload):
    result = await import_data(store, payload)

    assert result.success is False
    assert result.error == "InvalidData"
    assert result.message == "No data"


@pytest.mark.parametrize("payload", [
    {"cookies": "nope"},
    {"foo": []},
    [{"id": 1}],
    "cookies",
])
async def test_malformed_payload_is_rejected(store, payload):
    await seed(store, cookies=[{"id": "keep", "timestamp": 1, "createdAt": 1}])

    result = await import_data(store, payload)

    assert result.success is False
    assert result.error == "InvalidData"
    assert [c["id"] for c in await read_raw(store, "cookies")] == ["keep"]


async def test_import_accepts_out_of_range_numbers(store):
    result = await import_data(store, {"cookies": [{"id": "a", "level": 10**400}]})

    assert result.success is True
    assert (await read_raw(store, "cookies"))[0]["level"] == 1


async def test_unexpected_error_is_reported(store, monkeypatch):
    await seed(store, cookies=[{"id": "keep"}], projects=[{"id": "p1"}])
    failure = RuntimeError("disk full")

    def explode(*_args, **_kwargs):
        raise failure

    monkeypatch.setattr("cookiejar.services.transfer.normalize_projects", explode)

    result = await import_data(store, {"cookies": [], "projects": [{"name": "New"}]})

    assert result.success is False
    assert result.error == "Error"
    assert result.message == str(failure)
    assert await read_raw(store, "cookies") == [{"id": "keep"}]
    assert await read_raw(store, "projects") == [{"id": "p1"}]


async def test_store_failure_is_reported(store, monkeypatch):
    await seed(store, cookies=[{"id": "keep"}], projects=[{"id": "p1"}])
    failure = IOFailure("database is locked")

    async def fail_save(*_args, **_kwargs):
        raise failure

    monkeypatch.setattr("cookiejar.services.transfer.save_projects", fail_save)

    result = await import_data(store, {"cookies": [{"id": "new"}], "projects": []})

    assert result.success is False
    assert result.error == "IOFailure"
    assert result.message == str(failure)
    # the cookie write earlier in the same transaction was not committed
    assert await read_raw(store, "cookies") == [{"id": "keep"}]
    assert await read_raw(store, "projects") == [{"id": "p1"}]


async def test_result_uses_camel_case_keys(store):
    result = await import_data(store, {"cookies": []})

    assert result.model_dump(by_alias=True, exclude_none=True) == {
        "success": True,
        "cookiesImported": 0,
    }
