"""
Tests for the record normalizer.

Validates:
1. Malformed legacy cookies coerce to canonical records (never raise)
2. Normalization is idempotent
3. Collection-level id uniqueness
4. Project coercion (tags, status)
"""

from __future__ import annotations

import math

import pytest

from cookiejar.services.normalizer import (
    clean_tags,
    needs_migration,
    normalize_cookie,
    normalize_cookies,
    normalize_project,
    normalize_projects,
)

NOW = 1_760_000_000_000


class TestNormalizeCookie:
    def test_fills_every_missing_field(self):
        cookie = normalize_cookie({}, index=3, now=NOW)

        assert cookie.id.startswith(f"{NOW}-3-")
        assert len(cookie.id.rsplit("-", 1)[1]) == 6
        assert cookie.timestamp == NOW
        assert cookie.created_at == NOW
        assert cookie.level == 1
        assert cookie.project_id is None
        assert cookie.note == ""
        assert cookie.updated_at is None

    def test_coerces_legacy_types(self):
        cookie = normalize_cookie(
            {
                "id": 1700000000123,
                "projectId": 42,
                "note": "scales",
                "level": "3",
                "timestamp": "1700000000000",
            },
            now=NOW,
        )

        assert cookie.id == "1700000000123"
        assert cookie.project_id == "42"
        assert cookie.level == 3
        assert cookie.timestamp == 1_700_000_000_000
        # createdAt defaults to the resolved timestamp
        assert cookie.created_at == 1_700_000_000_000

    def test_float_id_renders_without_decimal(self):
        assert normalize_cookie({"id": 5.0}, now=NOW).id == "5"

    @pytest.mark.parametrize("bad", [None, "", "soon", float("nan"), math.inf, True, [1]])
    def test_invalid_timestamp_becomes_now(self, bad):
        cookie = normalize_cookie({"id": "a", "timestamp": bad}, now=NOW)
        assert cookie.timestamp == NOW

    @pytest.mark.parametrize("bad", [None, 0, "x", -2, 0.5])
    def test_invalid_level_becomes_one(self, bad):
        assert normalize_cookie({"id": "a", "level": bad}, now=NOW).level == 1

    def test_out_of_range_integers_are_treated_as_missing(self):
        huge = 10**400
        cookie = normalize_cookie(
            {"id": "a", "timestamp": huge, "createdAt": huge, "level": huge, "updatedAt": huge},
            now=NOW,
        )

        assert cookie.timestamp == NOW
        assert cookie.created_at == NOW
        assert cookie.level == 1
        assert cookie.updated_at is None

    def test_explicit_created_at_is_kept(self):
        cookie = normalize_cookie(
            {"id": "a", "timestamp": 2000, "createdAt": "1000"}, now=NOW,
        )
        assert cookie.created_at == 1000
        assert cookie.timestamp == 2000

    def test_legacy_expiry_is_dropped(self):
        cookie = normalize_cookie({"id": "a", "expiresAt": NOW + 1}, now=NOW)
        assert "expiresAt" not in cookie.to_record()

    def test_non_mapping_counts_as_empty(self):
        cookie = normalize_cookie("garbage", index=1, now=NOW)
        assert cookie.id.startswith(f"{NOW}-1-")

    def test_updated_at_only_serialized_when_set(self):
        plain = normalize_cookie({"id": "a"}, now=NOW).to_record()
        edited = normalize_cookie({"id": "a", "updatedAt": NOW}, now=NOW).to_record()

        assert "updatedAt" not in plain
        assert edited["updatedAt"] == NOW
        assert plain["projectId"] is None

    @pytest.mark.parametrize("raw", [
        {},
        {"id": 7, "timestamp": "12345", "level": "2.7", "note": 0},
        {"id": "x", "projectId": "p1", "note": "hi", "level": 4,
         "timestamp": NOW, "createdAt": NOW - 5, "updatedAt": NOW + 5},
    ])
    def test_idempotent(self, raw):
        once = normalize_cookie(raw, now=NOW)
        twice = normalize_cookie(once.to_record(), now=NOW + 999)
        assert twice == once


class TestNormalizeCookies:
    def test_duplicate_ids_are_reminted(self):
        cookies = normalize_cookies(
            [{"id": "same"}, {"id": "same"}, {"id": "other"}], now=NOW,
        )

        ids = [c.id for c in cookies]
        assert ids[0] == "same"
        assert ids[1] != "same"
        assert len(set(ids)) == 3

    def test_same_millisecond_ids_are_unique(self):
        cookies = normalize_cookies([{} for _ in range(50)], now=NOW)
        assert len({c.id for c in cookies}) == 50

    def test_needs_migration(self):
        raw = [{"id": 1, "timestamp": NOW}]
        cookies = normalize_cookies(raw, now=NOW)

        assert needs_migration(raw, cookies) is True
        canonical = [c.to_record() for c in cookies]
        assert needs_migration(canonical, normalize_cookies(canonical, now=NOW)) is False


class TestNormalizeProject:
    def test_defaults(self):
        project = normalize_project({"id": 17, "name": "Piano"}, now=NOW)

        assert project.id == "17"
        assert project.tags == []
        assert project.status == "active"
        assert project.created_at == NOW

    def test_out_of_range_created_at(self):
        project = normalize_project({"id": "a", "name": "x", "createdAt": 10**400}, now=NOW)
        assert project.created_at == NOW

    def test_unknown_status_becomes_active(self):
        assert normalize_project({"id": "a", "status": "deleted"}, now=NOW).status == "active"
        assert normalize_project({"id": "a", "status": "archived"}, now=NOW).status == "archived"

    def test_duplicate_project_ids_are_reminted(self):
        projects = normalize_projects(
            [{"id": "1", "name": "a"}, {"id": "1", "name": "b"}], now=NOW,
        )
        assert projects[0].id == "1"
        assert projects[1].id != "1"


class TestCleanTags:
    def test_comma_string(self):
        assert clean_tags("music, practice,,music ") == ["music", "practice"]

    def test_list_keeps_order(self):
        assert clean_tags(["b", "a", "b", " ", None]) == ["b", "a"]

    def test_garbage(self):
        assert clean_tags(42) == []
