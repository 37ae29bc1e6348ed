"""
Dev seed script — prepare a local cookie jar database.

Usage:
    python -m scripts.seed_dev                  # create schema + a sample project
    python -m scripts.seed_dev backup.json      # create schema + restore a backup

This will:
  1. Create the `collections` table if it is missing
  2. Either import the given export file (replacing stored data)
     or create a "Dev Project" with one cookie, if it does not exist yet
"""

import asyncio
import json
import sys
from pathlib import Path

# Ensure the project root is on the path
sys.path.insert(0, ".")

from cookiejar.core.database import async_session_factory, create_schema, engine
from cookiejar.core.store import CollectionStore
from cookiejar.services.cookies import CookieRepository
from cookiejar.services.projects import ProjectRepository
from cookiejar.services.transfer import import_data


async def main(argv: list[str]) -> int:
    await create_schema(engine)
    store = CollectionStore(async_session_factory)

    try:
        if argv:
            # ── Restore a backup ────────────────────────────
            path = Path(argv[0])
            payload = json.loads(path.read_text(encoding="utf-8"))
            result = await import_data(store, payload)
            if not result.success:
                print(f"  Import failed: {result.error}: {result.message}")
                return 1
            print(f"  Imported {result.cookies_imported} cookie(s), "
                  f"{result.projects_imported} project(s) from {path}")
            return 0

        # ── Sample data ─────────────────────────────────────
        created = await ProjectRepository(store).create(
            {"name": "Dev Project", "tags": ["dev", "sample"]},
        )
        if not created.success:
            print(f"  Skipped: {created.message}")
            return 0

        cookie = await CookieRepository(store).create(
            {"projectId": created.project.id, "note": "first cookie"},
        )
    finally:
        await engine.dispose()

    print()
    print("=" * 60)
    print("  Dev Seed Complete")
    print("=" * 60)
    print()
    print(f"  Project:    {created.project.name}")
    print(f"  Project ID: {created.project.id}")
    print(f"  Cookie ID:  {cookie.id}")
    print("=" * 60)
    print()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
