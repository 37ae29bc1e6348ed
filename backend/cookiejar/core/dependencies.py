"""
FastAPI dependencies shared by every router.

  • Store     — the process-wide CollectionStore (single writer)
  • Notifier  — the process-wide ChangeNotifier
  • ClientId  — which UI surface is calling (X-Client-Id header), used to
                skip echoing change events back to their originator

Usage in routers:
    async def handler(store: Store, notifier: Notifier, client_id: ClientId): ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from cookiejar.core.store import CollectionStore, get_collection_store
from cookiejar.services.notifier import ChangeNotifier, get_notifier


async def get_client_id(
    x_client_id: str | None = Header(default=None, alias="X-Client-Id"),
) -> str | None:
    """Optional caller identity; anonymous callers get every event."""
    if x_client_id is None:
        return None
    return x_client_id.strip() or None


Store = Annotated[CollectionStore, Depends(get_collection_store)]
Notifier = Annotated[ChangeNotifier, Depends(get_notifier)]
ClientId = Annotated[str | None, Depends(get_client_id)]
