"""
Cookies router — the jar overlay and dashboard log, edit and remove cookies.

  GET    /cookies            — every cookie, normalized (migrates on read)
  POST   /cookies            — log a new cookie (fresh id + createdAt)
  PATCH  /cookies/{id}       — merge an edit into an existing cookie
  DELETE /cookies/{id}       — remove one cookie, returns it

Mutations publish `data-changed` (and `cookie-deleted` for removals) to
every other open surface. Store failures surface as 503 via the app-level
IOFailure handler.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from cookiejar.core.dependencies import ClientId, Notifier, Store
from cookiejar.schemas.records import Cookie, CookieInput
from cookiejar.services.cookies import CookieRepository
from cookiejar.services.notifier import COOKIE_DELETED, DATA_CHANGED

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cookies"])


def _not_found(cookie_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Cookie '{cookie_id}' not found.",
    )


@router.get(
    "",
    response_model=list[Cookie],
    summary="List every cookie",
)
async def list_cookies(store: Store) -> list[Cookie]:
    return await CookieRepository(store).list()


@router.post(
    "",
    response_model=Cookie,
    status_code=status.HTTP_201_CREATED,
    summary="Log a new cookie",
    description=(
        "Normalizes the partial record and stores it. The id and createdAt "
        "are always minted server-side, even if the client sent them."
    ),
)
async def create_cookie(
    payload: CookieInput,
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
) -> Cookie:
    cookie = await CookieRepository(store).create(payload.to_partial())
    notifier.publish(DATA_CHANGED, origin=client_id)
    return cookie


@router.patch(
    "/{cookie_id}",
    summary="Edit a cookie",
    description="Fields present in the body overwrite; absent fields are kept.",
)
async def update_cookie(
    cookie_id: str,
    payload: CookieInput,
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
) -> dict[str, bool]:
    partial = payload.to_partial()
    partial["id"] = cookie_id

    if not await CookieRepository(store).update(partial):
        raise _not_found(cookie_id)

    notifier.publish(DATA_CHANGED, origin=client_id)
    return {"success": True}


@router.delete(
    "/{cookie_id}",
    response_model=Cookie,
    summary="Remove a cookie",
)
async def delete_cookie(
    cookie_id: str,
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
) -> Cookie:
    removed = await CookieRepository(store).delete(cookie_id)
    if removed is None:
        raise _not_found(cookie_id)

    logger.debug("Cookie %s removed via API", cookie_id)
    notifier.publish(COOKIE_DELETED, payload=removed.to_record(), origin=client_id)
    notifier.publish(DATA_CHANGED, origin=client_id)
    return removed
