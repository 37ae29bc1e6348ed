"""
Data router — backup and restore.

  GET  /data/export  — {projects, cookies, exportDate} as a downloadable file
  POST /data/import  — replace the collections present in the body

Import answers with a TransferResult in every case:
    InvalidData → 400 | IOFailure → 503 | anything else → 500
"""

import datetime
import logging
from typing import Any

from fastapi import APIRouter, Body, Response, status
from fastapi.responses import JSONResponse

from cookiejar.core.dependencies import ClientId, Notifier, Store
from cookiejar.core.errors import InvalidData, IOFailure
from cookiejar.schemas.results import Snapshot, TransferResult
from cookiejar.services.notifier import DATA_CHANGED, REFRESH_JAR
from cookiejar.services.transfer import export_data, import_data

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Data"])

_FAILURE_STATUS = {
    InvalidData.code: status.HTTP_400_BAD_REQUEST,
    IOFailure.code: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@router.get(
    "/export",
    response_model=Snapshot,
    summary="Export every project and cookie",
)
async def export_backup(store: Store, response: Response) -> Snapshot:
    snapshot = await export_data(store)
    filename = f"cookiejar-backup-{datetime.date.today().isoformat()}.json"
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return snapshot


@router.post(
    "/import",
    response_model=TransferResult,
    summary="Replace stored data from a backup",
    description=(
        "Each of `cookies` / `projects` present as an array replaces its "
        "whole collection. Cookie ids are preserved."
    ),
)
async def import_backup(
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
    payload: Any = Body(default=None),
):
    result = await import_data(store, payload)
    if not result.success:
        return JSONResponse(
            status_code=_FAILURE_STATUS.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR),
            content=result.model_dump(mode="json", by_alias=True),
        )

    notifier.publish(REFRESH_JAR, origin=client_id)
    notifier.publish(DATA_CHANGED, origin=client_id)
    return result
