"""
Projects router — the dashboard's project grid and project form.

  GET    /projects                 — all projects (optional ?tag= & ?q= filters)
  POST   /projects                 — create (name must be unique)
  PATCH  /projects/{id}            — rename / retag / change status
  POST   /projects/{id}/archive    — status → archived
  POST   /projects/{id}/activate   — status → active
  DELETE /projects/{id}            — delete project AND all its cookies

Create/update answer with a ProjectResult body in every case, so the
form can show `{success: false, error, message}` inline:
    ValidationError → 422 | DuplicateName → 409 | NotFound → 404
"""

import logging

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import JSONResponse

from cookiejar.core.dependencies import ClientId, Notifier, Store
from cookiejar.core.errors import DuplicateName, NotFound, ValidationError
from cookiejar.schemas.records import Project, ProjectCreate, ProjectStatus, ProjectUpdate
from cookiejar.schemas.results import ProjectResult
from cookiejar.services.notifier import DATA_CHANGED, REFRESH_JAR
from cookiejar.services.projects import ProjectRepository, filter_projects

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Projects"])

_FAILURE_STATUS = {
    ValidationError.code: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateName.code: status.HTTP_409_CONFLICT,
    NotFound.code: status.HTTP_404_NOT_FOUND,
}


def _failure_response(result: ProjectResult) -> JSONResponse:
    return JSONResponse(
        status_code=_FAILURE_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST),
        content=result.model_dump(mode="json", by_alias=True),
    )


def _not_found(project_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Project '{project_id}' not found.",
    )


@router.get(
    "",
    response_model=list[Project],
    summary="List projects",
    description="Active projects first, then by name when filtering.",
)
async def list_projects(
    store: Store,
    tag: str | None = Query(default=None, description="Only projects with this tag"),
    q: str = Query(default="", description="Case-insensitive search over name and tags"),
) -> list[Project]:
    projects = await ProjectRepository(store).list()
    if tag or q:
        return filter_projects(projects, tag=tag, query=q)
    return projects


@router.post(
    "",
    response_model=ProjectResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(
    payload: ProjectCreate,
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
):
    result = await ProjectRepository(store).create(payload.model_dump())
    if not result.success:
        return _failure_response(result)

    notifier.publish(DATA_CHANGED, origin=client_id)
    return result


@router.patch(
    "/{project_id}",
    response_model=ProjectResult,
    summary="Edit a project",
)
async def update_project(
    project_id: str,
    payload: ProjectUpdate,
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
):
    result = await ProjectRepository(store).update({**payload.to_partial(), "id": project_id})
    if not result.success:
        return _failure_response(result)

    notifier.publish(DATA_CHANGED, origin=client_id)
    return result


async def _set_status(
    project_id: str,
    new_status: ProjectStatus,
    store: Store,
    notifier: Notifier,
    client_id: str | None,
) -> dict[str, bool]:
    if not await ProjectRepository(store).set_status(project_id, new_status):
        raise _not_found(project_id)

    notifier.publish(DATA_CHANGED, origin=client_id)
    return {"success": True}


@router.post("/{project_id}/archive", summary="Archive a project")
async def archive_project(
    project_id: str,
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
) -> dict[str, bool]:
    return await _set_status(project_id, "archived", store, notifier, client_id)


@router.post("/{project_id}/activate", summary="Re-activate an archived project")
async def activate_project(
    project_id: str,
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
) -> dict[str, bool]:
    return await _set_status(project_id, "active", store, notifier, client_id)


@router.delete(
    "/{project_id}",
    summary="Delete a project and all its cookies",
)
async def delete_project(
    project_id: str,
    store: Store,
    notifier: Notifier,
    client_id: ClientId,
) -> dict[str, bool]:
    if not await ProjectRepository(store).delete(project_id):
        raise _not_found(project_id)

    # cookies may have left the jar
    notifier.publish(REFRESH_JAR, origin=client_id)
    notifier.publish(DATA_CHANGED, origin=client_id)
    return {"success": True}
