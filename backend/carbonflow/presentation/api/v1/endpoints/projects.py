"""Project CRUD endpoints."""

from fastapi import APIRouter, Depends, Query, status

from carbonflow.application.schemas.common import PaginationResponse
from carbonflow.application.schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectProgressUpdate,
    ProjectResponse,
    ProjectStatisticsResponse,
    ProjectUpdate,
)
from carbonflow.application.services import ProjectService, completion_rate
from carbonflow.domain.entities import ProjectStatus, ProjectType
from carbonflow.infrastructure.dependencies import get_project_service
from carbonflow.presentation.api.errors import DOMAIN_ERRORS, to_http_exception

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    customer_id: str | None = Query(None, description="Filter by owning customer"),
    status_filter: ProjectStatus | None = Query(None, alias="status"),
    project_type: ProjectType | None = Query(None),
    search: str | None = Query(None, description="Case-insensitive project name match"),
    limit: int | None = Query(None, ge=1, description="Page size, capped at max_page_size"),
    next_token: str | None = Query(None),
    service: ProjectService = Depends(get_project_service),
) -> ProjectListResponse:
    page = await service.list_projects(
        customer_id=customer_id,
        status=status_filter,
        project_type=project_type,
        search=search,
        limit=limit,
        next_token=next_token,
    )
    return ProjectListResponse(
        items=[ProjectResponse.model_validate(p, from_attributes=True) for p in page.items],
        pagination=PaginationResponse.of(page),
    )


@router.get("/statistics", response_model=ProjectStatisticsResponse)
async def project_statistics(
    service: ProjectService = Depends(get_project_service),
) -> ProjectStatisticsResponse:
    stats = await service.get_statistics()
    return ProjectStatisticsResponse(
        total_projects=stats.total,
        active_projects=stats.total_by_status.get(ProjectStatus.ACTIVE.value, 0),
        completed_projects=stats.total_by_status.get(ProjectStatus.COMPLETED.value, 0),
        status_breakdown=stats.total_by_status,
        type_breakdown=stats.by_category,
        completion_rate=completion_rate(stats),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    try:
        project = await service.get_project(project_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return ProjectResponse.model_validate(project, from_attributes=True)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Create a project and count it against its customer."""
    try:
        project = await service.create_project(data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return ProjectResponse.model_validate(project, from_attributes=True)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    try:
        project = await service.update_project(project_id, data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return ProjectResponse.model_validate(project, from_attributes=True)


@router.put("/{project_id}/progress", response_model=ProjectResponse)
async def update_project_progress(
    project_id: str,
    data: ProjectProgressUpdate,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Record actual CO2 removed and budget used."""
    try:
        project = await service.update_progress(project_id, data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return ProjectResponse.model_validate(project, from_attributes=True)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> None:
    """Delete a project; refused while it still has measurements."""
    try:
        await service.delete_project(project_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
