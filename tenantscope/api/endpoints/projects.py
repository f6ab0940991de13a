"""
Project Endpoints

Create/list/get/delete projects. None of these handlers filters by
tenant: ScopedRepository does it for every call.
"""
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from typing import Optional

from tenantscope.schemas.project import (
    ProjectResponse,
    ProjectCreate,
    ProjectListResponse,
    ProjectSummaryResponse,
)
from tenantscope.api.deps import get_project_repository, get_tenant_project_repository
from tenantscope.core.exceptions import RecordNotFoundError
from tenantscope.core.repository import ScopedRepository
from tenantscope.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=ProjectListResponse)
def list_projects(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None, pattern="^(active|archived|completed)$"),
    repo: ScopedRepository = Depends(get_project_repository),
):
    """
    List projects visible to the caller.

    With a tenant token this is that tenant's projects; without one
    (internal jobs) it is every tenant's.
    """
    filters = {"status": status} if status else None
    total = repo.count(filters)
    projects = repo.list(filters, offset=(page - 1) * page_size, limit=page_size)

    return ProjectListResponse(
        projects=projects,
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/summary", response_model=ProjectSummaryResponse)
def project_summary(
    repo: ScopedRepository = Depends(get_tenant_project_repository),
):
    """
    Project counts by status for the caller's tenant.

    Tenant dashboards only: a request without a tenant token gets 401
    instead of an all-tenant summary.
    """
    counts = {
        name: repo.count({"status": name})
        for name in ("active", "archived", "completed")
    }
    return ProjectSummaryResponse(
        tenant_id=repo.context.tenant_id,
        total=repo.count(),
        by_status=counts,
    )


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    repo: ScopedRepository = Depends(get_project_repository),
):
    """Get a project by ID. Other tenants' projects are simply not found."""
    project = repo.get(project_id)
    if not project:
        raise RecordNotFoundError("Project", project_id)
    return project


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    repo: ScopedRepository = Depends(get_project_repository),
):
    """
    Create a project for the caller's tenant.

    Any tenant_id in the body is overwritten. Without a tenant token
    the request fails with 401.
    """
    return repo.create(**project_data.model_dump())


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: str,
    repo: ScopedRepository = Depends(get_project_repository),
):
    """Soft delete a project of the caller's tenant."""
    project = repo.get(project_id)
    if not project:
        raise RecordNotFoundError("Project", project_id)

    repo.soft_delete(project)
    logger.info(f"Project soft-deleted: {project_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
