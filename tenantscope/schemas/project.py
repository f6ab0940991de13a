"""
Project Schemas

Request/response models for project operations.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ProjectBase(BaseModel):
    """Base project schema."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectCreate(ProjectBase):
    """
    Schema for creating a project.

    tenant_id is accepted so older clients keep working, but it is
    always replaced with the caller's tenant.
    """
    tenant_id: Optional[str] = None


class ProjectResponse(ProjectBase):
    """Project response schema."""
    id: str
    tenant_id: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectListResponse(BaseModel):
    """Paginated list of projects."""
    projects: list[ProjectResponse]
    total: int
    page: int
    page_size: int


class ProjectSummaryResponse(BaseModel):
    """Per-tenant project counts."""
    tenant_id: str
    total: int
    by_status: dict[str, int]
