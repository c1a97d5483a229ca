"""Pydantic DTOs (Data Transfer Objects) for the Project feature."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from carbonflow.application.schemas.common import PaginationResponse
from carbonflow.domain.entities import ProjectStatus, ProjectType


class ProjectCreate(BaseModel):
    """Schema for creating a new project under an existing customer."""

    project_name: str = Field(
        ..., min_length=1, max_length=255, examples=["Plant 3 CO2 capture"],
    )
    customer_id: str = Field(..., min_length=1, max_length=64)
    project_type: ProjectType
    start_date: date
    end_date: date | None = None
    description: str = Field("", max_length=2000)
    site_location: str = Field("", max_length=255)
    budget: float = Field(0.0, ge=0)
    co2_target: float = Field(0.0, ge=0)
    tags: list[str] = Field(default_factory=list)
    status: ProjectStatus = ProjectStatus.PLANNING

    @model_validator(mode="after")
    def _check_dates(self) -> "ProjectCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectUpdate(BaseModel):
    """Schema for updating an existing project: all fields optional.

    The owning customer cannot be changed. Omitted or null fields are left
    as they are, except ``end_date``: an explicit null removes it.
    """

    project_name: str | None = Field(None, min_length=1, max_length=255)
    project_type: ProjectType | None = None
    description: str | None = Field(None, max_length=2000)
    site_location: str | None = Field(None, max_length=255)
    budget: float | None = Field(None, ge=0)
    budget_used: float | None = Field(None, ge=0)
    co2_target: float | None = Field(None, ge=0)
    co2_actual: float | None = Field(None, ge=0)
    start_date: date | None = None
    end_date: date | None = None
    progress: float | None = Field(None, ge=0, le=100)
    tags: list[str] | None = None
    status: ProjectStatus | None = None
    version: int | None = Field(None, ge=1)


class ProjectProgressUpdate(BaseModel):
    co2_actual: float = Field(..., ge=0)
    budget_used: float | None = Field(None, ge=0)


class ProjectResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    project_name: str
    customer_id: str
    project_type: ProjectType
    description: str
    site_location: str
    budget: float
    budget_used: float
    co2_target: float
    co2_actual: float
    start_date: date
    end_date: date | None
    progress: float
    tags: list[str]
    status: ProjectStatus
    measurement_count: int
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectListResponse(BaseModel):
    items: list[ProjectResponse]
    pagination: PaginationResponse


class ProjectStatisticsResponse(BaseModel):
    total_projects: int
    active_projects: int
    completed_projects: int
    status_breakdown: dict[str, int]
    type_breakdown: dict[str, int]
    completion_rate: float
