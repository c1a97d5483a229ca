"""Pydantic DTOs (Data Transfer Objects) for the Customer feature."""

from datetime import datetime

from pydantic import BaseModel, Field

from carbonflow.application.schemas.common import PaginationResponse
from carbonflow.domain.entities import CustomerStatus


class ContactInfoSchema(BaseModel):
    email: str = Field("", max_length=255, examples=["ops@example.co.jp"])
    phone: str = Field("", max_length=50)
    address: str = Field("", max_length=500)

    model_config = {"from_attributes": True}


class CustomerCreate(BaseModel):
    """Schema for creating a new customer."""

    company_name: str = Field(
        ..., min_length=1, max_length=255, examples=["Kanto Water Works"],
    )
    industry: str = Field(..., min_length=1, max_length=100, examples=["manufacturing"])
    contact_info: ContactInfoSchema = Field(default_factory=ContactInfoSchema)
    status: CustomerStatus = CustomerStatus.ACTIVE


class CustomerUpdate(BaseModel):
    """Schema for updating an existing customer: all fields optional.

    ``version`` enables an optimistic-concurrency check against the stored version.
    """

    company_name: str | None = Field(None, min_length=1, max_length=255)
    industry: str | None = Field(None, min_length=1, max_length=100)
    contact_info: ContactInfoSchema | None = None
    status: CustomerStatus | None = None
    version: int | None = Field(None, ge=1)


class CustomerResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    company_name: str
    industry: str
    contact_info: ContactInfoSchema
    status: CustomerStatus
    project_count: int
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CustomerListResponse(BaseModel):
    items: list[CustomerResponse]
    pagination: PaginationResponse


class CustomerStatisticsResponse(BaseModel):
    total_customers: int
    active_customers: int
    inactive_customers: int
    industry_breakdown: dict[str, int]
