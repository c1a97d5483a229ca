"""Customer CRUD endpoints."""

from fastapi import APIRouter, Depends, Query, status

from carbonflow.application.schemas.common import PaginationResponse
from carbonflow.application.schemas.customer import (
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerStatisticsResponse,
    CustomerUpdate,
)
from carbonflow.application.schemas.project import ProjectResponse
from carbonflow.application.services import CustomerService, ProjectService
from carbonflow.domain.entities import CustomerStatus
from carbonflow.infrastructure.dependencies import get_customer_service, get_project_service
from carbonflow.presentation.api.errors import DOMAIN_ERRORS, to_http_exception

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    status_filter: CustomerStatus | None = Query(None, alias="status", description="Filter by status"),
    industry: str | None = Query(None, description="Filter by industry"),
    search: str | None = Query(None, description="Case-insensitive company name match"),
    limit: int | None = Query(None, ge=1, description="Page size, capped at max_page_size"),
    next_token: str | None = Query(None, description="Token from the previous page"),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerListResponse:
    """List customers; without filters only active customers are returned."""
    page = await service.list_customers(
        status=status_filter,
        industry=industry,
        search=search,
        limit=limit,
        next_token=next_token,
    )
    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c, from_attributes=True) for c in page.items],
        pagination=PaginationResponse.of(page),
    )


@router.get("/statistics", response_model=CustomerStatisticsResponse)
async def customer_statistics(
    service: CustomerService = Depends(get_customer_service),
) -> CustomerStatisticsResponse:
    stats = await service.get_statistics()
    return CustomerStatisticsResponse(
        total_customers=stats.total,
        active_customers=stats.total_by_status.get(CustomerStatus.ACTIVE.value, 0),
        inactive_customers=stats.total_by_status.get(CustomerStatus.INACTIVE.value, 0),
        industry_breakdown=stats.by_category,
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: str,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    """Retrieve a single customer by ID."""
    try:
        customer = await service.get_customer(customer_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return CustomerResponse.model_validate(customer, from_attributes=True)


@router.get("/{customer_id}/projects", response_model=list[ProjectResponse])
async def list_customer_projects(
    customer_id: str,
    limit: int | None = Query(None, ge=1, description="Page size, capped at max_page_size"),
    service: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    """Projects of one customer, grouped by status."""
    try:
        projects = await service.list_customer_projects(customer_id, limit)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return [ProjectResponse.model_validate(p, from_attributes=True) for p in projects]


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    data: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    """Create a new customer."""
    try:
        customer = await service.create_customer(data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return CustomerResponse.model_validate(customer, from_attributes=True)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str,
    data: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    """Update an existing customer."""
    try:
        customer = await service.update_customer(customer_id, data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return CustomerResponse.model_validate(customer, from_attributes=True)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    service: CustomerService = Depends(get_customer_service),
) -> None:
    """Delete a customer; refused while it still has projects."""
    try:
        await service.delete_customer(customer_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
