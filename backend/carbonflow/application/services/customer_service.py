"""Application service (use case) for Customer operations."""

import logging

from carbonflow.application.interfaces import CustomerRepository
from carbonflow.application.schemas.customer import CustomerCreate, CustomerUpdate
from carbonflow.domain.entities import (
    ContactInfo,
    Customer,
    CustomerPatch,
    CustomerStatus,
    EntityStatistics,
    ListQuery,
    Page,
)
from carbonflow.domain.exceptions import DuplicateEntityError, EntityNotFoundError

logger = logging.getLogger(__name__)


class CustomerService:
    """Orchestrates customer CRUD logic. Depends on the repository port (DI)."""

    def __init__(
        self,
        repository: CustomerRepository,
        *,
        default_page_size: int = 20,
        max_page_size: int = 100,
    ):
        self._repository = repository
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    async def get_customer(self, customer_id: str) -> Customer:
        customer = await self._repository.get_by_id(customer_id)
        if customer is None:
            raise EntityNotFoundError("Customer", customer_id)
        return customer

    async def list_customers(
        self,
        *,
        status: CustomerStatus | None = None,
        industry: str | None = None,
        search: str | None = None,
        limit: int | None = None,
        next_token: str | None = None,
    ) -> Page[Customer]:
        query = ListQuery(
            status=status.value if status else None,
            category=industry,
            search=search,
            page_size=min(limit or self._default_page_size, self._max_page_size),
            cursor=next_token,
        )
        return await self._repository.list(query)

    async def create_customer(self, data: CustomerCreate) -> Customer:
        if data.status == CustomerStatus.ACTIVE:
            await self._ensure_name_available(data.company_name)

        customer = Customer(
            company_name=data.company_name,
            industry=data.industry,
            contact_info=ContactInfo(**data.contact_info.model_dump()),
            status=data.status,
        )
        created = await self._repository.create(customer)
        logger.info("Created customer %s (%s)", created.id, created.company_name)
        return created

    async def update_customer(self, customer_id: str, data: CustomerUpdate) -> Customer:
        patch = CustomerPatch(
            company_name=data.company_name,
            industry=data.industry,
            contact_info=(
                ContactInfo(**data.contact_info.model_dump()) if data.contact_info else None
            ),
            status=data.status,
        )
        if patch.is_empty():
            return await self.get_customer(customer_id)

        if patch.company_name is not None or patch.status == CustomerStatus.ACTIVE:
            current = await self.get_customer(customer_id)
            renamed = patch.company_name not in (None, current.company_name)
            reactivated = current.status != CustomerStatus.ACTIVE
            merged = patch.apply(current)
            if merged.status == CustomerStatus.ACTIVE and (renamed or reactivated):
                await self._ensure_name_available(merged.company_name, exclude_id=customer_id)

        updated = await self._repository.update(
            customer_id, patch, expected_version=data.version
        )
        if updated is None:
            raise EntityNotFoundError("Customer", customer_id)
        logger.info("Updated customer %s: %s", customer_id, sorted(patch.changes()))
        return updated

    async def delete_customer(self, customer_id: str) -> bool:
        deleted = await self._repository.delete(customer_id)
        if not deleted:
            raise EntityNotFoundError("Customer", customer_id)
        logger.info("Deleted customer %s", customer_id)
        return deleted

    async def get_statistics(self) -> EntityStatistics:
        return await self._repository.statistics()

    async def _ensure_name_available(
        self, company_name: str, *, exclude_id: str | None = None
    ) -> None:
        """Active customers must have unique company names."""
        existing = await self._repository.find_by_company_name(company_name)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateEntityError("Customer", "company_name", company_name)
