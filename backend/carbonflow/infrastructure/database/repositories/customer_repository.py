"""Concrete repository implementation for Customer backed by the single-table item store."""

from dataclasses import asdict
from typing import Any

from carbonflow.application.interfaces import CustomerRepository
from carbonflow.domain.entities import ContactInfo, Customer, CustomerPatch, CustomerStatus, ListQuery
from carbonflow.infrastructure.database.keys import EntityType, IndexName, index_template
from carbonflow.infrastructure.database.query_router import RoutingRules
from carbonflow.infrastructure.database.repositories.base_repository import SingleTableRepository


class SQLAlchemyCustomerRepository(SingleTableRepository[Customer, CustomerPatch], CustomerRepository):
    """Implements the CustomerRepository port.

    Listing without any filter returns active customers ordered by company
    name; an industry filter lists newest customers first.
    """

    entity_type = EntityType.CUSTOMER
    entity_label = "Customer"
    routing = RoutingRules(
        entity_type=EntityType.CUSTOMER,
        status_attr="status",
        status_index=IndexName.GSI1,
        search_attr="company_name",
        category_attr="industry",
        category_index=IndexName.GSI2,
        default_status=CustomerStatus.ACTIVE.value,
        newest_first=frozenset({IndexName.GSI2}),
    )
    statuses = tuple(s.value for s in CustomerStatus)
    breakdown_statuses = (CustomerStatus.ACTIVE.value,)
    dependent_attr = "project_count"

    def _to_attributes(self, entity: Customer) -> dict[str, Any]:
        return {
            "company_name": entity.company_name,
            "industry": entity.industry,
            "contact_info": asdict(entity.contact_info),
            "status": entity.status.value,
        }

    def _from_item(self, item: dict[str, Any]) -> Customer:
        attrs = item["attributes"]
        return Customer(
            company_name=attrs["company_name"],
            industry=attrs["industry"],
            contact_info=ContactInfo(**(attrs.get("contact_info") or {})),
            status=CustomerStatus(attrs["status"]),
            **self._item_meta(item),
        )

    async def find_by_company_name(self, company_name: str) -> Customer | None:
        template = index_template(self.entity_type, IndexName.GSI1)
        sort_key = template.sort_bound(company_name)
        page = await self._store.query(
            IndexName.GSI1,
            template.partition(CustomerStatus.ACTIVE),
            limit=1,
            sort_from=sort_key,
            sort_to=sort_key,
        )
        return self._from_item(page.items[0]) if page.items else None

    async def find_by_industry(self, industry: str, limit: int = 20) -> list[Customer]:
        page = await self.list(ListQuery(category=industry, page_size=limit))
        return page.items
