"""Abstract repository interface (port) for Customer persistence."""

from abc import abstractmethod

from carbonflow.application.interfaces.entity_repository import EntityRepository
from carbonflow.domain.entities import Customer, CustomerPatch


class CustomerRepository(EntityRepository[Customer, CustomerPatch]):
    """Port for customer persistence. The dependent count is ``project_count``."""

    @abstractmethod
    async def find_by_company_name(self, company_name: str) -> Customer | None:
        """Exact company-name lookup among active customers."""
        ...

    @abstractmethod
    async def find_by_industry(self, industry: str, limit: int = 20) -> list[Customer]:
        """Newest customers of one industry."""
        ...
