"""Abstract repository interface (port) for Project persistence."""

from abc import abstractmethod

from carbonflow.application.interfaces.entity_repository import EntityRepository
from carbonflow.domain.entities import Project, ProjectPatch, ProjectStatus


class ProjectRepository(EntityRepository[Project, ProjectPatch]):
    """Port for project persistence. The dependent count is ``measurement_count``."""

    @abstractmethod
    async def find_by_customer(self, customer_id: str, limit: int = 20) -> list[Project]:
        """Projects of one customer, ordered by status then name."""
        ...

    @abstractmethod
    async def find_by_status(self, status: ProjectStatus, limit: int = 20) -> list[Project]:
        """Projects in one status, latest start date first."""
        ...

    @abstractmethod
    async def update_progress(
        self, project_id: str, co2_actual: float, budget_used: float | None = None
    ) -> Project | None:
        """Record actual CO2 removal and budget spent."""
        ...
