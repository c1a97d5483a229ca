"""Application service (use case) for Project operations.

Projects are children of customers: creating or deleting one keeps the
customer's ``project_count`` in step. Both writes share the caller's unit
of work, so a failed second step rolls back the first.
"""

import logging

from carbonflow.application.interfaces import CustomerRepository, ProjectRepository
from carbonflow.application.schemas.project import (
    ProjectCreate,
    ProjectProgressUpdate,
    ProjectUpdate,
)
from carbonflow.domain.entities import (
    CLEAR,
    EntityStatistics,
    ListQuery,
    Page,
    Project,
    ProjectPatch,
    ProjectStatus,
    ProjectType,
)
from carbonflow.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

CLEARABLE_FIELDS = frozenset({"end_date"})


def completion_rate(stats: EntityStatistics) -> float:
    """Percentage of all projects that are completed (0 when there are none)."""
    total = stats.total
    if total == 0:
        return 0.0
    return stats.total_by_status.get(ProjectStatus.COMPLETED.value, 0) / total * 100


class ProjectService:
    """Orchestrates project CRUD and customer dependent-count upkeep."""

    def __init__(
        self,
        repository: ProjectRepository,
        customer_repository: CustomerRepository,
        *,
        default_page_size: int = 20,
        max_page_size: int = 100,
    ):
        self._repository = repository
        self._customers = customer_repository
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    async def get_project(self, project_id: str) -> Project:
        project = await self._repository.get_by_id(project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)
        return project

    async def list_projects(
        self,
        *,
        customer_id: str | None = None,
        status: ProjectStatus | None = None,
        project_type: ProjectType | None = None,
        search: str | None = None,
        limit: int | None = None,
        next_token: str | None = None,
    ) -> Page[Project]:
        query = ListQuery(
            parent_id=customer_id,
            status=status.value if status else None,
            category=project_type.value if project_type else None,
            search=search,
            page_size=min(limit or self._default_page_size, self._max_page_size),
            cursor=next_token,
        )
        return await self._repository.list(query)

    async def list_customer_projects(self, customer_id: str, limit: int | None = None) -> list[Project]:
        if await self._customers.get_by_id(customer_id) is None:
            raise EntityNotFoundError("Customer", customer_id)
        return await self._repository.find_by_customer(
            customer_id, min(limit or self._default_page_size, self._max_page_size)
        )

    async def create_project(self, data: ProjectCreate) -> Project:
        customer = await self._customers.get_by_id(data.customer_id)
        if customer is None:
            raise EntityNotFoundError("Customer", data.customer_id)

        project = Project(
            project_name=data.project_name,
            customer_id=customer.id,
            project_type=data.project_type,
            start_date=data.start_date,
            end_date=data.end_date,
            description=data.description,
            site_location=data.site_location,
            budget=data.budget,
            co2_target=data.co2_target,
            tags=list(data.tags),
            status=data.status,
        )
        created = await self._repository.create(project)
        if await self._customers.increment_dependent_count(customer.id) is None:
            # Customer vanished between the read and the increment.
            raise EntityNotFoundError("Customer", customer.id)
        logger.info("Created project %s for customer %s", created.id, customer.id)
        return created

    async def update_project(self, project_id: str, data: ProjectUpdate) -> Project:
        changes = data.model_dump(exclude={"version"}, exclude_none=True)
        # An explicit null clears the field rather than leaving it unchanged.
        for name in CLEARABLE_FIELDS & data.model_fields_set:
            if getattr(data, name) is None:
                changes[name] = CLEAR
        patch = ProjectPatch(**changes)
        if patch.is_empty():
            return await self.get_project(project_id)

        updated = await self._repository.update(project_id, patch, expected_version=data.version)
        if updated is None:
            raise EntityNotFoundError("Project", project_id)
        logger.info("Updated project %s: %s", project_id, sorted(patch.changes()))
        return updated

    async def update_progress(self, project_id: str, data: ProjectProgressUpdate) -> Project:
        updated = await self._repository.update_progress(
            project_id, data.co2_actual, data.budget_used
        )
        if updated is None:
            raise EntityNotFoundError("Project", project_id)
        return updated

    async def delete_project(self, project_id: str) -> bool:
        project = await self.get_project(project_id)
        if not await self._repository.delete(project_id):
            raise EntityNotFoundError("Project", project_id)
        if await self._customers.decrement_dependent_count(project.customer_id) is None:
            logger.warning(
                "Project %s referenced missing customer %s", project_id, project.customer_id
            )
        logger.info("Deleted project %s", project_id)
        return True

    async def get_statistics(self) -> EntityStatistics:
        return await self._repository.statistics()
