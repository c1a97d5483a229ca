"""Concrete repository implementation for Project backed by the single-table item store."""

from datetime import date
from typing import Any

from carbonflow.application.interfaces import ProjectRepository
from carbonflow.domain.entities import (
    ListQuery,
    Project,
    ProjectPatch,
    ProjectStatus,
    ProjectType,
)
from carbonflow.infrastructure.database.keys import EntityType, IndexName
from carbonflow.infrastructure.database.query_router import RoutingRules
from carbonflow.infrastructure.database.repositories.base_repository import SingleTableRepository


class SQLAlchemyProjectRepository(SingleTableRepository[Project, ProjectPatch], ProjectRepository):
    """Implements the ProjectRepository port."""

    entity_type = EntityType.PROJECT
    entity_label = "Project"
    routing = RoutingRules(
        entity_type=EntityType.PROJECT,
        status_attr="status",
        status_index=IndexName.GSI1,
        search_attr="project_name",
        category_attr="project_type",
        category_index=IndexName.GSI2,
        parent_attr="customer_id",
        parent_index=IndexName.GSI3,
        newest_first=frozenset({IndexName.GSI1, IndexName.GSI2}),
    )
    statuses = tuple(s.value for s in ProjectStatus)
    breakdown_statuses = (ProjectStatus.ACTIVE.value,)
    dependent_attr = "measurement_count"

    def _to_attributes(self, entity: Project) -> dict[str, Any]:
        return {
            "project_name": entity.project_name,
            "customer_id": entity.customer_id,
            "project_type": entity.project_type.value,
            "description": entity.description,
            "site_location": entity.site_location,
            "budget": entity.budget,
            "budget_used": entity.budget_used,
            "co2_target": entity.co2_target,
            "co2_actual": entity.co2_actual,
            "start_date": entity.start_date.isoformat(),
            "end_date": entity.end_date.isoformat() if entity.end_date else None,
            "progress": entity.progress,
            "tags": list(entity.tags),
            "status": entity.status.value,
        }

    def _from_item(self, item: dict[str, Any]) -> Project:
        attrs = item["attributes"]
        end_date = attrs.get("end_date")
        return Project(
            project_name=attrs["project_name"],
            customer_id=attrs["customer_id"],
            project_type=ProjectType(attrs["project_type"]),
            description=attrs.get("description", ""),
            site_location=attrs.get("site_location", ""),
            budget=attrs.get("budget", 0.0),
            budget_used=attrs.get("budget_used", 0.0),
            co2_target=attrs.get("co2_target", 0.0),
            co2_actual=attrs.get("co2_actual", 0.0),
            start_date=date.fromisoformat(attrs["start_date"]),
            end_date=date.fromisoformat(end_date) if end_date else None,
            progress=attrs.get("progress", 0.0),
            tags=list(attrs.get("tags") or []),
            status=ProjectStatus(attrs["status"]),
            **self._item_meta(item),
        )

    async def find_by_customer(self, customer_id: str, limit: int = 20) -> list[Project]:
        page = await self.list(ListQuery(parent_id=customer_id, page_size=limit))
        return page.items

    async def find_by_status(self, status: ProjectStatus, limit: int = 20) -> list[Project]:
        page = await self.list(ListQuery(status=status.value, page_size=limit))
        return page.items

    async def update_progress(
        self, project_id: str, co2_actual: float, budget_used: float | None = None
    ) -> Project | None:
        return await self.update(
            project_id, ProjectPatch(co2_actual=co2_actual, budget_used=budget_used)
        )
