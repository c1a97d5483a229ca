"""Domain entity: a CO2-removal / wastewater-treatment project for a customer."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from uuid import uuid4

from carbonflow.domain.entities.patch import EntityPatch
from carbonflow.domain.exceptions import InvalidEntityError


class ProjectStatus(str, Enum):
    """Project lifecycle status."""

    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class ProjectType(str, Enum):
    """Kind of installation the project delivers."""

    CO2_REMOVAL = "co2_removal"
    WASTEWATER_TREATMENT = "wastewater_treatment"
    COMBINED = "combined"


@dataclass
class Project:
    """Core domain entity for a project.

    A project always belongs to exactly one customer (``customer_id``) and
    is the parent of its measurements; ``measurement_count`` tracks them.
    """

    project_name: str
    customer_id: str
    project_type: ProjectType
    start_date: date
    end_date: date | None = None
    description: str = ""
    site_location: str = ""
    budget: float = 0.0
    budget_used: float = 0.0
    co2_target: float = 0.0
    co2_actual: float = 0.0
    progress: float = 0.0
    tags: list[str] = field(default_factory=list)
    status: ProjectStatus = ProjectStatus.PLANNING
    measurement_count: int = 0
    id: str = field(default_factory=lambda: str(uuid4()))
    version: int = 1
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ProjectPatch(EntityPatch):
    """Partial update for a project. The owning customer cannot be changed."""

    project_name: str | None = None
    project_type: ProjectType | None = None
    description: str | None = None
    site_location: str | None = None
    budget: float | None = None
    budget_used: float | None = None
    co2_target: float | None = None
    co2_actual: float | None = None
    start_date: date | None = None
    end_date: date | None = None  # CLEAR removes the end date
    progress: float | None = None
    tags: list[str] | None = None
    status: ProjectStatus | None = None

    def apply(self, entity: Project) -> Project:  # type: ignore[override]
        updated = super().apply(entity)
        if updated.end_date is not None and updated.end_date < updated.start_date:
            raise InvalidEntityError(
                "Project", updated.id, "end_date must not be before start_date"
            )
        return updated
