"""Application service (use case) for Measurement operations.

Measurements are children of projects; every create and delete keeps the
project's ``measurement_count`` in step within the caller's unit of work.
"""

import logging
from collections.abc import Iterator, Sequence
from datetime import datetime, timezone
from typing import TypeVar

from carbonflow.application.interfaces import MeasurementRepository, ProjectRepository
from carbonflow.application.schemas.measurement import (
    MeasurementBatchCreate,
    MeasurementCreate,
    MeasurementReading,
    MeasurementUpdate,
)
from carbonflow.domain.entities import (
    AlertLevel,
    EntityStatistics,
    ListQuery,
    Measurement,
    MeasurementPatch,
    MeasurementSummary,
    MeasurementType,
    Page,
)
from carbonflow.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

BATCH_SIZE = 25

T = TypeVar("T")


def _chunks(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class MeasurementService:
    """Orchestrates measurement recording, listing and project count upkeep."""

    def __init__(
        self,
        repository: MeasurementRepository,
        project_repository: ProjectRepository,
        *,
        default_page_size: int = 50,
        max_page_size: int = 100,
        batch_size: int = BATCH_SIZE,
    ):
        self._repository = repository
        self._projects = project_repository
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size
        self._batch_size = batch_size

    async def get_measurement(self, measurement_id: str) -> Measurement:
        measurement = await self._repository.get_by_id(measurement_id)
        if measurement is None:
            raise EntityNotFoundError("Measurement", measurement_id)
        return measurement

    async def list_measurements(
        self,
        *,
        project_id: str | None = None,
        measurement_type: MeasurementType | None = None,
        alert_level: AlertLevel | None = None,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        next_token: str | None = None,
    ) -> tuple[Page[Measurement], MeasurementSummary]:
        """One page of measurements plus a summary computed over that page."""
        query = ListQuery(
            parent_id=project_id,
            category=measurement_type.value if measurement_type else None,
            status=alert_level.value if alert_level else None,
            search=search,
            time_from=start,
            time_to=end,
            page_size=min(limit or self._default_page_size, self._max_page_size),
            cursor=next_token,
        )
        page = await self._repository.list(query)
        return page, MeasurementSummary.of(page.items)

    async def record_measurement(self, data: MeasurementCreate) -> Measurement:
        await self._require_project(data.project_id)
        created = await self._repository.create(self._build(data.project_id, data))
        if await self._projects.increment_dependent_count(data.project_id) is None:
            raise EntityNotFoundError("Project", data.project_id)
        if created.alert_level == AlertLevel.HIGH:
            logger.warning(
                "High alert measurement %s on project %s: %s",
                created.id, created.project_id, created.values,
            )
        return created

    async def record_batch(self, data: MeasurementBatchCreate) -> list[Measurement]:
        """Record many readings; the parent count moves once per chunk."""
        await self._require_project(data.project_id)
        created: list[Measurement] = []
        for chunk in _chunks(data.measurements, self._batch_size):
            for reading in chunk:
                created.append(
                    await self._repository.create(self._build(data.project_id, reading))
                )
            if await self._projects.adjust_dependent_count(data.project_id, len(chunk)) is None:
                raise EntityNotFoundError("Project", data.project_id)
        logger.info(
            "Recorded %d measurements for project %s", len(created), data.project_id
        )
        return created

    async def update_measurement(
        self, measurement_id: str, data: MeasurementUpdate
    ) -> Measurement:
        patch = MeasurementPatch(values=data.values, location=data.location, notes=data.notes)
        if patch.is_empty():
            return await self.get_measurement(measurement_id)
        updated = await self._repository.update(
            measurement_id, patch, expected_version=data.version
        )
        if updated is None:
            raise EntityNotFoundError("Measurement", measurement_id)
        return updated

    async def delete_measurement(self, measurement_id: str) -> bool:
        measurement = await self.get_measurement(measurement_id)
        if not await self._repository.delete(measurement_id):
            raise EntityNotFoundError("Measurement", measurement_id)
        if await self._projects.decrement_dependent_count(measurement.project_id) is None:
            logger.warning(
                "Measurement %s referenced missing project %s",
                measurement_id, measurement.project_id,
            )
        return True

    async def get_statistics(self) -> EntityStatistics:
        return await self._repository.statistics()

    async def _require_project(self, project_id: str) -> None:
        if await self._projects.get_by_id(project_id) is None:
            raise EntityNotFoundError("Project", project_id)

    @staticmethod
    def _build(project_id: str, reading: MeasurementReading) -> Measurement:
        return Measurement.record(
            project_id=project_id,
            measurement_type=reading.measurement_type,
            values=dict(reading.values),
            timestamp=reading.timestamp or datetime.now(timezone.utc),
            location=reading.location,
            notes=reading.notes,
        )
