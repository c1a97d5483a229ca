"""Concrete repository implementation for Measurement backed by the single-table item store."""

from typing import Any

from carbonflow.application.interfaces import MeasurementRepository
from carbonflow.domain.entities import (
    AlertLevel,
    ListQuery,
    Measurement,
    MeasurementPatch,
    MeasurementType,
)
from carbonflow.infrastructure.database.keys import (
    EntityType,
    IndexName,
    format_timestamp,
    parse_timestamp,
)
from carbonflow.infrastructure.database.query_router import RoutingRules
from carbonflow.infrastructure.database.repositories.base_repository import SingleTableRepository


class SQLAlchemyMeasurementRepository(
    SingleTableRepository[Measurement, MeasurementPatch], MeasurementRepository
):
    """Implements the MeasurementRepository port.

    Every measurement index is sorted by timestamp and read newest first, so
    a ``time_from``/``time_to`` window becomes a sort-key range.
    """

    entity_type = EntityType.MEASUREMENT
    entity_label = "Measurement"
    routing = RoutingRules(
        entity_type=EntityType.MEASUREMENT,
        status_attr="alert_level",
        status_index=IndexName.GSI1,
        search_attr="notes",
        category_attr="measurement_type",
        category_index=IndexName.GSI2,
        parent_attr="project_id",
        parent_index=IndexName.GSI3,
        time_attr="timestamp",
        newest_first=frozenset({IndexName.GSI1, IndexName.GSI2, IndexName.GSI3}),
    )
    statuses = tuple(level.value for level in AlertLevel)
    breakdown_statuses = statuses

    def _to_attributes(self, entity: Measurement) -> dict[str, Any]:
        return {
            "project_id": entity.project_id,
            "measurement_type": entity.measurement_type.value,
            "values": dict(entity.values),
            "timestamp": format_timestamp(entity.timestamp),
            "location": entity.location,
            "notes": entity.notes,
            "alert_level": entity.alert_level.value,
            "is_anomaly": entity.is_anomaly,
        }

    def _from_item(self, item: dict[str, Any]) -> Measurement:
        attrs = item["attributes"]
        return Measurement(
            project_id=attrs["project_id"],
            measurement_type=MeasurementType(attrs["measurement_type"]),
            values=dict(attrs.get("values") or {}),
            timestamp=parse_timestamp(attrs["timestamp"]),
            location=attrs.get("location"),
            notes=attrs.get("notes", ""),
            alert_level=AlertLevel(attrs["alert_level"]),
            is_anomaly=bool(attrs.get("is_anomaly", False)),
            **self._item_meta(item),
        )

    async def find_by_type(
        self, measurement_type: MeasurementType, limit: int = 50
    ) -> list[Measurement]:
        page = await self.list(ListQuery(category=measurement_type.value, page_size=limit))
        return page.items
