"""Abstract repository interface (port) for Measurement persistence."""

from abc import abstractmethod

from carbonflow.application.interfaces.entity_repository import EntityRepository
from carbonflow.domain.entities import Measurement, MeasurementPatch, MeasurementType


class MeasurementRepository(EntityRepository[Measurement, MeasurementPatch]):
    """Port for measurement persistence. Measurements have no dependents."""

    @abstractmethod
    async def find_by_type(
        self, measurement_type: MeasurementType, limit: int = 50
    ) -> list[Measurement]:
        """Newest measurements of one type across all projects."""
        ...
