from .entity_repository import EntityRepository
from .customer_repository import CustomerRepository
from .project_repository import ProjectRepository
from .measurement_repository import MeasurementRepository

__all__ = [
    "EntityRepository",
    "CustomerRepository",
    "ProjectRepository",
    "MeasurementRepository",
]
