from .base_repository import SingleTableRepository
from .customer_repository import SQLAlchemyCustomerRepository
from .project_repository import SQLAlchemyProjectRepository
from .measurement_repository import SQLAlchemyMeasurementRepository

__all__ = [
    "SingleTableRepository",
    "SQLAlchemyCustomerRepository",
    "SQLAlchemyProjectRepository",
    "SQLAlchemyMeasurementRepository",
]
