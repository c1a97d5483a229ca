from .customer_service import CustomerService
from .project_service import ProjectService, completion_rate
from .measurement_service import MeasurementService

__all__ = [
    "CustomerService",
    "ProjectService",
    "completion_rate",
    "MeasurementService",
]
