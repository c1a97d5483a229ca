from .common import PaginationResponse
from .customer import (
    ContactInfoSchema,
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerStatisticsResponse,
    CustomerUpdate,
)
from .project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectProgressUpdate,
    ProjectResponse,
    ProjectStatisticsResponse,
    ProjectUpdate,
)
from .measurement import (
    MeasurementBatchCreate,
    MeasurementBatchResponse,
    MeasurementCreate,
    MeasurementListResponse,
    MeasurementReading,
    MeasurementResponse,
    MeasurementStatisticsResponse,
    MeasurementSummaryResponse,
    MeasurementUpdate,
)

__all__ = [
    "PaginationResponse",
    "ContactInfoSchema",
    "CustomerCreate",
    "CustomerListResponse",
    "CustomerResponse",
    "CustomerStatisticsResponse",
    "CustomerUpdate",
    "ProjectCreate",
    "ProjectListResponse",
    "ProjectProgressUpdate",
    "ProjectResponse",
    "ProjectStatisticsResponse",
    "ProjectUpdate",
    "MeasurementBatchCreate",
    "MeasurementBatchResponse",
    "MeasurementCreate",
    "MeasurementListResponse",
    "MeasurementReading",
    "MeasurementResponse",
    "MeasurementStatisticsResponse",
    "MeasurementSummaryResponse",
    "MeasurementUpdate",
]
