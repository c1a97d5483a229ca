from .customer import ContactInfo, Customer, CustomerPatch, CustomerStatus
from .project import Project, ProjectPatch, ProjectStatus, ProjectType
from .measurement import (
    AlertLevel,
    Measurement,
    MeasurementPatch,
    MeasurementSummary,
    MeasurementType,
    calculate_alert_level,
    detect_anomaly,
)
from .listing import EntityStatistics, ListQuery, Page
from .patch import CLEAR, EntityPatch

__all__ = [
    "ContactInfo",
    "Customer",
    "CustomerPatch",
    "CustomerStatus",
    "Project",
    "ProjectPatch",
    "ProjectStatus",
    "ProjectType",
    "AlertLevel",
    "Measurement",
    "MeasurementPatch",
    "MeasurementSummary",
    "MeasurementType",
    "calculate_alert_level",
    "detect_anomaly",
    "EntityStatistics",
    "ListQuery",
    "Page",
    "CLEAR",
    "EntityPatch",
]
