"""Pydantic DTOs (Data Transfer Objects) for the Measurement feature."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from carbonflow.application.schemas.common import PaginationResponse
from carbonflow.domain.entities import AlertLevel, MeasurementType

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_reading_keys(values: dict[str, float] | None) -> dict[str, float] | None:
    """Store reading names in snake_case (``co2Concentration`` -> ``co2_concentration``)."""
    if values is None:
        return None
    return {_CAMEL_BOUNDARY.sub("_", key).lower(): value for key, value in values.items()}


class MeasurementReading(BaseModel):
    """One reading without its project; used inside batch requests.

    Reading names are stored in snake_case; camelCase names are converted.
    """

    measurement_type: MeasurementType
    values: dict[str, float] = Field(
        ..., min_length=1, examples=[{"ph": 7.2, "temperature": 18.5}],
    )
    timestamp: datetime | None = None
    location: str | None = Field(None, max_length=255)
    notes: str = Field("", max_length=2000)

    @field_validator("values")
    @classmethod
    def _snake_case_names(cls, values: dict[str, float] | None) -> dict[str, float] | None:
        return normalize_reading_keys(values)


class MeasurementCreate(MeasurementReading):
    """Schema for recording a single measurement."""

    project_id: str = Field(..., min_length=1, max_length=64)


class MeasurementBatchCreate(BaseModel):
    """Schema for recording many measurements of one project at once."""

    project_id: str = Field(..., min_length=1, max_length=64)
    measurements: list[MeasurementReading] = Field(..., min_length=1, max_length=1000)


class MeasurementUpdate(BaseModel):
    """Changing ``values`` re-derives ``alert_level`` and ``is_anomaly``."""

    values: dict[str, float] | None = Field(None, min_length=1)
    location: str | None = Field(None, max_length=255)
    notes: str | None = Field(None, max_length=2000)
    version: int | None = Field(None, ge=1)

    @field_validator("values")
    @classmethod
    def _snake_case_names(cls, values: dict[str, float] | None) -> dict[str, float] | None:
        return normalize_reading_keys(values)


class MeasurementResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    project_id: str
    measurement_type: MeasurementType
    values: dict[str, float]
    timestamp: datetime
    location: str | None
    notes: str
    alert_level: AlertLevel
    is_anomaly: bool
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MeasurementSummaryResponse(BaseModel):
    total_count: int
    alert_count: int
    anomaly_count: int
    type_breakdown: dict[str, int]

    model_config = {"from_attributes": True}


class MeasurementListResponse(BaseModel):
    items: list[MeasurementResponse]
    pagination: PaginationResponse
    summary: MeasurementSummaryResponse


class MeasurementBatchResponse(BaseModel):
    items: list[MeasurementResponse]
    count: int


class MeasurementStatisticsResponse(BaseModel):
    total_measurements: int
    alert_breakdown: dict[str, int]
    type_breakdown: dict[str, int]
