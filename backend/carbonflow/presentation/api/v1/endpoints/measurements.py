"""Measurement endpoints: recording, batch import, listing with page summary."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from carbonflow.application.schemas.common import PaginationResponse
from carbonflow.application.schemas.measurement import (
    MeasurementBatchCreate,
    MeasurementBatchResponse,
    MeasurementCreate,
    MeasurementListResponse,
    MeasurementResponse,
    MeasurementStatisticsResponse,
    MeasurementSummaryResponse,
    MeasurementUpdate,
)
from carbonflow.application.services import MeasurementService
from carbonflow.domain.entities import AlertLevel, MeasurementType
from carbonflow.infrastructure.dependencies import get_measurement_service
from carbonflow.presentation.api.errors import DOMAIN_ERRORS, to_http_exception

router = APIRouter(prefix="/measurements", tags=["Measurements"])


@router.get("", response_model=MeasurementListResponse)
async def list_measurements(
    project_id: str | None = Query(None),
    measurement_type: MeasurementType | None = Query(None),
    alert_level: AlertLevel | None = Query(None),
    search: str | None = Query(None, description="Case-insensitive match on notes"),
    start: datetime | None = Query(None, description="Earliest timestamp (inclusive)"),
    end: datetime | None = Query(None, description="Latest timestamp (inclusive)"),
    limit: int | None = Query(None, ge=1, description="Page size, capped at max_page_size"),
    next_token: str | None = Query(None),
    service: MeasurementService = Depends(get_measurement_service),
) -> MeasurementListResponse:
    """Newest measurements first, with alert/anomaly summary of the returned page."""
    page, summary = await service.list_measurements(
        project_id=project_id,
        measurement_type=measurement_type,
        alert_level=alert_level,
        search=search,
        start=start,
        end=end,
        limit=limit,
        next_token=next_token,
    )
    return MeasurementListResponse(
        items=[MeasurementResponse.model_validate(m, from_attributes=True) for m in page.items],
        pagination=PaginationResponse.of(page),
        summary=MeasurementSummaryResponse.model_validate(summary, from_attributes=True),
    )


@router.get("/statistics", response_model=MeasurementStatisticsResponse)
async def measurement_statistics(
    service: MeasurementService = Depends(get_measurement_service),
) -> MeasurementStatisticsResponse:
    stats = await service.get_statistics()
    return MeasurementStatisticsResponse(
        total_measurements=stats.total,
        alert_breakdown=stats.total_by_status,
        type_breakdown=stats.by_category,
    )


@router.get("/{measurement_id}", response_model=MeasurementResponse)
async def get_measurement(
    measurement_id: str,
    service: MeasurementService = Depends(get_measurement_service),
) -> MeasurementResponse:
    try:
        measurement = await service.get_measurement(measurement_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return MeasurementResponse.model_validate(measurement, from_attributes=True)


@router.post("", response_model=MeasurementResponse, status_code=status.HTTP_201_CREATED)
async def record_measurement(
    data: MeasurementCreate,
    service: MeasurementService = Depends(get_measurement_service),
) -> MeasurementResponse:
    try:
        measurement = await service.record_measurement(data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return MeasurementResponse.model_validate(measurement, from_attributes=True)


@router.post("/batch", response_model=MeasurementBatchResponse, status_code=status.HTTP_201_CREATED)
async def record_measurement_batch(
    data: MeasurementBatchCreate,
    service: MeasurementService = Depends(get_measurement_service),
) -> MeasurementBatchResponse:
    """Record many readings for one project; all or nothing."""
    try:
        measurements = await service.record_batch(data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return MeasurementBatchResponse(
        items=[MeasurementResponse.model_validate(m, from_attributes=True) for m in measurements],
        count=len(measurements),
    )


@router.put("/{measurement_id}", response_model=MeasurementResponse)
async def update_measurement(
    measurement_id: str,
    data: MeasurementUpdate,
    service: MeasurementService = Depends(get_measurement_service),
) -> MeasurementResponse:
    try:
        measurement = await service.update_measurement(measurement_id, data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return MeasurementResponse.model_validate(measurement, from_attributes=True)


@router.delete("/{measurement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_measurement(
    measurement_id: str,
    service: MeasurementService = Depends(get_measurement_service),
) -> None:
    try:
        await service.delete_measurement(measurement_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
