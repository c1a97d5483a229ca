"""Domain entity: a single field measurement taken on a project site."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from carbonflow.domain.entities.patch import EntityPatch


class MeasurementType(str, Enum):
    WATER_QUALITY = "water_quality"
    ATMOSPHERIC = "atmospheric"
    SOIL = "soil"


class AlertLevel(str, Enum):
    NORMAL = "normal"
    HIGH = "high"


# (low, high) per reading; None means unbounded on that side.
_ALERT_THRESHOLDS: dict[MeasurementType, dict[str, tuple[float | None, float | None]]] = {
    MeasurementType.WATER_QUALITY: {
        "ph": (6.5, 8.5),
        "iron": (None, 0.3),
        "copper": (None, 1.0),
        "zinc": (None, 5.0),
    },
    MeasurementType.ATMOSPHERIC: {
        "co2_concentration": (None, 1000.0),
        "temperature": (0.0, 40.0),
    },
    MeasurementType.SOIL: {
        "ph": (6.0, 8.0),
        "temperature": (5.0, 35.0),
    },
}

_ANOMALY_LIMITS: dict[MeasurementType, dict[str, tuple[float | None, float | None]]] = {
    MeasurementType.WATER_QUALITY: {
        "ph": (4.0, 10.0),
        "temperature": (-10.0, 60.0),
    },
    MeasurementType.ATMOSPHERIC: {
        "co2_concentration": (None, 5000.0),
        "temperature": (-20.0, 60.0),
    },
    MeasurementType.SOIL: {
        "ph": (4.0, 10.0),
        "temperature": (-10.0, 50.0),
    },
}


def _out_of_bounds(
    values: dict[str, float],
    bounds: dict[str, tuple[float | None, float | None]],
) -> bool:
    for name, value in values.items():
        if name not in bounds:
            continue
        low, high = bounds[name]
        if high is not None and value > high:
            return True
        if low is not None and value < low:
            return True
    return False


def calculate_alert_level(
    measurement_type: MeasurementType, values: dict[str, float]
) -> AlertLevel:
    """Return HIGH when any reading breaches its operating threshold."""
    if _out_of_bounds(values, _ALERT_THRESHOLDS.get(measurement_type, {})):
        return AlertLevel.HIGH
    return AlertLevel.NORMAL


def detect_anomaly(measurement_type: MeasurementType, values: dict[str, float]) -> bool:
    """Flag readings outside physically plausible limits (likely sensor faults)."""
    return _out_of_bounds(values, _ANOMALY_LIMITS.get(measurement_type, {}))


@dataclass
class Measurement:
    """Core domain entity for a measurement.

    ``alert_level`` and ``is_anomaly`` are derived from ``values``; build
    new measurements through :meth:`record` so they start out consistent.
    """

    project_id: str
    measurement_type: MeasurementType
    values: dict[str, float]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    location: str | None = None
    notes: str = ""
    alert_level: AlertLevel = AlertLevel.NORMAL
    is_anomaly: bool = False
    id: str = field(default_factory=lambda: str(uuid4()))
    version: int = 1
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def record(
        cls,
        project_id: str,
        measurement_type: MeasurementType,
        values: dict[str, float],
        **kwargs: Any,
    ) -> "Measurement":
        return cls(
            project_id=project_id,
            measurement_type=measurement_type,
            values=values,
            alert_level=calculate_alert_level(measurement_type, values),
            is_anomaly=detect_anomaly(measurement_type, values),
            **kwargs,
        )


@dataclass
class MeasurementPatch(EntityPatch):
    """Partial update for a measurement; new ``values`` re-derive alert and anomaly flags."""

    values: dict[str, float] | None = None
    location: str | None = None
    notes: str | None = None

    def apply(self, entity: Measurement) -> Measurement:  # type: ignore[override]
        updated = super().apply(entity)
        if self.values is not None:
            updated.alert_level = calculate_alert_level(updated.measurement_type, updated.values)
            updated.is_anomaly = detect_anomaly(updated.measurement_type, updated.values)
        return updated


@dataclass
class MeasurementSummary:
    """Aggregate over one page of measurements."""

    total_count: int = 0
    alert_count: int = 0
    anomaly_count: int = 0
    type_breakdown: dict[str, int] = field(default_factory=dict)

    @classmethod
    def of(cls, measurements: list[Measurement]) -> "MeasurementSummary":
        breakdown = Counter(m.measurement_type.value for m in measurements)
        return cls(
            total_count=len(measurements),
            alert_count=sum(1 for m in measurements if m.alert_level == AlertLevel.HIGH),
            anomaly_count=sum(1 for m in measurements if m.is_anomaly),
            type_breakdown=dict(breakdown),
        )
