"""Unit tests for measurement alert, anomaly and summary rules."""

from carbonflow.application.schemas import MeasurementCreate
from carbonflow.domain.entities import (
    AlertLevel,
    Measurement,
    MeasurementPatch,
    MeasurementSummary,
    MeasurementType,
    calculate_alert_level,
    detect_anomaly,
)


def test_water_quality_within_thresholds_is_normal():
    values = {"ph": 7.2, "iron": 0.1, "copper": 0.5, "zinc": 1.0}

    assert calculate_alert_level(MeasurementType.WATER_QUALITY, values) == AlertLevel.NORMAL


def test_any_breach_raises_alert():
    assert calculate_alert_level(MeasurementType.WATER_QUALITY, {"ph": 8.6}) == AlertLevel.HIGH
    assert calculate_alert_level(MeasurementType.WATER_QUALITY, {"iron": 0.31}) == AlertLevel.HIGH
    assert (
        calculate_alert_level(MeasurementType.ATMOSPHERIC, {"co2_concentration": 1200})
        == AlertLevel.HIGH
    )


def test_zero_lower_bound_is_enforced():
    assert calculate_alert_level(MeasurementType.ATMOSPHERIC, {"temperature": 0.0}) == AlertLevel.NORMAL
    assert calculate_alert_level(MeasurementType.ATMOSPHERIC, {"temperature": -0.5}) == AlertLevel.HIGH


def test_unknown_readings_are_ignored():
    assert calculate_alert_level(MeasurementType.SOIL, {"nitrogen": 999}) == AlertLevel.NORMAL
    assert detect_anomaly(MeasurementType.SOIL, {"nitrogen": 999}) is False


def test_anomaly_limits():
    assert detect_anomaly(MeasurementType.WATER_QUALITY, {"ph": 11}) is True
    assert detect_anomaly(MeasurementType.WATER_QUALITY, {"ph": 9}) is False
    assert detect_anomaly(MeasurementType.ATMOSPHERIC, {"co2_concentration": 6000}) is True


def test_record_derives_flags():
    measurement = Measurement.record("p-1", MeasurementType.SOIL, {"ph": 3.5})

    assert measurement.alert_level == AlertLevel.HIGH
    assert measurement.is_anomaly is True


def test_patch_with_new_values_rederives_flags():
    measurement = Measurement.record("p-1", MeasurementType.SOIL, {"ph": 3.5})

    patched = MeasurementPatch(values={"ph": 7.0}).apply(measurement)
    noted = MeasurementPatch(notes="recalibrated").apply(measurement)

    assert patched.alert_level == AlertLevel.NORMAL
    assert patched.is_anomaly is False
    assert noted.alert_level == AlertLevel.HIGH
    assert noted.notes == "recalibrated"
    assert measurement.values == {"ph": 3.5}


def test_summary_of_page():
    page = [
        Measurement.record("p-1", MeasurementType.SOIL, {"ph": 7.0}),
        Measurement.record("p-1", MeasurementType.SOIL, {"ph": 3.0}),
        Measurement.record("p-1", MeasurementType.ATMOSPHERIC, {"temperature": 45}),
    ]

    summary = MeasurementSummary.of(page)

    assert summary.total_count == 3
    assert summary.alert_count == 2
    assert summary.anomaly_count == 1
    assert summary.type_breakdown == {"soil": 2, "atmospheric": 1}
    assert MeasurementSummary.of([]).total_count == 0


def test_camel_case_reading_names_are_normalised():
    reading = MeasurementCreate(
        project_id="p-1",
        measurement_type=MeasurementType.ATMOSPHERIC,
        values={"co2Concentration": 1500, "dissolvedOxygen": 7.5, "ph": 7.0},
    )

    assert reading.values == {"co2_concentration": 1500, "dissolved_oxygen": 7.5, "ph": 7.0}
    assert calculate_alert_level(reading.measurement_type, reading.values) == AlertLevel.HIGH
