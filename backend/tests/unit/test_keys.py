"""Unit tests for the key codec."""

from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from carbonflow.domain.entities import (
    Customer,
    CustomerStatus,
    Measurement,
    MeasurementType,
    Project,
    ProjectStatus,
    ProjectType,
)
from carbonflow.infrastructure.database.keys import (
    EntityType,
    IndexName,
    changed_index_keys,
    entity_type_of,
    format_timestamp,
    index_key,
    index_keys,
    index_partition,
    index_template,
    parse_key,
    parse_primary_key,
    parse_timestamp,
    primary_key,
    sort_key_prefix,
)


def _project(**kwargs) -> Project:
    return Project(
        project_name=kwargs.pop("project_name", "Plant 3"),
        customer_id=kwargs.pop("customer_id", "c-1"),
        project_type=kwargs.pop("project_type", ProjectType.COMBINED),
        start_date=kwargs.pop("start_date", date(2024, 4, 1)),
        **kwargs,
    )


def test_primary_key_round_trip():
    pk, sk = primary_key(EntityType.CUSTOMER, "abc")

    assert (pk, sk) == ("CUSTOMER#abc", "METADATA")
    assert parse_primary_key(pk) == (EntityType.CUSTOMER, "abc")


def test_parse_key_splits_at_first_separator():
    assert parse_key("PROJECT#a#b") == ("PROJECT", "a#b")
    with pytest.raises(ValueError):
        parse_key("no-separator")


def test_timestamp_format_is_fixed_width_utc():
    aware = datetime(2024, 6, 1, 9, 30, 0, 5, tzinfo=timezone.utc)
    naive = datetime(2024, 6, 1, 9, 30, 0, 5)

    assert format_timestamp(aware) == "2024-06-01T09:30:00.000005Z"
    assert format_timestamp(naive) == format_timestamp(aware)
    assert parse_timestamp(format_timestamp(aware)) == aware


def test_customer_index_keys():
    customer = Customer(company_name="Acme", industry="food", status=CustomerStatus.INACTIVE)

    keys = index_keys(customer)

    assert keys["gsi1pk"] == "CUSTOMER_STATUS#inactive"
    assert keys["gsi1sk"] == "COMPANY_NAME#Acme"
    assert keys["gsi2pk"] == "INDUSTRY#food"
    assert keys["gsi2sk"].startswith("CREATED_AT#")
    assert keys["gsi3pk"] is None and keys["gsi3sk"] is None


def test_project_parent_index_sorts_by_status_then_name():
    project = _project(status=ProjectStatus.ON_HOLD)

    assert index_key(IndexName.GSI3, project) == (
        "CUSTOMER#c-1",
        "STATUS#on_hold#NAME#Plant 3",
    )
    assert index_key(IndexName.GSI1, project) == (
        "PROJECT_STATUS#on_hold",
        "START_DATE#2024-04-01",
    )


def test_measurement_index_keys_use_timestamp():
    measurement = Measurement.record(
        "p-1",
        MeasurementType.SOIL,
        {"ph": 9.0},
        timestamp=datetime(2024, 6, 1, tzinfo=timezone.utc),
    )

    keys = index_keys(measurement)

    assert keys["gsi1pk"] == "MEASUREMENT_ALERT#high"
    assert keys["gsi2pk"] == "MEASUREMENT_TYPE#soil"
    assert keys["gsi3pk"] == "PROJECT#p-1"
    assert keys["gsi3sk"] == "TIMESTAMP#2024-06-01T00:00:00.000000Z"


def test_type_index_key():
    customer = Customer(company_name="Acme", industry="food")

    assert index_key(IndexName.TYPE, customer) == ("CUSTOMER", f"CUSTOMER#{customer.id}")


def test_index_key_for_undeclared_index_is_none():
    assert index_key(IndexName.GSI3, Customer(company_name="Acme", industry="food")) is None


def test_changed_index_keys_only_reports_derived_changes():
    project = _project()

    assert changed_index_keys(project, replace(project, description="new")) == {}
    assert changed_index_keys(project, replace(project, status=ProjectStatus.ACTIVE)) == {
        "gsi1pk": "PROJECT_STATUS#active",
        "gsi3sk": "STATUS#active#NAME#Plant 3",
    }


def test_sort_prefix_ends_each_part_with_separator():
    template = index_template(EntityType.PROJECT, IndexName.GSI3)

    assert template.sort_prefix({"status": "active"}) == "STATUS#active#"
    assert template.sort_prefix({"project_name": "x"}) is None
    assert sort_key_prefix(EntityType.PROJECT, IndexName.GSI3, {"status": "active"}) == "STATUS#active#"
    assert sort_key_prefix(EntityType.PROJECT, IndexName.TYPE, {"status": "active"}) is None


def test_index_partition():
    assert index_partition(EntityType.CUSTOMER, IndexName.GSI2, "food") == "INDUSTRY#food"
    assert index_partition(EntityType.MEASUREMENT, IndexName.TYPE, None) == "MEASUREMENT"
    with pytest.raises(ValueError):
        index_partition(EntityType.CUSTOMER, IndexName.GSI3, "x")


def test_entity_type_of_unknown_object():
    assert entity_type_of(_project()) is EntityType.PROJECT
    with pytest.raises(TypeError):
        entity_type_of(object())
