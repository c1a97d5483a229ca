"""Key codec for the single-table item store.

This is the only module that knows how key strings are shaped. Primary keys
address the canonical item of an entity::

    pk = "{TYPE}#{id}"      sk = "METADATA"

Secondary-index keys are declared per entity type as ``IndexTemplate``
entries: the partition encodes a low-cardinality attribute (status, type,
parent id) and the sort key encodes one or more higher-cardinality
attributes joined as ``LABEL#value#LABEL#value``. Every function here is
pure; repositories call ``index_keys`` on create and ``changed_index_keys``
on update so derived keys never go stale.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from carbonflow.domain.entities import Customer, Measurement, Project

METADATA_SK = "METADATA"
KEY_SEPARATOR = "#"
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class EntityType(str, Enum):
    CUSTOMER = "CUSTOMER"
    PROJECT = "PROJECT"
    MEASUREMENT = "MEASUREMENT"


class IndexName(str, Enum):
    """Access paths of the item store. ``TYPE`` lists every item of one entity type."""

    TYPE = "TYPE"
    GSI1 = "GSI1"
    GSI2 = "GSI2"
    GSI3 = "GSI3"


# Column pair (partition, sort) backing each index.
INDEX_COLUMNS: dict[IndexName, tuple[str, str]] = {
    IndexName.TYPE: ("entity_type", "pk"),
    IndexName.GSI1: ("gsi1pk", "gsi1sk"),
    IndexName.GSI2: ("gsi2pk", "gsi2sk"),
    IndexName.GSI3: ("gsi3pk", "gsi3sk"),
}

SECONDARY_INDEXES = (IndexName.GSI1, IndexName.GSI2, IndexName.GSI3)


# ── Value formatting ─────────────────────────────────────────────────


def format_timestamp(value: datetime) -> str:
    """Render a datetime as a fixed-width UTC string (sorts chronologically)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def format_key_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


# ── Index templates ──────────────────────────────────────────────────


@dataclass(frozen=True)
class IndexTemplate:
    """Declarative shape of one secondary index for one entity type."""

    partition_label: str
    partition_attr: str
    sort_parts: tuple[tuple[str, str], ...]

    @property
    def leading_sort_attr(self) -> str:
        return self.sort_parts[0][1]

    def partition(self, value: Any) -> str:
        return f"{self.partition_label}{KEY_SEPARATOR}{format_key_value(value)}"

    def sort_key(self, entity: Any) -> str:
        return KEY_SEPARATOR.join(
            f"{label}{KEY_SEPARATOR}{format_key_value(getattr(entity, attr))}"
            for label, attr in self.sort_parts
        )

    def sort_prefix(self, values: dict[str, Any]) -> str | None:
        """Prefix covering the leading sort parts present in ``values``.

        Each part ends with the separator so ``STATUS#active`` cannot match
        ``STATUS#active_pending``. Returns None when the leading part is absent.
        """
        prefix = ""
        for label, attr in self.sort_parts:
            if values.get(attr) is None:
                break
            prefix += f"{label}{KEY_SEPARATOR}{format_key_value(values[attr])}{KEY_SEPARATOR}"
        return prefix or None

    def sort_bound(self, value: Any) -> str:
        """Sort-key value bounding a range on the leading sort attribute."""
        label = self.sort_parts[0][0]
        return f"{label}{KEY_SEPARATOR}{format_key_value(value)}"


KEY_SCHEMAS: dict[EntityType, dict[IndexName, IndexTemplate]] = {
    EntityType.CUSTOMER: {
        IndexName.GSI1: IndexTemplate(
            "CUSTOMER_STATUS", "status", (("COMPANY_NAME", "company_name"),)
        ),
        IndexName.GSI2: IndexTemplate(
            "INDUSTRY", "industry", (("CREATED_AT", "created_at"),)
        ),
    },
    EntityType.PROJECT: {
        IndexName.GSI1: IndexTemplate(
            "PROJECT_STATUS", "status", (("START_DATE", "start_date"),)
        ),
        IndexName.GSI2: IndexTemplate(
            "PROJECT_TYPE", "project_type", (("CREATED_AT", "created_at"),)
        ),
        IndexName.GSI3: IndexTemplate(
            "CUSTOMER", "customer_id", (("STATUS", "status"), ("NAME", "project_name"))
        ),
    },
    EntityType.MEASUREMENT: {
        IndexName.GSI1: IndexTemplate(
            "MEASUREMENT_ALERT", "alert_level", (("TIMESTAMP", "timestamp"),)
        ),
        IndexName.GSI2: IndexTemplate(
            "MEASUREMENT_TYPE", "measurement_type", (("TIMESTAMP", "timestamp"),)
        ),
        IndexName.GSI3: IndexTemplate(
            "PROJECT", "project_id", (("TIMESTAMP", "timestamp"),)
        ),
    },
}

_ENTITY_TYPES: dict[type, EntityType] = {
    Customer: EntityType.CUSTOMER,
    Project: EntityType.PROJECT,
    Measurement: EntityType.MEASUREMENT,
}


def entity_type_of(entity: Any) -> EntityType:
    try:
        return _ENTITY_TYPES[type(entity)]
    except KeyError:
        raise TypeError(f"No key schema for {type(entity).__name__}") from None


def index_template(entity_type: EntityType, index: IndexName) -> IndexTemplate:
    try:
        return KEY_SCHEMAS[entity_type][index]
    except KeyError:
        raise ValueError(f"{entity_type.value} has no index {index.value}") from None


# ── Primary keys ─────────────────────────────────────────────────────


def primary_key(entity_type: EntityType, entity_id: str) -> tuple[str, str]:
    return f"{entity_type.value}{KEY_SEPARATOR}{entity_id}", METADATA_SK


def parse_key(key: str) -> tuple[str, str]:
    """Split ``LABEL#value`` at the first separator."""
    label, sep, value = key.partition(KEY_SEPARATOR)
    if not sep:
        raise ValueError(f"Malformed key: {key!r}")
    return label, value


def parse_primary_key(pk: str) -> tuple[EntityType, str]:
    label, entity_id = parse_key(pk)
    return EntityType(label), entity_id


# ── Secondary keys ───────────────────────────────────────────────────


def index_key(index: IndexName, entity: Any) -> tuple[str, str] | None:
    """Derive one index key pair for ``entity``; None if its type lacks the index."""
    entity_type = entity_type_of(entity)
    if index is IndexName.TYPE:
        return entity_type.value, primary_key(entity_type, entity.id)[0]
    template = KEY_SCHEMAS[entity_type].get(index)
    if template is None:
        return None
    return (
        template.partition(getattr(entity, template.partition_attr)),
        template.sort_key(entity),
    )


def index_keys(entity: Any) -> dict[str, str | None]:
    """All secondary-index columns for ``entity`` (unused indexes map to None)."""
    columns: dict[str, str | None] = {}
    for index in SECONDARY_INDEXES:
        pk_column, sk_column = INDEX_COLUMNS[index]
        key = index_key(index, entity)
        columns[pk_column], columns[sk_column] = key if key else (None, None)
    return columns


def changed_index_keys(old: Any, new: Any) -> dict[str, str | None]:
    """Index columns whose derived value differs between ``old`` and ``new``."""
    before = index_keys(old)
    return {column: value for column, value in index_keys(new).items() if before[column] != value}


def index_partition(entity_type: EntityType, index: IndexName, value: Any) -> str:
    """Partition value of ``index`` for one attribute value."""
    if index is IndexName.TYPE:
        return entity_type.value
    return index_template(entity_type, index).partition(value)


def sort_key_prefix(entity_type: EntityType, index: IndexName, values: dict[str, Any]) -> str | None:
    """Sort-key prefix of ``index`` covering the leading attributes present in ``values``."""
    if index is IndexName.TYPE:
        return None
    return index_template(entity_type, index).sort_prefix(values)
