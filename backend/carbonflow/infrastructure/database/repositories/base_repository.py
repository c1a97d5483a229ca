"""Generic single-table repository.

Concrete repositories declare their entity type, routing rules and status
vocabulary, and provide the attribute mapping; this base supplies CRUD,
routed listing with cursor pagination, dependent-count maintenance and
statistics on top of ``ItemStore``.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections import Counter
from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, TypeVar

from carbonflow.application.interfaces import EntityRepository
from carbonflow.domain.entities import EntityPatch, EntityStatistics, ListQuery, Page
from carbonflow.domain.exceptions import (
    ConflictError,
    DuplicateEntityError,
    HasDependentsError,
    InvalidStateError,
)
from carbonflow.infrastructure.database import cursor
from carbonflow.infrastructure.database.item_store import ConditionalCheckFailedError, ItemStore
from carbonflow.infrastructure.database.keys import (
    EntityType,
    changed_index_keys,
    format_timestamp,
    index_keys,
    index_template,
    parse_primary_key,
    parse_timestamp,
    primary_key,
)
from carbonflow.infrastructure.database.query_router import QueryRouter, RoutingRules

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")
PatchT = TypeVar("PatchT", bound=EntityPatch)


class SingleTableRepository(EntityRepository[EntityT, PatchT], Generic[EntityT, PatchT]):
    """Implements the EntityRepository port over the shared item table."""

    entity_type: ClassVar[EntityType]
    entity_label: ClassVar[str]
    routing: ClassVar[RoutingRules]
    statuses: ClassVar[tuple[str, ...]]
    # Status partitions whose items feed the per-category breakdown.
    breakdown_statuses: ClassVar[tuple[str, ...]]
    # Entity attribute mirroring ``dependent_count``; None if the type has no dependents.
    dependent_attr: ClassVar[str | None] = None

    def __init__(self, store: ItemStore):
        self._store = store
        self._router = QueryRouter(self.routing)

    # ── Mapping hooks ────────────────────────────────────────────────

    @abstractmethod
    def _to_attributes(self, entity: EntityT) -> dict[str, Any]:
        """Map domain entity → JSON attribute document."""
        ...

    @abstractmethod
    def _from_item(self, item: dict[str, Any]) -> EntityT:
        """Map stored item → domain entity."""
        ...

    def _item_meta(self, item: dict[str, Any]) -> dict[str, Any]:
        """Entity fields that live in item columns rather than the attribute document."""
        _, entity_id = parse_primary_key(item["pk"])
        meta = {
            "id": entity_id,
            "version": item["version"],
            "created_at": parse_timestamp(item["created_at"]),
            "updated_at": parse_timestamp(item["updated_at"]),
        }
        if self.dependent_attr:
            meta[self.dependent_attr] = item["dependent_count"]
        return meta

    def _to_item(self, entity: EntityT) -> dict[str, Any]:
        pk, sk = primary_key(self.entity_type, entity.id)  # type: ignore[attr-defined]
        return {
            "pk": pk,
            "sk": sk,
            "entity_type": self.entity_type.value,
            **index_keys(entity),
            "attributes": self._to_attributes(entity),
            "dependent_count": getattr(entity, self.dependent_attr) if self.dependent_attr else 0,
            "version": entity.version,  # type: ignore[attr-defined]
            "created_at": format_timestamp(entity.created_at),  # type: ignore[attr-defined]
            "updated_at": format_timestamp(entity.updated_at),  # type: ignore[attr-defined]
        }

    def _key(self, entity_id: str) -> tuple[str, str]:
        return primary_key(self.entity_type, entity_id)

    # ── CRUD ─────────────────────────────────────────────────────────

    async def get_by_id(self, entity_id: str) -> EntityT | None:
        item = await self._store.get_item(*self._key(entity_id))
        return self._from_item(item) if item else None

    async def create(self, entity: EntityT) -> EntityT:
        now = datetime.now(timezone.utc)
        entity.created_at = now  # type: ignore[attr-defined]
        entity.updated_at = now  # type: ignore[attr-defined]
        entity.version = 1  # type: ignore[attr-defined]
        if self.dependent_attr:
            setattr(entity, self.dependent_attr, 0)

        item = self._to_item(entity)
        try:
            await self._store.put_item(item)
        except ConditionalCheckFailedError as exc:
            raise DuplicateEntityError(self.entity_label, "id", entity.id) from exc  # type: ignore[attr-defined]
        logger.debug("Created %s %s", self.entity_label, item["pk"])
        return self._from_item(item)

    async def update(
        self, entity_id: str, patch: PatchT, *, expected_version: int | None = None
    ) -> EntityT | None:
        pk, sk = self._key(entity_id)
        item = await self._store.get_item(pk, sk)
        if item is None:
            return None
        current = self._from_item(item)
        if expected_version is not None and expected_version != current.version:  # type: ignore[attr-defined]
            raise ConflictError(self.entity_label, entity_id, expected_version)

        updated = patch.apply(current)
        updated.updated_at = datetime.now(timezone.utc)  # type: ignore[attr-defined]

        values: dict[str, Any] = changed_index_keys(current, updated)
        attributes = self._to_attributes(updated)
        if attributes != item["attributes"]:
            values["attributes"] = attributes
        values["updated_at"] = format_timestamp(updated.updated_at)  # type: ignore[attr-defined]

        try:
            stored = await self._store.update_item(
                pk, sk, values, expected_version=current.version  # type: ignore[attr-defined]
            )
        except ConditionalCheckFailedError as exc:
            raise ConflictError(self.entity_label, entity_id, current.version) from exc  # type: ignore[attr-defined]
        if stored is None:
            return None
        logger.debug("Updated %s %s columns=%s", self.entity_label, pk, sorted(values))
        return self._from_item(stored)

    async def delete(self, entity_id: str) -> bool:
        pk, sk = self._key(entity_id)
        item = await self._store.get_item(pk, sk)
        if item is None:
            return False
        if item["dependent_count"] > 0:
            logger.warning(
                "Refusing to delete %s %s: %d dependent(s)",
                self.entity_label, entity_id, item["dependent_count"],
            )
            raise HasDependentsError(self.entity_label, entity_id, item["dependent_count"])
        try:
            deleted = await self._store.delete_item(pk, sk, require_no_dependents=True)
        except ConditionalCheckFailedError as exc:
            count = exc.item["dependent_count"] if exc.item else 0
            raise HasDependentsError(self.entity_label, entity_id, count) from exc
        logger.debug("Deleted %s %s", self.entity_label, pk)
        return deleted

    # ── Dependent counter ────────────────────────────────────────────

    async def increment_dependent_count(self, entity_id: str) -> EntityT | None:
        return await self.adjust_dependent_count(entity_id, 1)

    async def decrement_dependent_count(self, entity_id: str) -> EntityT | None:
        return await self.adjust_dependent_count(entity_id, -1)

    async def adjust_dependent_count(self, entity_id: str, delta: int) -> EntityT | None:
        if not self.dependent_attr:
            raise InvalidStateError(self.entity_label, entity_id, "does not track dependents")
        pk, sk = self._key(entity_id)
        try:
            item = await self._store.add_to_counter(
                pk, sk, delta, updated_at=format_timestamp(datetime.now(timezone.utc))
            )
        except ConditionalCheckFailedError as exc:
            count = exc.item["dependent_count"] if exc.item else 0
            raise InvalidStateError(
                self.entity_label,
                entity_id,
                f"{self.dependent_attr} is {count} and cannot change by {delta:+d}",
            ) from exc
        return self._from_item(item) if item else None

    # ── Aggregates ───────────────────────────────────────────────────

    async def statistics(self) -> EntityStatistics:
        """One count query per status plus one projection per breakdown status.

        The store has no GROUP BY, so aggregation happens here.
        """
        index = self.routing.status_index
        template = index_template(self.entity_type, index)
        total_by_status = {
            status: await self._store.count(index, template.partition(status))
            for status in self.statuses
        }

        by_category: Counter[str] = Counter()
        category_attr = self.routing.category_attr
        if category_attr:
            for status in self.breakdown_statuses:
                values = await self._store.project(index, template.partition(status), category_attr)
                by_category.update(str(v) for v in values if v is not None)
        return EntityStatistics(total_by_status=total_by_status, by_category=dict(by_category))

    # ── Listing ──────────────────────────────────────────────────────

    async def list(self, query: ListQuery) -> Page[EntityT]:
        plan = self._router.route(query)
        start_key = cursor.decode(query.cursor, plan.fingerprint) if query.cursor else None

        page = await self._store.query(
            plan.index,
            plan.partition,
            limit=max(1, query.page_size),
            sort_prefix=plan.sort_prefix,
            sort_from=plan.sort_from,
            sort_to=plan.sort_to,
            exclusive_start_key=start_key,
            scan_forward=plan.scan_forward,
        )
        entities = [self._from_item(item) for item in page.items]
        next_cursor = (
            cursor.encode(page.last_evaluated_key, plan.fingerprint)
            if page.last_evaluated_key
            else None
        )
        return Page(
            items=[entity for entity in entities if plan.matches(entity)],
            next_cursor=next_cursor,
            scanned_count=page.scanned_count,
        )
