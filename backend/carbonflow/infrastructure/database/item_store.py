"""Item store: keyed get/put/update/query/delete over the single ``items`` table.

The store speaks in raw items (``dict`` rows) and key strings; it knows
nothing about entities. Conditional writes report failure through
``ConditionalCheckFailedError`` so repositories can translate it into the
matching domain error, and every driver-level failure is wrapped into
``StorageError``. Nothing here retries.

All statements run on the caller's ``AsyncSession``; the unit of work is
committed (or rolled back) by whoever owns the session.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carbonflow.domain.exceptions import InvalidCursorError, StorageError
from carbonflow.infrastructure.database.keys import INDEX_COLUMNS, IndexName
from carbonflow.infrastructure.database.models import ItemModel

logger = logging.getLogger(__name__)

_items = ItemModel.__table__


class ConditionalCheckFailedError(Exception):
    """A conditional write found the item in a state it did not expect.

    ``item`` is the current stored item (None if the key is free).
    """

    def __init__(self, operation: str, pk: str, item: dict[str, Any] | None = None):
        self.operation = operation
        self.pk = pk
        self.item = item
        super().__init__(f"Condition failed for {operation} on '{pk}'")


@dataclass
class QueryPage:
    """Raw result of one index query."""

    items: list[dict[str, Any]]
    last_evaluated_key: dict[str, str] | None = None

    @property
    def scanned_count(self) -> int:
        return len(self.items)


class ItemStore:
    """Keyed item access bound to one SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self._session = session

    # ── Single-item operations ───────────────────────────────────────

    async def get_item(self, pk: str, sk: str) -> dict[str, Any] | None:
        stmt = select(_items).where(_items.c.pk == pk, _items.c.sk == sk)
        result = await self._execute("get_item", stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def put_item(self, item: dict[str, Any]) -> None:
        """Insert ``item``; fails if an item with the same primary key exists."""
        pk, sk = item["pk"], item["sk"]
        existing = await self.get_item(pk, sk)
        if existing is not None:
            raise ConditionalCheckFailedError("put_item", pk, existing)
        try:
            await self._session.execute(insert(_items).values(**item))
        except IntegrityError as exc:
            # Lost a race with a concurrent insert of the same key.
            raise ConditionalCheckFailedError("put_item", pk) from exc
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError("put_item", exc) from exc
        logger.debug("put_item pk=%s sk=%s", pk, sk)

    async def update_item(
        self,
        pk: str,
        sk: str,
        values: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> dict[str, Any] | None:
        """Set ``values`` on an existing item and bump its version.

        Returns the updated item, or None if no item exists at the key.
        With ``expected_version`` the write only applies if the stored
        version still matches.
        """
        stmt = (
            update(_items)
            .where(_items.c.pk == pk, _items.c.sk == sk)
            .values(**values, version=_items.c.version + 1)
        )
        if expected_version is not None:
            stmt = stmt.where(_items.c.version == expected_version)
        result = await self._execute("update_item", stmt)
        if result.rowcount == 0:
            current = await self.get_item(pk, sk)
            if current is None:
                return None
            raise ConditionalCheckFailedError("update_item", pk, current)
        logger.debug("update_item pk=%s columns=%s", pk, sorted(values))
        return await self.get_item(pk, sk)

    async def add_to_counter(
        self, pk: str, sk: str, delta: int, *, updated_at: str
    ) -> dict[str, Any] | None:
        """Atomically add ``delta`` to ``dependent_count``.

        The statement only applies while the result stays non-negative;
        otherwise ``ConditionalCheckFailedError`` is raised and the count is
        untouched. Returns None if the item does not exist.
        """
        stmt = (
            update(_items)
            .where(
                _items.c.pk == pk,
                _items.c.sk == sk,
                _items.c.dependent_count + delta >= 0,
            )
            .values(dependent_count=_items.c.dependent_count + delta, updated_at=updated_at)
        )
        result = await self._execute("add_to_counter", stmt)
        if result.rowcount == 0:
            current = await self.get_item(pk, sk)
            if current is None:
                return None
            raise ConditionalCheckFailedError("add_to_counter", pk, current)
        logger.debug("add_to_counter pk=%s delta=%+d", pk, delta)
        return await self.get_item(pk, sk)

    async def delete_item(
        self, pk: str, sk: str, *, require_no_dependents: bool = False
    ) -> bool:
        """Delete the item at the key. Returns False if it did not exist."""
        stmt = delete(_items).where(_items.c.pk == pk, _items.c.sk == sk)
        if require_no_dependents:
            stmt = stmt.where(_items.c.dependent_count == 0)
        result = await self._execute("delete_item", stmt)
        if result.rowcount == 0:
            current = await self.get_item(pk, sk)
            if current is None:
                return False
            raise ConditionalCheckFailedError("delete_item", pk, current)
        logger.debug("delete_item pk=%s sk=%s", pk, sk)
        return True

    # ── Index queries ────────────────────────────────────────────────

    async def query(
        self,
        index: IndexName,
        partition: str,
        *,
        limit: int,
        sort_prefix: str | None = None,
        sort_from: str | None = None,
        sort_to: str | None = None,
        exclusive_start_key: dict[str, str] | None = None,
        scan_forward: bool = True,
    ) -> QueryPage:
        """Read up to ``limit`` items of one index partition in sort-key order.

        Ties on the index sort key are broken by the table ``pk`` so the
        order is total and keyset pagination never skips or repeats items.
        ``last_evaluated_key`` is set only when more items follow.
        """
        partition_column, sort_column = self._index_columns(index)
        tie_column = _items.c.pk

        stmt = select(_items).where(partition_column == partition)
        if sort_prefix:
            stmt = stmt.where(sort_column.startswith(sort_prefix, autoescape=True))
        if sort_from is not None:
            stmt = stmt.where(sort_column >= sort_from)
        if sort_to is not None:
            stmt = stmt.where(sort_column <= sort_to)

        if exclusive_start_key:
            stmt = stmt.where(
                self._after(index, exclusive_start_key, scan_forward)
            )

        if index is IndexName.TYPE:
            order = [tie_column.asc() if scan_forward else tie_column.desc()]
        elif scan_forward:
            order = [sort_column.asc(), tie_column.asc()]
        else:
            order = [sort_column.desc(), tie_column.desc()]
        stmt = stmt.order_by(*order).limit(limit + 1)

        result = await self._execute("query", stmt)
        rows = [dict(row) for row in result.mappings().all()]
        has_more = len(rows) > limit
        rows = rows[:limit]
        last_key = self._key_of(index, rows[-1]) if has_more and rows else None
        logger.debug(
            "query index=%s partition=%s returned=%d more=%s",
            index.value, partition, len(rows), has_more,
        )
        return QueryPage(items=rows, last_evaluated_key=last_key)

    async def count(self, index: IndexName, partition: str) -> int:
        """Count-only query over one index partition."""
        partition_column, _ = self._index_columns(index)
        stmt = select(func.count()).select_from(_items).where(partition_column == partition)
        result = await self._execute("count", stmt)
        return int(result.scalar_one())

    async def project(self, index: IndexName, partition: str, attribute: str) -> list[Any]:
        """Projection query returning one entity attribute for every item in a partition."""
        partition_column, _ = self._index_columns(index)
        stmt = select(_items.c.attributes).where(partition_column == partition)
        result = await self._execute("project", stmt)
        return [(row or {}).get(attribute) for row in result.scalars().all()]

    # ── Internals ────────────────────────────────────────────────────

    async def _execute(self, operation: str, stmt: Any) -> Any:
        try:
            return await self._session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            logger.debug("Storage failure during %s: %s", operation, exc)
            raise StorageError(operation, exc) from exc

    @staticmethod
    def _index_columns(index: IndexName) -> tuple[Any, Any]:
        partition_name, sort_name = INDEX_COLUMNS[index]
        return _items.c[partition_name], _items.c[sort_name]

    @staticmethod
    def _key_of(index: IndexName, row: dict[str, Any]) -> dict[str, str]:
        key = {"pk": row["pk"], "sk": row["sk"]}
        for column in INDEX_COLUMNS[index]:
            key[column] = row[column]
        return key

    def _after(self, index: IndexName, start_key: dict[str, str], forward: bool) -> Any:
        """Keyset predicate selecting rows strictly after ``start_key``."""
        _, sort_name = INDEX_COLUMNS[index]
        if sort_name not in start_key or "pk" not in start_key:
            raise InvalidCursorError("resume position does not match the queried index")
        _, sort_column = self._index_columns(index)
        tie_column = _items.c.pk
        last_sort, last_pk = start_key[sort_name], start_key["pk"]

        if index is IndexName.TYPE:
            return tie_column > last_pk if forward else tie_column < last_pk
        if forward:
            return or_(sort_column > last_sort, and_(sort_column == last_sort, tie_column > last_pk))
        return or_(sort_column < last_sort, and_(sort_column == last_sort, tie_column < last_pk))
