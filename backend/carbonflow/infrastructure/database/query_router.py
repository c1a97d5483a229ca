"""Query router: turns a ``ListQuery`` into an index query plus in-process predicates.

Routing order:

1. a parent filter uses the parent-scoped index;
2. otherwise a status filter uses the status index;
3. otherwise a category filter uses the category index;
4. otherwise the entity's default status (if it has one) or the type index.

Filters that the chosen index covers become its partition or a sort-key
prefix / range. Everything else, including free-text search, is evaluated
against the items of the fetched page only, so a page can come back short
or empty while more matches exist further on.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from carbonflow.domain.entities import ListQuery
from carbonflow.infrastructure.database.cursor import query_fingerprint
from carbonflow.infrastructure.database.keys import (
    EntityType,
    IndexName,
    IndexTemplate,
    format_key_value,
    index_template,
)


@dataclass(frozen=True)
class RoutingRules:
    """Which attributes each index of an entity type can answer for."""

    entity_type: EntityType
    status_attr: str
    status_index: IndexName
    search_attr: str
    category_attr: str | None = None
    category_index: IndexName | None = None
    parent_attr: str | None = None
    parent_index: IndexName | None = None
    time_attr: str | None = None
    default_status: str | None = None
    newest_first: frozenset[IndexName] = field(default_factory=frozenset)


@dataclass(frozen=True)
class PostFilter:
    """Predicate applied to fetched entities; no index can evaluate it."""

    attr: str
    op: str
    value: Any

    def matches(self, entity: Any) -> bool:
        actual = getattr(entity, self.attr, None)
        if self.op == "contains":
            return actual is not None and str(self.value).casefold() in str(actual).casefold()
        if self.op == "eq":
            return actual is not None and format_key_value(actual) == format_key_value(self.value)
        if actual is None:
            return False
        if self.op == "gte":
            return _as_utc(actual) >= _as_utc(self.value)
        if self.op == "lte":
            return _as_utc(actual) <= _as_utc(self.value)
        raise ValueError(f"Unknown post-filter operator: {self.op}")

    def describe(self) -> tuple[str, str, str]:
        return self.attr, self.op, format_key_value(self.value)


@dataclass(frozen=True)
class QueryPlan:
    entity_type: EntityType
    index: IndexName
    partition: str
    sort_prefix: str | None = None
    sort_from: str | None = None
    sort_to: str | None = None
    scan_forward: bool = True
    post_filters: tuple[PostFilter, ...] = ()

    @property
    def fingerprint(self) -> str:
        return query_fingerprint(
            entity_type=self.entity_type.value,
            index=self.index.value,
            partition=self.partition,
            sort_prefix=self.sort_prefix,
            sort_from=self.sort_from,
            sort_to=self.sort_to,
            scan_forward=self.scan_forward,
            post_filters=[f.describe() for f in self.post_filters],
        )

    def matches(self, entity: Any) -> bool:
        return all(f.matches(entity) for f in self.post_filters)


class QueryRouter:
    """Selects the index and predicates that answer a list request for one entity type."""

    def __init__(self, rules: RoutingRules):
        self._rules = rules

    @property
    def rules(self) -> RoutingRules:
        return self._rules

    def route(self, query: ListQuery) -> QueryPlan:
        rules = self._rules
        filters = self._equality_filters(query)
        if not filters and rules.default_status is not None:
            filters[rules.status_attr] = rules.default_status

        index = self._choose_index(filters)
        template: IndexTemplate | None = None
        sort_prefix = None
        if index is IndexName.TYPE:
            partition = rules.entity_type.value
        else:
            template = index_template(rules.entity_type, index)
            partition = template.partition(filters.pop(template.partition_attr))
            sort_prefix = template.sort_prefix(filters)
            for _, attr in template.sort_parts:
                if filters.get(attr) is None:
                    break
                del filters[attr]

        post_filters = [PostFilter(attr, "eq", value) for attr, value in filters.items()]

        sort_from = sort_to = None
        if rules.time_attr and (query.time_from or query.time_to):
            if template is not None and sort_prefix is None and template.leading_sort_attr == rules.time_attr:
                if query.time_from:
                    sort_from = template.sort_bound(query.time_from)
                if query.time_to:
                    sort_to = template.sort_bound(query.time_to)
            else:
                if query.time_from:
                    post_filters.append(PostFilter(rules.time_attr, "gte", query.time_from))
                if query.time_to:
                    post_filters.append(PostFilter(rules.time_attr, "lte", query.time_to))

        if query.search:
            post_filters.append(PostFilter(rules.search_attr, "contains", query.search))

        return QueryPlan(
            entity_type=rules.entity_type,
            index=index,
            partition=partition,
            sort_prefix=sort_prefix,
            sort_from=sort_from,
            sort_to=sort_to,
            scan_forward=index not in rules.newest_first,
            post_filters=tuple(post_filters),
        )

    def _equality_filters(self, query: ListQuery) -> dict[str, Any]:
        rules = self._rules
        candidates = (
            (rules.parent_attr, query.parent_id),
            (rules.status_attr, query.status),
            (rules.category_attr, query.category),
        )
        return {attr: value for attr, value in candidates if attr and value is not None}

    def _choose_index(self, filters: dict[str, Any]) -> IndexName:
        rules = self._rules
        if rules.parent_attr in filters and rules.parent_index is not None:
            return rules.parent_index
        if rules.status_attr in filters:
            return rules.status_index
        if rules.category_attr in filters and rules.category_index is not None:
            return rules.category_index
        return IndexName.TYPE


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
