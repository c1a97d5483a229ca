"""Abstract repository interface (port) shared by every single-table entity type."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from carbonflow.domain.entities import EntityStatistics, ListQuery, Page

EntityT = TypeVar("EntityT")
PatchT = TypeVar("PatchT")


class EntityRepository(ABC, Generic[EntityT, PatchT]):
    """Port for entity persistence: implemented in the infrastructure layer.

    Not-found is reported as ``None`` / ``False``; every other failure is a
    domain exception (``DuplicateEntityError``, ``HasDependentsError``,
    ``InvalidStateError``, ``ConflictError``, ``InvalidCursorError``,
    ``StorageError``).
    """

    @abstractmethod
    async def list(self, query: ListQuery) -> Page[EntityT]:
        """Return one page of entities matching ``query``."""
        ...

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> EntityT | None:
        """Retrieve a single entity by its id."""
        ...

    @abstractmethod
    async def create(self, entity: EntityT) -> EntityT:
        """Persist a new entity and return it as stored."""
        ...

    @abstractmethod
    async def update(
        self, entity_id: str, patch: PatchT, *, expected_version: int | None = None
    ) -> EntityT | None:
        """Apply a partial update. Returns None if the entity does not exist."""
        ...

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        """Delete an entity. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def increment_dependent_count(self, entity_id: str) -> EntityT | None:
        """Atomically add one dependent."""
        ...

    @abstractmethod
    async def decrement_dependent_count(self, entity_id: str) -> EntityT | None:
        """Atomically remove one dependent; never goes below zero."""
        ...

    @abstractmethod
    async def adjust_dependent_count(self, entity_id: str, delta: int) -> EntityT | None:
        """Atomically add ``delta`` (may be negative) to the dependent count."""
        ...

    @abstractmethod
    async def statistics(self) -> EntityStatistics:
        """Aggregate counts per status and per category."""
        ...
