"""Base for typed partial-update records."""

from dataclasses import fields, replace
from typing import Any, TypeVar

T = TypeVar("T")


class _Clear:
    """Marker value: reset the field to None instead of leaving it unchanged."""

    def __repr__(self) -> str:
        return "CLEAR"


CLEAR: Any = _Clear()


class EntityPatch:
    """Mixin for dataclass patches where ``None`` means "leave unchanged".

    Optional entity fields are reset by setting the patch field to ``CLEAR``.
    """

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller actually supplied."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)  # type: ignore[arg-type]
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()

    def apply(self, entity: T) -> T:
        """Return a copy of ``entity`` with the supplied fields replaced."""
        resolved = {
            name: None if value is CLEAR else value for name, value in self.changes().items()
        }
        return replace(entity, **resolved)  # type: ignore[type-var]
