"""Domain-specific exceptions: framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class HasDependentsError(Exception):
    """Raised when deleting an entity that still has live dependents.

    Carries the current dependent count so callers can tell the user how
    many children must be detached first.
    """

    def __init__(self, entity_type: str, entity_id: str, dependent_count: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.dependent_count = dependent_count
        super().__init__(
            f"Cannot delete {entity_type} '{entity_id}' with "
            f"{dependent_count} dependent(s)"
        )


class InvalidStateError(Exception):
    """Raised for transitions the stored state does not allow (e.g. count underflow)."""

    def __init__(self, entity_type: str, entity_id: str, message: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} '{entity_id}': {message}")


class ConflictError(Exception):
    """Raised when a write loses an optimistic-concurrency check."""

    def __init__(self, entity_type: str, entity_id: str, expected_version: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(
            f"{entity_type} '{entity_id}' was modified concurrently "
            f"(expected version {expected_version})"
        )


class InvalidCursorError(Exception):
    """Raised when a pagination token is malformed or replayed against another query."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid pagination token: {reason}")


class StorageError(Exception):
    """Raised when the storage engine fails (connectivity, timeout, driver errors)."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage operation '{operation}' failed: {cause}")


class InvalidEntityError(Exception):
    """Raised when a change would leave an entity violating its own rules."""

    def __init__(self, entity_type: str, entity_id: str, message: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} '{entity_id}': {message}")
