"""
Domain errors raised by the record store.

Every operation raises synchronously from the point that detects the
problem; nothing here is retried internally.
"""

import functools
from typing import Any, Callable, TypeVar

from loguru import logger
from redis.exceptions import RedisError


class RegistryError(Exception):
    """Base exception for registry errors."""
    pass


class NotFoundError(RegistryError):
    """Raised when an update or delete targets a nonexistent record."""

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} with ID {record_id} not found")


class ConflictError(RegistryError):
    """Raised when a write would violate a uniqueness or integrity rule."""
    pass


class DuplicateKeyError(ConflictError):
    """A natural key (username, email) or identifier is already claimed."""

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field.capitalize()} {value} is already taken")


class HouseholdInUseError(ConflictError):
    """Household deletion refused because residents still reference it."""

    def __init__(self, household_id: str, count: int) -> None:
        self.household_id = household_id
        self.count = count
        super().__init__(
            f"Cannot delete household with ID {household_id} because it "
            f"still has {count} residents"
        )


class ConcurrentModificationError(ConflictError):
    """A watched key changed between the snapshot read and the commit.

    The transaction was discarded and nothing was written; the caller may
    retry the whole operation.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"{key} was modified concurrently, retry the operation")


class RecordValidationError(RegistryError):
    """Required field missing or malformed."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        self.fields = fields or []
        super().__init__(message)


class StoreUnavailableError(RegistryError):
    """The round trip to Redis itself failed."""
    pass


class BatchStatusUnknownError(StoreUnavailableError):
    """Connection lost while a MULTI/EXEC was in flight.

    The batch may or may not have committed. No reconciliation is attempted.
    """
    pass


F = TypeVar("F", bound=Callable[..., Any])


def store_operation(func: F) -> F:
    """Translate low-level Redis failures into StoreUnavailableError.

    Domain errors pass through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except RedisError as e:
            logger.error(f"Store error in {func.__qualname__}: {e}")
            raise StoreUnavailableError(str(e)) from e

    return wrapper  # type: ignore[return-value]
