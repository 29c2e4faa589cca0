"""Referential integrity between households and residents."""

from loguru import logger
from redis.client import Pipeline

from barangay_registry.config.constants import HOUSEHOLDS_NAMESPACE
from barangay_registry.repositories.errors import (
    HouseholdInUseError,
    RecordValidationError,
    store_operation,
)
from barangay_registry.repositories.index_manager import IndexManager


class ReferentialIntegrityGuard:
    """Refuses household deletion while residents still reference it.

    Integrity is enforced by refusal only; there is no cascading delete.
    """

    def __init__(self, indexes: IndexManager) -> None:
        self.indexes = indexes

    def count_residents(self, household_id: str, pipe: Pipeline | None = None) -> int:
        """Number of residents linked to ``household_id``.

        Args:
            household_id: Household identifier.
            pipe: Pipeline in immediate (watching) mode. When given the count
                is read through it so it belongs to the caller's snapshot.
        """
        key = self.indexes.household_members_key(household_id)
        if pipe is not None:
            return int(pipe.scard(key))
        return self.indexes.count(key)

    def can_delete(self, household_id: str) -> bool:
        return self.count_residents(household_id) == 0

    def ensure_can_delete(self, household_id: str, pipe: Pipeline | None = None) -> None:
        """Raise HouseholdInUseError if any resident references the household."""
        count = self.count_residents(household_id, pipe)
        if count:
            logger.warning(
                f"Refusing to delete household {household_id}: {count} residents linked"
            )
            raise HouseholdInUseError(household_id, count)

    @store_operation
    def ensure_household_exists(self, household_id: str, pipe: Pipeline | None = None) -> None:
        """Raise RecordValidationError if ``household_id`` names no household.

        Only consulted when household references are validated on write.
        """
        key = f"{HOUSEHOLDS_NAMESPACE}:{household_id}"
        client = pipe if pipe is not None else self.indexes.db.client
        if not client.exists(key):
            raise RecordValidationError(
                f"Household with ID {household_id} does not exist", ["householdId"]
            )
