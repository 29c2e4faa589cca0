"""
Repository for residents.

Indexes maintained: full name, age, household membership and category
tags. The age index holds the age at the time the entry was written; the
value is kept in the record hash as ``indexedAge`` so the exact entry can
be retracted later. Ages drift as birthdays pass until ``reindex_ages``
runs; statistics always recompute ages and never read this index.
"""

from datetime import date
from typing import Any, Callable, Mapping

from loguru import logger
from redis.client import Pipeline

from barangay_registry.config import Config
from barangay_registry.config.constants import (
    HOUSEHOLDS_NAMESPACE,
    RESIDENT_ID_PREFIX,
    RESIDENTS_NAMESPACE,
)
from barangay_registry.models import Resident
from barangay_registry.repositories import codec
from barangay_registry.repositories.base import RecordRepository
from barangay_registry.repositories.database import RedisConnection
from barangay_registry.repositories.errors import (
    ConcurrentModificationError,
    store_operation,
)
from barangay_registry.repositories.index_manager import IndexManager
from barangay_registry.repositories.integrity import ReferentialIntegrityGuard

INDEXED_AGE_FIELD = "indexedAge"


class ResidentRepository(RecordRepository[Resident]):
    """Data access layer for residents."""

    kind = "resident"
    namespace = RESIDENTS_NAMESPACE
    id_prefix = RESIDENT_ID_PREFIX
    model = Resident

    def __init__(
        self,
        db: RedisConnection,
        indexes: IndexManager,
        guard: ReferentialIntegrityGuard,
        config: Config | None = None,
        clock: Callable[[], date] | None = None,
    ) -> None:
        """Initialize resident repository.

        Args:
            db: Redis connection manager.
            indexes: Index manager shared with the other repositories.
            guard: Integrity guard, used when household references are validated.
            config: Settings; defaults to the global config.
            clock: Returns today's date; defaults to ``date.today``.
        """
        super().__init__(db, indexes, config)
        self.guard = guard
        self.clock = clock or date.today

    @property
    def validate_household_reference(self) -> bool:
        return self.config.validate_household_reference

    def _encode(self, record: Resident) -> dict[str, str]:
        fields = codec.encode(record)
        fields[INDEXED_AGE_FIELD] = str(record.age(self.clock()))
        return fields

    def _index_keys(self, record: Resident, fields: Mapping[str, str]) -> set[str]:
        stored = fields.get(INDEXED_AGE_FIELD)
        # Records written before indexedAge existed fall back to today's age
        age = int(stored) if stored else record.age(self.clock())
        return self.indexes.resident_keys(record, age)

    def _links_new_household(self, record: Resident, existing: Resident | None) -> bool:
        if not record.household_id:
            return False
        return existing is None or existing.household_id != record.household_id

    def _watch_keys(self, record: Resident, existing: Resident | None) -> list[str]:
        if self.validate_household_reference and self._links_new_household(record, existing):
            return [f"{HOUSEHOLDS_NAMESPACE}:{record.household_id}"]
        return []

    def _before_write(self, pipe: Pipeline, record: Resident, existing: Resident | None) -> None:
        if self.validate_household_reference and self._links_new_household(record, existing):
            self.guard.ensure_household_exists(record.household_id, pipe)

    @store_operation
    def get_by_household(self, household_id: str) -> list[Resident]:
        """Residents linked to a household, skipping dangling entries."""
        ids = self.indexes.members(self.indexes.household_members_key(household_id))
        return self.resolve_many(sorted(ids))

    @store_operation
    def find_by_tag(self, tag: str) -> list[Resident]:
        """Residents carrying ``tag`` (case-insensitive exact match)."""
        ids = self.indexes.members(self.indexes.resident_tag_key(tag))
        return self.resolve_many(sorted(ids))

    @store_operation
    def find_by_age(self, age: int) -> list[Resident]:
        """Residents indexed under ``age``.

        The index reflects ages as of the last write or reindex.
        """
        ids = self.indexes.members(self.indexes.age_key(age))
        return self.resolve_many(sorted(ids))

    @store_operation
    def reindex_ages(self, today: date | None = None) -> int:
        """Move residents whose indexed age is out of date.

        Args:
            today: Reference date; defaults to the repository clock.

        Returns:
            Number of residents moved to a new age index entry.
        """
        today = today or self.clock()
        moved = 0

        for record_id in self.all_ids():
            key = self.key(record_id)
            try:
                with self.db.transaction(key, description=f"reindex age {record_id}") as pipe:
                    fields = pipe.hgetall(key)
                    resident = codec.decode(self.model, fields)
                    if resident is None:
                        pipe.multi()
                        continue

                    current = resident.age(today)
                    stored = fields.get(INDEXED_AGE_FIELD)
                    if stored == str(current):
                        pipe.multi()
                        continue

                    pipe.multi()
                    if stored:
                        pipe.srem(self.indexes.age_key(int(stored)), record_id)
                    pipe.sadd(self.indexes.age_key(current), record_id)
                    pipe.hset(key, INDEXED_AGE_FIELD, str(current))
                moved += 1
            except ConcurrentModificationError:
                # The concurrent write re-indexed the record with today's age
                logger.warning(f"Resident {record_id} changed during age reindex, skipped")

        logger.info(f"Age reindex moved {moved} residents")
        return moved
