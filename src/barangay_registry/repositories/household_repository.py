"""Repository for households."""

from typing import Any, Mapping

from loguru import logger
from redis.client import Pipeline

from barangay_registry.config import Config
from barangay_registry.config.constants import HOUSEHOLD_ID_PREFIX, HOUSEHOLDS_NAMESPACE
from barangay_registry.models import Household, HouseholdWithResidents
from barangay_registry.repositories.base import RecordRepository
from barangay_registry.repositories.database import RedisConnection
from barangay_registry.repositories.errors import store_operation
from barangay_registry.repositories.index_manager import IndexManager
from barangay_registry.repositories.integrity import ReferentialIntegrityGuard
from barangay_registry.repositories.resident_repository import ResidentRepository


class HouseholdRepository(RecordRepository[Household]):
    """Data access layer for households.

    Indexes maintained: address, barangay and category tags. Deletion is
    refused while any resident still references the household.
    """

    kind = "household"
    namespace = HOUSEHOLDS_NAMESPACE
    id_prefix = HOUSEHOLD_ID_PREFIX
    model = Household

    def __init__(
        self,
        db: RedisConnection,
        indexes: IndexManager,
        guard: ReferentialIntegrityGuard,
        residents: ResidentRepository,
        config: Config | None = None,
    ) -> None:
        """Initialize household repository.

        Args:
            db: Redis connection manager.
            indexes: Index manager shared with the other repositories.
            guard: Integrity guard consulted before deletion.
            residents: Resident repository used to join households with members.
            config: Settings; defaults to the global config.
        """
        super().__init__(db, indexes, config)
        self.guard = guard
        self.residents = residents

    def _build(self, payload: Mapping[str, Any]) -> Household:
        payload = dict(payload)
        # One barangay per deployment, whatever the caller sent
        payload["barangay"] = self.config.barangay_name
        if not payload.get("city"):
            payload["city"] = self.config.default_city
        if not payload.get("province"):
            payload["province"] = self.config.default_province
        return super()._build(payload)

    def _index_keys(self, record: Household, fields: Mapping[str, str]) -> set[str]:
        return self.indexes.household_keys(record)

    def _delete_watch_keys(self, record_id: str) -> list[str]:
        # A resident joining between the count and EXEC must abort the delete
        return [self.indexes.household_members_key(record_id)]

    def _before_delete(self, pipe: Pipeline, existing: Household) -> None:
        self.guard.ensure_can_delete(existing.id, pipe)

    @store_operation
    def get_with_residents(self, household_id: str) -> HouseholdWithResidents | None:
        """Get a household joined with its resolved residents.

        Returns:
            Household with a ``residents`` list, or None if absent.
        """
        household = self.get(household_id)
        if household is None:
            return None

        residents = self.residents.get_by_household(household_id)
        return HouseholdWithResidents.model_validate(
            {**household.model_dump(), "residents": residents}
        )

    @store_operation
    def find_by_tag(self, tag: str) -> list[Household]:
        """Households carrying ``tag`` (case-insensitive exact match)."""
        ids = self.indexes.members(self.indexes.household_tag_key(tag))
        households = self.resolve_many(sorted(ids))
        logger.debug(f"Found {len(households)} households tagged {tag!r}")
        return households
