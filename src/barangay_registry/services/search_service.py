"""
Free-text search over index key names.

A query matches a record when the lower-cased query is a substring of one
of the record's index keys: address and tag keys for households, name and
tag keys for residents. Record contents are never scanned, so a field with
no index (occupation, notes, contact number) is never searched.

Cost grows with the number of distinct index keys, since every query walks
the key space with SCAN.
"""

import re

from loguru import logger

from barangay_registry.config.constants import (
    HOUSEHOLD_ADDRESS_INDEX,
    HOUSEHOLD_TAG_INDEX,
    RESIDENT_NAME_INDEX,
    RESIDENT_TAG_INDEX,
)
from barangay_registry.models import Household, Resident
from barangay_registry.repositories import HouseholdRepository, RedisConnection, ResidentRepository
from barangay_registry.repositories.errors import RecordValidationError, store_operation

# Characters with meaning in a Redis MATCH pattern
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")

SCAN_BATCH = 500


def escape_glob(term: str) -> str:
    """Escape Redis glob metacharacters so ``term`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", term)


class SearchEngine:
    """Substring search across household and resident indexes."""

    def __init__(
        self,
        db: RedisConnection,
        households: HouseholdRepository,
        residents: ResidentRepository,
    ) -> None:
        self.db = db
        self.households = households
        self.residents = residents

    @staticmethod
    def _normalize(query: str) -> str:
        term = (query or "").strip().lower()
        if not term:
            raise RecordValidationError("Search query is required", ["query"])
        return term

    def _matching_ids(self, prefixes: list[str], term: str) -> set[str]:
        """Union of members of every index key under ``prefixes`` containing ``term``."""
        client = self.db.client
        pattern_term = escape_glob(term)
        ids: set[str] = set()
        for prefix in prefixes:
            pattern = f"{escape_glob(prefix)}*{pattern_term}*"
            for key in client.scan_iter(match=pattern, count=SCAN_BATCH):
                ids.update(client.smembers(key))
        return ids

    @store_operation
    def search_households(self, query: str) -> list[Household]:
        """Households whose address or a tag contains ``query``."""
        term = self._normalize(query)
        ids = self._matching_ids([HOUSEHOLD_ADDRESS_INDEX, HOUSEHOLD_TAG_INDEX], term)
        households = self.households.resolve_many(sorted(ids))
        logger.debug(f"Household search {term!r}: {len(households)} matches")
        return households

    @store_operation
    def search_residents(self, query: str) -> list[Resident]:
        """Residents whose full name or a tag contains ``query``."""
        term = self._normalize(query)
        ids = self._matching_ids([RESIDENT_NAME_INDEX, RESIDENT_TAG_INDEX], term)
        residents = self.residents.resolve_many(sorted(ids))
        logger.debug(f"Resident search {term!r}: {len(residents)} matches")
        return residents

    def search(self, query: str) -> dict[str, list]:
        """Combined search.

        Returns:
            Dictionary with ``residents`` and ``households`` result lists.
        """
        return {
            "residents": self.search_residents(query),
            "households": self.search_households(query),
        }
