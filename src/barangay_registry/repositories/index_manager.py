"""
Secondary index maintenance.

Every searchable attribute maps to a Redis set keyed by its case-folded
value. Repositories compute the index keys of a record before and after a
mutation and hand both sets to ``apply`` inside the same transaction, so a
record's index entries always match its stored attributes.

Key layout:
- households:index:address:{addressLine1 addressLine2}
- households:index:barangay:{barangay}
- households:index:tag:{tag}
- residents:index:name:{firstName lastName}
- residents:index:age:{age}
- residents:household:{householdId}
- residents:index:tag:{tag}
- users:index:username:{username}   (string pointer, unique)
- users:index:email:{email}         (string pointer, unique)
"""

from typing import Iterable

from loguru import logger
from redis.client import Pipeline

from barangay_registry.config.constants import (
    HOUSEHOLD_ADDRESS_INDEX,
    HOUSEHOLD_BARANGAY_INDEX,
    HOUSEHOLD_TAG_INDEX,
    RESIDENT_AGE_INDEX,
    RESIDENT_HOUSEHOLD_INDEX,
    RESIDENT_NAME_INDEX,
    RESIDENT_TAG_INDEX,
    USER_EMAIL_INDEX,
    USER_USERNAME_INDEX,
)
from barangay_registry.models import Household, Resident, UserView
from barangay_registry.repositories.database import RedisConnection
from barangay_registry.repositories.errors import store_operation


class IndexManager:
    """Derives index keys for records and keeps the index sets in step."""

    def __init__(self, db: RedisConnection) -> None:
        """Initialize index manager.

        Args:
            db: Redis connection manager.
        """
        self.db = db

    # =========================================================================
    # Key Derivation
    # =========================================================================

    @staticmethod
    def address_key(address_line1: str, address_line2: str = "") -> str:
        # The separating space is kept even when line 2 is empty
        return f"{HOUSEHOLD_ADDRESS_INDEX}{f'{address_line1} {address_line2}'.lower()}"

    @staticmethod
    def barangay_key(barangay: str) -> str:
        return f"{HOUSEHOLD_BARANGAY_INDEX}{barangay.lower()}"

    @staticmethod
    def name_key(first_name: str, last_name: str) -> str:
        return f"{RESIDENT_NAME_INDEX}{f'{first_name} {last_name}'.lower()}"

    @staticmethod
    def age_key(age: int) -> str:
        return f"{RESIDENT_AGE_INDEX}{age}"

    @staticmethod
    def household_members_key(household_id: str) -> str:
        return f"{RESIDENT_HOUSEHOLD_INDEX}{household_id}"

    @staticmethod
    def household_tag_key(tag: str) -> str:
        return f"{HOUSEHOLD_TAG_INDEX}{tag.lower()}"

    @staticmethod
    def resident_tag_key(tag: str) -> str:
        return f"{RESIDENT_TAG_INDEX}{tag.lower()}"

    @staticmethod
    def username_key(username: str) -> str:
        return f"{USER_USERNAME_INDEX}{username}"

    @staticmethod
    def email_key(email: str) -> str:
        return f"{USER_EMAIL_INDEX}{email}"

    def household_keys(self, household: Household) -> set[str]:
        """Membership-index keys that should contain ``household.id``."""
        keys = {
            self.address_key(household.address_line1, household.address_line2),
            self.barangay_key(household.barangay),
        }
        keys.update(self.household_tag_key(tag) for tag in household.category_tags if tag)
        return keys

    def resident_keys(self, resident: Resident, age: int | None) -> set[str]:
        """Membership-index keys that should contain ``resident.id``.

        Args:
            resident: Resident snapshot.
            age: Age to index under. This is the age at the time the entry
                was (or is being) written, not necessarily the current age.
        """
        keys = {self.name_key(resident.first_name, resident.last_name)}
        if age is not None:
            keys.add(self.age_key(age))
        if resident.household_id:
            keys.add(self.household_members_key(resident.household_id))
        keys.update(self.resident_tag_key(tag) for tag in resident.category_tags if tag)
        return keys

    def user_pointers(self, user: UserView) -> dict[str, str]:
        """Unique-pointer keys of a user, by natural-key field name."""
        return {
            "username": self.username_key(user.username),
            "email": self.email_key(user.email),
        }

    # =========================================================================
    # Mutation
    # =========================================================================

    @staticmethod
    def apply(
        pipe: Pipeline,
        record_id: str,
        before: Iterable[str],
        after: Iterable[str],
    ) -> None:
        """Queue the index delta between two snapshots onto ``pipe``.

        Keys only in ``before`` lose ``record_id``; keys only in ``after``
        gain it. Keys in both are left alone.
        """
        before_set, after_set = set(before), set(after)
        retracted = before_set - after_set
        inserted = after_set - before_set
        for key in sorted(retracted):
            pipe.srem(key, record_id)
        for key in sorted(inserted):
            pipe.sadd(key, record_id)
        if retracted or inserted:
            logger.debug(
                f"Index delta for {record_id}: -{len(retracted)} +{len(inserted)}"
            )

    # =========================================================================
    # Lookup
    # =========================================================================

    @store_operation
    def members(self, key: str) -> set[str]:
        """Identifiers stored in a membership index."""
        return set(self.db.client.smembers(key))

    @store_operation
    def count(self, key: str) -> int:
        return int(self.db.client.scard(key))

    @store_operation
    def pointer(self, key: str) -> str | None:
        """Identifier held by a unique pointer, or None."""
        return self.db.client.get(key)
