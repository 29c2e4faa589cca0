"""Repository layer for data access."""

from barangay_registry.repositories.database import RedisConnection
from barangay_registry.repositories.household_repository import HouseholdRepository
from barangay_registry.repositories.index_manager import IndexManager
from barangay_registry.repositories.integrity import ReferentialIntegrityGuard
from barangay_registry.repositories.resident_repository import ResidentRepository
from barangay_registry.repositories.user_repository import UserRepository

__all__ = [
    "RedisConnection",
    "IndexManager",
    "ReferentialIntegrityGuard",
    "HouseholdRepository",
    "ResidentRepository",
    "UserRepository",
]
