"""Entity models stored by the registry."""

from barangay_registry.models.common import Page, RegistryModel
from barangay_registry.models.household import Household, HouseholdWithResidents
from barangay_registry.models.resident import Resident, age_on
from barangay_registry.models.user import Principal, Role, User, UserView

__all__ = [
    "Household",
    "HouseholdWithResidents",
    "Page",
    "Principal",
    "RegistryModel",
    "Resident",
    "Role",
    "User",
    "UserView",
    "age_on",
]
