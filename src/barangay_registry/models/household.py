"""
Household entity.

A household is one dwelling address in the barangay. Residents point at it
through their ``householdId``.
"""

from decimal import Decimal

from pydantic import Field, field_validator

from barangay_registry.models.common import RegistryModel
from barangay_registry.models.resident import Resident


class Household(RegistryModel):
    """A household record as stored under ``households:{id}``."""

    address_line1: str = Field(alias="addressLine1", min_length=1)
    address_line2: str = Field(default="", alias="addressLine2")
    barangay: str = Field(default="Kabacsanan", description="Fixed per deployment")
    city: str = Field(default="Default City")
    province: str = Field(default="Default Province")
    zip_code: str = Field(default="", alias="zipCode")
    monthly_income: Decimal = Field(default=Decimal("0"), alias="monthlyIncome", ge=0)
    notes: str = Field(default="")

    @field_validator("address_line2", "zip_code", "notes", mode="before")
    @classmethod
    def _blank_if_none(cls, v):
        return "" if v is None else v

    @field_validator("monthly_income", mode="before")
    @classmethod
    def _income_default(cls, v):
        # Forms submit an empty string when the income box is left blank
        if v is None or v == "":
            return Decimal("0")
        return v


class HouseholdWithResidents(Household):
    """Household joined with its resolved resident list."""

    residents: list[Resident] = Field(default_factory=list)
