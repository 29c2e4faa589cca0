"""Resident entity."""

from datetime import date

from pydantic import Field, field_validator

from barangay_registry.models.common import RegistryModel


def age_on(birth_date: date, today: date) -> int:
    """Whole years between ``birth_date`` and ``today``."""
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return today.year - birth_date.year - int(before_birthday)


class Resident(RegistryModel):
    """A resident record as stored under ``residents:{id}``."""

    first_name: str = Field(alias="firstName", min_length=1)
    middle_name: str = Field(default="", alias="middleName")
    last_name: str = Field(alias="lastName", min_length=1)
    birth_date: date = Field(alias="birthDate")
    gender: str = Field(min_length=1)
    civil_status: str = Field(alias="civilStatus", min_length=1)
    occupation: str = Field(default="")
    contact_number: str = Field(default="", alias="contactNumber")
    email: str = Field(default="")
    image_url: str = Field(default="", alias="imageUrl")
    household_id: str = Field(
        default="",
        alias="householdId",
        description="Empty when the resident is not linked to a household",
    )
    is_head: bool = Field(default=False, alias="isHead")

    @field_validator(
        "middle_name",
        "occupation",
        "contact_number",
        "email",
        "image_url",
        "household_id",
        mode="before",
    )
    @classmethod
    def _blank_if_none(cls, v):
        return "" if v is None else v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def age(self, today: date | None = None) -> int:
        return age_on(self.birth_date, today or date.today())
