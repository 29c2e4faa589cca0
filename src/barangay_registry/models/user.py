"""
User account models.

``User`` carries password material and never leaves the user repository
except through the privileged authentication lookup. Everything else sees
``UserView`` or, after a successful login, a ``Principal``.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from barangay_registry.models.common import RegistryModel


class Role(str, Enum):
    """Access level of a user account."""

    ADMIN = "admin"
    EDITOR = "editor"


class UserView(RegistryModel):
    """User record with password material stripped."""

    username: str = Field(min_length=1)
    email: str = Field(min_length=1)
    full_name: str = Field(default="", alias="fullName")
    role: Role = Field(default=Role.EDITOR)
    last_login: datetime | None = Field(default=None, alias="lastLogin")

    @field_validator("last_login", mode="before")
    @classmethod
    def _blank_login(cls, v):
        return None if v == "" else v

    @field_validator("full_name", mode="before")
    @classmethod
    def _blank_if_none(cls, v):
        return "" if v is None else v


class User(UserView):
    """Full user record as stored under ``users:{id}``."""

    password_hash: str = Field(alias="passwordHash", min_length=1)
    password_salt: str = Field(alias="passwordSalt", min_length=1)

    def safe_view(self) -> UserView:
        return UserView.model_validate(
            self.model_dump(exclude={"password_hash", "password_salt"})
        )


class Principal(BaseModel):
    """Authenticated identity handed to route handlers."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    role: Role
    full_name: str = Field(default="", alias="fullName")
