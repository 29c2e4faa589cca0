"""
Repository for user accounts.

Usernames and emails are unique across all users. Each is claimed through
a string pointer key (``users:index:username:{username}`` and
``users:index:email:{email}``) that is checked under WATCH before the
write batch is queued, so a conflicting create or rename never lands.

Password hash and salt stay inside this module: ``get`` and friends return
``UserView``; only ``get_for_auth`` returns the full ``User``.
"""

from datetime import datetime
from typing import Any, Mapping

from loguru import logger
from redis.client import Pipeline

from barangay_registry.config.constants import USER_ID_PREFIX, USERS_NAMESPACE
from barangay_registry.models import Role, User, UserView
from barangay_registry.models.common import utc_now
from barangay_registry.repositories.base import RecordRepository
from barangay_registry.repositories.errors import (
    DuplicateKeyError,
    NotFoundError,
    RecordValidationError,
    store_operation,
)
from barangay_registry.utils.passwords import hash_password

PASSWORD_FIELDS = ("passwordHash", "passwordSalt", "password_hash", "password_salt")


class UserRepository(RecordRepository[User]):
    """Data access layer for user accounts."""

    kind = "user"
    namespace = USERS_NAMESPACE
    id_prefix = USER_ID_PREFIX
    model = User

    def _present(self, record: User) -> UserView:
        return record.safe_view()

    def _with_password(self, data: Mapping[str, Any], required: bool) -> dict[str, Any]:
        """Replace a plaintext ``password`` with a fresh hash and salt."""
        data = {k: v for k, v in data.items() if k not in PASSWORD_FIELDS}
        password = data.pop("password", None)
        if password:
            password_hash, salt = hash_password(password, self.config.password_hash_iterations)
            data["passwordHash"] = password_hash
            data["passwordSalt"] = salt
        elif required:
            raise RecordValidationError("Password is required", ["password"])
        return data

    def _changed_pointers(self, record: User, existing: User | None) -> dict[str, tuple[str, str]]:
        """Pointer keys the write must claim, by field: (key, value)."""
        new = self.indexes.user_pointers(record)
        old = self.indexes.user_pointers(existing) if existing is not None else {}
        return {
            field: (key, getattr(record, field))
            for field, key in new.items()
            if old.get(field) != key
        }

    def _watch_keys(self, record: User, existing: User | None) -> list[str]:
        return [key for key, _ in self._changed_pointers(record, existing).values()]

    def _before_write(self, pipe: Pipeline, record: User, existing: User | None) -> None:
        for field, (key, value) in self._changed_pointers(record, existing).items():
            holder = pipe.get(key)
            if holder and holder != record.id:
                logger.warning(f"Refusing user write: {field} {value} claimed by {holder}")
                raise DuplicateKeyError(field, value)

    def _queue_extra(self, pipe: Pipeline, record: User, existing: User | None) -> None:
        if existing is not None:
            old = self.indexes.user_pointers(existing)
            new = self.indexes.user_pointers(record)
            for field, key in old.items():
                if key != new[field]:
                    pipe.delete(key)
        for key in self.indexes.user_pointers(record).values():
            pipe.set(key, record.id)

    def _queue_delete_extra(self, pipe: Pipeline, existing: User) -> None:
        for key in self.indexes.user_pointers(existing).values():
            pipe.delete(key)

    def create(self, data: Mapping[str, Any]) -> str:
        """Create a user account.

        Args:
            data: username, email, password and optionally fullName, role, id.

        Raises:
            DuplicateKeyError: username or email already claimed.
            RecordValidationError: a required field is missing.

        Returns:
            The new user id.
        """
        payload = self._with_password(data, required=True)
        payload.setdefault("role", Role.EDITOR.value)
        payload["lastLogin"] = ""
        return super().create(payload)

    def update(self, record_id: str, data: Mapping[str, Any]) -> UserView:
        """Update a user; a ``password`` entry is re-hashed."""
        payload = self._with_password(data, required=False)
        payload.pop("lastLogin", None)
        payload.pop("last_login", None)
        return super().update(record_id, payload)

    @store_operation
    def get_for_auth(self, username: str) -> User | None:
        """Full record, password material included, for credential checks only."""
        user_id = self.indexes.pointer(self.indexes.username_key(username))
        if not user_id:
            return None
        return self._load(user_id)

    @store_operation
    def get_by_username(self, username: str) -> UserView | None:
        user_id = self.indexes.pointer(self.indexes.username_key(username))
        return self.get(user_id) if user_id else None

    @store_operation
    def get_by_email(self, email: str) -> UserView | None:
        user_id = self.indexes.pointer(self.indexes.email_key(email))
        return self.get(user_id) if user_id else None

    @store_operation
    def record_login(self, user_id: str, when: datetime | None = None) -> None:
        """Stamp ``lastLogin`` without touching anything else.

        Raises:
            NotFoundError: The user was deleted.
        """
        key = self.key(user_id)
        when = when or utc_now()
        with self.db.transaction(key, description=f"record login {user_id}") as pipe:
            if not pipe.exists(key):
                raise NotFoundError(self.kind, user_id)
            pipe.multi()
            pipe.hset(key, "lastLogin", when.isoformat())
        logger.info(f"Recorded login for user {user_id}")
