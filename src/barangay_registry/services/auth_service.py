"""Credential verification for the route layer."""

from loguru import logger

from barangay_registry.config import Config, get_config
from barangay_registry.models import Principal, Role
from barangay_registry.repositories import UserRepository
from barangay_registry.repositories.errors import DuplicateKeyError
from barangay_registry.utils.passwords import verify_password


class AuthService:
    """Verifies username/password pairs against stored hashes."""

    def __init__(self, users: UserRepository, config: Config | None = None) -> None:
        self.users = users
        self.config = config or get_config()

    def authenticate(self, username: str, password: str) -> Principal | None:
        """Check a username and plaintext password.

        Returns:
            Principal on success, None when the user is unknown or the
            password does not match. Hash and salt never leave this call.
        """
        if not username or not password:
            return None

        user = self.users.get_for_auth(username)
        if user is None:
            logger.info(f"Login failed: unknown user {username}")
            return None

        if not verify_password(
            password,
            user.password_hash,
            user.password_salt,
            self.config.password_hash_iterations,
        ):
            logger.info(f"Login failed: bad password for {username}")
            return None

        self.users.record_login(user.id)
        return Principal(id=user.id, username=user.username, role=user.role, full_name=user.full_name)

    def initialize_admin(self) -> str | None:
        """Create the configured admin account if its username is unclaimed.

        Returns:
            The new admin id, or None if the admin already existed.
        """
        if self.users.get_by_username(self.config.admin_username) is not None:
            logger.debug("Admin user already present")
            return None

        try:
            user_id = self.users.create({
                "username": self.config.admin_username,
                "email": self.config.admin_email,
                "password": self.config.admin_password,
                "fullName": self.config.admin_full_name,
                "role": Role.ADMIN.value,
            })
        except DuplicateKeyError as e:
            if e.field != "username":
                raise
            # Another process created it between the lookup and the write
            logger.info(f"Admin user not created: {e}")
            return None

        logger.info("Admin user initialized")
        return user_id
