"""PBKDF2 password hashing compatible with hashes already in the store."""

import hashlib
import hmac
import secrets

HASH_NAME = "sha512"
KEY_LENGTH = 64
SALT_BYTES = 16


def hash_password(password: str, iterations: int, salt: str | None = None) -> tuple[str, str]:
    """Hash ``password`` with a random (or given) hex salt.

    Returns:
        Tuple of (hex hash, hex salt)
    """
    salt = salt or secrets.token_hex(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        HASH_NAME, password.encode("utf-8"), salt.encode("utf-8"), iterations, KEY_LENGTH
    )
    return digest.hex(), salt


def verify_password(password: str, password_hash: str, salt: str, iterations: int) -> bool:
    """Constant-time check of ``password`` against a stored hash."""
    candidate, _ = hash_password(password, iterations, salt)
    return hmac.compare_digest(candidate, password_hash)
