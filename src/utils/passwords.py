"""Password hashing utilities.

Passwords are stored as bcrypt hashes and verified with ``bcrypt.checkpw``,
which compares in constant time.
"""

import logging
from typing import Optional

import bcrypt

import config

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72

_dummy_hash: Optional[bytes] = None


def _to_bytes(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > _BCRYPT_MAX_BYTES:
        logger.debug("Password exceeds %d bytes, truncating", _BCRYPT_MAX_BYTES)
        password_bytes = password_bytes[:_BCRYPT_MAX_BYTES]
    return password_bytes


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password.

    Returns:
        Hashed password (bcrypt hash string).
    """
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_to_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        plain_password: Plain text password to verify.
        hashed_password: Bcrypt hash string to verify against.

    Returns:
        True if password matches, False otherwise (including malformed hashes).
    """
    try:
        return bcrypt.checkpw(_to_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.error("Stored password hash is malformed")
        return False


def burn_password_check(plain_password: str) -> None:
    """Spend the time of a real verification against a throwaway hash.

    Used when the account does not exist, so that an unknown username takes as
    long to reject as a wrong password.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.hashpw(b"unused", bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS))
    bcrypt.checkpw(_to_bytes(plain_password), _dummy_hash)
