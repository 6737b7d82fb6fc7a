"""Password hashing with bcrypt."""

import bcrypt

from taskflow.config import get_settings

# bcrypt only reads the first 72 bytes; newer releases raise on longer input.
BCRYPT_MAX_BYTES = 72


def _encode(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password. The salt is generated per call and embedded in the result."""
    if rounds is None:
        rounds = get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(_encode(plain_password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash (constant-time compare)."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


_dummy_hash: str | None = None


def verify_against_dummy(plain_password: str) -> bool:
    """Spend the same bcrypt work as a real check when no user matched. Always False."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("not-a-real-password")
    verify_password(plain_password, _dummy_hash)
    return False
