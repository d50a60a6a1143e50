"""
Security Utilities

Password hashing (bcrypt) and one-time token helpers used by the
password reset flow.
"""

import hashlib
import re
import secrets

import bcrypt

# bcrypt only looks at the first 72 bytes of the password
_BCRYPT_MAX_BYTES = 72

RESET_TOKEN_BYTES = 32

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Verify a password against its bcrypt hash.

    Returns False for a missing or malformed hash instead of raising.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(
            plain.encode("utf-8")[:_BCRYPT_MAX_BYTES],
            hashed.encode("utf-8"),
        )
    except ValueError:
        return False


def generate_reset_token() -> str:
    """Generate a URL-safe random token (256 bits of entropy)."""
    return secrets.token_hex(RESET_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """
    Hash a token for storage using SHA-256.

    Only the hash is persisted so a leaked database row cannot be used
    to reset a password.
    """
    return hashlib.sha256(token.encode()).hexdigest()


def validate_password_strength(password: str) -> str | None:
    """
    Check password complexity.

    Returns:
        None if the password is acceptable, otherwise a human-readable reason.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if not re.search(r"[A-Za-z]", password):
        return "Password must contain at least one letter"
    if not re.search(r"\d", password):
        return "Password must contain at least one number"
    return None
