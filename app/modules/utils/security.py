"""Password hashing helpers."""

from __future__ import annotations

from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

# Verified when a login names an unknown user so both failure paths do the same work.
_DUMMY_HASH = pwd_context.hash("minisocial-dummy-password")


def hash(password: str) -> str:
    """Hash the password using bcrypt."""
    return pwd_context.hash(password)


def verify(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hashed version."""
    return pwd_context.verify(plain_password, hashed_password)


def verify_dummy(plain_password: str) -> bool:
    """Burn one verification against a throwaway hash; always False."""
    pwd_context.verify(plain_password, _DUMMY_HASH)
    return False


__all__ = ["hash", "verify", "verify_dummy", "pwd_context"]
