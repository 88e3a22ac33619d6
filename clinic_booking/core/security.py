"""Password hashing and session token helpers."""

import secrets

from passlib.context import CryptContext

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_session_token() -> str:
    """Generate an opaque, unguessable session token."""
    return secrets.token_urlsafe(32)


def dummy_verify_password() -> None:
    """Spend the time of a real hash check when there is no account to check."""
    pwd_context.dummy_verify()
