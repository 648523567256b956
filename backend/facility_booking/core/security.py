"""
Password hashing and session token helpers.
"""

import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def new_session_id() -> str:
    """Opaque, unguessable session identifier stored in the session cookie."""
    return secrets.token_urlsafe(32)
