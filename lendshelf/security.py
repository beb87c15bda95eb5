"""
Password hashing and access tokens for LendShelf.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from lendshelf.errors import UnauthenticatedError

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: UUID,
    settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed JWT for a user.

    Args:
        subject: User id, stored as the ``sub`` claim
        settings: Provides jwt_secret_key, jwt_algorithm and
            access_token_expire_minutes
        expires_delta: Overrides the configured lifetime
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": str(subject), "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings) -> UUID:
    """
    Validate a JWT and return the user id it was issued for.

    Raises:
        UnauthenticatedError: Bad signature, expired, or malformed subject
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        subject = payload.get("sub")
        if subject is None:
            raise UnauthenticatedError()
        return UUID(subject)
    except (JWTError, ValueError):
        raise UnauthenticatedError()
