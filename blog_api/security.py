"""
Password hashing and access-token helpers.

Passwords are hashed with bcrypt through passlib's ``CryptContext``.
Access tokens are HS256 JWTs signed with ``settings.SECRET_KEY``::

    {"sub": "<user id>", "ver": <token_version>, "iat": ..., "exp": ...}

``ver`` ties a token to the user's current ``token_version``; signing out
bumps the version, which invalidates every token issued before it.
"""
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from blog_api.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: int,
    token_version: int,
    expires_delta: timedelta | None = None,
) -> str:
    """Return a signed token for *user_id* at *token_version*."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "ver": token_version,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify *token* and return its payload.

    Raises ValueError when the token is expired, tampered with, or
    missing the claims this service issues.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except jwt.InvalidTokenError as exc:
        raise ValueError(f"Invalid token: {exc}")

    if "ver" not in payload:
        raise ValueError("Invalid token: missing version claim")
    return payload
