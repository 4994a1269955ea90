"""
Auth service — registration, sign-in and token lifecycle for User.

Tokens are stateless JWTs; revocation works by bumping
``User.token_version``, which every token embeds as its ``ver`` claim.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.exceptions import AuthenticationError, ConflictError
from blog_api.models import User
from blog_api.schemas import SignInRequest, SignUpRequest
from blog_api.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def _token_payload(user: User) -> dict:
    return {
        "access_token": create_access_token(user.id, user.token_version),
        "token_type": "bearer",
        "user": {"id": user.id, "name": user.name, "email": user.email},
    }


async def sign_up(db: AsyncSession, data: SignUpRequest) -> dict:
    """
    Register a user and return a token for them.

    Email uniqueness is enforced by the database; a duplicate surfaces as
    ConflictError.
    """
    user = User(
        name=data.name,
        email=data.email.lower(),
        password_hash=hash_password(data.password),
        token_version=0,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ConflictError("A user with this email already exists") from exc

    logger.info("User %d registered", user.id)
    return _token_payload(user)


async def sign_in(db: AsyncSession, data: SignInRequest) -> dict:
    result = await db.execute(select(User).where(User.email == data.email.lower()))
    user = result.scalar_one_or_none()
    # Same error for unknown email and wrong password.
    if user is None or not verify_password(data.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    logger.info("User %d signed in", user.id)
    return _token_payload(user)


async def sign_out(db: AsyncSession, user: User) -> None:
    """Revoke every outstanding token for *user*."""
    user.token_version += 1
    await db.flush()
    logger.info("User %d signed out", user.id)


def refresh_token(user: User) -> dict:
    """Issue a fresh token for an already-authenticated *user*."""
    return _token_payload(user)
