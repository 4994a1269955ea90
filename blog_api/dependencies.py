"""
Request-scoped dependencies for resolving the authenticated user.

Handlers that mutate data declare ``current_user: CurrentUser``; the user
is passed explicitly down into the service layer rather than read from
any global.

    get_db ──► get_current_user ◄── HTTP Authorization: Bearer <jwt>
"""
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.exceptions import AuthenticationError
from blog_api.models import User
from blog_api.security import decode_access_token

# auto_error=False so a missing header goes through our 401 renderer
# instead of FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Return the ``User`` the bearer token belongs to.

    Raises AuthenticationError when the header is missing, the token does
    not verify, the user no longer exists, or the token predates the
    user's last sign-out.
    """
    if credentials is None:
        raise AuthenticationError()

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = int(payload["sub"])
    except ValueError as exc:
        raise AuthenticationError(str(exc)) from exc

    user = await db.get(User, user_id)
    if user is None or user.token_version != payload["ver"]:
        raise AuthenticationError("Invalid or revoked token")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
