"""
Authentication Dependencies

Bearer tokens are issued by the external auth service and stored on the user
record; here we only resolve a presented token to a user and check roles.
"""
import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.database import get_db
from teachhub.errors import ForbiddenError, InvalidTokenError, UnauthenticatedError
from teachhub.models.user import User

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Resolve the caller, or None when no bearer token was sent.

    Raises:
        InvalidTokenError: A token was sent but matches no user
    """
    if credentials is None:
        return None

    token = credentials.credentials
    user = await db.scalar(select(User).where(User.access_token == token))
    if user is None:
        logger.warning(f"Invalid token attempt: {token[:10]}...")
        raise InvalidTokenError(
            "Invalid or expired token",
            details="The provided token is not valid",
        )
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Require an authenticated caller."""
    if user is None:
        raise UnauthenticatedError(
            "Authorization header missing",
            details="Please provide a valid bearer token",
        )
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Require the admin (teacher) role."""
    if not user.is_admin:
        raise ForbiddenError("Access denied")
    return user
