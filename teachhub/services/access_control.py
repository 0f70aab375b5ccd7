"""
Content Access Gate

Admins read everything. Students read a batch's sections, lessons and notes
only while they hold an approved enrollment for that exact batch.
"""
import logging
import uuid
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.errors import NotEnrolledError, UnauthenticatedError
from teachhub.models.enrollment import Enrollment
from teachhub.models.user import User

logger = logging.getLogger(__name__)


async def can_read(session: AsyncSession, user: User, batch_id: uuid.UUID) -> bool:
    """
    Check whether a user may read the content of a batch.

    Args:
        session: Database session
        user: Authenticated user
        batch_id: Batch whose content is requested

    Returns:
        True for admins, otherwise True iff an approved enrollment exists
    """
    if user.is_admin:
        return True

    result = await session.execute(
        select(Enrollment.id).where(
            Enrollment.user_id == user.id,
            Enrollment.batch_id == batch_id,
            Enrollment.status == "approved",
        )
    )
    return result.first() is not None


async def ensure_can_read(session: AsyncSession, user: Optional[User], batch_id: uuid.UUID) -> None:
    """
    Raise unless the caller may read the batch content.

    Raises:
        UnauthenticatedError: No identity was presented
        NotEnrolledError: Identity present but no approved enrollment
    """
    if user is None:
        raise UnauthenticatedError("Please sign in to access this content")

    if not await can_read(session, user, batch_id):
        logger.info(f"Access denied for user {user.id} on batch {batch_id}")
        raise NotEnrolledError(
            "Please enroll in this batch to access its content",
            details={"batch_id": str(batch_id)},
        )
