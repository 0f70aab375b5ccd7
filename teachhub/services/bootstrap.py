"""
Teacher Admin Bootstrap

Startup routine that makes sure the platform has its admin account. Runs on
every boot and only creates the admin when no admin-role user exists yet.
"""
import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from teachhub import config
from teachhub.errors import ConflictError
from teachhub.models.user import User

logger = logging.getLogger(__name__)

PASSWORD_HASH_METHOD = "pbkdf2:sha256"


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=PASSWORD_HASH_METHOD)


def verify_password(password: str, encoded: Optional[str]) -> bool:
    """False for a wrong password and for missing or unreadable hashes."""
    if not encoded:
        return False
    try:
        return check_password_hash(encoded, password)
    except ValueError:
        # unknown hash method
        return False


async def ensure_teacher_admin(
    session: AsyncSession,
    name: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
    access_token: Optional[str] = None,
) -> Optional[User]:
    """
    Create the admin from configuration if no admin exists.

    Arguments default to the TEACHER_* settings.

    Returns:
        The existing or newly created admin, or None when credentials are missing

    Raises:
        ConflictError: The admin email already belongs to a non-admin user
    """
    existing = await session.scalar(select(User).where(User.role == "admin").limit(1))
    if existing is not None:
        logger.debug(f"Admin already present: {existing.email}")
        return existing

    name = name or config.TEACHER_NAME
    email = email or config.TEACHER_EMAIL
    password = password or config.TEACHER_PASSWORD
    access_token = access_token or config.TEACHER_ACCESS_TOKEN

    if not email or not password:
        logger.warning("TEACHER_EMAIL or TEACHER_PASSWORD not set; skipping admin seeding")
        return None

    taken = await session.scalar(select(User).where(User.email == email))
    if taken is not None:
        raise ConflictError(
            f"Cannot create admin: {email} is already registered as a {taken.role}",
            details={"email": email},
        )

    admin = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role="admin",
        access_token=access_token,
    )
    session.add(admin)
    await session.commit()

    logger.info(f"Admin teacher user created: {email}")
    return admin
