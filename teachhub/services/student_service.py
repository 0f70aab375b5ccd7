"""Student administration queries for the admin dashboard"""
import logging
import uuid
from typing import Any, Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.errors import NotFoundError
from teachhub.models.batch import Batch
from teachhub.models.enrollment import Enrollment
from teachhub.models.user import User

logger = logging.getLogger(__name__)


class StudentService:
    """Read-only student listings"""

    async def list_students(self, session: AsyncSession) -> List[User]:
        result = await session.execute(
            select(User).where(User.role == "student").order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_student(self, session: AsyncSession, student_id: uuid.UUID) -> Dict[str, Any]:
        """
        A student with all enrollments and their batches.

        Raises:
            NotFoundError: Unknown id or the user is not a student
        """
        student = await session.get(User, student_id)
        if student is None or student.role != "student":
            raise NotFoundError("Student not found")

        result = await session.execute(
            select(Enrollment, Batch)
            .outerjoin(Batch, Batch.id == Enrollment.batch_id)
            .where(Enrollment.user_id == student_id)
            .order_by(Enrollment.created_at.desc())
        )
        enrollments = [{"enrollment": enrollment, "batch": batch} for enrollment, batch in result.all()]
        return {"student": student, "enrollments": enrollments}

    async def students_by_batch(self, session: AsyncSession, batch_id: uuid.UUID) -> List[Dict[str, Any]]:
        """Roster of a batch: every enrollment (any status) with its user."""
        if await session.get(Batch, batch_id) is None:
            raise NotFoundError("Batch not found")

        result = await session.execute(
            select(Enrollment, User)
            .join(User, User.id == Enrollment.user_id)
            .where(Enrollment.batch_id == batch_id)
            .order_by(Enrollment.created_at.desc())
        )
        return [{"enrollment": enrollment, "user": user} for enrollment, user in result.all()]


# Global student service instance
_student_service: Optional[StudentService] = None


def get_student_service() -> StudentService:
    """Get or create global StudentService instance."""
    global _student_service
    if _student_service is None:
        _student_service = StudentService()
    return _student_service
