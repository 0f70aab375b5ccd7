"""
Enrollment Service

State machine for student access to a batch:

    request()             -> pending
    approve() / reject()  -> approved / rejected (admin, unconditional overwrite)
    admin_direct_enroll() -> approved (creates, or upgrades a non-approved row)
    revoke()              -> row removed

At most one enrollment exists per (user, batch); the database unique
constraint settles concurrent duplicate requests.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.errors import ConflictError, ForbiddenError, NotFoundError, ValidationFailure
from teachhub.models.batch import Batch
from teachhub.models.enrollment import Enrollment
from teachhub.models.user import User

logger = logging.getLogger(__name__)

DUPLICATE_REQUEST_MESSAGES = {
    "pending": "Your enrollment request is already pending approval",
    "rejected": "Your enrollment request was rejected. Please contact the admin",
    "approved": "Already enrolled in this batch",
}


class EnrollmentService:
    """Enrollment requests, approvals and admin-managed membership"""

    async def _get_batch(self, session: AsyncSession, batch_id: uuid.UUID) -> Batch:
        batch = await session.get(Batch, batch_id)
        if batch is None:
            raise NotFoundError("Batch not found")
        return batch

    async def _find(self, session: AsyncSession, user_id: uuid.UUID, batch_id: uuid.UUID) -> Optional[Enrollment]:
        return await session.scalar(
            select(Enrollment).where(Enrollment.user_id == user_id, Enrollment.batch_id == batch_id)
        )

    async def _insert(self, session: AsyncSession, enrollment: Enrollment) -> Enrollment:
        session.add(enrollment)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            logger.warning(
                f"Duplicate enrollment rejected by store for user {enrollment.user_id}, batch {enrollment.batch_id}"
            )
            raise ConflictError("An enrollment for this batch already exists")
        return enrollment

    async def request_enrollment(self, session: AsyncSession, user: User, batch_id: uuid.UUID) -> Enrollment:
        """
        Student asks to join a batch; the request starts as pending.

        Raises:
            ForbiddenError: Caller is an admin or the batch instructor
            NotFoundError: Batch does not exist
            ConflictError: An enrollment for the pair already exists (any status)
        """
        if user.is_admin:
            raise ForbiddenError("Admins cannot enroll in batches")

        batch = await self._get_batch(session, batch_id)
        if batch.instructor_id == user.id:
            raise ForbiddenError("Instructors cannot enroll in their own batches")

        existing = await self._find(session, user.id, batch_id)
        if existing is not None:
            raise ConflictError(
                DUPLICATE_REQUEST_MESSAGES.get(existing.status, "Already enrolled in this batch"),
                details={"status": existing.status},
            )

        enrollment = await self._insert(
            session, Enrollment(user_id=user.id, batch_id=batch_id, status="pending")
        )
        logger.info(f"Enrollment request {enrollment.id}: user {user.id} -> batch {batch_id}")
        return enrollment

    async def _set_status(self, session: AsyncSession, enrollment_id: uuid.UUID, status: str) -> Enrollment:
        enrollment = await session.get(Enrollment, enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found")

        previous = enrollment.status
        enrollment.status = status
        await session.commit()

        logger.info(f"Enrollment {enrollment_id} {previous} -> {status}")
        return enrollment

    async def approve(self, session: AsyncSession, enrollment_id: uuid.UUID) -> Enrollment:
        return await self._set_status(session, enrollment_id, "approved")

    async def reject(self, session: AsyncSession, enrollment_id: uuid.UUID) -> Enrollment:
        return await self._set_status(session, enrollment_id, "rejected")

    async def admin_direct_enroll(self, session: AsyncSession, student_id: uuid.UUID, batch_id: uuid.UUID) -> Enrollment:
        """
        Admin grants a student access without a request.

        Raises:
            NotFoundError: Student or batch does not exist
            ValidationFailure: Target user is not a student
            ConflictError: Student already approved for the batch
        """
        student = await session.get(User, student_id)
        if student is None:
            raise NotFoundError("Student not found")
        if student.role != "student":
            raise ValidationFailure("Only students can be enrolled")
        await self._get_batch(session, batch_id)

        existing = await self._find(session, student_id, batch_id)
        if existing is None:
            enrollment = await self._insert(
                session, Enrollment(user_id=student_id, batch_id=batch_id, status="approved")
            )
            logger.info(f"Admin enrolled student {student_id} in batch {batch_id}")
            return enrollment

        if existing.status == "approved":
            raise ConflictError("Student is already enrolled in this batch")

        previous = existing.status
        existing.status = "approved"
        await session.commit()
        logger.info(f"Admin upgraded enrollment {existing.id} {previous} -> approved")
        return existing

    async def revoke(self, session: AsyncSession, student_id: uuid.UUID, batch_id: uuid.UUID) -> Enrollment:
        """
        Remove a student's enrollment record entirely.

        Raises:
            NotFoundError: No enrollment for the pair
        """
        enrollment = await self._find(session, student_id, batch_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found")

        await session.delete(enrollment)
        await session.commit()

        logger.info(f"Revoked enrollment of student {student_id} from batch {batch_id}")
        return enrollment

    async def my_enrollments(self, session: AsyncSession, user: User) -> List[Dict[str, Any]]:
        """The user's enrollments with their batches, newest first."""
        result = await session.execute(
            select(Enrollment, Batch)
            .outerjoin(Batch, Batch.id == Enrollment.batch_id)
            .where(Enrollment.user_id == user.id)
            .order_by(Enrollment.created_at.desc())
        )
        return [{"enrollment": enrollment, "batch": batch} for enrollment, batch in result.all()]

    async def pending(self, session: AsyncSession) -> List[Dict[str, Any]]:
        """Pending requests, newest first, with requesting user and batch."""
        result = await session.execute(
            select(Enrollment, User, Batch)
            .outerjoin(User, User.id == Enrollment.user_id)
            .outerjoin(Batch, Batch.id == Enrollment.batch_id)
            .where(Enrollment.status == "pending")
            .order_by(Enrollment.created_at.desc())
        )
        return [
            {"enrollment": enrollment, "user": user, "batch": batch}
            for enrollment, user, batch in result.all()
        ]


# Global enrollment service instance
_enrollment_service: Optional[EnrollmentService] = None


def get_enrollment_service() -> EnrollmentService:
    """Get or create global EnrollmentService instance."""
    global _enrollment_service
    if _enrollment_service is None:
        _enrollment_service = EnrollmentService()
    return _enrollment_service
