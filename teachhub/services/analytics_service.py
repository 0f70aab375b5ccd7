"""
Admin Analytics

Platform totals, per-batch content/enrollment breakdowns, student activity
and recent enrollments for the teacher dashboard. Everything is aggregated on
each request.
"""
import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.errors import NotFoundError
from teachhub.models.batch import Batch
from teachhub.models.enrollment import Enrollment, ENROLLMENT_STATUSES
from teachhub.models.lesson import Lesson
from teachhub.models.note import Note
from teachhub.models.section import Section
from teachhub.models.user import User

logger = logging.getLogger(__name__)

TOP_STUDENTS_LIMIT = 10
DEFAULT_ACTIVITY_LIMIT = 15


class AnalyticsService:
    """Aggregate counts over the content hierarchy and enrollment ledger"""

    async def _count(self, session: AsyncSession, model, *criteria) -> int:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        return (await session.scalar(query)) or 0

    async def overview(self, session: AsyncSession) -> Dict[str, int]:
        """
        Platform totals.

        Returns:
            Dict with total_students, total_batches, total_sections,
            total_lessons, total_notes, total_enrollments and one
            <status>_enrollments entry per enrollment status
        """
        stats = {
            "total_students": await self._count(session, User, User.role == "student"),
            "total_batches": await self._count(session, Batch),
            "total_sections": await self._count(session, Section),
            "total_lessons": await self._count(session, Lesson),
            "total_notes": await self._count(session, Note),
            "total_enrollments": await self._count(session, Enrollment),
        }

        result = await session.execute(
            select(Enrollment.status, func.count()).group_by(Enrollment.status)
        )
        by_status = dict(result.all())
        for status in ENROLLMENT_STATUSES:
            stats[f"{status}_enrollments"] = by_status.get(status, 0)

        return stats

    async def batch_analytics(self, session: AsyncSession) -> List[Dict[str, Any]]:
        """Per-batch enrollment counts, content counts and total lesson duration."""
        batches = (await session.execute(select(Batch).order_by(Batch.created_at.desc()))).scalars().all()

        enrollment_counts = defaultdict(lambda: defaultdict(int))
        result = await session.execute(
            select(Enrollment.batch_id, Enrollment.status, func.count())
            .group_by(Enrollment.batch_id, Enrollment.status)
        )
        for batch_id, status, count in result.all():
            enrollment_counts[batch_id][status] = count

        result = await session.execute(
            select(Section.batch_id, func.count()).group_by(Section.batch_id)
        )
        section_counts = dict(result.all())

        result = await session.execute(
            select(Section.batch_id, func.count(Lesson.id), func.coalesce(func.sum(Lesson.duration), 0))
            .join(Lesson, Lesson.section_id == Section.id)
            .group_by(Section.batch_id)
        )
        lesson_stats = {batch_id: (count, duration) for batch_id, count, duration in result.all()}

        result = await session.execute(
            select(Section.batch_id, func.count(Note.id))
            .join(Lesson, Lesson.section_id == Section.id)
            .join(Note, Note.lesson_id == Lesson.id)
            .group_by(Section.batch_id)
        )
        note_counts = dict(result.all())

        analytics = []
        for batch in batches:
            statuses = enrollment_counts[batch.id]
            lesson_count, total_duration = lesson_stats.get(batch.id, (0, 0))
            analytics.append({
                "batch_id": batch.id,
                "title": batch.title,
                "thumbnail_url": batch.thumbnail_url,
                "enrollment_count": sum(statuses.values()),
                "approved_count": statuses["approved"],
                "pending_count": statuses["pending"],
                "total_sections": section_counts.get(batch.id, 0),
                "total_lessons": lesson_count,
                "total_notes": note_counts.get(batch.id, 0),
                "total_duration": int(total_duration or 0),
            })

        logger.debug(f"Computed analytics for {len(analytics)} batches")
        return analytics

    async def batch_detail(self, session: AsyncSession, batch_id: uuid.UUID) -> Dict[str, Any]:
        """
        Everything the dashboard shows for one batch.

        Returns:
            Dict with batch, content totals, enrollments (newest first, with
            user), approved/pending/rejected counts and section_breakdown

        Raises:
            NotFoundError: Batch does not exist
        """
        batch = await session.get(Batch, batch_id)
        if batch is None:
            raise NotFoundError("Batch not found")

        sections = (await session.execute(
            select(Section)
            .where(Section.batch_id == batch_id)
            .order_by(Section.order.asc(), Section.created_at.asc())
        )).scalars().all()

        lessons_by_section = defaultdict(list)
        if sections:
            result = await session.execute(
                select(Lesson).where(Lesson.section_id.in_([s.id for s in sections]))
            )
            for lesson in result.scalars().all():
                lessons_by_section[lesson.section_id].append(lesson)
        lesson_ids = [lesson.id for lessons in lessons_by_section.values() for lesson in lessons]

        total_notes = 0
        if lesson_ids:
            total_notes = await self._count(session, Note, Note.lesson_id.in_(lesson_ids))

        result = await session.execute(
            select(Enrollment, User)
            .outerjoin(User, User.id == Enrollment.user_id)
            .where(Enrollment.batch_id == batch_id)
            .order_by(Enrollment.created_at.desc())
        )
        enrollments = [{"enrollment": enrollment, "user": user} for enrollment, user in result.all()]
        status_counts = defaultdict(int)
        for row in enrollments:
            status_counts[row["enrollment"].status] += 1

        section_breakdown = []
        for section in sections:
            lessons = lessons_by_section.get(section.id, [])
            section_breakdown.append({
                "section_id": section.id,
                "title": section.title,
                "order": section.order,
                "lesson_count": len(lessons),
                "total_duration": sum(lesson.duration or 0 for lesson in lessons),
            })

        return {
            "batch": batch,
            "total_sections": len(sections),
            "total_lessons": len(lesson_ids),
            "total_notes": total_notes,
            "total_duration": sum(row["total_duration"] for row in section_breakdown),
            "enrollments": enrollments,
            "approved_count": status_counts["approved"],
            "pending_count": status_counts["pending"],
            "rejected_count": status_counts["rejected"],
            "section_breakdown": section_breakdown,
        }

    async def student_analytics(self, session: AsyncSession, top: int = TOP_STUDENTS_LIMIT) -> Dict[str, Any]:
        """
        Student totals and the most enrolled students.

        avg_enrollments averages over students holding at least one enrollment
        (any status), rounded to one decimal. top_students ranks by approved
        enrollments.
        """
        total_students = await self._count(session, User, User.role == "student")

        per_student = (await session.execute(
            select(Enrollment.user_id, func.count()).group_by(Enrollment.user_id)
        )).all()
        avg_enrollments = 0.0
        if per_student:
            avg_enrollments = round(sum(count for _, count in per_student) / len(per_student), 1)

        approved_count = func.count(Enrollment.id).label("enrollment_count")
        result = await session.execute(
            select(User, approved_count)
            .join(Enrollment, Enrollment.user_id == User.id)
            .where(Enrollment.status == "approved")
            .group_by(User.id)
            .order_by(approved_count.desc(), User.name.asc())
            .limit(top)
        )
        top_students = [
            {"user": user, "enrollment_count": count}
            for user, count in result.all()
        ]

        return {
            "total_students": total_students,
            "avg_enrollments": avg_enrollments,
            "top_students": top_students,
        }

    async def recent_activity(self, session: AsyncSession, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[Dict[str, Any]]:
        """Latest enrollments across all batches, newest first, with user and batch."""
        result = await session.execute(
            select(Enrollment, User, Batch)
            .outerjoin(User, User.id == Enrollment.user_id)
            .outerjoin(Batch, Batch.id == Enrollment.batch_id)
            .order_by(Enrollment.created_at.desc())
            .limit(limit)
        )
        return [
            {"enrollment": enrollment, "user": user, "batch": batch}
            for enrollment, user, batch in result.all()
        ]


# Global analytics service instance
_analytics_service: Optional[AnalyticsService] = None


def get_analytics_service() -> AnalyticsService:
    """Get or create global AnalyticsService instance."""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService()
    return _analytics_service
