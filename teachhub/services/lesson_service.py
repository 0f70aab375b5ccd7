"""
Lesson Service

Two creation paths:
- recorded lessons carry a video reference from the upload collaborator
- live lessons carry platform, join URL and start time, and move through
  scheduled -> live -> ended; a recording can be attached later

Content events fan out notifications to the batch's approved students after
the lesson change has been committed.
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.errors import NotFoundError, ValidationFailure
from teachhub.models.enrollment import Enrollment
from teachhub.models.lesson import Lesson, LIVE_PLATFORMS, LIVE_STATUSES
from teachhub.models.section import Section
from teachhub.models.user import User
from teachhub.services.access_control import ensure_can_read
from teachhub.services.cascade import DeletionReport, delete_lesson_tree
from teachhub.services.notification_service import (
    NotificationService,
    get_notification_service,
    lesson_uploaded_message,
    live_scheduled_message,
    live_started_message,
    recording_uploaded_message,
)
from teachhub.services.storage import purge_files
from teachhub.services.updates import (
    apply_numeric_updates,
    apply_text_updates,
    has_text,
    is_numeric,
    validate_order,
)

logger = logging.getLogger(__name__)


def _validate_duration(duration: Optional[int]) -> int:
    if duration is None:
        return 0
    if not is_numeric(duration) or duration < 0:
        raise ValidationFailure("Duration must be a non-negative number of seconds")
    return int(duration)


def _validate_platform(platform: Optional[str]) -> str:
    if platform not in LIVE_PLATFORMS:
        raise ValidationFailure(f"Live platform must be one of: {', '.join(LIVE_PLATFORMS)}")
    return platform


class LessonService:
    """Lesson CRUD, live-class lifecycle and recording upload"""

    def __init__(self, notifications: Optional[NotificationService] = None):
        self.notifications = notifications or get_notification_service()

    async def _get_section(self, session: AsyncSession, section_id: uuid.UUID) -> Section:
        section = await session.get(Section, section_id)
        if section is None:
            raise NotFoundError("Section not found")
        return section

    async def _next_order(self, session: AsyncSession, section_id: uuid.UUID) -> int:
        count = await session.scalar(
            select(func.count()).select_from(Lesson).where(Lesson.section_id == section_id)
        )
        return count or 0

    async def create_recorded_lesson(
        self,
        session: AsyncSession,
        section_id: uuid.UUID,
        title: str,
        video_url: Optional[str],
        video_storage_key: Optional[str],
        description: Optional[str] = None,
        duration: Optional[int] = None,
        order: Optional[int] = None,
    ) -> Lesson:
        """
        Create a lesson backed by an uploaded video.

        Raises:
            NotFoundError: Section does not exist
            ValidationFailure: Title or video reference missing, bad duration
        """
        await self._get_section(session, section_id)
        if not title or not title.strip():
            raise ValidationFailure("Lesson title is required")
        if not video_url or not video_storage_key:
            raise ValidationFailure("A video is required for a recorded lesson")
        duration = _validate_duration(duration)

        order = validate_order(order)
        if order is None:
            order = await self._next_order(session, section_id)

        lesson = Lesson(
            title=title,
            description=description,
            section_id=section_id,
            order=order,
            duration=duration,
            video_url=video_url,
            video_storage_key=video_storage_key,
            is_live_enabled=False,
        )
        session.add(lesson)
        await session.commit()
        logger.info(f"Created recorded lesson {lesson.id} in section {section_id}")

        await self.notifications.notify(
            section_id=section_id,
            type="lesson_uploaded",
            message=lesson_uploaded_message(lesson.title),
            lesson_id=lesson.id,
        )
        return lesson

    async def create_live_lesson(
        self,
        session: AsyncSession,
        section_id: uuid.UUID,
        title: str,
        platform: Optional[str],
        join_url: Optional[str],
        start_at: Optional[datetime],
        description: Optional[str] = None,
        duration: Optional[int] = None,
        order: Optional[int] = None,
    ) -> Lesson:
        """
        Schedule a live class. The lesson has no video until a recording is attached.

        Raises:
            NotFoundError: Section does not exist
            ValidationFailure: Join URL/start time missing or unknown platform
        """
        await self._get_section(session, section_id)
        if not title or not title.strip():
            raise ValidationFailure("Lesson title is required")
        if not join_url or not join_url.strip():
            raise ValidationFailure("A join URL is required for a live class")
        if start_at is None:
            raise ValidationFailure("A start time is required for a live class")
        platform = _validate_platform(platform)
        duration = _validate_duration(duration)

        order = validate_order(order)
        if order is None:
            order = await self._next_order(session, section_id)

        lesson = Lesson(
            title=title,
            description=description,
            section_id=section_id,
            order=order,
            duration=duration,
            is_live_enabled=True,
            live_platform=platform,
            live_join_url=join_url,
            live_start_at=start_at,
            live_status="scheduled",
        )
        session.add(lesson)
        await session.commit()
        logger.info(f"Scheduled live lesson {lesson.id} in section {section_id} on {platform}")

        await self.notifications.notify(
            section_id=section_id,
            type="live_scheduled",
            message=live_scheduled_message(lesson.title, platform, start_at),
            lesson_id=lesson.id,
        )
        return lesson

    async def get_lesson(
        self,
        session: AsyncSession,
        lesson_id: uuid.UUID,
        user: Optional[User] = None,
        check_access: bool = True,
    ) -> Lesson:
        """
        Fetch a lesson, enforcing the access gate of its batch unless check_access is False.

        Raises:
            NotFoundError: Lesson (or its section) does not exist
        """
        lesson = await session.get(Lesson, lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")

        if check_access:
            section = await self._get_section(session, lesson.section_id)
            await ensure_can_read(session, user, section.batch_id)
        return lesson

    async def list_lessons(self, session: AsyncSession, section_id: uuid.UUID, user: Optional[User]) -> List[Lesson]:
        """Lessons of a section ordered by `order`, behind the access gate."""
        section = await self._get_section(session, section_id)
        await ensure_can_read(session, user, section.batch_id)

        result = await session.execute(
            select(Lesson)
            .where(Lesson.section_id == section_id)
            .order_by(Lesson.order.asc(), Lesson.created_at.asc())
        )
        return list(result.scalars().all())

    async def update_lesson(self, session: AsyncSession, lesson_id: uuid.UUID, updates: Dict[str, Any]) -> Lesson:
        """
        Partial update.

        Non-empty strings win (title, description, live_join_url, live_platform);
        blank strings and nulls are ignored. Numbers are applied whenever given
        (order, duration). Live-only fields are rejected on recorded lessons.
        """
        lesson = await self.get_lesson(session, lesson_id, check_access=False)

        if is_numeric(updates.get("duration")):
            _validate_duration(updates["duration"])
        validate_order(updates.get("order"))

        live_fields = [
            name for name in ("live_join_url", "live_platform") if has_text(updates.get(name))
        ]
        if isinstance(updates.get("live_start_at"), datetime):
            live_fields.append("live_start_at")
        if live_fields and not lesson.is_live_enabled:
            raise ValidationFailure(f"Cannot set {', '.join(live_fields)} on a recorded lesson")
        platform = None
        if has_text(updates.get("live_platform")):
            platform = _validate_platform(updates["live_platform"].strip())

        changed = apply_text_updates(lesson, updates, ("title", "description", "live_join_url"))
        changed += apply_numeric_updates(lesson, updates, ("order", "duration"))

        if platform is not None:
            lesson.live_platform = platform
            changed.append("live_platform")
        if isinstance(updates.get("live_start_at"), datetime):
            lesson.live_start_at = updates["live_start_at"]
            changed.append("live_start_at")

        if changed:
            await session.commit()
            logger.info(f"Updated lesson {lesson_id}: {', '.join(changed)}")

        return lesson

    async def set_live_status(self, session: AsyncSession, lesson_id: uuid.UUID, status: str) -> Lesson:
        """
        Move a live lesson between scheduled, live and ended.

        Entering `live` notifies approved students.

        Raises:
            NotFoundError: Lesson does not exist
            ValidationFailure: Not a live lesson or unknown status
        """
        lesson = await self.get_lesson(session, lesson_id, check_access=False)
        if not lesson.is_live_enabled:
            raise ValidationFailure("Lesson is not a live class")
        if status not in LIVE_STATUSES:
            raise ValidationFailure(f"Live status must be one of: {', '.join(LIVE_STATUSES)}")

        previous = lesson.live_status
        lesson.live_status = status
        await session.commit()
        logger.info(f"Lesson {lesson_id} live status {previous} -> {status}")

        if status == "live" and previous != "live":
            await self.notifications.notify(
                section_id=lesson.section_id,
                type="live_started",
                message=live_started_message(lesson.title, lesson.live_platform),
                lesson_id=lesson.id,
            )
        return lesson

    async def attach_recording(
        self,
        session: AsyncSession,
        lesson_id: uuid.UUID,
        video_url: Optional[str],
        video_storage_key: Optional[str],
        duration: Optional[int] = None,
    ) -> Lesson:
        """
        Attach the recording of a live class; the lesson then displays as recorded.

        Raises:
            NotFoundError: Lesson does not exist
            ValidationFailure: Not a live lesson or video missing
        """
        lesson = await self.get_lesson(session, lesson_id, check_access=False)
        if not lesson.is_live_enabled:
            raise ValidationFailure("Recordings can only be attached to live classes")
        if not video_url or not video_storage_key:
            raise ValidationFailure("A video is required for the recording")

        replaced_key = lesson.video_storage_key
        lesson.video_url = video_url
        lesson.video_storage_key = video_storage_key
        if duration is not None:
            lesson.duration = _validate_duration(duration)
        await session.commit()
        logger.info(f"Attached recording to lesson {lesson_id}")

        if replaced_key and replaced_key != video_storage_key:
            await purge_files([replaced_key])

        await self.notifications.notify(
            section_id=lesson.section_id,
            type="recording_uploaded",
            message=recording_uploaded_message(lesson.title),
            lesson_id=lesson.id,
        )
        return lesson

    async def delete_lesson(self, session: AsyncSession, lesson_id: uuid.UUID) -> DeletionReport:
        """
        Delete a lesson and its notes in one transaction.

        Raises:
            NotFoundError: Lesson does not exist
        """
        lesson = await self.get_lesson(session, lesson_id, check_access=False)

        try:
            report = await delete_lesson_tree(session, lesson)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.error(f"Cascade delete of lesson {lesson_id} rolled back", exc_info=True)
            raise

        logger.info(f"Deleted lesson {lesson_id}: {report.as_dict()}")
        await purge_files(report.storage_keys)
        return report

    async def live_batch_ids(self, session: AsyncSession, user: User) -> List[uuid.UUID]:
        """
        Batches with at least one lesson currently live.

        Admins see every batch; students only batches they are approved in.
        """
        query = (
            select(Section.batch_id)
            .join(Lesson, Lesson.section_id == Section.id)
            .where(Lesson.is_live_enabled.is_(True), Lesson.live_status == "live")
            .distinct()
        )
        if not user.is_admin:
            approved = select(Enrollment.batch_id).where(
                Enrollment.user_id == user.id,
                Enrollment.status == "approved",
            )
            query = query.where(Section.batch_id.in_(approved))

        result = await session.execute(query)
        return list(result.scalars().all())


# Global lesson service instance
_lesson_service: Optional[LessonService] = None


def get_lesson_service() -> LessonService:
    """Get or create global LessonService instance."""
    global _lesson_service
    if _lesson_service is None:
        _lesson_service = LessonService()
    return _lesson_service
