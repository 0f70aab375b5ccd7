"""
Integration tests for notification fan-out and the inbox
"""
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from sqlalchemy import select

from teachhub.database import AsyncSessionLocal
from teachhub.errors import NotFoundError, ValidationFailure
from teachhub.models import Enrollment, Lesson, Notification
from teachhub.services.batch_service import BatchService
from teachhub.services.lesson_service import LessonService
from teachhub.services.note_service import NoteService
from teachhub.services.notification_service import NotificationService
from teachhub.services.section_service import SectionService

pytestmark = pytest.mark.integration


@pytest.fixture
async def classroom(db_session, admin_user, student_user, other_student):
    """One batch/section; student_user approved, other_student pending"""
    batch = await BatchService().create_batch(db_session, admin_user, "Physics 101", "Kinematics")
    section = await SectionService().create_section(db_session, batch.id, "Motion")
    db_session.add_all([
        Enrollment(user_id=student_user.id, batch_id=batch.id, status="approved"),
        Enrollment(user_id=other_student.id, batch_id=batch.id, status="pending"),
    ])
    await db_session.commit()
    return {"batch": batch, "section": section}


async def _notifications_for(session, user):
    result = await session.execute(select(Notification).where(Notification.user_id == user.id))
    return list(result.scalars().all())


class TestFanOut:
    async def test_only_approved_students_are_notified(self, db_session, classroom, student_user, other_student, admin_user):
        result = await NotificationService().notify(
            classroom["section"].id, "lesson_uploaded", 'New lesson "Vectors" has been uploaded',
        )

        assert result.status == "delivered"
        assert result.delivered == 1
        assert result.batch_id == classroom["batch"].id

        received = await _notifications_for(db_session, student_user)
        assert len(received) == 1
        assert received[0].read is False
        assert received[0].batch_id == classroom["batch"].id
        assert await _notifications_for(db_session, other_student) == []
        assert await _notifications_for(db_session, admin_user) == []

    async def test_one_notification_per_approved_enrollee(self, db_session, classroom, other_student):
        db_session.add(Enrollment(user_id=uuid.uuid4(), batch_id=classroom["batch"].id, status="approved"))
        pending = await db_session.scalar(
            select(Enrollment).where(Enrollment.user_id == other_student.id)
        )
        pending.status = "approved"
        await db_session.commit()

        result = await NotificationService().notify(classroom["section"].id, "note_added", "msg")

        assert result.delivered == 3

    async def test_no_recipients_is_skipped(self, db_session, admin_user):
        batch = await BatchService().create_batch(db_session, admin_user, "Empty", "Nobody here")
        section = await SectionService().create_section(db_session, batch.id, "Lonely")

        result = await NotificationService().notify(section.id, "lesson_uploaded", "msg")

        assert result.status == "skipped"
        assert result.reason == "no approved enrollees"

    async def test_lesson_creation_notifies(self, db_session, classroom, student_user):
        lesson = await LessonService().create_recorded_lesson(
            db_session, classroom["section"].id, "Vectors", "https://cdn/v.mp4", "videos/v.mp4",
        )

        received = await _notifications_for(db_session, student_user)
        assert [(n.type, n.message, n.lesson_id) for n in received] == [
            ("lesson_uploaded", 'New lesson "Vectors" has been uploaded', lesson.id)
        ]

    async def test_note_creation_notifies(self, db_session, classroom, student_user):
        lesson = await LessonService().create_recorded_lesson(
            db_session, classroom["section"].id, "Vectors", "https://cdn/v.mp4", "videos/v.mp4",
        )
        await NoteService().create_note(db_session, lesson.id, "Formula sheet", "https://cdn/f.pdf", "notes/f.pdf")

        messages = {n.message for n in await _notifications_for(db_session, student_user)}
        assert 'New note "Formula sheet" added to "Vectors"' in messages

    async def test_live_lifecycle_notifications(self, db_session, classroom, student_user):
        service = LessonService()
        start_at = datetime.now(timezone.utc) + timedelta(hours=2)
        lesson = await service.create_live_lesson(
            db_session, classroom["section"].id, "Projectiles", "youtube", "https://youtu.be/live", start_at,
        )

        await service.set_live_status(db_session, lesson.id, "live")
        # Repeating the same status does not notify again
        await service.set_live_status(db_session, lesson.id, "live")
        await service.set_live_status(db_session, lesson.id, "ended")
        await service.attach_recording(db_session, lesson.id, "https://cdn/rec.mp4", "videos/rec.mp4")

        types = sorted(n.type for n in await _notifications_for(db_session, student_user))
        assert types == ["live_scheduled", "live_started", "recording_uploaded"]

    async def test_live_status_rejected_for_recorded_lesson(self, db_session, classroom):
        lesson = await LessonService().create_recorded_lesson(
            db_session, classroom["section"].id, "Vectors", "https://cdn/v.mp4", "videos/v.mp4",
        )
        with pytest.raises(ValidationFailure):
            await LessonService().set_live_status(db_session, lesson.id, "live")


class TestInbox:
    async def test_list_mark_read_and_count(self, db_session, classroom, student_user):
        service = NotificationService()
        await service.notify(classroom["section"].id, "lesson_uploaded", "first")
        await service.notify(classroom["section"].id, "note_added", "second")

        rows = await service.list_for_user(db_session, student_user)
        assert len(rows) == 2
        assert all(row["batch_title"] == "Physics 101" for row in rows)
        assert await service.unread_count(db_session, student_user) == 2

        target = rows[0]["notification"]
        marked = await service.mark_read(db_session, target.id, student_user)
        assert marked.read is True
        assert await service.unread_count(db_session, student_user) == 1

        unread = await service.list_for_user(db_session, student_user, unread_only=True)
        assert len(unread) == 1
        assert unread[0]["notification"].id != target.id

        assert await service.mark_all_read(db_session, student_user) == 1
        assert await service.unread_count(db_session, student_user) == 0

    async def test_limit(self, db_session, classroom, student_user):
        service = NotificationService()
        for i in range(3):
            await service.notify(classroom["section"].id, "note_added", f"note {i}")

        assert len(await service.list_for_user(db_session, student_user, limit=2)) == 2
        with pytest.raises(ValidationFailure):
            await service.list_for_user(db_session, student_user, limit=0)

    async def test_cannot_mark_someone_elses_notification(self, db_session, classroom, student_user, other_student):
        service = NotificationService()
        await service.notify(classroom["section"].id, "lesson_uploaded", "hello")
        notification = (await _notifications_for(db_session, student_user))[0]

        with pytest.raises(NotFoundError):
            await service.mark_read(db_session, notification.id, other_student)

    async def test_notifications_survive_batch_delete(self, db_session, classroom, student_user):
        service = NotificationService()
        await service.notify(classroom["section"].id, "lesson_uploaded", "hello")

        await BatchService().delete_batch(db_session, classroom["batch"].id)

        rows = await service.list_for_user(db_session, student_user)
        assert len(rows) == 1
        assert rows[0]["batch_title"] is None


class TestLiveBatches:
    async def test_live_batch_ids_respect_enrollment(self, db_session, classroom, admin_user, student_user, other_student):
        service = LessonService()
        lesson = await service.create_live_lesson(
            db_session, classroom["section"].id, "Projectiles", "zoom", "https://zoom.us/j/9",
            datetime.now(timezone.utc),
        )
        assert await service.live_batch_ids(db_session, student_user) == []

        await service.set_live_status(db_session, lesson.id, "live")

        assert await service.live_batch_ids(db_session, admin_user) == [classroom["batch"].id]
        assert await service.live_batch_ids(db_session, student_user) == [classroom["batch"].id]
        assert await service.live_batch_ids(db_session, other_student) == []


class TestFanOutIsolation:
    async def test_failed_fan_out_keeps_the_lesson(self, db_session, classroom, student_user):
        broken = NotificationService(session_factory=Mock(side_effect=RuntimeError("insert failed")))
        service = LessonService(notifications=broken)

        lesson = await service.create_recorded_lesson(
            db_session, classroom["section"].id, "Vectors", "https://cdn/v.mp4", "videos/v.mp4",
        )

        async with AsyncSessionLocal() as session:
            stored = await session.get(Lesson, lesson.id)
        assert stored is not None
        assert await _notifications_for(db_session, student_user) == []
