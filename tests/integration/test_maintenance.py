"""
Integration tests for startup bootstrap and the periodic orphan sweep
"""
import uuid
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from teachhub.database import AsyncSessionLocal
from teachhub.errors import ConflictError
from teachhub.models import Batch, Enrollment, Lesson, Note, Section, User
from teachhub.services import scheduler
from teachhub.services.bootstrap import ensure_teacher_admin, verify_password
from teachhub.services.cascade import sweep_orphans

pytestmark = pytest.mark.integration


class TestTeacherBootstrap:
    async def test_creates_admin_once(self, db_session):
        admin = await ensure_teacher_admin(
            db_session, name="Ms. Frizzle", email="frizzle@example.com", password="bus", access_token="tok",
        )
        assert admin.role == "admin"
        assert verify_password("bus", admin.password_hash)

        again = await ensure_teacher_admin(
            db_session, name="Someone Else", email="else@example.com", password="other",
        )
        assert again.id == admin.id

        admins = await db_session.scalar(select(func.count()).select_from(User).where(User.role == "admin"))
        assert admins == 1

    async def test_missing_credentials_skip_seeding(self, db_session):
        with patch("teachhub.services.bootstrap.config") as config:
            config.TEACHER_NAME = "Teacher"
            config.TEACHER_EMAIL = None
            config.TEACHER_PASSWORD = None
            config.TEACHER_ACCESS_TOKEN = None

            assert await ensure_teacher_admin(db_session) is None

        count = await db_session.scalar(select(func.count()).select_from(User))
        assert count == 0

    async def test_existing_admin_is_kept(self, db_session, admin_user):
        result = await ensure_teacher_admin(db_session, email="new@example.com", password="pw")
        assert result.id == admin_user.id

    async def test_email_taken_by_student_is_a_conflict(self, db_session, student_user):
        with pytest.raises(ConflictError) as exc_info:
            await ensure_teacher_admin(db_session, email=student_user.email, password="pw")

        assert exc_info.value.details == {"email": student_user.email}
        admins = await db_session.scalar(select(func.count()).select_from(User).where(User.role == "admin"))
        assert admins == 0
        await db_session.refresh(student_user)
        assert student_user.role == "student"

    async def test_startup_survives_conflicting_admin_email(self, db_session, student_user):
        from main import app, lifespan

        with patch("teachhub.services.bootstrap.config") as config:
            config.TEACHER_NAME = "Teacher"
            config.TEACHER_EMAIL = student_user.email
            config.TEACHER_PASSWORD = "pw"
            config.TEACHER_ACCESS_TOKEN = None

            async with lifespan(app):
                pass

        admins = await db_session.scalar(select(func.count()).select_from(User).where(User.role == "admin"))
        assert admins == 0


@pytest.fixture
async def orphans(db_session, admin_user):
    """
    A healthy batch tree plus rows whose parents are gone:
    a section of a missing batch (with a lesson and note below it),
    a lesson of a missing section, a note of a missing lesson and an
    enrollment of a missing batch.
    """
    batch = Batch(title="Kept", description="Still here", instructor_id=admin_user.id)
    db_session.add(batch)
    await db_session.flush()

    kept_section = Section(title="Kept", order=0, batch_id=batch.id)
    db_session.add(kept_section)
    await db_session.flush()
    kept_lesson = Lesson(
        title="Kept", section_id=kept_section.id, order=0,
        video_url="https://cdn/k.mp4", video_storage_key="videos/kept.mp4",
    )
    db_session.add(kept_lesson)
    await db_session.flush()
    db_session.add(Note(title="Kept", file_url="https://cdn/k.pdf", storage_key="notes/kept.pdf", lesson_id=kept_lesson.id))

    lost_section = Section(title="Lost", order=0, batch_id=uuid.uuid4())
    db_session.add(lost_section)
    await db_session.flush()
    lost_lesson = Lesson(
        title="Lost", section_id=lost_section.id, order=0,
        video_url="https://cdn/l.mp4", video_storage_key="videos/lost.mp4",
    )
    db_session.add(lost_lesson)
    await db_session.flush()
    db_session.add_all([
        Note(title="Lost", file_url="https://cdn/l.pdf", storage_key="notes/lost.pdf", lesson_id=lost_lesson.id),
        Lesson(title="Stray", section_id=uuid.uuid4(), order=0),
        Note(title="Stray", file_url="https://cdn/s.pdf", storage_key="notes/stray.pdf", lesson_id=uuid.uuid4()),
        Enrollment(user_id=uuid.uuid4(), batch_id=uuid.uuid4(), status="approved"),
        Enrollment(user_id=uuid.uuid4(), batch_id=batch.id, status="approved"),
    ])
    await db_session.commit()
    return batch


async def _count(model) -> int:
    async with AsyncSessionLocal() as session:
        return await session.scalar(select(func.count()).select_from(model))


class TestOrphanSweep:
    async def test_sweep_removes_orphaned_subtrees(self, db_session, orphans):
        report = await sweep_orphans(db_session)

        assert report.as_dict() == {"batches": 0, "sections": 1, "lessons": 2, "notes": 2, "enrollments": 1}
        assert sorted(report.storage_keys) == ["notes/lost.pdf", "notes/stray.pdf", "videos/lost.mp4"]

        assert await _count(Batch) == 1
        assert await _count(Section) == 1
        assert await _count(Lesson) == 1
        assert await _count(Note) == 1
        assert await _count(Enrollment) == 1

    async def test_sweep_is_idempotent(self, db_session, orphans):
        await sweep_orphans(db_session)
        report = await sweep_orphans(db_session)

        assert sum(report.as_dict().values()) == 0
        assert report.storage_keys == []

    async def test_scheduled_job_purges_files(self, orphans, storage):
        await scheduler.sweep_orphaned_content()

        assert sorted(storage.deleted) == ["notes/lost.pdf", "notes/stray.pdf", "videos/lost.mp4"]
        assert await _count(Section) == 1

    async def test_scheduled_job_never_raises(self, database):
        with patch.object(scheduler, "sweep_orphans", side_effect=RuntimeError("db down")):
            await scheduler.sweep_orphaned_content()

    def test_scheduler_registers_sweep_job(self):
        scheduler.configure_scheduler()
        job = scheduler.scheduler.get_job("orphan_sweep")

        assert job is not None
        assert job.name == "Sweep Orphaned Content"
