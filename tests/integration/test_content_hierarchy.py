"""
Integration tests for the content hierarchy

Batch -> Section -> Lesson -> Note CRUD, order assignment, section
enrichment and transactional cascade delete against a real database.
"""
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from teachhub.database import AsyncSessionLocal
from teachhub.errors import ForbiddenError, NotFoundError, ValidationFailure
from teachhub.models import Batch, Enrollment, Lesson, Note, Section
from teachhub.services import batch_service as batch_service_module
from teachhub.services.batch_service import BatchService
from teachhub.services.cascade import delete_batch_tree
from teachhub.services.lesson_service import LessonService
from teachhub.services.note_service import NoteService
from teachhub.services.section_service import SectionService

pytestmark = pytest.mark.integration


async def _count(model) -> int:
    async with AsyncSessionLocal() as session:
        return await session.scalar(select(func.count()).select_from(model))


@pytest.fixture
async def course(db_session, admin_user, student_user):
    """
    Batch with two sections; section 1 holds a recorded and a live lesson,
    the recorded lesson has two notes. The student is approved.
    """
    batches, sections, lessons, notes = BatchService(), SectionService(), LessonService(), NoteService()

    batch = await batches.create_batch(
        db_session, admin_user, "Algebra 101", "Linear equations and more",
        thumbnail_url="https://cdn/thumb.png", thumbnail_storage_key="thumbs/algebra.png",
    )
    module_1 = await sections.create_section(db_session, batch.id, "Module 1")
    module_2 = await sections.create_section(db_session, batch.id, "Module 2")

    recorded = await lessons.create_recorded_lesson(
        db_session, module_1.id, "Intro", "https://cdn/intro.mp4", "videos/intro.mp4", duration=600,
    )
    live = await lessons.create_live_lesson(
        db_session, module_1.id, "Office hours", "zoom", "https://zoom.us/j/1",
        datetime.now(timezone.utc) + timedelta(days=1), duration=1800,
    )
    note_a = await notes.create_note(db_session, recorded.id, "Slides", "https://cdn/slides.pdf", "notes/slides.pdf")
    note_b = await notes.create_note(db_session, recorded.id, "Worksheet", "https://cdn/ws.pdf", "notes/ws.pdf")

    db_session.add(Enrollment(user_id=student_user.id, batch_id=batch.id, status="approved"))
    await db_session.commit()

    return {
        "batch": batch,
        "sections": [module_1, module_2],
        "lessons": [recorded, live],
        "notes": [note_a, note_b],
    }


class TestBatches:
    async def test_create_requires_admin(self, db_session, student_user):
        with pytest.raises(ForbiddenError):
            await BatchService().create_batch(db_session, student_user, "Title", "Description")

    async def test_create_requires_title_and_description(self, db_session, admin_user):
        with pytest.raises(ValidationFailure):
            await BatchService().create_batch(db_session, admin_user, "  ", "Description")
        with pytest.raises(ValidationFailure):
            await BatchService().create_batch(db_session, admin_user, "Title", "")

    async def test_list_includes_instructor_name(self, db_session, admin_user):
        service = BatchService()
        await service.create_batch(db_session, admin_user, "Physics", "Mechanics")

        rows = await service.list_batches(db_session)

        assert len(rows) == 1
        assert rows[0]["batch"].title == "Physics"
        assert rows[0]["instructor_name"] == admin_user.name

    async def test_update_ignores_blank_values(self, db_session, admin_user):
        service = BatchService()
        batch = await service.create_batch(db_session, admin_user, "Physics", "Mechanics")

        updated = await service.update_batch(db_session, batch.id, {"title": "", "description": "Optics"})

        assert updated.title == "Physics"
        assert updated.description == "Optics"

    async def test_get_missing_batch(self, db_session):
        with pytest.raises(NotFoundError):
            await BatchService().get_batch(db_session, uuid.uuid4())


class TestOrdering:
    async def test_section_order_defaults_to_sibling_count(self, course):
        assert [s.order for s in course["sections"]] == [0, 1]

    async def test_lesson_order_defaults_to_sibling_count(self, course):
        assert [l.order for l in course["lessons"]] == [0, 1]

    async def test_explicit_zero_order_is_kept(self, db_session, course):
        section = await SectionService().create_section(db_session, course["batch"].id, "Prelude", order=0)
        assert section.order == 0

    async def test_update_order_to_zero(self, db_session, course):
        module_2 = course["sections"][1]
        updated = await SectionService().update_section(db_session, module_2.id, {"order": 0, "title": " "})

        assert updated.order == 0
        assert updated.title == "Module 2"

    async def test_create_section_in_missing_batch(self, db_session):
        with pytest.raises(NotFoundError):
            await SectionService().create_section(db_session, uuid.uuid4(), "Orphan")

    async def test_negative_section_order_rejected(self, db_session, course):
        with pytest.raises(ValidationFailure):
            await SectionService().create_section(db_session, course["batch"].id, "Neg", order=-5)
        assert await _count(Section) == 2

    async def test_negative_order_update_rejected(self, db_session, course):
        module_2 = course["sections"][1]
        with pytest.raises(ValidationFailure):
            await SectionService().update_section(db_session, module_2.id, {"order": -1})

    async def test_negative_lesson_order_rejected(self, db_session, course):
        section_id = course["sections"][1].id
        service = LessonService()

        with pytest.raises(ValidationFailure):
            await service.create_recorded_lesson(
                db_session, section_id, "Neg", "https://cdn/v.mp4", "videos/v.mp4", order=-1,
            )
        with pytest.raises(ValidationFailure):
            await service.create_live_lesson(
                db_session, section_id, "Neg live", "zoom", "https://zoom.us/j/9",
                datetime.now(timezone.utc), order=-3,
            )
        with pytest.raises(ValidationFailure):
            await service.update_lesson(db_session, course["lessons"][0].id, {"order": -2})


class TestSectionListing:
    async def test_sections_enriched_with_lessons(self, db_session, course, admin_user):
        rows = await SectionService().list_sections(db_session, course["batch"].id, admin_user)

        assert [row["section"].title for row in rows] == ["Module 1", "Module 2"]
        assert rows[0]["lesson_count"] == 2
        assert rows[0]["total_duration"] == 2400
        assert [l.title for l in rows[0]["lessons"]] == ["Intro", "Office hours"]
        assert rows[1]["lesson_count"] == 0
        assert rows[1]["total_duration"] == 0

    async def test_missing_batch_is_not_found(self, db_session, admin_user):
        with pytest.raises(NotFoundError):
            await SectionService().list_sections(db_session, uuid.uuid4(), admin_user)


class TestLessons:
    async def test_recorded_lesson_requires_video(self, db_session, course):
        with pytest.raises(ValidationFailure):
            await LessonService().create_recorded_lesson(
                db_session, course["sections"][0].id, "No video", None, None,
            )

    async def test_negative_duration_rejected(self, db_session, course):
        with pytest.raises(ValidationFailure):
            await LessonService().create_recorded_lesson(
                db_session, course["sections"][0].id, "Bad", "https://cdn/v.mp4", "videos/v.mp4", duration=-5,
            )

    async def test_live_lesson_requires_known_platform(self, db_session, course):
        with pytest.raises(ValidationFailure):
            await LessonService().create_live_lesson(
                db_session, course["sections"][0].id, "Live", "teams", "https://x", datetime.now(timezone.utc),
            )

    async def test_live_lesson_starts_scheduled(self, course):
        live = course["lessons"][1]
        assert live.kind == "live"
        assert live.live_status == "scheduled"
        assert live.video_url is None

    async def test_live_fields_rejected_on_recorded_lesson(self, db_session, course):
        recorded = course["lessons"][0]
        with pytest.raises(ValidationFailure):
            await LessonService().update_lesson(db_session, recorded.id, {"live_join_url": "https://zoom.us/j/2"})

    async def test_blank_live_fields_ignored_on_recorded_lesson(self, db_session, course):
        recorded = course["lessons"][0]

        updated = await LessonService().update_lesson(
            db_session, recorded.id, {"title": "Introduction", "live_join_url": "  ", "live_platform": ""},
        )

        assert updated.title == "Introduction"
        assert updated.live_join_url is None
        assert updated.kind == "recorded"

    async def test_blank_platform_ignored_on_live_lesson(self, db_session, course):
        live = course["lessons"][1]

        updated = await LessonService().update_lesson(
            db_session, live.id, {"title": "Office hours (week 2)", "live_platform": "", "live_join_url": " "},
        )

        assert updated.title == "Office hours (week 2)"
        assert updated.live_platform == "zoom"
        assert updated.live_join_url == "https://zoom.us/j/1"

    async def test_unknown_platform_update_changes_nothing(self, db_session, course):
        live = course["lessons"][1]

        with pytest.raises(ValidationFailure):
            await LessonService().update_lesson(db_session, live.id, {"title": "Renamed", "live_platform": "teams"})

        async with AsyncSessionLocal() as session:
            stored = await session.get(Lesson, live.id)
        assert stored.title == "Office hours"
        assert stored.live_platform == "zoom"

    async def test_update_applies_zero_duration(self, db_session, course):
        recorded = course["lessons"][0]
        updated = await LessonService().update_lesson(db_session, recorded.id, {"duration": 0, "title": ""})

        assert updated.duration == 0
        assert updated.title == "Intro"

    async def test_attach_recording_turns_live_into_recorded(self, db_session, course, storage):
        live = course["lessons"][1]
        service = LessonService()

        lesson = await service.attach_recording(db_session, live.id, "https://cdn/rec1.mp4", "videos/rec1.mp4")
        assert lesson.kind == "recorded"

        await service.attach_recording(db_session, live.id, "https://cdn/rec2.mp4", "videos/rec2.mp4", duration=1700)
        assert storage.deleted == ["videos/rec1.mp4"]

    async def test_recording_only_for_live_lessons(self, db_session, course):
        with pytest.raises(ValidationFailure):
            await LessonService().attach_recording(
                db_session, course["lessons"][0].id, "https://cdn/x.mp4", "videos/x.mp4",
            )


class TestNotes:
    async def test_note_requires_file(self, db_session, course):
        with pytest.raises(ValidationFailure):
            await NoteService().create_note(db_session, course["lessons"][0].id, "Empty", None, None)

    async def test_list_and_download(self, db_session, course, student_user):
        service = NoteService()
        lesson = course["lessons"][0]

        notes = await service.list_notes(db_session, lesson.id, student_user)
        assert {n.title for n in notes} == {"Slides", "Worksheet"}

        note, url = await service.download_note(db_session, course["notes"][0].id, student_user)
        assert url == "https://cdn/slides.pdf"
        assert note.id == course["notes"][0].id

    async def test_delete_note_purges_file(self, db_session, course, storage):
        note = course["notes"][0]
        await NoteService().delete_note(db_session, note.id)

        assert storage.deleted == ["notes/slides.pdf"]
        assert await _count(Note) == 1


class TestCascadeDelete:
    async def test_delete_lesson_removes_notes(self, db_session, course, storage):
        report = await LessonService().delete_lesson(db_session, course["lessons"][0].id)

        assert report.lessons == 1
        assert report.notes == 2
        assert await _count(Lesson) == 1
        assert await _count(Note) == 0
        assert sorted(storage.deleted) == ["notes/slides.pdf", "notes/ws.pdf", "videos/intro.mp4"]

    async def test_delete_section_removes_lessons_and_notes(self, db_session, course):
        report = await SectionService().delete_section(db_session, course["sections"][0].id)

        assert report.as_dict() == {"batches": 0, "sections": 1, "lessons": 2, "notes": 2, "enrollments": 0}
        assert await _count(Section) == 1
        assert await _count(Lesson) == 0
        assert await _count(Note) == 0
        assert await _count(Enrollment) == 1

    async def test_delete_batch_removes_everything(self, db_session, course, storage):
        report = await BatchService().delete_batch(db_session, course["batch"].id)

        assert report.as_dict() == {"batches": 1, "sections": 2, "lessons": 2, "notes": 2, "enrollments": 1}
        for model in (Batch, Section, Lesson, Note, Enrollment):
            assert await _count(model) == 0
        assert "thumbs/algebra.png" in storage.deleted

    async def test_former_children_are_not_found_after_batch_delete(self, db_session, course, admin_user):
        await BatchService().delete_batch(db_session, course["batch"].id)

        async with AsyncSessionLocal() as session:
            with pytest.raises(NotFoundError):
                await BatchService().get_batch(session, course["batch"].id)
            for section in course["sections"]:
                with pytest.raises(NotFoundError):
                    await SectionService().get_section(session, section.id, admin_user)
            for lesson in course["lessons"]:
                with pytest.raises(NotFoundError):
                    await LessonService().get_lesson(session, lesson.id, admin_user)
            for note in course["notes"]:
                with pytest.raises(NotFoundError):
                    await NoteService().get_note(session, note.id)

    async def test_failed_cascade_rolls_back(self, db_session, course, storage):
        async def failing_cascade(session, batch):
            await delete_batch_tree(session, batch)
            raise RuntimeError("storage layer exploded mid-cascade")

        with patch.object(batch_service_module, "delete_batch_tree", side_effect=failing_cascade):
            with pytest.raises(RuntimeError):
                await BatchService().delete_batch(db_session, course["batch"].id)

        assert await _count(Batch) == 1
        assert await _count(Section) == 2
        assert await _count(Lesson) == 2
        assert await _count(Note) == 2
        assert await _count(Enrollment) == 1
        assert storage.deleted == []

    async def test_delete_missing_batch(self, db_session):
        with pytest.raises(NotFoundError):
            await BatchService().delete_batch(db_session, uuid.uuid4())
