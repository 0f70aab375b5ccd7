"""
Cascade Deletion Engine

Application-level cascade for the content hierarchy:

    Batch -> Section -> Lesson -> Note
    Batch -> Enrollment

Children are always deleted before their parent. The functions here only
stage deletes on the caller's session; the caller commits once, so a whole
subtree disappears in a single transaction or not at all.

sweep_orphans() is the periodic safety net for rows whose parent vanished
outside of these functions (manual edits, imports, older data).
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Sequence
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.models.batch import Batch
from teachhub.models.enrollment import Enrollment
from teachhub.models.lesson import Lesson
from teachhub.models.note import Note
from teachhub.models.section import Section

logger = logging.getLogger(__name__)


@dataclass
class DeletionReport:
    """Rows removed by one cascade and the stored files they referenced"""
    batches: int = 0
    sections: int = 0
    lessons: int = 0
    notes: int = 0
    enrollments: int = 0
    storage_keys: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, int]:
        return {
            "batches": self.batches,
            "sections": self.sections,
            "lessons": self.lessons,
            "notes": self.notes,
            "enrollments": self.enrollments,
        }


async def _delete_notes_of_lessons(session: AsyncSession, lesson_ids: Sequence[uuid.UUID], report: DeletionReport) -> None:
    if not lesson_ids:
        return

    result = await session.execute(select(Note.storage_key).where(Note.lesson_id.in_(lesson_ids)))
    report.storage_keys.extend(key for key in result.scalars().all() if key)

    result = await session.execute(delete(Note).where(Note.lesson_id.in_(lesson_ids)))
    report.notes += result.rowcount or 0


async def _delete_lessons_of_sections(session: AsyncSession, section_ids: Sequence[uuid.UUID], report: DeletionReport) -> None:
    if not section_ids:
        return

    result = await session.execute(
        select(Lesson.id, Lesson.video_storage_key).where(Lesson.section_id.in_(section_ids))
    )
    rows = result.all()
    lesson_ids = [row.id for row in rows]
    report.storage_keys.extend(row.video_storage_key for row in rows if row.video_storage_key)

    await _delete_notes_of_lessons(session, lesson_ids, report)

    result = await session.execute(delete(Lesson).where(Lesson.section_id.in_(section_ids)))
    report.lessons += result.rowcount or 0


async def delete_lesson_tree(session: AsyncSession, lesson: Lesson) -> DeletionReport:
    """Stage deletion of a lesson and its notes."""
    report = DeletionReport()

    await _delete_notes_of_lessons(session, [lesson.id], report)

    if lesson.video_storage_key:
        report.storage_keys.append(lesson.video_storage_key)
    await session.delete(lesson)
    await session.flush()
    report.lessons += 1

    return report


async def delete_section_tree(session: AsyncSession, section: Section) -> DeletionReport:
    """Stage deletion of a section, its lessons and their notes. Enrollments are batch-scoped and stay."""
    report = DeletionReport()

    await _delete_lessons_of_sections(session, [section.id], report)

    await session.delete(section)
    await session.flush()
    report.sections += 1

    return report


async def delete_batch_tree(session: AsyncSession, batch: Batch) -> DeletionReport:
    """Stage deletion of a batch with all sections, lessons, notes and enrollments."""
    report = DeletionReport()

    result = await session.execute(select(Section.id).where(Section.batch_id == batch.id))
    section_ids = list(result.scalars().all())

    await _delete_lessons_of_sections(session, section_ids, report)

    if section_ids:
        result = await session.execute(delete(Section).where(Section.batch_id == batch.id))
        report.sections += result.rowcount or 0

    result = await session.execute(delete(Enrollment).where(Enrollment.batch_id == batch.id))
    report.enrollments += result.rowcount or 0

    if batch.thumbnail_storage_key:
        report.storage_keys.append(batch.thumbnail_storage_key)
    await session.delete(batch)
    await session.flush()
    report.batches += 1

    return report


async def sweep_orphans(session: AsyncSession) -> DeletionReport:
    """
    Delete hierarchy rows whose parent no longer exists, then commit.

    Parents are swept before children so an orphaned subtree is removed in a
    single pass.

    Returns:
        DeletionReport with per-table counts and storage keys to purge
    """
    report = DeletionReport()
    unsynced = {"synchronize_session": False}

    result = await session.execute(
        delete(Section)
        .where(Section.batch_id.not_in(select(Batch.id)))
        .execution_options(**unsynced)
    )
    report.sections = result.rowcount or 0

    orphan_lessons = Lesson.section_id.not_in(select(Section.id))
    result = await session.execute(select(Lesson.video_storage_key).where(orphan_lessons))
    report.storage_keys.extend(key for key in result.scalars().all() if key)
    result = await session.execute(delete(Lesson).where(orphan_lessons).execution_options(**unsynced))
    report.lessons = result.rowcount or 0

    orphan_notes = Note.lesson_id.not_in(select(Lesson.id))
    result = await session.execute(select(Note.storage_key).where(orphan_notes))
    report.storage_keys.extend(key for key in result.scalars().all() if key)
    result = await session.execute(delete(Note).where(orphan_notes).execution_options(**unsynced))
    report.notes = result.rowcount or 0

    result = await session.execute(
        delete(Enrollment)
        .where(Enrollment.batch_id.not_in(select(Batch.id)))
        .execution_options(**unsynced)
    )
    report.enrollments = result.rowcount or 0

    await session.commit()

    logger.info(f"Orphan sweep complete: {report.as_dict()}")
    return report
