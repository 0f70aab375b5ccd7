"""
Note Service

Notes are downloadable files attached to a lesson. Reading them goes through
the access gate of the lesson's batch.
"""
import logging
import uuid
from typing import List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.errors import NotFoundError, ValidationFailure
from teachhub.models.lesson import Lesson
from teachhub.models.note import Note
from teachhub.models.section import Section
from teachhub.models.user import User
from teachhub.services.access_control import ensure_can_read
from teachhub.services.notification_service import (
    NotificationService,
    get_notification_service,
    note_added_message,
)
from teachhub.services.storage import purge_files

logger = logging.getLogger(__name__)


class NoteService:
    """Note create/list/download/delete"""

    def __init__(self, notifications: Optional[NotificationService] = None):
        self.notifications = notifications or get_notification_service()

    async def _get_lesson(self, session: AsyncSession, lesson_id: uuid.UUID) -> Lesson:
        lesson = await session.get(Lesson, lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")
        return lesson

    async def _ensure_lesson_readable(self, session: AsyncSession, lesson: Lesson, user: Optional[User]) -> None:
        batch_id = await session.scalar(select(Section.batch_id).where(Section.id == lesson.section_id))
        if batch_id is None:
            raise NotFoundError("Section not found")
        await ensure_can_read(session, user, batch_id)

    async def create_note(
        self,
        session: AsyncSession,
        lesson_id: uuid.UUID,
        title: str,
        file_url: Optional[str],
        storage_key: Optional[str],
        description: Optional[str] = None,
    ) -> Note:
        """
        Attach a note to a lesson and notify the batch.

        Raises:
            NotFoundError: Lesson does not exist
            ValidationFailure: Title or file reference missing
        """
        lesson = await self._get_lesson(session, lesson_id)
        if not title or not title.strip():
            raise ValidationFailure("Note title is required")
        if not file_url or not storage_key:
            raise ValidationFailure("File is required")

        note = Note(
            title=title,
            description=description or "",
            file_url=file_url,
            storage_key=storage_key,
            lesson_id=lesson_id,
        )
        session.add(note)
        await session.commit()
        logger.info(f"Created note {note.id} for lesson {lesson_id}")

        await self.notifications.notify(
            section_id=lesson.section_id,
            type="note_added",
            message=note_added_message(note.title, lesson.title),
            lesson_id=lesson.id,
        )
        return note

    async def list_notes(self, session: AsyncSession, lesson_id: uuid.UUID, user: Optional[User]) -> List[Note]:
        """Notes of a lesson, newest first."""
        lesson = await self._get_lesson(session, lesson_id)
        await self._ensure_lesson_readable(session, lesson, user)

        result = await session.execute(
            select(Note).where(Note.lesson_id == lesson_id).order_by(Note.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_note(self, session: AsyncSession, note_id: uuid.UUID) -> Note:
        note = await session.get(Note, note_id)
        if note is None:
            raise NotFoundError("Note not found")
        return note

    async def download_note(self, session: AsyncSession, note_id: uuid.UUID, user: Optional[User]) -> Tuple[Note, str]:
        """
        Resolve the file URL of a note for a reader.

        Returns:
            (note, file_url)
        """
        note = await self.get_note(session, note_id)
        lesson = await self._get_lesson(session, note.lesson_id)
        await self._ensure_lesson_readable(session, lesson, user)
        return note, note.file_url

    async def delete_note(self, session: AsyncSession, note_id: uuid.UUID) -> Note:
        """Leaf delete; the stored file is purged after commit."""
        note = await self.get_note(session, note_id)

        await session.delete(note)
        await session.commit()
        logger.info(f"Deleted note {note_id}")

        await purge_files([note.storage_key])
        return note


# Global note service instance
_note_service: Optional[NoteService] = None


def get_note_service() -> NoteService:
    """Get or create global NoteService instance."""
    global _note_service
    if _note_service is None:
        _note_service = NoteService()
    return _note_service
