"""
Section Service

Sections group lessons inside a batch. Listing returns each section with its
lessons, lesson count and total duration, computed on every read.
"""
import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.errors import NotFoundError, ValidationFailure
from teachhub.models.batch import Batch
from teachhub.models.lesson import Lesson
from teachhub.models.section import Section
from teachhub.models.user import User
from teachhub.services.access_control import ensure_can_read
from teachhub.services.cascade import DeletionReport, delete_section_tree
from teachhub.services.storage import purge_files
from teachhub.services.updates import apply_numeric_updates, apply_text_updates, validate_order

logger = logging.getLogger(__name__)


class SectionService:
    """Section CRUD with lesson enrichment"""

    async def create_section(
        self,
        session: AsyncSession,
        batch_id: uuid.UUID,
        title: str,
        order: Optional[int] = None,
    ) -> Section:
        """
        Create a section at the end of the batch unless an order is given.

        Raises:
            NotFoundError: Batch does not exist
            ValidationFailure: Title blank or negative order
        """
        if await session.get(Batch, batch_id) is None:
            raise NotFoundError("Batch not found")
        if not title or not title.strip():
            raise ValidationFailure("Section title is required")

        order = validate_order(order)
        if order is None:
            order = await session.scalar(
                select(func.count()).select_from(Section).where(Section.batch_id == batch_id)
            )

        section = Section(title=title, order=int(order), batch_id=batch_id)
        session.add(section)
        await session.commit()

        logger.info(f"Created section {section.id} in batch {batch_id} at order {section.order}")
        return section

    async def get_section(self, session: AsyncSession, section_id: uuid.UUID, user: Optional[User] = None, check_access: bool = True) -> Section:
        """
        Fetch a section, enforcing the access gate unless check_access is False.

        Raises:
            NotFoundError: Section does not exist
        """
        section = await session.get(Section, section_id)
        if section is None:
            raise NotFoundError("Section not found")

        if check_access:
            await ensure_can_read(session, user, section.batch_id)
        return section

    async def list_sections(self, session: AsyncSession, batch_id: uuid.UUID, user: Optional[User]) -> List[Dict[str, Any]]:
        """
        Sections of a batch ordered by `order`, each enriched with lessons.

        Returns:
            List of dicts with section, lessons, lesson_count, total_duration

        Raises:
            NotFoundError: Batch does not exist
            UnauthenticatedError / NotEnrolledError: Access gate failed
        """
        if await session.get(Batch, batch_id) is None:
            raise NotFoundError("Batch not found")
        await ensure_can_read(session, user, batch_id)

        result = await session.execute(
            select(Section)
            .where(Section.batch_id == batch_id)
            .order_by(Section.order.asc(), Section.created_at.asc())
        )
        sections = list(result.scalars().all())
        if not sections:
            return []

        result = await session.execute(
            select(Lesson)
            .where(Lesson.section_id.in_([s.id for s in sections]))
            .order_by(Lesson.order.asc(), Lesson.created_at.asc())
        )
        lessons_by_section = defaultdict(list)
        for lesson in result.scalars().all():
            lessons_by_section[lesson.section_id].append(lesson)

        enriched = []
        for section in sections:
            lessons = lessons_by_section.get(section.id, [])
            enriched.append({
                "section": section,
                "lessons": lessons,
                "lesson_count": len(lessons),
                "total_duration": sum(lesson.duration or 0 for lesson in lessons),
            })
        return enriched

    async def update_section(self, session: AsyncSession, section_id: uuid.UUID, updates: Dict[str, Any]) -> Section:
        """Apply a non-empty title and/or a numeric order."""
        section = await self.get_section(session, section_id, check_access=False)
        validate_order(updates.get("order"))

        changed = apply_text_updates(section, updates, ("title",))
        changed += apply_numeric_updates(section, updates, ("order",))
        if changed:
            await session.commit()
            logger.info(f"Updated section {section_id}: {', '.join(changed)}")

        return section

    async def delete_section(self, session: AsyncSession, section_id: uuid.UUID) -> DeletionReport:
        """
        Delete a section with its lessons and their notes in one transaction.

        Raises:
            NotFoundError: Section does not exist
        """
        section = await self.get_section(session, section_id, check_access=False)

        try:
            report = await delete_section_tree(session, section)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.error(f"Cascade delete of section {section_id} rolled back", exc_info=True)
            raise

        logger.info(f"Deleted section {section_id}: {report.as_dict()}")
        await purge_files(report.storage_keys)
        return report


# Global section service instance
_section_service: Optional[SectionService] = None


def get_section_service() -> SectionService:
    """Get or create global SectionService instance."""
    global _section_service
    if _section_service is None:
        _section_service = SectionService()
    return _section_service
