"""
Batch Service

Create/read/update/delete for batches, the root of each content tree.
Deleting a batch cascades to its sections, lessons, notes and enrollments.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.errors import ForbiddenError, NotFoundError, ValidationFailure
from teachhub.models.batch import Batch
from teachhub.models.user import User
from teachhub.services.cascade import DeletionReport, delete_batch_tree
from teachhub.services.storage import purge_files
from teachhub.services.updates import apply_text_updates

logger = logging.getLogger(__name__)


class BatchService:
    """Batch lifecycle operations"""

    async def create_batch(
        self,
        session: AsyncSession,
        instructor: User,
        title: str,
        description: str,
        thumbnail_url: Optional[str] = None,
        thumbnail_storage_key: Optional[str] = None,
    ) -> Batch:
        """
        Create a batch owned by the admin instructor.

        Raises:
            ForbiddenError: Instructor is not an admin
            ValidationFailure: Title or description blank
        """
        if not instructor.is_admin:
            raise ForbiddenError("Only the admin can create batches")
        if not title or not title.strip():
            raise ValidationFailure("Batch title is required")
        if not description or not description.strip():
            raise ValidationFailure("Batch description is required")

        batch = Batch(
            title=title,
            description=description,
            thumbnail_url=thumbnail_url,
            thumbnail_storage_key=thumbnail_storage_key,
            instructor_id=instructor.id,
        )
        session.add(batch)
        await session.commit()

        logger.info(f"Created batch {batch.id} ({batch.title})")
        return batch

    async def list_batches(self, session: AsyncSession) -> List[Dict[str, Any]]:
        """All batches, newest first, with the instructor's name."""
        result = await session.execute(
            select(Batch, User.name)
            .outerjoin(User, User.id == Batch.instructor_id)
            .order_by(Batch.created_at.desc())
        )
        return [{"batch": batch, "instructor_name": name} for batch, name in result.all()]

    async def get_batch(self, session: AsyncSession, batch_id: uuid.UUID) -> Batch:
        batch = await session.get(Batch, batch_id)
        if batch is None:
            raise NotFoundError("Batch not found")
        return batch

    async def update_batch(self, session: AsyncSession, batch_id: uuid.UUID, updates: Dict[str, Any]) -> Batch:
        """Apply non-empty title/description; blank values are ignored."""
        batch = await self.get_batch(session, batch_id)

        changed = apply_text_updates(batch, updates, ("title", "description"))
        if changed:
            await session.commit()
            logger.info(f"Updated batch {batch_id}: {', '.join(changed)}")

        return batch

    async def delete_batch(self, session: AsyncSession, batch_id: uuid.UUID) -> DeletionReport:
        """
        Delete a batch and everything under it in one transaction.

        Raises:
            NotFoundError: Batch does not exist
        """
        batch = await self.get_batch(session, batch_id)

        try:
            report = await delete_batch_tree(session, batch)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.error(f"Cascade delete of batch {batch_id} rolled back", exc_info=True)
            raise

        logger.info(f"Deleted batch {batch_id}: {report.as_dict()}")
        await purge_files(report.storage_keys)
        return report


# Global batch service instance
_batch_service: Optional[BatchService] = None


def get_batch_service() -> BatchService:
    """Get or create global BatchService instance."""
    global _batch_service
    if _batch_service is None:
        _batch_service = BatchService()
    return _batch_service
