"""
Notification Fan-out Service

Writes one notification per approved enrollee when batch content changes
(lesson uploaded, note added, live class scheduled/started, recording uploaded),
and serves the per-user notification inbox.

Fan-out is best-effort: it runs in its own session after the content change
has been committed and never raises. Every attempt yields a FanOutResult that
is logged, so dropped notifications stay visible to operators.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy import select, insert, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.database import AsyncSessionLocal
from teachhub.errors import NotFoundError, ValidationFailure
from teachhub.models.batch import Batch
from teachhub.models.enrollment import Enrollment
from teachhub.models.notification import Notification, NOTIFICATION_TYPES
from teachhub.models.section import Section
from teachhub.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_INBOX_LIMIT = 30


@dataclass
class FanOutResult:
    """Outcome of one fan-out attempt"""
    status: str  # delivered | skipped | failed
    type: str
    delivered: int = 0
    batch_id: Optional[uuid.UUID] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


def lesson_uploaded_message(title: str) -> str:
    return f'New lesson "{title}" has been uploaded'


def live_scheduled_message(title: str, platform: Optional[str], start_at) -> str:
    when = start_at.isoformat() if start_at is not None else "a time to be announced"
    return f'Live class "{title}" scheduled on {(platform or "other").capitalize()} for {when}'


def live_started_message(title: str, platform: Optional[str]) -> str:
    return f'Live class "{title}" is live now on {(platform or "other").capitalize()}'


def recording_uploaded_message(title: str) -> str:
    return f'Recording for "{title}" is now available'


def note_added_message(note_title: str, lesson_title: str) -> str:
    return f'New note "{note_title}" added to "{lesson_title}"'


class NotificationService:
    """Batch-wide notification fan-out and user inbox operations"""

    def __init__(self, session_factory: Callable[[], AsyncSession] = AsyncSessionLocal):
        self.session_factory = session_factory

    async def notify(
        self,
        section_id: uuid.UUID,
        type: str,
        message: str,
        lesson_id: Optional[uuid.UUID] = None,
    ) -> FanOutResult:
        """
        Notify every approved student of the batch that owns a section.

        Args:
            section_id: Section the event happened in (resolved to its batch)
            type: One of NOTIFICATION_TYPES
            message: Human-readable text
            lesson_id: Optional lesson back-reference

        Returns:
            FanOutResult; this method never raises
        """
        try:
            result = await self._fan_out(section_id, type, message, lesson_id)
        except Exception as e:
            logger.error(
                f"Notification fan-out failed for section {section_id} ({type}): {e}",
                exc_info=True,
            )
            result = FanOutResult(status="failed", type=type, reason=str(e))

        self._log_result(section_id, result)
        return result

    async def _fan_out(
        self,
        section_id: uuid.UUID,
        type: str,
        message: str,
        lesson_id: Optional[uuid.UUID],
    ) -> FanOutResult:
        if type not in NOTIFICATION_TYPES:
            raise ValueError(f"Invalid notification type: {type}")

        async with self.session_factory() as session:
            batch_id = await session.scalar(select(Section.batch_id).where(Section.id == section_id))
            if batch_id is None:
                return FanOutResult(status="skipped", type=type, reason="section not found")

            result = await session.execute(
                select(Enrollment.user_id).where(
                    Enrollment.batch_id == batch_id,
                    Enrollment.status == "approved",
                )
            )
            recipients = list(result.scalars().all())
            if not recipients:
                return FanOutResult(status="skipped", type=type, batch_id=batch_id, reason="no approved enrollees")

            rows = [
                {
                    "user_id": user_id,
                    "type": type,
                    "message": message,
                    "batch_id": batch_id,
                    "lesson_id": lesson_id,
                }
                for user_id in recipients
            ]
            await session.execute(insert(Notification), rows)
            await session.commit()

        return FanOutResult(status="delivered", type=type, delivered=len(rows), batch_id=batch_id)

    def _log_result(self, section_id: uuid.UUID, result: FanOutResult) -> None:
        if result.status == "delivered":
            logger.info(
                f"Fan-out {result.type}: {result.delivered} notifications for batch {result.batch_id}"
            )
        elif result.status == "skipped":
            logger.debug(f"Fan-out {result.type} skipped for section {section_id}: {result.reason}")
        else:
            logger.warning(f"Fan-out {result.type} dropped for section {section_id}: {result.reason}")

    async def list_for_user(
        self,
        session: AsyncSession,
        user: User,
        limit: int = DEFAULT_INBOX_LIMIT,
        unread_only: bool = False,
    ) -> List[Dict[str, Any]]:
        """Newest notifications first, each with the batch title when it still exists."""
        if limit < 1:
            raise ValidationFailure("limit must be positive")

        query = (
            select(Notification, Batch.title)
            .outerjoin(Batch, Batch.id == Notification.batch_id)
            .where(Notification.user_id == user.id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        if unread_only:
            query = query.where(Notification.read.is_(False))

        result = await session.execute(query)
        return [
            {"notification": notification, "batch_title": batch_title}
            for notification, batch_title in result.all()
        ]

    async def unread_count(self, session: AsyncSession, user: User) -> int:
        count = await session.scalar(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user.id, Notification.read.is_(False))
        )
        return count or 0

    async def mark_read(self, session: AsyncSession, notification_id: uuid.UUID, user: User) -> Notification:
        """
        Mark one of the user's notifications as read.

        Raises:
            NotFoundError: Missing or owned by someone else
        """
        notification = await session.scalar(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user.id,
            )
        )
        if notification is None:
            raise NotFoundError("Notification not found")

        notification.read = True
        await session.commit()
        return notification

    async def mark_all_read(self, session: AsyncSession, user: User) -> int:
        """Mark every unread notification of the user as read; returns the count."""
        result = await session.execute(
            update(Notification)
            .where(Notification.user_id == user.id, Notification.read.is_(False))
            .values(read=True)
        )
        await session.commit()
        return result.rowcount or 0


# Global notification service instance
_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    """Get or create global NotificationService instance."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
