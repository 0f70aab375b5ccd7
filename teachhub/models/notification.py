"""Notification model - Per-student content event notices"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, CheckConstraint, Index, Uuid
import uuid

from teachhub.database import Base, utcnow

NOTIFICATION_TYPES = (
    "lesson_uploaded",
    "note_added",
    "live_scheduled",
    "live_started",
    "recording_uploaded",
)


class Notification(Base):
    """Notification for one recipient; batch/lesson are weak references"""

    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False)
    type = Column(
        String(30),
        CheckConstraint(
            "type IN ('lesson_uploaded', 'note_added', 'live_scheduled', 'live_started', 'recording_uploaded')",
            name="ck_notifications_type",
        ),
        nullable=False,
    )
    message = Column(Text, nullable=False)
    batch_id = Column(Uuid, nullable=True)
    lesson_id = Column(Uuid, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "created_at"),
        Index("idx_notifications_user_read", "user_id", "read"),
    )

    def __repr__(self):
        return f"<Notification(id={self.id}, user={self.user_id}, type={self.type}, read={self.read})>"
