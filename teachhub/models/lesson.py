"""Lesson model - Recorded video or live class inside a section"""
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, CheckConstraint, Index, Uuid
import uuid

from teachhub.database import Base, utcnow

LIVE_PLATFORMS = ("zoom", "youtube", "other")
LIVE_STATUSES = ("scheduled", "live", "ended")


class Lesson(Base):
    """
    Lesson of a section.

    Recorded lessons carry a video reference and no live fields. Live lessons
    start without a video and may acquire one when the recording is uploaded,
    after which they display as recorded.
    """

    __tablename__ = "lessons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    section_id = Column(Uuid, nullable=False)
    order = Column("position", Integer, nullable=False, default=0)
    duration = Column(
        Integer,
        CheckConstraint("duration >= 0", name="ck_lessons_duration"),
        nullable=False,
        default=0,
    )
    video_url = Column(String(1024), nullable=True)
    video_storage_key = Column(String(512), nullable=True)

    # Live class metadata
    is_live_enabled = Column(Boolean, nullable=False, default=False)
    live_platform = Column(
        String(20),
        CheckConstraint("live_platform IN ('zoom', 'youtube', 'other')", name="ck_lessons_live_platform"),
        nullable=True,
    )
    live_join_url = Column(String(1024), nullable=True)
    live_start_at = Column(DateTime(timezone=True), nullable=True)
    live_status = Column(
        String(20),
        CheckConstraint("live_status IN ('scheduled', 'live', 'ended')", name="ck_lessons_live_status"),
        nullable=True,
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_lessons_section_position", "section_id", "position"),
        Index("idx_lessons_live_status", "live_status"),
    )

    @property
    def kind(self) -> str:
        """A live lesson with an uploaded recording is shown as recorded"""
        if self.video_url:
            return "recorded"
        return "live" if self.is_live_enabled else "recorded"

    def __repr__(self):
        return f"<Lesson(id={self.id}, section={self.section_id}, kind={self.kind})>"
