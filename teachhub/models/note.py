"""Note model - Downloadable attachment of a lesson"""
from sqlalchemy import Column, String, Text, DateTime, Index, Uuid
import uuid

from teachhub.database import Base, utcnow


class Note(Base):
    """Leaf attachment keyed to a lesson"""

    __tablename__ = "notes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    file_url = Column(String(1024), nullable=False)
    storage_key = Column(String(512), nullable=False)
    lesson_id = Column(Uuid, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_notes_lesson", "lesson_id"),
    )

    def __repr__(self):
        return f"<Note(id={self.id}, lesson={self.lesson_id}, title={self.title})>"
