"""Batch model - Top-level course offering owned by the teacher"""
from sqlalchemy import Column, String, Text, DateTime, Index, Uuid
import uuid

from teachhub.database import Base, utcnow


class Batch(Base):
    """Root of one content tree (sections, lessons, notes)"""

    __tablename__ = "batches"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    thumbnail_url = Column(String(1024), nullable=True)
    thumbnail_storage_key = Column(String(512), nullable=True)
    instructor_id = Column(Uuid, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_batches_instructor", "instructor_id"),
        Index("idx_batches_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Batch(id={self.id}, title={self.title})>"
