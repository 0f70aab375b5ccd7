"""Enrollment model - Student access request/grant for a batch"""
from sqlalchemy import Column, String, DateTime, CheckConstraint, Index, UniqueConstraint, Uuid
import uuid

from teachhub.database import Base, utcnow

ENROLLMENT_STATUSES = ("pending", "approved", "rejected")


class Enrollment(Base):
    """(user, batch) enrollment; an approved row is the content-access credential"""

    __tablename__ = "enrollments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False)
    batch_id = Column(Uuid, nullable=False)
    status = Column(
        String(20),
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_enrollments_status"),
        nullable=False,
        default="pending",
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "batch_id", name="uq_enrollments_user_batch"),
        Index("idx_enrollments_batch_status", "batch_id", "status"),
        Index("idx_enrollments_status", "status"),
    )

    def __repr__(self):
        return f"<Enrollment(id={self.id}, user={self.user_id}, batch={self.batch_id}, status={self.status})>"
