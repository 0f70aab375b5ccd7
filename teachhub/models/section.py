"""Section model - Ordered grouping of lessons inside a batch"""
from sqlalchemy import Column, String, Integer, DateTime, Index, Uuid
import uuid

from teachhub.database import Base, utcnow


class Section(Base):
    """Section of a batch; `order` is the only sort key"""

    __tablename__ = "sections"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    order = Column("position", Integer, nullable=False, default=0)
    batch_id = Column(Uuid, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_sections_batch_position", "batch_id", "position"),
    )

    def __repr__(self):
        return f"<Section(id={self.id}, batch={self.batch_id}, order={self.order})>"
