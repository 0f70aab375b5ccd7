"""User model - Students and the teacher (admin) account"""
from sqlalchemy import Column, String, DateTime, CheckConstraint, Index, Uuid
import uuid

from teachhub.database import Base, utcnow

USER_ROLES = ("student", "admin")


class User(Base):
    """Platform identity; role is fixed at creation"""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    email = Column(String(320), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=True)
    role = Column(
        String(20),
        CheckConstraint("role IN ('student', 'admin')", name="ck_users_role"),
        nullable=False,
        default="student",
    )
    # Opaque bearer token issued by the auth collaborator
    access_token = Column(String(255), unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_users_role", "role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
