"""Response models shared across routers"""
import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Standard response wrapper"""
    data: T


class MessageResponse(BaseModel):
    message: str


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class UserSummary(ORMModel):
    id: uuid.UUID
    name: str
    email: str


class StudentOut(UserSummary):
    role: str
    created_at: datetime


class BatchOut(ORMModel):
    id: uuid.UUID
    title: str
    description: str
    thumbnail_url: Optional[str] = None
    instructor_id: uuid.UUID
    instructor_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BatchSummary(ORMModel):
    id: uuid.UUID
    title: str
    description: str


class LessonOut(ORMModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    section_id: uuid.UUID
    order: int
    duration: int
    kind: str
    video_url: Optional[str] = None
    is_live_enabled: bool
    live_platform: Optional[str] = None
    live_join_url: Optional[str] = None
    live_start_at: Optional[datetime] = None
    live_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SectionOut(ORMModel):
    id: uuid.UUID
    title: str
    order: int
    batch_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class SectionWithLessons(SectionOut):
    lessons: List[LessonOut] = Field(default_factory=list)
    lesson_count: int = 0
    total_duration: int = 0


class NoteOut(ORMModel):
    id: uuid.UUID
    title: str
    description: str
    file_url: str
    lesson_id: uuid.UUID
    created_at: datetime


class EnrollmentOut(ORMModel):
    id: uuid.UUID
    user_id: uuid.UUID
    batch_id: uuid.UUID
    status: str
    created_at: datetime
    updated_at: datetime


class EnrollmentWithBatch(EnrollmentOut):
    batch: Optional[BatchSummary] = None


class EnrollmentWithUser(EnrollmentOut):
    user: Optional[UserSummary] = None
    batch: Optional[BatchSummary] = None


class DeletionSummary(BaseModel):
    id: uuid.UUID
    message: str
    deleted: dict = Field(default_factory=dict)


def enrollment_with_batch(row: dict) -> EnrollmentWithBatch:
    item = EnrollmentWithBatch.model_validate(row["enrollment"])
    if row.get("batch") is not None:
        item.batch = BatchSummary.model_validate(row["batch"])
    return item


def enrollment_with_user(row: dict) -> EnrollmentWithUser:
    item = EnrollmentWithUser.model_validate(row["enrollment"])
    if row.get("user") is not None:
        item.user = UserSummary.model_validate(row["user"])
    if row.get("batch") is not None:
        item.batch = BatchSummary.model_validate(row["batch"])
    return item
