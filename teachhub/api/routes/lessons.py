"""
Lesson API Endpoints

POST   /api/v1/lessons/recorded             - Create recorded lesson (admin)
POST   /api/v1/lessons/live                 - Schedule live class (admin)
GET    /api/v1/lessons/section/{section_id} - Lessons of a section (enrolled or admin)
GET    /api/v1/lessons/{id}                 - Lesson detail (enrolled or admin)
PUT    /api/v1/lessons/{id}                 - Partial update (admin)
PUT    /api/v1/lessons/{id}/live-status     - scheduled / live / ended (admin)
PUT    /api/v1/lessons/{id}/recording       - Attach live class recording (admin)
DELETE /api/v1/lessons/{id}                 - Delete lesson and notes (admin)
"""
import uuid
from datetime import datetime
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.api.auth import get_optional_user, require_admin
from teachhub.api.schemas import DataResponse, DeletionSummary, LessonOut
from teachhub.database import get_db
from teachhub.models.user import User
from teachhub.services.lesson_service import get_lesson_service

router = APIRouter(prefix="/api/v1/lessons", tags=["lessons"])


# Request models
class CreateRecordedLessonRequest(BaseModel):
    """Video comes from the upload service as a (url, storage key) pair"""
    section_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: Optional[str] = None
    video_storage_key: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0, description="Seconds")
    order: Optional[int] = Field(None, ge=0)


class CreateLiveLessonRequest(BaseModel):
    section_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    live_platform: str = "other"
    live_join_url: Optional[str] = None
    live_start_at: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0, description="Seconds")
    order: Optional[int] = Field(None, ge=0)


class UpdateLessonRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    order: Optional[int] = Field(None, ge=0)
    duration: Optional[int] = None
    live_platform: Optional[str] = None
    live_join_url: Optional[str] = None
    live_start_at: Optional[datetime] = None


class LiveStatusRequest(BaseModel):
    status: Literal["scheduled", "live", "ended"]


class RecordingRequest(BaseModel):
    video_url: Optional[str] = None
    video_storage_key: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0, description="Seconds")


@router.post("/recorded", response_model=DataResponse[LessonOut], status_code=status.HTTP_201_CREATED)
async def create_recorded_lesson(
    request: CreateRecordedLessonRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a video lesson; approved students get a lesson_uploaded notification."""
    lesson = await get_lesson_service().create_recorded_lesson(
        db,
        section_id=request.section_id,
        title=request.title,
        description=request.description,
        video_url=request.video_url,
        video_storage_key=request.video_storage_key,
        duration=request.duration,
        order=request.order,
    )
    return DataResponse(data=LessonOut.model_validate(lesson))


@router.post("/live", response_model=DataResponse[LessonOut], status_code=status.HTTP_201_CREATED)
async def create_live_lesson(
    request: CreateLiveLessonRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Schedule a live class; approved students get a live_scheduled notification."""
    lesson = await get_lesson_service().create_live_lesson(
        db,
        section_id=request.section_id,
        title=request.title,
        description=request.description,
        platform=request.live_platform,
        join_url=request.live_join_url,
        start_at=request.live_start_at,
        duration=request.duration,
        order=request.order,
    )
    return DataResponse(data=LessonOut.model_validate(lesson))


@router.get("/section/{section_id}", response_model=DataResponse[List[LessonOut]])
async def list_lessons(
    section_id: uuid.UUID = Path(..., description="Section UUID"),
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    lessons = await get_lesson_service().list_lessons(db, section_id, user)
    return DataResponse(data=[LessonOut.model_validate(lesson) for lesson in lessons])


@router.get("/{lesson_id}", response_model=DataResponse[LessonOut])
async def get_lesson(
    lesson_id: uuid.UUID = Path(..., description="Lesson UUID"),
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    lesson = await get_lesson_service().get_lesson(db, lesson_id, user)
    return DataResponse(data=LessonOut.model_validate(lesson))


@router.put("/{lesson_id}", response_model=DataResponse[LessonOut])
async def update_lesson(
    request: UpdateLessonRequest,
    lesson_id: uuid.UUID = Path(..., description="Lesson UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    lesson = await get_lesson_service().update_lesson(db, lesson_id, request.model_dump(exclude_unset=True))
    return DataResponse(data=LessonOut.model_validate(lesson))


@router.put("/{lesson_id}/live-status", response_model=DataResponse[LessonOut])
async def set_live_status(
    request: LiveStatusRequest,
    lesson_id: uuid.UUID = Path(..., description="Lesson UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Going live notifies approved students with live_started."""
    lesson = await get_lesson_service().set_live_status(db, lesson_id, request.status)
    return DataResponse(data=LessonOut.model_validate(lesson))


@router.put("/{lesson_id}/recording", response_model=DataResponse[LessonOut])
async def attach_recording(
    request: RecordingRequest,
    lesson_id: uuid.UUID = Path(..., description="Lesson UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    lesson = await get_lesson_service().attach_recording(
        db,
        lesson_id,
        video_url=request.video_url,
        video_storage_key=request.video_storage_key,
        duration=request.duration,
    )
    return DataResponse(data=LessonOut.model_validate(lesson))


@router.delete("/{lesson_id}", response_model=DataResponse[DeletionSummary])
async def delete_lesson(
    lesson_id: uuid.UUID = Path(..., description="Lesson UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    report = await get_lesson_service().delete_lesson(db, lesson_id)
    return DataResponse(data=DeletionSummary(
        id=lesson_id,
        message="Lesson deleted successfully",
        deleted=report.as_dict(),
    ))
