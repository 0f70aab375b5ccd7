"""
Section API Endpoints

POST   /api/v1/sections                  - Create section (admin)
GET    /api/v1/sections/batch/{batch_id} - Sections with lessons (enrolled or admin)
GET    /api/v1/sections/{id}             - Section detail (enrolled or admin)
PUT    /api/v1/sections/{id}             - Update title/order (admin)
DELETE /api/v1/sections/{id}             - Delete section, lessons and notes (admin)
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.api.auth import get_optional_user, require_admin
from teachhub.api.schemas import DataResponse, DeletionSummary, LessonOut, SectionOut, SectionWithLessons
from teachhub.database import get_db
from teachhub.models.user import User
from teachhub.services.section_service import get_section_service

router = APIRouter(prefix="/api/v1/sections", tags=["sections"])


class CreateSectionRequest(BaseModel):
    batch_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    order: Optional[int] = Field(None, ge=0, description="Defaults to the end of the batch")


class UpdateSectionRequest(BaseModel):
    title: Optional[str] = None
    order: Optional[int] = Field(None, ge=0)


@router.post("", response_model=DataResponse[SectionOut], status_code=status.HTTP_201_CREATED)
async def create_section(
    request: CreateSectionRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    section = await get_section_service().create_section(db, request.batch_id, request.title, request.order)
    return DataResponse(data=SectionOut.model_validate(section))


@router.get("/batch/{batch_id}", response_model=DataResponse[List[SectionWithLessons]])
async def list_sections(
    batch_id: uuid.UUID = Path(..., description="Batch UUID"),
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Sections of a batch in display order, each with its lessons,
    lesson_count and total_duration (seconds).
    """
    rows = await get_section_service().list_sections(db, batch_id, user)

    sections = []
    for row in rows:
        item = SectionWithLessons.model_validate(row["section"])
        item.lessons = [LessonOut.model_validate(lesson) for lesson in row["lessons"]]
        item.lesson_count = row["lesson_count"]
        item.total_duration = row["total_duration"]
        sections.append(item)
    return DataResponse(data=sections)


@router.get("/{section_id}", response_model=DataResponse[SectionOut])
async def get_section(
    section_id: uuid.UUID = Path(..., description="Section UUID"),
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    section = await get_section_service().get_section(db, section_id, user)
    return DataResponse(data=SectionOut.model_validate(section))


@router.put("/{section_id}", response_model=DataResponse[SectionOut])
async def update_section(
    request: UpdateSectionRequest,
    section_id: uuid.UUID = Path(..., description="Section UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    section = await get_section_service().update_section(db, section_id, request.model_dump(exclude_unset=True))
    return DataResponse(data=SectionOut.model_validate(section))


@router.delete("/{section_id}", response_model=DataResponse[DeletionSummary])
async def delete_section(
    section_id: uuid.UUID = Path(..., description="Section UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    report = await get_section_service().delete_section(db, section_id)
    return DataResponse(data=DeletionSummary(
        id=section_id,
        message="Section deleted successfully",
        deleted=report.as_dict(),
    ))
