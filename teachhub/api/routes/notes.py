"""
Note API Endpoints

POST   /api/v1/notes                    - Attach note to lesson (admin)
GET    /api/v1/notes/lesson/{lesson_id} - Notes of a lesson (enrolled or admin)
GET    /api/v1/notes/{id}/download      - Redirect to the note file (enrolled or admin)
DELETE /api/v1/notes/{id}               - Delete note (admin)
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.api.auth import get_optional_user, require_admin
from teachhub.api.schemas import DataResponse, DeletionSummary, NoteOut
from teachhub.database import get_db
from teachhub.models.user import User
from teachhub.services.note_service import get_note_service

router = APIRouter(prefix="/api/v1/notes", tags=["notes"])


class CreateNoteRequest(BaseModel):
    """File comes from the upload service as a (url, storage key) pair"""
    lesson_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    file_url: Optional[str] = None
    storage_key: Optional[str] = None


@router.post("", response_model=DataResponse[NoteOut], status_code=status.HTTP_201_CREATED)
async def create_note(
    request: CreateNoteRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Approved students of the batch get a note_added notification."""
    note = await get_note_service().create_note(
        db,
        lesson_id=request.lesson_id,
        title=request.title,
        description=request.description,
        file_url=request.file_url,
        storage_key=request.storage_key,
    )
    return DataResponse(data=NoteOut.model_validate(note))


@router.get("/lesson/{lesson_id}", response_model=DataResponse[List[NoteOut]])
async def list_notes(
    lesson_id: uuid.UUID = Path(..., description="Lesson UUID"),
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    notes = await get_note_service().list_notes(db, lesson_id, user)
    return DataResponse(data=[NoteOut.model_validate(note) for note in notes])


@router.get("/{note_id}/download")
async def download_note(
    note_id: uuid.UUID = Path(..., description="Note UUID"),
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    _, file_url = await get_note_service().download_note(db, note_id, user)
    return RedirectResponse(url=file_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.delete("/{note_id}", response_model=DataResponse[DeletionSummary])
async def delete_note(
    note_id: uuid.UUID = Path(..., description="Note UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await get_note_service().delete_note(db, note_id)
    return DataResponse(data=DeletionSummary(
        id=note_id,
        message="Note deleted successfully",
        deleted={"notes": 1},
    ))
