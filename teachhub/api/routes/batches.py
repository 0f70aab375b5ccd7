"""
Batch API Endpoints

GET    /api/v1/batches        - List batches (public)
GET    /api/v1/batches/{id}   - Batch detail (public)
POST   /api/v1/batches        - Create batch (admin)
PUT    /api/v1/batches/{id}   - Update title/description (admin)
DELETE /api/v1/batches/{id}   - Delete batch and all of its content (admin)
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.api.auth import require_admin
from teachhub.api.schemas import BatchOut, DataResponse, DeletionSummary
from teachhub.database import get_db
from teachhub.models.user import User
from teachhub.services.batch_service import get_batch_service

router = APIRouter(prefix="/api/v1/batches", tags=["batches"])


# Request models
class CreateBatchRequest(BaseModel):
    """Thumbnail comes from the upload service as a (url, storage key) pair"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    thumbnail_url: Optional[str] = None
    thumbnail_storage_key: Optional[str] = None


class UpdateBatchRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


@router.get("", response_model=DataResponse[List[BatchOut]])
async def list_batches(db: AsyncSession = Depends(get_db)):
    """All batches, newest first."""
    rows = await get_batch_service().list_batches(db)

    batches = []
    for row in rows:
        item = BatchOut.model_validate(row["batch"])
        item.instructor_name = row["instructor_name"]
        batches.append(item)
    return DataResponse(data=batches)


@router.get("/{batch_id}", response_model=DataResponse[BatchOut])
async def get_batch(
    batch_id: uuid.UUID = Path(..., description="Batch UUID"),
    db: AsyncSession = Depends(get_db),
):
    batch = await get_batch_service().get_batch(db, batch_id)
    return DataResponse(data=BatchOut.model_validate(batch))


@router.post("", response_model=DataResponse[BatchOut], status_code=status.HTTP_201_CREATED)
async def create_batch(
    request: CreateBatchRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    batch = await get_batch_service().create_batch(
        db,
        instructor=admin,
        title=request.title,
        description=request.description,
        thumbnail_url=request.thumbnail_url,
        thumbnail_storage_key=request.thumbnail_storage_key,
    )
    return DataResponse(data=BatchOut.model_validate(batch))


@router.put("/{batch_id}", response_model=DataResponse[BatchOut])
async def update_batch(
    request: UpdateBatchRequest,
    batch_id: uuid.UUID = Path(..., description="Batch UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Blank title/description values are ignored."""
    batch = await get_batch_service().update_batch(db, batch_id, request.model_dump(exclude_unset=True))
    return DataResponse(data=BatchOut.model_validate(batch))


@router.delete("/{batch_id}", response_model=DataResponse[DeletionSummary])
async def delete_batch(
    batch_id: uuid.UUID = Path(..., description="Batch UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Deletes the batch with its sections, lessons, notes and enrollments."""
    report = await get_batch_service().delete_batch(db, batch_id)
    return DataResponse(data=DeletionSummary(
        id=batch_id,
        message="Batch deleted successfully",
        deleted=report.as_dict(),
    ))
