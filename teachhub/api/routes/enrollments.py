"""
Enrollment API Endpoints

POST /api/v1/enrollments/{batch_id}        - Request enrollment (student)
GET  /api/v1/enrollments/my                - Caller's enrollments
GET  /api/v1/enrollments/pending           - Pending requests (admin)
PUT  /api/v1/enrollments/{id}/approve      - Approve request (admin)
PUT  /api/v1/enrollments/{id}/reject       - Reject request (admin)
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.api.auth import get_current_user, require_admin
from teachhub.api.schemas import (
    DataResponse,
    EnrollmentOut,
    EnrollmentWithBatch,
    EnrollmentWithUser,
    enrollment_with_batch,
    enrollment_with_user,
)
from teachhub.database import get_db
from teachhub.models.user import User
from teachhub.services.enrollment_service import get_enrollment_service

router = APIRouter(prefix="/api/v1/enrollments", tags=["enrollments"])


@router.get("/my", response_model=DataResponse[List[EnrollmentWithBatch]])
async def my_enrollments(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_enrollment_service().my_enrollments(db, user)
    return DataResponse(data=[enrollment_with_batch(row) for row in rows])


@router.get("/pending", response_model=DataResponse[List[EnrollmentWithUser]])
async def pending_enrollments(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_enrollment_service().pending(db)
    return DataResponse(data=[enrollment_with_user(row) for row in rows])


@router.post("/{batch_id}", response_model=DataResponse[EnrollmentOut], status_code=status.HTTP_201_CREATED)
async def request_enrollment(
    batch_id: uuid.UUID = Path(..., description="Batch UUID"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Creates a pending request; content unlocks once the admin approves it."""
    enrollment = await get_enrollment_service().request_enrollment(db, user, batch_id)
    return DataResponse(data=EnrollmentOut.model_validate(enrollment))


@router.put("/{enrollment_id}/approve", response_model=DataResponse[EnrollmentOut])
async def approve_enrollment(
    enrollment_id: uuid.UUID = Path(..., description="Enrollment UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    enrollment = await get_enrollment_service().approve(db, enrollment_id)
    return DataResponse(data=EnrollmentOut.model_validate(enrollment))


@router.put("/{enrollment_id}/reject", response_model=DataResponse[EnrollmentOut])
async def reject_enrollment(
    enrollment_id: uuid.UUID = Path(..., description="Enrollment UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    enrollment = await get_enrollment_service().reject(db, enrollment_id)
    return DataResponse(data=EnrollmentOut.model_validate(enrollment))
