"""
Student Administration API Endpoints (admin only)

GET    /api/v1/students                          - All students
POST   /api/v1/students/enroll                   - Enroll a student directly (approved)
GET    /api/v1/students/batch/{batch_id}         - Batch roster
GET    /api/v1/students/{id}                     - Student with enrollments
DELETE /api/v1/students/{id}/batches/{batch_id}  - Remove student from batch
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.api.auth import require_admin
from teachhub.api.schemas import (
    DataResponse,
    EnrollmentOut,
    EnrollmentWithBatch,
    EnrollmentWithUser,
    MessageResponse,
    StudentOut,
    enrollment_with_batch,
    enrollment_with_user,
)
from teachhub.database import get_db
from teachhub.models.user import User
from teachhub.services.enrollment_service import get_enrollment_service
from teachhub.services.student_service import get_student_service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


class DirectEnrollRequest(BaseModel):
    student_id: uuid.UUID
    batch_id: uuid.UUID


class StudentDetail(BaseModel):
    student: StudentOut
    enrollments: List[EnrollmentWithBatch]


@router.get("", response_model=DataResponse[List[StudentOut]])
async def list_students(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    students = await get_student_service().list_students(db)
    return DataResponse(data=[StudentOut.model_validate(student) for student in students])


@router.post("/enroll", response_model=DataResponse[EnrollmentOut])
async def enroll_student(
    request: DirectEnrollRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Creates an approved enrollment, or upgrades an existing pending/rejected one."""
    enrollment = await get_enrollment_service().admin_direct_enroll(db, request.student_id, request.batch_id)
    return DataResponse(data=EnrollmentOut.model_validate(enrollment))


@router.get("/batch/{batch_id}", response_model=DataResponse[List[EnrollmentWithUser]])
async def batch_roster(
    batch_id: uuid.UUID = Path(..., description="Batch UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_student_service().students_by_batch(db, batch_id)
    return DataResponse(data=[enrollment_with_user(row) for row in rows])


@router.get("/{student_id}", response_model=DataResponse[StudentDetail])
async def get_student(
    student_id: uuid.UUID = Path(..., description="Student UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    detail = await get_student_service().get_student(db, student_id)
    return DataResponse(data=StudentDetail(
        student=StudentOut.model_validate(detail["student"]),
        enrollments=[enrollment_with_batch(row) for row in detail["enrollments"]],
    ))


@router.delete("/{student_id}/batches/{batch_id}", response_model=DataResponse[MessageResponse])
async def remove_student_from_batch(
    student_id: uuid.UUID = Path(..., description="Student UUID"),
    batch_id: uuid.UUID = Path(..., description="Batch UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await get_enrollment_service().revoke(db, student_id, batch_id)
    return DataResponse(data=MessageResponse(message="Student removed from batch"))
