"""
Admin Analytics API Endpoints

GET /api/v1/analytics/overview             - Platform totals
GET /api/v1/analytics/batches              - Per-batch breakdown
GET /api/v1/analytics/batches/{batch_id}   - One batch with sections and enrollments
GET /api/v1/analytics/students             - Student totals and top students
GET /api/v1/analytics/activity             - Latest enrollments
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.api.auth import require_admin
from teachhub.api.schemas import (
    BatchOut,
    DataResponse,
    EnrollmentWithUser,
    UserSummary,
    enrollment_with_user,
)
from teachhub.database import get_db
from teachhub.models.user import User
from teachhub.services.analytics_service import DEFAULT_ACTIVITY_LIMIT, get_analytics_service

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


class OverviewResponse(BaseModel):
    total_students: int
    total_batches: int
    total_sections: int
    total_lessons: int
    total_notes: int
    total_enrollments: int
    pending_enrollments: int
    approved_enrollments: int
    rejected_enrollments: int


class BatchAnalytics(BaseModel):
    batch_id: uuid.UUID
    title: str
    thumbnail_url: Optional[str] = None
    enrollment_count: int
    approved_count: int
    pending_count: int
    total_sections: int
    total_lessons: int
    total_notes: int
    total_duration: int


class SectionBreakdown(BaseModel):
    section_id: uuid.UUID
    title: str
    order: int
    lesson_count: int
    total_duration: int


class BatchDetailAnalytics(BaseModel):
    batch: BatchOut
    total_sections: int
    total_lessons: int
    total_notes: int
    total_duration: int
    enrollments: List[EnrollmentWithUser]
    approved_count: int
    pending_count: int
    rejected_count: int
    section_breakdown: List[SectionBreakdown]


class TopStudent(BaseModel):
    user: UserSummary
    enrollment_count: int


class StudentAnalytics(BaseModel):
    total_students: int
    avg_enrollments: float
    top_students: List[TopStudent]


@router.get("/overview", response_model=DataResponse[OverviewResponse])
async def overview(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    stats = await get_analytics_service().overview(db)
    return DataResponse(data=OverviewResponse(**stats))


@router.get("/batches", response_model=DataResponse[List[BatchAnalytics]])
async def batch_analytics(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_analytics_service().batch_analytics(db)
    return DataResponse(data=[BatchAnalytics(**row) for row in rows])


@router.get("/batches/{batch_id}", response_model=DataResponse[BatchDetailAnalytics])
async def batch_detail(
    batch_id: uuid.UUID = Path(..., description="Batch UUID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    detail = await get_analytics_service().batch_detail(db, batch_id)
    return DataResponse(data=BatchDetailAnalytics(
        **{key: value for key, value in detail.items() if key not in ("batch", "enrollments", "section_breakdown")},
        batch=BatchOut.model_validate(detail["batch"]),
        enrollments=[enrollment_with_user(row) for row in detail["enrollments"]],
        section_breakdown=[SectionBreakdown(**row) for row in detail["section_breakdown"]],
    ))


@router.get("/students", response_model=DataResponse[StudentAnalytics])
async def student_analytics(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    stats = await get_analytics_service().student_analytics(db)
    return DataResponse(data=StudentAnalytics(
        total_students=stats["total_students"],
        avg_enrollments=stats["avg_enrollments"],
        top_students=[
            TopStudent(user=UserSummary.model_validate(row["user"]), enrollment_count=row["enrollment_count"])
            for row in stats["top_students"]
        ],
    ))


@router.get("/activity", response_model=DataResponse[List[EnrollmentWithUser]])
async def recent_activity(
    limit: int = Query(DEFAULT_ACTIVITY_LIMIT, ge=1, le=100, description="Number of enrollments"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_analytics_service().recent_activity(db, limit=limit)
    return DataResponse(data=[enrollment_with_user(row) for row in rows])
