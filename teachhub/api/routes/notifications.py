"""
Notification Inbox API Endpoints

GET /api/v1/notifications                - Caller's notifications, newest first
GET /api/v1/notifications/unread-count   - Number of unread notifications
GET /api/v1/notifications/live-batches   - Batches with a class live right now
PUT /api/v1/notifications/read-all       - Mark everything read
PUT /api/v1/notifications/{id}/read      - Mark one notification read
"""
import uuid
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from teachhub.api.auth import get_current_user
from teachhub.api.schemas import DataResponse, ORMModel
from teachhub.database import get_db
from teachhub.models.user import User
from teachhub.services.lesson_service import get_lesson_service
from teachhub.services.notification_service import DEFAULT_INBOX_LIMIT, get_notification_service

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


class NotificationOut(ORMModel):
    id: uuid.UUID
    type: str
    message: str
    batch_id: Optional[uuid.UUID] = None
    lesson_id: Optional[uuid.UUID] = None
    batch_title: Optional[str] = None
    read: bool
    created_at: datetime


class InboxResponse(BaseModel):
    notifications: List[NotificationOut]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class LiveBatchesResponse(BaseModel):
    live_batch_ids: List[uuid.UUID]


class ReadAllResponse(BaseModel):
    updated: int


@router.get("", response_model=DataResponse[InboxResponse])
async def list_notifications(
    limit: int = Query(DEFAULT_INBOX_LIMIT, ge=1, le=100, description="Max notifications"),
    unread: bool = Query(False, description="Only unread notifications"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = get_notification_service()
    rows = await service.list_for_user(db, user, limit=limit, unread_only=unread)

    notifications = []
    for row in rows:
        item = NotificationOut.model_validate(row["notification"])
        item.batch_title = row["batch_title"]
        notifications.append(item)

    return DataResponse(data=InboxResponse(
        notifications=notifications,
        unread_count=await service.unread_count(db, user),
    ))


@router.get("/unread-count", response_model=DataResponse[UnreadCountResponse])
async def unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await get_notification_service().unread_count(db, user)
    return DataResponse(data=UnreadCountResponse(unread_count=count))


@router.get("/live-batches", response_model=DataResponse[LiveBatchesResponse])
async def live_batches(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Used by the client to badge batches with a class in progress."""
    batch_ids = await get_lesson_service().live_batch_ids(db, user)
    return DataResponse(data=LiveBatchesResponse(live_batch_ids=batch_ids))


@router.put("/read-all", response_model=DataResponse[ReadAllResponse])
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await get_notification_service().mark_all_read(db, user)
    return DataResponse(data=ReadAllResponse(updated=updated))


@router.put("/{notification_id}/read", response_model=DataResponse[NotificationOut])
async def mark_read(
    notification_id: uuid.UUID = Path(..., description="Notification UUID"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await get_notification_service().mark_read(db, notification_id, user)
    return DataResponse(data=NotificationOut.model_validate(notification))
