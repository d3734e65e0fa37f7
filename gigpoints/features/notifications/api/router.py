"""
notifications router
--------------------
Purpose:
    Notification list, unread badge, read/delete actions and the banner
    poll used by the client's notification context.
"""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel

from gigpoints.auth.verify import current_user_id
from gigpoints.dependencies import get_notification_service
from gigpoints.features.notifications.services import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])

DisplayType = Literal["success", "info", "warning", "error", "rank"]


class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    type: DisplayType
    created_at: datetime
    is_read: bool


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class BannerResponse(BaseModel):
    id: str
    title: str
    message: str
    type: DisplayType
    duration_ms: int


class ActionResponse(BaseModel):
    success: bool


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    notifications = await service.list_notifications(user_id, limit)
    return NotificationListResponse(
        notifications=[
            NotificationResponse(
                id=n.id,
                title=n.title,
                message=n.message,
                type=n.type,
                created_at=n.created_at,
                is_read=n.is_read,
            )
            for n in notifications
        ],
        unread_count=sum(1 for n in notifications if not n.is_read),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user_id: str = Depends(current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    return UnreadCountResponse(unread_count=await service.unread_count(user_id))


@router.post("/read-all", response_model=ActionResponse)
async def mark_all_read(
    user_id: str = Depends(current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    if not await service.mark_all_as_read(user_id):
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Could not update notifications")
    return ActionResponse(success=True)


@router.post("/{notification_id}/read", response_model=ActionResponse)
async def mark_read(
    notification_id: str,
    user_id: str = Depends(current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    if not await service.mark_as_read(user_id, notification_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Notification not found")
    return ActionResponse(success=True)


@router.delete("/{notification_id}", response_model=ActionResponse)
async def delete_notification(
    notification_id: str,
    user_id: str = Depends(current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    if not await service.delete_notification(user_id, notification_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Notification not found")
    return ActionResponse(success=True)


@router.get("/banner", response_model=BannerResponse | None)
async def next_banner(
    user_id: str = Depends(current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    banner = await service.next_banner(user_id)
    if banner is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return BannerResponse(
        id=banner.id,
        title=banner.title,
        message=banner.message,
        type=banner.type,
        duration_ms=banner.duration_ms,
    )
