# app/api/routers/notifications.py
from typing import List

from fastapi import APIRouter, Depends

from app.api.auth import TokenUser, require_admin, require_self_or_admin
from app.api.deps import get_notification_service
from app.domain.schemas import (
    NotificationCreate,
    NotificationResponse,
    UserNotificationOut,
    ReadStateOut,
    MarkAllReadOut,
)
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/admin/send", response_model=NotificationResponse, status_code=201)
def send_notification(
    payload: NotificationCreate,
    admin: TokenUser = Depends(require_admin),
    svc: NotificationService = Depends(get_notification_service),
):
    notification = svc.publish(payload.title, payload.message, payload.type, created_by=admin.id)
    return {"success": True, "notification": notification}


@router.get("/{user_id}", response_model=List[UserNotificationOut])
def list_notifications(
    user_id: int,
    _: TokenUser = Depends(require_self_or_admin),
    svc: NotificationService = Depends(get_notification_service),
):
    return svc.list_for_user(user_id)


@router.post("/{user_id}/read-all", response_model=MarkAllReadOut)
def mark_all_read(
    user_id: int,
    _: TokenUser = Depends(require_self_or_admin),
    svc: NotificationService = Depends(get_notification_service),
):
    return {"success": True, "updated_count": svc.mark_all_read(user_id)}


@router.post("/{user_id}/read/{notification_id}", response_model=ReadStateOut)
def mark_read(
    user_id: int,
    notification_id: int,
    _: TokenUser = Depends(require_self_or_admin),
    svc: NotificationService = Depends(get_notification_service),
):
    return svc.mark_read(user_id, notification_id)
