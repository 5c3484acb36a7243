# routers/notifications.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from core.logging_config import logger
from core.policy import Action, ResourceKind
from core.utils import clean_text
from database import get_session
from dependencies.auth import can, require
from models.auth import Principal
from models.notification import Notification, NotificationCreate, NotificationRead, NotificationReadUpdate
from models.user import User


router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"],
)


def _serialize(notification: Notification, user: User = None) -> dict:
    data = NotificationRead(
        id=notification.id,
        user_id=notification.user_id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        data=notification.data or {},
        is_read=notification.is_read,
        created_at=notification.created_at,
        user={"name": user.name, "email": user.email} if user else None,
    )
    return data.model_dump()


def _load(session: Session, notification_id: str) -> Notification:
    notification = session.get(Notification, notification_id)
    if not notification:
        raise HTTPException(404, "Notification not found")
    return notification


# -----------------------------------------------------
# LIST  (admin: everything, staff: own)
# -----------------------------------------------------
@router.get("", summary="List notifications")
def list_notifications(
    principal: Principal = Depends(require(ResourceKind.notification, Action.list)),
    session: Session = Depends(get_session),
):
    query = (
        select(Notification, User)
        .join(User, User.id == Notification.user_id, isouter=True)
        .order_by(Notification.created_at.desc())
    )
    if not can(principal, ResourceKind.notification, Action.list_all):
        query = query.where(Notification.user_id == principal.id)

    return [_serialize(n, u) for n, u in session.exec(query).all()]


# -----------------------------------------------------
# CREATE
# -----------------------------------------------------
@router.post("", summary="Create a notification for the caller")
def create_notification(
    payload: NotificationCreate,
    principal: Principal = Depends(require(ResourceKind.notification, Action.create)),
    session: Session = Depends(get_session),
):
    kind = clean_text(payload.type)
    title = clean_text(payload.title)
    message = clean_text(payload.message)

    if not kind or not title or not message:
        raise HTTPException(400, "Type, title, and message are required")

    notification = Notification(
        user_id=principal.id,
        type=kind,
        title=title,
        message=message,
        data=payload.data or {},
    )
    session.add(notification)
    session.commit()
    session.refresh(notification)

    logger.info(f"Notification {notification.id} created by {principal.id}")
    return {"success": True, "notification": _serialize(notification)}


# -----------------------------------------------------
# MARK READ / UNREAD
# -----------------------------------------------------
@router.patch("/{notification_id}", summary="Mark a notification read or unread")
def update_notification(
    notification_id: str,
    payload: NotificationReadUpdate,
    principal: Principal = Depends(require(ResourceKind.notification, Action.update)),
    session: Session = Depends(get_session),
):
    notification = _load(session, notification_id)
    notification.is_read = payload.is_read
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return {"success": True, "notification": _serialize(notification)}


@router.delete("/{notification_id}", summary="Delete a notification")
def delete_notification(
    notification_id: str,
    principal: Principal = Depends(require(ResourceKind.notification, Action.delete)),
    session: Session = Depends(get_session),
):
    notification = _load(session, notification_id)
    session.delete(notification)
    session.commit()
    return {"success": True, "message": "Notification deleted"}
