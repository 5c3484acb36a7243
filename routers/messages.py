# routers/messages.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from core.logging_config import logger
from core.policy import Action, ResourceKind, ResourceRef
from core.utils import clean_text, utcnow
from database import get_session
from dependencies.auth import enforce, require
from models.auth import Principal
from models.enums import MANUAL_MESSAGE_STATUSES, MessageStatus
from models.message import (
    Message,
    MessageCreate,
    MessageRespond,
    MessageStatusUpdate,
    MessageResponse,
)
from models.user import User
from services import messages as message_service

router = APIRouter(
    prefix="/messages",
    tags=["Messages"],
)


def _load_message(session: Session, message_id: str) -> Message:
    message = message_service.find_message(session, message_id)
    if not message:
        raise HTTPException(404, "Message not found")
    return message


# -----------------------------------------------------
# Customer side
# -----------------------------------------------------
@router.get("", summary="List the caller's own messages")
def list_my_messages(
    principal: Principal = Depends(require(ResourceKind.message, Action.list_own)),
    session: Session = Depends(get_session),
):
    """Messages opened by the caller, newest first, with responses."""
    rows = session.exec(
        select(Message)
        .where(Message.user_id == principal.id)
        .order_by(Message.created_at.desc())
    ).all()
    return message_service.serialize_messages(session, rows, include_sender=False)


@router.post("", status_code=201, summary="Open a support message")
def create_message(
    payload: MessageCreate,
    principal: Principal = Depends(require(ResourceKind.message, Action.create)),
    session: Session = Depends(get_session),
):
    """
    Any authenticated user may write in. The message belongs to the
    caller and starts as PENDING.
    """
    subject = clean_text(payload.subject)
    body = clean_text(payload.message)
    if not subject or not body:
        raise HTTPException(400, "Subject and message required")

    if session.get(User, principal.id) is None:
        raise HTTPException(404, "User not found")

    message = Message(
        subject=subject,
        message=body,
        user_id=principal.id,
        status=MessageStatus.PENDING.value,
    )
    session.add(message)
    session.commit()
    session.refresh(message)

    logger.info(f"User {principal.id} ({principal.role}) opened message {message.id}")
    return message_service.serialize_message(session, message, include_sender=False)


# -----------------------------------------------------
# Staff / admin side
# -----------------------------------------------------
@router.get("/all", summary="Staff/Admin: list every message")
def list_all_messages(
    principal: Principal = Depends(require(ResourceKind.message, Action.list_all)),
    session: Session = Depends(get_session),
):
    rows = session.exec(select(Message).order_by(Message.created_at.desc())).all()
    return message_service.serialize_messages(session, rows)


@router.get("/{message_id}", summary="Get one message")
def get_message(
    message_id: str,
    principal: Principal = Depends(require(ResourceKind.message, Action.read)),
    session: Session = Depends(get_session),
):
    message = _load_message(session, message_id)
    enforce(
        principal, ResourceKind.message, Action.read,
        ResourceRef(ResourceKind.message, id=message.id, owner_id=message.user_id),
    )
    return message_service.serialize_message(session, message)


@router.patch("/{message_id}", summary="Staff/Admin: update message status")
def update_message_status(
    message_id: str,
    payload: MessageStatusUpdate,
    principal: Principal = Depends(require(ResourceKind.message, Action.update)),
    session: Session = Depends(get_session),
):
    # RESPONDED is reserved for the respond flow
    if payload.status not in [s.value for s in MANUAL_MESSAGE_STATUSES]:
        raise HTTPException(400, "Invalid status")

    message = _load_message(session, message_id)
    message.status = payload.status
    message.updated_at = utcnow()
    session.add(message)
    session.commit()
    session.refresh(message)

    return message_service.serialize_message(session, message)


@router.delete("/{message_id}", summary="Staff/Admin: delete a message")
def delete_message(
    message_id: str,
    principal: Principal = Depends(require(ResourceKind.message, Action.delete)),
    session: Session = Depends(get_session),
):
    message = _load_message(session, message_id)

    for response in session.exec(
        select(MessageResponse).where(MessageResponse.message_id == message.id)
    ).all():
        session.delete(response)
    session.delete(message)
    session.commit()

    logger.info(f"Message {message_id} deleted by {principal.id}")
    return {"success": True, "message": "Message deleted"}


@router.post("/{message_id}/respond", summary="Staff/Admin: respond to a message")
def respond_to_message(
    message_id: str,
    payload: MessageRespond,
    principal: Principal = Depends(require(ResourceKind.message, Action.respond)),
    session: Session = Depends(get_session),
):
    """
    Adds a response row and moves the message to RESPONDED.
    Both writes commit together or not at all.
    """
    text = clean_text(payload.message)
    if not text:
        raise HTTPException(400, "Response message is required")

    message = _load_message(session, message_id)
    message_service.respond(session, message, principal.id, text)

    return message_service.serialize_message(session, message)
