# services/messages.py

from typing import Dict, Iterable, List, Optional

from sqlmodel import Session, select

from core.logging_config import logger
from core.utils import utcnow
from models.enums import MessageStatus
from models.message import Message, MessageResponse
from models.user import User


def _participants(session: Session, user_ids: Iterable[str]) -> Dict[str, dict]:
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    users = session.exec(select(User).where(User.id.in_(ids))).all()
    return {u.id: {"id": u.id, "name": u.name, "email": u.email} for u in users}


def serialize_messages(session: Session, messages: List[Message], include_sender: bool = True) -> List[dict]:
    """
    Messages with their responses (oldest first) and, optionally,
    the sender. Batched: one query for responses, one for users.
    """
    if not messages:
        return []

    message_ids = [m.id for m in messages]
    responses = session.exec(
        select(MessageResponse)
        .where(MessageResponse.message_id.in_(message_ids))
        .order_by(MessageResponse.created_at.asc())
    ).all()

    user_ids = [r.responded_by_id for r in responses]
    if include_sender:
        user_ids += [m.user_id for m in messages]
    people = _participants(session, user_ids)

    by_message: Dict[str, List[dict]] = {mid: [] for mid in message_ids}
    for r in responses:
        by_message[r.message_id].append({
            "id": r.id,
            "message_id": r.message_id,
            "message": r.message,
            "created_at": r.created_at,
            "responded_by": people.get(r.responded_by_id),
        })

    result = []
    for m in messages:
        data = m.model_dump()
        data["user"] = people.get(m.user_id) if include_sender else None
        data["responses"] = by_message[m.id]
        result.append(data)
    return result


def serialize_message(session: Session, message: Message, include_sender: bool = True) -> dict:
    return serialize_messages(session, [message], include_sender)[0]


def respond(session: Session, message: Message, responder_id: str, text: str) -> MessageResponse:
    """
    Attach a response and mark the message RESPONDED.

    Both writes share one transaction: nothing is committed until the
    status change is in place, and any failure rolls both back.
    """
    try:
        response = MessageResponse(
            message_id=message.id,
            responded_by_id=responder_id,
            message=text,
        )
        session.add(response)
        session.flush()

        now = utcnow()
        message.status = MessageStatus.RESPONDED.value
        message.responded_at = now
        message.updated_at = now
        session.add(message)

        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(message)
    logger.info(f"Message {message.id} responded by {responder_id}")
    return response


def find_message(session: Session, message_id: str) -> Optional[Message]:
    return session.get(Message, message_id)
