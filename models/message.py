# models/message.py

from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field as PydanticField
from sqlmodel import SQLModel, Field

from core.utils import new_id, utcnow
from models.enums import MessageStatus


class Message(SQLModel, table=True):
    """Support message opened by a customer."""
    __tablename__ = "messages"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    subject: str
    message: str
    status: str = Field(default=MessageStatus.PENDING.value, index=True)
    responded_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class MessageResponse(SQLModel, table=True):
    """Staff/admin reply attached to a message."""
    __tablename__ = "message_responses"

    id: str = Field(default_factory=new_id, primary_key=True)
    message_id: str = Field(foreign_key="messages.id", index=True, ondelete="CASCADE")
    responded_by_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    message: str
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# -----------------------------------------------------
# Payloads
# -----------------------------------------------------

class MessageCreate(BaseModel):
    subject: Optional[str] = PydanticField(None, description="Message subject")
    message: Optional[str] = PydanticField(None, description="Message body")


class MessageStatusUpdate(BaseModel):
    status: Optional[str] = None


class MessageRespond(BaseModel):
    message: Optional[str] = PydanticField(None, description="Response body")


# -----------------------------------------------------
# Reads
# -----------------------------------------------------

class Participant(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class MessageResponseRead(BaseModel):
    id: str
    message_id: str
    message: str
    created_at: datetime
    responded_by: Optional[Participant] = None


class MessageRead(BaseModel):
    id: str
    user_id: str
    subject: str
    message: str
    status: str
    responded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[Participant] = None
    responses: List[MessageResponseRead] = []
