# models/notification.py

from typing import Any, Dict, Optional
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from core.utils import new_id, utcnow


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    type: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    is_read: bool = False
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)


class NotificationCreate(BaseModel):
    type: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class NotificationRead(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    created_at: datetime
    user: Optional[Dict[str, Optional[str]]] = None


class NotificationReadUpdate(BaseModel):
    is_read: bool = True
