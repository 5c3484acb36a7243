# models/file_purge.py

from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel, Field

from core.utils import new_id, utcnow


class FilePurge(SQLModel, table=True):
    """
    Storage object waiting to be removed after a soft delete.
    Drained by the scheduler, never by a request.
    """
    __tablename__ = "file_purges"

    id: str = Field(default_factory=new_id, primary_key=True)
    path: str
    order_id: Optional[str] = Field(default=None, index=True)
    queued_at: datetime = Field(default_factory=utcnow, nullable=False)
    purged_at: Optional[datetime] = Field(default=None, index=True)
