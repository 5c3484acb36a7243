# models/inventory.py

from typing import Optional
from datetime import datetime

from pydantic import BaseModel
from sqlmodel import SQLModel, Field

from core.utils import new_id, utcnow


class InventoryItem(SQLModel, table=True):
    """Consumable stock (paper, toner, binding supplies)."""
    __tablename__ = "inventory"

    id: str = Field(default_factory=new_id, primary_key=True)
    item_name: str = Field(index=True)
    category: str
    quantity: int = 0
    unit: str
    min_stock_level: int = 0
    last_restocked: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock_level


class InventoryCreate(BaseModel):
    item_name: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    min_stock_level: Optional[int] = None


class InventoryUpdate(BaseModel):
    item_name: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    min_stock_level: Optional[int] = None


class InventoryRead(BaseModel):
    id: str
    item_name: str
    category: str
    quantity: int
    unit: str
    min_stock_level: int
    last_restocked: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
