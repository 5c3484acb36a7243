# models/order.py

from typing import Optional
from datetime import datetime

from pydantic import BaseModel
from sqlmodel import SQLModel, Field

from core.utils import new_id, utcnow
from models.enums import OrderStatus


# =====================================================
# 🖨️ ORDER TABLE
# =====================================================

class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=new_id, primary_key=True)
    order_number: str = Field(index=True)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")

    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None

    service_type: str = "DOCUMENT_PRINTING"
    paper_size: str = "A4"
    color_type: str = "BLACK_AND_WHITE"
    copies: int = 1
    pages: int = 1
    binding_type: str = "NONE"

    # Stored file references (nulled by soft delete)
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_path: Optional[str] = Field(default=None, index=True)

    price_per_page: float = 0
    total_price: float
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    payment_proof_url: Optional[str] = None
    payment_reference: Optional[str] = None

    status: str = Field(default=OrderStatus.PENDING.value, index=True)
    files_deleted_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# =====================================================
# 📥 PAYLOADS
# =====================================================

class OrderCreate(BaseModel):
    """
    Intake payload. Loosely typed on purpose: the storefront and the
    WordPress plugin both send strings for numeric fields.
    """
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    service_type: Optional[str] = None
    paper_size: Optional[str] = None
    color_type: Optional[str] = None
    copies: Optional[int | str] = None
    pages: Optional[int | str] = None
    binding_type: Optional[str] = None
    delivery_type: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    price_per_page: Optional[float | str] = None
    total_price: Optional[float | str] = None
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    payment_proof_url: Optional[str] = None
    payment_reference: Optional[str] = None


class OrderUpdate(BaseModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = None


# =====================================================
# 📤 RESPONSES
# =====================================================

class OrderCustomer(BaseModel):
    id: str
    name: Optional[str] = None
    email: str


class OrderRead(BaseModel):
    id: str
    order_number: str
    user_id: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    service_type: str
    paper_size: str
    color_type: str
    copies: int
    pages: int
    binding_type: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    price_per_page: float
    total_price: float
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    payment_proof_url: Optional[str] = None
    payment_reference: Optional[str] = None
    status: str
    files_deleted_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrderWithCustomer(OrderRead):
    user: Optional[OrderCustomer] = None


class OrderSummary(BaseModel):
    id: str
    order_number: str
    customer_name: str
    total_price: float
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}
