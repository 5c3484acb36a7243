# services/orders.py

import re
from typing import Optional

from fastapi import HTTPException
from sqlmodel import Session, select

from core.logging_config import logger
from core.utils import clean_text, utcnow
from models.enums import OrderStatus
from models.order import Order, OrderCreate, OrderRead, OrderWithCustomer
from models.user import User


ORDER_NUMBER_PREFIX = "MQ_"
FIRST_ORDER_NUMBER = 1001


# -----------------------------------------------------
# Order numbers: MQ_1001, MQ_1002, ...
# -----------------------------------------------------
def next_order_number(session: Session) -> str:
    last = session.exec(select(Order).order_by(Order.created_at.desc())).first()

    next_number = FIRST_ORDER_NUMBER
    if last and last.order_number:
        digits = re.sub(r"[^\d]", "", last.order_number)
        if digits:
            next_number = int(digits) + 1

    return f"{ORDER_NUMBER_PREFIX}{next_number}"


# -----------------------------------------------------
# Field normalization
# -----------------------------------------------------
def _positive_int(value, default: int = 1) -> int:
    try:
        return max(1, int(str(value).strip()))
    except (TypeError, ValueError):
        return default


def _float(value, default: Optional[float] = 0.0) -> Optional[float]:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return default


def _upper(value: Optional[str], default: str, replace: tuple = ()) -> str:
    text = clean_text(value)
    if not text:
        return default
    text = text.upper()
    if replace:
        text = re.sub(replace[0], replace[1], text)
    return text


def build_order(session: Session, user_id: str, payload: OrderCreate) -> Order:
    """
    Validate an intake payload and build (not persist) the Order row.
    """
    customer_name = clean_text(payload.customer_name)
    customer_email = clean_text(payload.customer_email)

    if not customer_name:
        raise HTTPException(400, "Customer name is required")
    if not customer_email:
        raise HTTPException(400, "Customer email is required")

    total_price = _float(payload.total_price, None)
    if total_price is None or total_price <= 0:
        raise HTTPException(400, "Valid total price is required")

    service_type = clean_text(payload.service_type) or "DOCUMENT_PRINTING"
    delivery = clean_text(payload.delivery_type) or "pickup"

    return Order(
        user_id=user_id,
        order_number=next_order_number(session),
        customer_name=customer_name,
        customer_email=customer_email.lower(),
        customer_phone=clean_text(payload.customer_phone),
        service_type=service_type,
        paper_size=_upper(payload.paper_size, "A4"),
        color_type=_upper(payload.color_type, "BLACK_AND_WHITE", (r"\s+", "_")),
        copies=_positive_int(payload.copies),
        pages=_positive_int(payload.pages),
        binding_type=_upper(payload.binding_type, "NONE", (r"-", "_")),
        file_url=clean_text(payload.file_url),
        file_name=clean_text(payload.file_name) or "document.pdf",
        file_path=clean_text(payload.file_path),
        price_per_page=_float(payload.price_per_page) or 0.0,
        total_price=total_price,
        notes=clean_text(payload.notes) or "",
        admin_notes=clean_text(payload.admin_notes) or f"Service: {service_type}\nDelivery: {delivery}",
        payment_proof_url=clean_text(payload.payment_proof_url),
        payment_reference=clean_text(payload.payment_reference),
        status=OrderStatus.PENDING.value,
    )


def create_order(session: Session, user_id: str, payload: OrderCreate) -> Order:
    # Token may outlive the account
    if session.get(User, user_id) is None:
        raise HTTPException(404, "User not found")

    order = build_order(session, user_id, payload)
    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info(f"Order created: {order.order_number} ({order.id}) for user {user_id}")
    return order


def parse_status(value: Optional[str]) -> Optional[OrderStatus]:
    if value is None:
        return None
    try:
        return OrderStatus(value)
    except ValueError:
        raise HTTPException(400, "Invalid status")


# -----------------------------------------------------
# Serialization
# -----------------------------------------------------
def to_read(order: Order) -> dict:
    return OrderRead.model_validate(order).model_dump()


def to_read_with_customer(order: Order, user: Optional[User]) -> dict:
    data = OrderRead.model_validate(order).model_dump()
    data["user"] = {"id": user.id, "name": user.name, "email": user.email} if user else None
    return OrderWithCustomer.model_validate(data).model_dump()


def touch(order: Order) -> None:
    order.updated_at = utcnow()
