# routers/orders.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from core.logging_config import logger
from core.policy import Action, ResourceKind, ResourceRef
from core.utils import utcnow
from database import get_session
from dependencies.auth import can, enforce, require
from models.auth import Principal
from models.file_purge import FilePurge
from models.order import Order, OrderCreate, OrderUpdate
from models.user import User
from services import orders as order_service


router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
)


def _load_order(session: Session, order_id: str) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Order not found")
    return order


# -----------------------------------------------------
# GET /orders: caller's own orders (staff/admin see all)
# -----------------------------------------------------
@router.get("", summary="List orders visible to the caller")
def list_orders(
    principal: Principal = Depends(require(ResourceKind.order, Action.list_own)),
    session: Session = Depends(get_session),
):
    query = select(Order).order_by(Order.created_at.desc())
    if not can(principal, ResourceKind.order, Action.list_all):
        query = query.where(Order.user_id == principal.id)

    rows = session.exec(query).all()
    logger.info(f"Fetched {len(rows)} orders for {principal.role} {principal.id}")
    return [order_service.to_read(o) for o in rows]


# -----------------------------------------------------
# POST /orders
# -----------------------------------------------------
@router.post("", summary="Place a print order")
def create_order(
    payload: OrderCreate,
    principal: Principal = Depends(require(ResourceKind.order, Action.create)),
    session: Session = Depends(get_session),
):
    order = order_service.create_order(session, principal.id, payload)

    return {
        "success": True,
        "order": {
            "id": order.id,
            "order_number": order.order_number,
            "customer_name": order.customer_name,
            "total_price": order.total_price,
            "status": order.status,
            "created_at": order.created_at,
        },
    }


# -----------------------------------------------------
# GET /orders/all: staff/admin, newest first, with customer
# -----------------------------------------------------
@router.get("/all", summary="Staff/Admin: list every order")
def list_all_orders(
    principal: Principal = Depends(require(ResourceKind.order, Action.list_all)),
    session: Session = Depends(get_session),
):
    rows = session.exec(
        select(Order, User)
        .join(User, User.id == Order.user_id, isouter=True)
        .order_by(Order.created_at.desc())
    ).all()

    logger.info(f"Fetched all {len(rows)} orders for {principal.role}")
    return [order_service.to_read_with_customer(order, user) for order, user in rows]


# -----------------------------------------------------
# GET /orders/{order_id}: staff/admin or the owner
# -----------------------------------------------------
@router.get("/{order_id}", summary="Get one order")
def get_order(
    order_id: str,
    principal: Principal = Depends(require(ResourceKind.order, Action.read)),
    session: Session = Depends(get_session),
):
    order = _load_order(session, order_id)
    enforce(
        principal, ResourceKind.order, Action.read,
        ResourceRef(ResourceKind.order, id=order.id, owner_id=order.user_id),
    )
    return order_service.to_read(order)


# -----------------------------------------------------
# PATCH /orders/{order_id}: status / admin notes
# -----------------------------------------------------
@router.patch("/{order_id}", summary="Staff/Admin: update order status")
def update_order(
    order_id: str,
    payload: OrderUpdate,
    principal: Principal = Depends(require(ResourceKind.order, Action.update)),
    session: Session = Depends(get_session),
):
    status = order_service.parse_status(payload.status)
    order = _load_order(session, order_id)

    if status:
        order.status = status.value
    if payload.admin_notes:
        order.admin_notes = payload.admin_notes
    order_service.touch(order)

    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.order_number} updated by {principal.id} (status={order.status})")
    return order_service.to_read(order)


# -----------------------------------------------------
# POST /orders/{order_id}/delete-files: soft delete
# -----------------------------------------------------
@router.post("/{order_id}/delete-files", summary="Staff/Admin: soft-delete order files")
def delete_order_files(
    order_id: str,
    principal: Principal = Depends(require(ResourceKind.order, Action.delete_files)),
    session: Session = Depends(get_session),
):
    """
    Marks the files deleted and drops the references. The stored object
    is queued for the purge job instead of being removed inline.
    """
    order = _load_order(session, order_id)
    if order.files_deleted_at is not None:
        raise HTTPException(404, "Order files already deleted")

    if order.file_path:
        session.add(FilePurge(path=order.file_path, order_id=order.id))

    now = utcnow()
    order.files_deleted_at = now
    order.file_url = None
    order.file_name = None
    order.file_path = None
    order.updated_at = now

    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info(f"Files deleted for order {order.id} by {principal.id}")
    return {"success": True, "order": order_service.to_read(order)}
