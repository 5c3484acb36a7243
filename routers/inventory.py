# routers/inventory.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from core.logging_config import logger
from core.policy import Action, ResourceKind
from core.utils import clean_text, utcnow
from database import get_session
from dependencies.auth import require
from models.auth import Principal
from models.inventory import InventoryCreate, InventoryItem, InventoryRead, InventoryUpdate
from services.inventory import queue_low_stock_alert


router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
)


def _to_read(item: InventoryItem) -> dict:
    data = InventoryRead.model_validate(item).model_dump()
    data["is_low_stock"] = item.is_low_stock
    return data


@router.get("", summary="List inventory items")
def list_inventory(
    principal: Principal = Depends(require(ResourceKind.inventory, Action.list)),
    session: Session = Depends(get_session),
):
    rows = session.exec(select(InventoryItem).order_by(InventoryItem.item_name)).all()
    return [_to_read(i) for i in rows]


@router.post("", summary="Add an inventory item")
def create_inventory_item(
    payload: InventoryCreate,
    principal: Principal = Depends(require(ResourceKind.inventory, Action.create)),
    session: Session = Depends(get_session),
):
    item_name = clean_text(payload.item_name)
    category = clean_text(payload.category)
    unit = clean_text(payload.unit)

    if not item_name or not category or not unit or payload.quantity is None or payload.min_stock_level is None:
        raise HTTPException(400, "Item name, category, quantity, unit, and minimum stock level are required")
    if payload.quantity < 0 or payload.min_stock_level < 0:
        raise HTTPException(400, "Quantity and minimum stock level must not be negative")

    now = utcnow()
    item = InventoryItem(
        item_name=item_name,
        category=category,
        quantity=payload.quantity,
        unit=unit,
        min_stock_level=payload.min_stock_level,
        last_restocked=now,
        created_at=now,
        updated_at=now,
    )
    session.add(item)
    session.flush()

    queue_low_stock_alert(session, item, principal.id)
    session.commit()
    session.refresh(item)

    logger.info(f"Inventory item {item.item_name} created by {principal.id}")
    return {"success": True, "item": _to_read(item)}


@router.patch("/{item_id}", summary="Update an inventory item")
def update_inventory_item(
    item_id: str,
    payload: InventoryUpdate,
    principal: Principal = Depends(require(ResourceKind.inventory, Action.update)),
    session: Session = Depends(get_session),
):
    item = session.get(InventoryItem, item_id)
    if not item:
        raise HTTPException(404, "Inventory item not found")

    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if updates.get("quantity", 0) < 0 or updates.get("min_stock_level", 0) < 0:
        raise HTTPException(400, "Quantity and minimum stock level must not be negative")

    now = utcnow()
    if "quantity" in updates and updates["quantity"] != item.quantity:
        item.last_restocked = now

    for key, value in updates.items():
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        setattr(item, key, value)
    item.updated_at = now

    session.add(item)
    queue_low_stock_alert(session, item, principal.id)
    session.commit()
    session.refresh(item)

    return {"success": True, "item": _to_read(item)}


@router.delete("/{item_id}", summary="Admin: delete an inventory item")
def delete_inventory_item(
    item_id: str,
    principal: Principal = Depends(require(ResourceKind.inventory, Action.delete)),
    session: Session = Depends(get_session),
):
    item = session.get(InventoryItem, item_id)
    if not item:
        raise HTTPException(404, "Inventory item not found")

    session.delete(item)
    session.commit()

    logger.info(f"Inventory item {item_id} deleted by {principal.id}")
    return {"success": True, "message": "Inventory item deleted"}
