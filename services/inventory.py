# services/inventory.py

from sqlmodel import Session

from core.logging_config import logger
from models.enums import NotificationType
from models.inventory import InventoryItem
from models.notification import Notification


def queue_low_stock_alert(session: Session, item: InventoryItem, user_id: str) -> bool:
    """
    Add (not commit) a LOW_STOCK notification when the item is at or
    below its minimum. Caller commits it together with the item.
    """
    if not item.is_low_stock:
        return False

    session.add(
        Notification(
            user_id=user_id,
            type=NotificationType.LOW_STOCK.value,
            title="Low Stock Alert",
            message=f"{item.item_name} is running low ({item.quantity} {item.unit} remaining)",
            data={
                "item_id": item.id,
                "item_name": item.item_name,
                "quantity": item.quantity,
                "min_stock_level": item.min_stock_level,
            },
        )
    )
    logger.warning(f"Low stock: {item.item_name} ({item.quantity}/{item.min_stock_level})")
    return True
