from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# Role value written by the old WordPress registration path
LEGACY_CUSTOMER_ROLE = "USER"


# -----------------------------------------------------
# ACCOUNT ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Account role. CUSTOMER is the canonical name for regular accounts."""

    ADMIN = "ADMIN"
    STAFF = "STAFF"
    CUSTOMER = "CUSTOMER"

    @classmethod
    def parse(cls, value) -> "Role":
        """
        Accepts the legacy "USER" spelling written by the old
        WordPress registration path. Raises ValueError otherwise.
        """
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().upper()
        if raw == LEGACY_CUSTOMER_ROLE:
            return cls.CUSTOMER
        return cls(raw)


# -----------------------------------------------------
# ORDER STATUS
# -----------------------------------------------------
class OrderStatus(BaseStrEnum):
    """Workflow state for a print order."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    READY = "READY"
    ON_DELIVERY = "ON_DELIVERY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# -----------------------------------------------------
# MESSAGE STATUS
# -----------------------------------------------------
class MessageStatus(BaseStrEnum):
    """Support message state. RESPONDED is only set by the respond flow."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    RESPONDED = "RESPONDED"
    RESOLVED = "RESOLVED"


# Statuses staff may set by hand
MANUAL_MESSAGE_STATUSES = (
    MessageStatus.PENDING,
    MessageStatus.IN_PROGRESS,
    MessageStatus.RESOLVED,
)


# -----------------------------------------------------
# NOTIFICATION TYPE
# -----------------------------------------------------
class NotificationType(BaseStrEnum):
    LOW_STOCK = "LOW_STOCK"
    ORDER = "ORDER"
    GENERAL = "GENERAL"


# -----------------------------------------------------
# UPLOAD CATEGORY DEFAULT
# -----------------------------------------------------
DEFAULT_UPLOAD_CATEGORY = "document"
