# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    OrderStatus,
    MessageStatus,
    NotificationType,
)

# -------------------------
# User Models
# -------------------------
from .user import (
    User,
    UserRead,
    ProfileRead,
    RegisterRequest,
    LoginRequest,
    ProfileUpdate,
    StaffCreate,
    StaffUpdate,
)

# -------------------------
# Order Models
# -------------------------
from .order import (
    Order,
    OrderCreate,
    OrderUpdate,
    OrderRead,
    OrderWithCustomer,
    OrderSummary,
)

# -------------------------
# Message Models
# -------------------------
from .message import (
    Message,
    MessageResponse,
    MessageCreate,
    MessageStatusUpdate,
    MessageRespond,
    MessageRead,
    MessageResponseRead,
)

# -------------------------
# Notification Models
# -------------------------
from .notification import (
    Notification,
    NotificationCreate,
    NotificationRead,
    NotificationReadUpdate,
)

# -------------------------
# Inventory Models
# -------------------------
from .inventory import (
    InventoryItem,
    InventoryCreate,
    InventoryUpdate,
    InventoryRead,
)

# -------------------------
# Product Models
# -------------------------
from .product import (
    Product,
    ProductCreate,
    ProductUpdate,
    ProductRead,
)

# -------------------------
# Storage bookkeeping
# -------------------------
from .file_purge import FilePurge
