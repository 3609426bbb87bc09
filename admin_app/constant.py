"""Editable static collection, status and schedule configuration."""

from __future__ import annotations

COLLECTION_ORDERS = "Orders"
COLLECTION_BRANCH = "Branch"
COLLECTION_DRIVERS = "Drivers"
COLLECTION_MENU_ITEMS = "menu_items"
COLLECTION_STAFF = "staff"
COLLECTION_RIDER_ASSIGNMENTS = "rider_assignments"

ROLE_SUPER_ADMIN = "super_admin"

STATUS_PENDING = "pending"
STATUS_PREPARING = "preparing"
STATUS_PREPARED = "prepared"
STATUS_NEEDS_ASSIGNMENT = "needs_rider_assignment"
STATUS_RIDER_ASSIGNED = "rider_assigned"
STATUS_PICKED_UP = "pickedUp"
STATUS_PICKED_UP_LEGACY = "pickedup"
STATUS_DELIVERED = "delivered"
STATUS_CANCELLED = "cancelled"
STATUS_REFUNDED = "refunded"

TERMINAL_STATUSES: tuple[str, ...] = (STATUS_DELIVERED, STATUS_CANCELLED)

# Statuses that count toward revenue. "refunded" never does.
BILLABLE_STATUSES: frozenset[str] = frozenset({"delivered", "completed", "paid"})

HISTORY_STATUSES: list[str] = [STATUS_DELIVERED, STATUS_CANCELLED]

# Orders in these states can no longer take a rider.
ASSIGNMENT_BLOCKED_STATUSES: frozenset[str] = frozenset(
    {"picked_up", STATUS_PICKED_UP, STATUS_PICKED_UP_LEGACY, "on_the_way", STATUS_DELIVERED, STATUS_CANCELLED}
)

ORDER_TYPE_DELIVERY = "delivery"
ORDER_TYPE_PICKUP = "pickup"
ORDER_TYPE_TAKEAWAY = "takeaway"
ORDER_TYPE_DINE_IN = "dine_in"

DRIVER_STATUS_ONLINE = "online"

CANCELLATION_REASONS: list[str] = [
    "Items Out of Stock",
    "Kitchen Too Busy",
    "Closing Soon / Closed",
    "Invalid Address",
    "Customer Request",
    "Other",
]
OTHER_REASON = "Other"
MAX_CANCELLATION_REASON = 500

WEEKDAYS: list[str] = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DEFAULT_DAY_SLOT: dict[str, str] = {"open": "09:00", "close": "22:00"}
ADDED_SLOT: dict[str, str] = {"open": "09:00", "close": "17:00"}

STATUS_COLORS: dict[str, str] = {
    STATUS_PENDING: "#e0a526",
    STATUS_PREPARING: "#2f6db5",
    STATUS_PREPARED: "#2e9e6a",
    STATUS_NEEDS_ASSIGNMENT: "#e07b26",
    STATUS_RIDER_ASSIGNED: "#6a4fc2",
    STATUS_PICKED_UP: "#3b4cc0",
    STATUS_DELIVERED: "#2e9e4a",
    STATUS_CANCELLED: "#b23a48",
    STATUS_REFUNDED: "#8a8a8a",
}
