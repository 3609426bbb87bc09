"""Status and order-type normalization helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from admin_app.constant import (
    ORDER_TYPE_DELIVERY,
    ORDER_TYPE_DINE_IN,
    ORDER_TYPE_PICKUP,
    ORDER_TYPE_TAKEAWAY,
    STATUS_PICKED_UP,
    STATUS_PICKED_UP_LEGACY,
    TERMINAL_STATUSES,
)

ORDER_NUMBER_LOADING_TEXT = "Generating..."


def normalize_status(status: str | None) -> str:
    """Map legacy spellings onto the canonical status value."""
    if not status:
        return ""
    if status.lower() == STATUS_PICKED_UP_LEGACY:
        return STATUS_PICKED_UP
    return status


def status_equals(left: str | None, right: str | None) -> bool:
    return normalize_status(left) == normalize_status(right)


def is_terminal_status(status: str | None) -> bool:
    normalized = normalize_status(status)
    return normalized in TERMINAL_STATUSES or normalized == STATUS_PICKED_UP


def normalize_order_type(order_type: str | None) -> str:
    """Collapse dine-in/pickup/takeaway spelling variants. Missing means delivery."""
    if not order_type:
        return ORDER_TYPE_DELIVERY

    cleaned = order_type.lower().replace("-", "_").replace(" ", "_")
    if cleaned in {"dinein", "dine_in", "dine"}:
        return ORDER_TYPE_DINE_IN
    if cleaned in {"pickup", "pick_up"}:
        return ORDER_TYPE_PICKUP
    if cleaned in {"takeaway", "take_away"}:
        return ORDER_TYPE_TAKEAWAY
    return cleaned


def is_delivery_order(order_type: str | None) -> bool:
    return normalize_order_type(order_type) == ORDER_TYPE_DELIVERY


def is_dine_in_order(order_type: str | None) -> bool:
    return normalize_order_type(order_type) == ORDER_TYPE_DINE_IN


def is_pickup_order(order_type: str | None) -> bool:
    return normalize_order_type(order_type) in {ORDER_TYPE_PICKUP, ORDER_TYPE_TAKEAWAY}


def completion_label(order_type: str | None) -> str:
    if is_dine_in_order(order_type):
        return "Served to Table"
    if is_pickup_order(order_type):
        return "Handed to Customer"
    return "Mark as Delivered"


def display_order_number(data: dict[str, Any] | None, order_id: str | None = None, now: datetime | None = None) -> str:
    """
    Human order number for a document.

    The daily number is assigned server-side shortly after creation, so very
    young orders show a loading label instead of the raw id.
    """
    if data is None:
        return ORDER_NUMBER_LOADING_TEXT

    daily = data.get("dailyOrderNumber")
    if daily is not None and str(daily):
        return str(daily)

    timestamp = data.get("timestamp")
    if isinstance(timestamp, datetime):
        current = now or datetime.now(timestamp.tzinfo or timezone.utc)
        if (current - timestamp).total_seconds() < 5:
            return ORDER_NUMBER_LOADING_TEXT

    if order_id:
        return f"#{order_id[:6].upper()}"
    return ORDER_NUMBER_LOADING_TEXT
