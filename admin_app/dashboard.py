"""Dashboard aggregates, per-stat view state and the order action table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from admin_app.constant import (
    BILLABLE_STATUSES,
    CANCELLATION_REASONS,
    DRIVER_STATUS_ONLINE,
    MAX_CANCELLATION_REASON,
    OTHER_REASON,
    STATUS_CANCELLED,
    STATUS_DELIVERED,
    STATUS_NEEDS_ASSIGNMENT,
    STATUS_PENDING,
    STATUS_PICKED_UP,
    STATUS_PREPARING,
    STATUS_REFUNDED,
    STATUS_RIDER_ASSIGNED,
)
from admin_app.data import completion_label, is_delivery_order, normalize_status
from admin_app.errors import ValidationError
from admin_app.models import Driver, Order


def count_documents(documents: Iterable[Any]) -> int:
    return sum(1 for _ in documents)


def revenue_total(orders: Iterable[dict[str, Any]]) -> float:
    """Sum totalAmount over billable orders; refunded orders never count."""
    total = 0.0
    for data in orders:
        status = str(data.get("status") or "").lower()
        if status == STATUS_REFUNDED:
            continue
        if status in BILLABLE_STATUSES:
            try:
                total += float(data.get("totalAmount") or 0)
            except (TypeError, ValueError):
                continue
    return total


class StatState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class LiveStat:
    """View state of one independently updating dashboard figure."""

    title: str
    state: StatState = StatState.LOADING
    value: str = ""
    error: str = ""

    def loading(self) -> None:
        self.state = StatState.LOADING
        self.error = ""

    def resolve(self, value: str) -> None:
        self.state = StatState.READY
        self.value = value
        self.error = ""

    def fail(self, error: str) -> None:
        self.state = StatState.ERROR
        self.error = error


@dataclass(frozen=True)
class OrderAction:
    key: str
    label: str
    target_status: str | None = None


ACCEPT = "accept"
COMPLETE = "complete"
ASSIGN_RIDER = "assign_rider"
MARK_PICKED_UP = "picked_up"
MARK_DELIVERED = "deliver"
CANCEL = "cancel"
REPRINT = "reprint"


def order_actions(order: Order) -> list[OrderAction]:
    """Actions offered in the order detail dialog, from status and order type alone."""
    status = normalize_status(order.status)
    lowered = status.lower()
    delivery = is_delivery_order(order.order_type)
    needs_assignment = status == STATUS_NEEDS_ASSIGNMENT
    actions: list[OrderAction] = []

    if lowered not in {STATUS_PENDING, STATUS_CANCELLED, STATUS_REFUNDED}:
        actions.append(OrderAction(REPRINT, "Reprint Receipt"))

    if status == STATUS_PENDING:
        actions.append(OrderAction(ACCEPT, "Accept Order", STATUS_PREPARING))

    if not delivery and (status == STATUS_PREPARING or needs_assignment):
        actions.append(OrderAction(COMPLETE, completion_label(order.order_type), STATUS_DELIVERED))

    if delivery:
        can_assign = status == STATUS_PREPARING or needs_assignment
        if can_assign and not order.auto_assign_started and not order.rider_id:
            label = "Assign Manually" if needs_assignment else "Assign Rider"
            actions.append(OrderAction(ASSIGN_RIDER, label, STATUS_RIDER_ASSIGNED))
        if status == STATUS_RIDER_ASSIGNED:
            actions.append(OrderAction(MARK_PICKED_UP, "Mark as Picked Up", STATUS_PICKED_UP))
        if status == STATUS_PICKED_UP:
            actions.append(OrderAction(MARK_DELIVERED, "Mark as Delivered", STATUS_DELIVERED))

    if lowered not in {STATUS_CANCELLED, STATUS_DELIVERED, STATUS_REFUNDED} and status != STATUS_PICKED_UP:
        actions.append(OrderAction(CANCEL, "Cancel Order", STATUS_CANCELLED))

    return actions


def filter_rider_candidates(drivers: Iterable[Driver], branch_ids: Iterable[str] = ()) -> list[Driver]:
    """Available, online drivers sharing a branch with the order (any branch when none given)."""
    wanted = set(branch_ids)
    result = []
    for driver in drivers:
        if not driver.is_available or driver.status != DRIVER_STATUS_ONLINE:
            continue
        if wanted and not wanted.intersection(driver.branch_ids):
            continue
        result.append(driver)
    return result


def resolve_cancellation_reason(selected: str | None, other_text: str = "") -> str:
    if selected is None or selected not in CANCELLATION_REASONS:
        raise ValidationError("Please select a reason for cancellation")
    if selected != OTHER_REASON:
        return selected

    reason = other_text.strip()
    if not reason:
        raise ValidationError("Please enter a reason")
    if len(reason) > MAX_CANCELLATION_REASON:
        raise ValidationError(f"Reason is too long (max {MAX_CANCELLATION_REASON} characters)")
    return reason
