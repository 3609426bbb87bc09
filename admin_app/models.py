"""Domain models for the admin console."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from admin_app.constant import DEFAULT_DAY_SLOT, ROLE_SUPER_ADMIN, WEEKDAYS


@dataclass
class TimeSlot:
    """One open/close interval, times as HH:MM strings."""

    open: str
    close: str

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> TimeSlot:
        return cls(
            open=str(raw.get("open") or DEFAULT_DAY_SLOT["open"]),
            close=str(raw.get("close") or DEFAULT_DAY_SLOT["close"]),
        )

    def to_dict(self) -> dict[str, str]:
        return {"open": self.open, "close": self.close}


@dataclass
class DaySchedule:
    """Open flag and ordered slots for a weekday."""

    is_open: bool = False
    slots: list[TimeSlot] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> DaySchedule:
        if not raw:
            return cls()
        slots = [TimeSlot.from_dict(dict(slot)) for slot in raw.get("slots") or []]
        return cls(is_open=bool(raw.get("isOpen", False)), slots=slots)

    def to_dict(self) -> dict[str, Any]:
        return {"isOpen": self.is_open, "slots": [slot.to_dict() for slot in self.slots]}


@dataclass
class WorkingHours:
    """Weekly schedule keyed by lowercase weekday name."""

    days: dict[str, DaySchedule] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> WorkingHours:
        return cls(days={day: DaySchedule.from_dict(raw.get(day)) for day in WEEKDAYS})

    def to_dict(self) -> dict[str, Any]:
        return {day: self.day(day).to_dict() for day in WEEKDAYS}

    def day(self, name: str) -> DaySchedule:
        schedule = self.days.get(name)
        if schedule is None:
            schedule = DaySchedule()
            self.days[name] = schedule
        return schedule

    def clone(self) -> WorkingHours:
        """Deep copy with no shared slot objects."""
        return WorkingHours.from_dict(self.to_dict())

    def serialized(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


@dataclass(frozen=True)
class OrderItem:
    name: str
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


@dataclass
class Order:
    """Read-only view over an order document."""

    order_id: str
    status: str
    order_type: str
    total_amount: float
    branch_ids: list[str] = field(default_factory=list)
    customer_name: str = "Guest"
    items: list[OrderItem] = field(default_factory=list)
    timestamp: datetime | None = None
    rider_id: str = ""
    daily_order_number: str = ""
    cancellation_reason: str | None = None
    auto_assign_started: bool = False
    subtotal: float = 0.0
    delivery_fee: float = 0.0

    @classmethod
    def from_document(cls, order_id: str, data: dict[str, Any] | None) -> Order:
        data = data or {}
        items = []
        for raw in data.get("items") or []:
            raw = dict(raw)
            items.append(
                OrderItem(
                    name=str(raw.get("name") or "Item"),
                    quantity=_as_int(raw.get("quantity", raw.get("qty")), 1),
                    price=_as_float(raw.get("price")),
                )
            )
        timestamp = data.get("timestamp")
        return cls(
            order_id=order_id,
            status=str(data.get("status") or "unknown"),
            order_type=str(data.get("Order_type") or ""),
            total_amount=_as_float(data.get("totalAmount")),
            branch_ids=[str(b) for b in data.get("branchIds") or []],
            customer_name=str(data.get("customerName") or "Guest"),
            items=items,
            timestamp=timestamp if isinstance(timestamp, datetime) else None,
            rider_id=str(data.get("riderId") or ""),
            daily_order_number=str(data.get("dailyOrderNumber") or ""),
            cancellation_reason=data.get("cancellationReason"),
            auto_assign_started="autoAssignStarted" in data,
            subtotal=_as_float(data.get("subtotal")),
            delivery_fee=_as_float(data.get("deliveryFee")),
        )


@dataclass(frozen=True)
class Driver:
    driver_id: str
    name: str
    status: str
    is_available: bool
    branch_ids: tuple[str, ...] = ()

    @classmethod
    def from_document(cls, driver_id: str, data: dict[str, Any] | None) -> Driver:
        data = data or {}
        return cls(
            driver_id=driver_id,
            name=str(data.get("name") or "Unnamed Driver"),
            status=str(data.get("status") or "offline"),
            is_available=bool(data.get("isAvailable", False)),
            branch_ids=tuple(str(b) for b in data.get("branchIds") or []),
        )


@dataclass(frozen=True)
class UserScope:
    """Role and branch membership of the signed-in staff member."""

    email: str
    role: str
    branch_ids: tuple[str, ...] = ()

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    @property
    def branch_id(self) -> str | None:
        return self.branch_ids[0] if self.branch_ids else None

    @property
    def is_multi_branch(self) -> bool:
        return self.is_super_admin and len(self.branch_ids) > 1


@dataclass(frozen=True)
class AllBranches:
    """No branch restriction beyond the caller's own scope."""


@dataclass(frozen=True)
class SpecificBranch:
    branch_id: str


BranchFilter = AllBranches | SpecificBranch

ALL_BRANCHES = AllBranches()


@dataclass(frozen=True)
class LoginAttempts:
    """Locally persisted failed-login record."""

    failed_count: int = 0
    locked_until: datetime | None = None

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until

    def is_expired(self, now: datetime) -> bool:
        return self.locked_until is not None and now >= self.locked_until


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
