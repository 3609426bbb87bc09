"""Branch working-hours parsing, validation and the editable timing state."""

from __future__ import annotations

import re
from typing import Any

from admin_app.constant import ADDED_SLOT, DEFAULT_DAY_SLOT, WEEKDAYS
from admin_app.errors import ScheduleError
from admin_app.models import DaySchedule, TimeSlot, WorkingHours

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_minutes(value: str) -> int:
    """Minutes since midnight for HH:MM. Unparseable input reads as midnight."""
    try:
        hours, minutes = value.split(":")[:2]
        return int(hours) * 60 + int(minutes)
    except (AttributeError, ValueError):
        return 0


def is_valid_time(value: str) -> bool:
    return bool(_TIME_RE.match(value or ""))


def is_overnight(slot: TimeSlot) -> bool:
    """A slot whose close precedes its open runs past midnight."""
    return parse_minutes(slot.close) < parse_minutes(slot.open)


def slots_overlap(first: TimeSlot, second: TimeSlot) -> bool:
    # Overnight slots are exempt from the check, including against each other.
    if is_overnight(first) or is_overnight(second):
        return False
    open1, close1 = parse_minutes(first.open), parse_minutes(first.close)
    open2, close2 = parse_minutes(second.open), parse_minutes(second.close)
    return open1 < close2 and open2 < close1


def validate_day(schedule: DaySchedule) -> str | None:
    """Return a problem description for an open day, or None when it can be saved."""
    if not schedule.is_open:
        return None
    if not schedule.slots:
        return "At least one slot is required"

    slots = schedule.slots
    for i in range(len(slots)):
        for j in range(i + 1, len(slots)):
            if slots_overlap(slots[i], slots[j]):
                return f"Slot {i + 1} and Slot {j + 1} overlap"
    return None


def validate_week(hours: WorkingHours) -> None:
    """Raise ScheduleError for the first day that cannot be saved."""
    for day in WEEKDAYS:
        problem = validate_day(hours.day(day))
        if problem is not None:
            raise ScheduleError(f"{day.upper()}: {problem}", day=day)


def default_working_hours() -> WorkingHours:
    return WorkingHours(
        days={day: DaySchedule(is_open=True, slots=[TimeSlot(**DEFAULT_DAY_SLOT)]) for day in WEEKDAYS}
    )


class TimingEditor:
    """
    Local editable copy of one branch's weekly schedule.

    ``original`` mirrors what the store holds; ``working`` receives edits.
    Both are independent deep copies so the unsaved-changes flag is a plain
    comparison of their serialized forms.
    """

    def __init__(self) -> None:
        self.branch_id: str | None = None
        self.original = WorkingHours()
        self.working = WorkingHours()
        self.generated_default = False

    def load(self, branch_id: str, document: dict[str, Any] | None) -> None:
        raw = (document or {}).get("workingHours")
        if raw:
            loaded = WorkingHours.from_dict(dict(raw))
            self.generated_default = False
        else:
            loaded = default_working_hours()
            self.generated_default = True

        self.branch_id = branch_id
        self.original = loaded.clone()
        self.working = loaded.clone()

    @property
    def has_unsaved_changes(self) -> bool:
        return self.working.serialized() != self.original.serialized()

    def toggle_day(self, day: str, is_open: bool | None = None) -> None:
        schedule = self._day(day)
        schedule.is_open = (not schedule.is_open) if is_open is None else is_open
        if schedule.is_open and not schedule.slots:
            schedule.slots.append(TimeSlot(**DEFAULT_DAY_SLOT))

    def add_slot(self, day: str) -> None:
        self._day(day).slots.append(TimeSlot(**ADDED_SLOT))

    def remove_slot(self, day: str, index: int) -> None:
        schedule = self._day(day)
        if not (0 <= index < len(schedule.slots)):
            raise ScheduleError(f"No slot {index + 1} on {day}", day=day)
        if schedule.is_open and len(schedule.slots) <= 1:
            raise ScheduleError("An open day must keep at least one slot", day=day)
        del schedule.slots[index]

    def set_slot_time(self, day: str, index: int, key: str, value: str) -> bool:
        """Update one end of a slot. Returns True when the slot now runs overnight."""
        if key not in {"open", "close"}:
            raise ValueError(f"Unknown slot field: {key}")
        if not is_valid_time(value):
            raise ScheduleError(f"Invalid time {value!r}, expected HH:MM", day=day)

        schedule = self._day(day)
        if not (0 <= index < len(schedule.slots)):
            raise ScheduleError(f"No slot {index + 1} on {day}", day=day)
        slot = schedule.slots[index]
        setattr(slot, key, value)
        return is_overnight(slot)

    def apply_to_all(self, source_day: str = "monday") -> None:
        source = self._day(source_day)
        for day in WEEKDAYS:
            if day == source_day:
                continue
            self.working.days[day] = DaySchedule(
                is_open=source.is_open,
                slots=[TimeSlot(slot.open, slot.close) for slot in source.slots],
            )

    def validate(self) -> None:
        validate_week(self.working)

    def payload(self) -> dict[str, Any]:
        return {"workingHours": self.working.to_dict()}

    def mark_saved(self) -> None:
        self.original = self.working.clone()

    def discard(self) -> None:
        self.working = self.original.clone()

    def _day(self, day: str) -> DaySchedule:
        if day not in WEEKDAYS:
            raise ScheduleError(f"Unknown day: {day}")
        return self.working.day(day)
