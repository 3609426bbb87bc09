"""Rendering helpers shared by the screens."""

from __future__ import annotations

from rich.text import Text

from admin_app.config import CURRENCY
from admin_app.constant import STATUS_COLORS
from admin_app.dashboard import LiveStat, StatState
from admin_app.data import ORDER_NUMBER_LOADING_TEXT, display_order_number, normalize_status
from admin_app.models import DaySchedule, Driver, Order, TimeSlot
from admin_app.schedule import is_overnight


def status_style(status: str) -> str:
    """Return a consistent badge style for an order status."""
    color = STATUS_COLORS.get(normalize_status(status), "#5a5a5a")
    return f"bold #ffffff on {color}"


def format_money(amount: float, decimals: int = 2) -> str:
    return f"{CURRENCY} {amount:,.{decimals}f}"


def format_status_badge(status: str) -> Text:
    text = Text()
    text.append(f" {status.upper().replace('_', ' ')} ", style=status_style(status))
    return text


def format_order_type(order_type: str) -> str:
    return (order_type or "order").upper().replace("_", " ")


def format_order_row(order: Order) -> Text:
    """One line summary: number, time, type, total, status badge."""
    text = Text()
    number = order_number_label(order)
    text.append(number, style="bold")
    if order.timestamp is not None:
        text.append(f"  {order.timestamp.astimezone():%b %d %I:%M %p}", style="dim")
    text.append(f"  {format_order_type(order.order_type)}")
    text.append(f"  {format_money(order.total_amount)}  ")
    text.append_text(format_status_badge(order.status))
    return text


def order_number_label(order: Order) -> str:
    data = {"dailyOrderNumber": order.daily_order_number or None, "timestamp": order.timestamp}
    number = display_order_number(data, order_id=order.order_id)
    if number == ORDER_NUMBER_LOADING_TEXT or number.startswith("#"):
        return number
    return f"#{number}"


def format_order_details(order: Order) -> Text:
    text = Text()
    text.append(f"Customer: {order.customer_name}\n")
    text.append(f"Type: {format_order_type(order.order_type)}   Status: ")
    text.append_text(format_status_badge(order.status))
    text.append("\n\n")
    if not order.items:
        text.append("No items found.\n", style="dim")
    for item in order.items:
        text.append(f"{item.name} x{item.quantity}")
        text.append(f"  {format_money(item.line_total)}\n", style="dim")
    text.append("\n")
    if order.delivery_fee:
        text.append(f"Delivery fee: {format_money(order.delivery_fee)}\n", style="dim")
    text.append(f"Total: {format_money(order.total_amount)}", style="bold")
    if order.cancellation_reason:
        text.append(f"\nCancelled: {order.cancellation_reason}", style="italic #ffb3b3")
    return text


def format_stat_card(stat: LiveStat) -> Text:
    text = Text()
    text.append(f"{stat.title}\n", style="dim")
    if stat.state == StatState.LOADING:
        text.append("…", style="bold")
    elif stat.state == StatState.ERROR:
        text.append("⚠ unavailable", style="bold #ffb3b3")
    else:
        text.append(stat.value, style="bold")
    return text


def format_slot(slot: TimeSlot) -> str:
    label = f"{slot.open} - {slot.close}"
    if is_overnight(slot):
        label += "  (overnight)"
    return label


def format_day_header(day: str, schedule: DaySchedule) -> Text:
    text = Text()
    text.append(f"{day.capitalize():<10}", style="bold")
    if schedule.is_open:
        text.append(" OPEN ", style="bold #0b1f0f on #5fbf72")
    else:
        text.append(" CLOSED ", style="bold #ffffff on #5a5a5a")
    return text


def format_driver(driver: Driver) -> str:
    return f"{driver.name}  ({driver.status})"


def visible_rows(height: int, default: int = 8) -> int:
    if height <= 0:
        return default
    return max(1, height)


def window_bounds(total: int, rows: int, selected: int | None) -> tuple[int, int]:
    """Slice of a list to show so the selected row stays roughly centered."""
    if total <= 0:
        return (0, 0)

    rows = max(1, rows)
    if total <= rows:
        return (0, total)

    if selected is None:
        start = 0
    else:
        half = rows // 2
        start = selected - half
        start = max(0, start)
        start = min(start, total - rows)

    return (start, start + rows)


def render_pointer_list(lines: list[Text], selected: int | None, rows: int) -> Text:
    """Pointer-marked windowed list with ellipsis markers, as every list screen draws it."""
    start, end = window_bounds(len(lines), rows, selected)
    out = Text()
    if start > 0:
        out.append("⋮\n", style="dim")

    for idx in range(start, end):
        if idx > start:
            out.append("\n")
        out.append("➤ " if idx == selected else "  ")
        out.append_text(lines[idx])

    if end < len(lines):
        out.append("\n⋮", style="dim")
    return out
