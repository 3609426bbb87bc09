from admin_app.dashboard import LiveStat
from admin_app.models import Order
from admin_app.rendering import (
    format_money,
    format_stat_card,
    order_number_label,
    render_pointer_list,
    window_bounds,
)
from rich.text import Text


def test_window_bounds_keeps_selection_visible():
    assert window_bounds(0, 5, None) == (0, 0)
    assert window_bounds(3, 5, 2) == (0, 3)
    assert window_bounds(20, 5, 0) == (0, 5)
    assert window_bounds(20, 5, 10) == (8, 13)
    assert window_bounds(20, 5, 19) == (15, 20)


def test_pointer_list_marks_selection_and_hidden_rows():
    lines = [Text(f"row {i}") for i in range(10)]
    rendered = render_pointer_list(lines, 9, 3).plain

    assert rendered.startswith("⋮")
    assert "➤ row 9" in rendered
    assert "row 0" not in rendered


def test_order_number_label_prefers_daily_number():
    order = Order(order_id="abcdef123", status="pending", order_type="delivery", total_amount=0.0, daily_order_number="12")
    assert order_number_label(order) == "#12"

    unnumbered = Order(order_id="abcdef123", status="pending", order_type="delivery", total_amount=0.0)
    assert order_number_label(unnumbered) == "#ABCDEF"


def test_money_and_stat_card():
    assert format_money(1234.5) == "QAR 1,234.50"

    stat = LiveStat("Revenue")
    assert "…" in format_stat_card(stat).plain
    stat.resolve("QAR 10.00")
    assert "QAR 10.00" in format_stat_card(stat).plain
    stat.fail("denied")
    assert "unavailable" in format_stat_card(stat).plain
