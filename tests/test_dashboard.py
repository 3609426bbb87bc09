import pytest

from admin_app.dashboard import (
    ACCEPT,
    ASSIGN_RIDER,
    CANCEL,
    COMPLETE,
    MARK_DELIVERED,
    MARK_PICKED_UP,
    REPRINT,
    LiveStat,
    StatState,
    filter_rider_candidates,
    order_actions,
    resolve_cancellation_reason,
    revenue_total,
)
from admin_app.errors import ValidationError
from admin_app.models import Driver, Order


def make_order(status, order_type="delivery", **kwargs):
    return Order(order_id="o1", status=status, order_type=order_type, total_amount=10.0, **kwargs)


def keys(order):
    return [action.key for action in order_actions(order)]


def test_revenue_counts_billable_statuses_only():
    orders = [
        {"status": "delivered", "totalAmount": 10},
        {"status": "completed", "totalAmount": 5.5},
        {"status": "paid", "totalAmount": "4"},
        {"status": "refunded", "totalAmount": 100},
        {"status": "pending", "totalAmount": 50},
        {"status": "cancelled", "totalAmount": 7},
        {"status": "delivered", "totalAmount": None},
    ]
    assert revenue_total(orders) == pytest.approx(19.5)


def test_pending_order_can_be_accepted_or_cancelled():
    assert keys(make_order("pending")) == [ACCEPT, CANCEL]
    accept = order_actions(make_order("pending"))[0]
    assert accept.target_status == "preparing"


def test_preparing_delivery_offers_rider_assignment():
    actions = order_actions(make_order("preparing"))
    assert [a.key for a in actions] == [REPRINT, ASSIGN_RIDER, CANCEL]
    assert actions[1].label == "Assign Rider"


def test_needs_assignment_offers_manual_assignment():
    actions = order_actions(make_order("needs_rider_assignment"))
    assert actions[1].label == "Assign Manually"


def test_auto_assignment_or_existing_rider_hides_assignment():
    assert ASSIGN_RIDER not in keys(make_order("preparing", auto_assign_started=True))
    assert ASSIGN_RIDER not in keys(make_order("preparing", rider_id="d1"))


def test_delivery_progression():
    assert keys(make_order("rider_assigned")) == [REPRINT, MARK_PICKED_UP, CANCEL]
    assert keys(make_order("pickedUp")) == [REPRINT, MARK_DELIVERED]
    assert keys(make_order("pickedup")) == [REPRINT, MARK_DELIVERED]


def test_terminal_orders():
    assert keys(make_order("delivered")) == [REPRINT]
    assert keys(make_order("cancelled")) == []
    assert keys(make_order("refunded")) == []


def test_non_delivery_orders_complete_directly():
    dine_in = order_actions(make_order("preparing", order_type="dine_in"))
    assert [a.key for a in dine_in] == [REPRINT, COMPLETE, CANCEL]
    assert dine_in[1].label == "Served to Table"
    assert dine_in[1].target_status == "delivered"

    takeaway = order_actions(make_order("preparing", order_type="takeaway"))
    assert takeaway[1].label == "Handed to Customer"


def test_rider_candidates_are_available_online_and_in_branch():
    drivers = [
        Driver("d1", "Ali", "online", True, ("b1",)),
        Driver("d2", "Sam", "offline", True, ("b1",)),
        Driver("d3", "Lee", "online", False, ("b1",)),
        Driver("d4", "Kim", "online", True, ("b2",)),
    ]
    assert [d.driver_id for d in filter_rider_candidates(drivers, ["b1"])] == ["d1"]
    assert [d.driver_id for d in filter_rider_candidates(drivers)] == ["d1", "d4"]


def test_cancellation_reason_rules():
    assert resolve_cancellation_reason("Kitchen Too Busy") == "Kitchen Too Busy"
    assert resolve_cancellation_reason("Other", "  Rain flooded the road ") == "Rain flooded the road"

    with pytest.raises(ValidationError):
        resolve_cancellation_reason(None)
    with pytest.raises(ValidationError):
        resolve_cancellation_reason("Other", "   ")
    with pytest.raises(ValidationError):
        resolve_cancellation_reason("Other", "x" * 501)


def test_live_stat_states():
    stat = LiveStat("Orders")
    assert stat.state == StatState.LOADING

    stat.resolve("3")
    assert (stat.state, stat.value) == (StatState.READY, "3")

    stat.fail("permission denied")
    assert stat.state == StatState.ERROR
    assert stat.value == "3"


def test_equal_amounts_only_delivered_and_paid_count():
    orders = [{"status": status, "totalAmount": 10} for status in ("delivered", "refunded", "paid", "pending")]
    assert revenue_total(orders) == pytest.approx(20.0)
