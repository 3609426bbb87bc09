from admin_app.models import Order, OrderItem
from admin_app.printer import receipt_lines


def test_receipt_lines_cover_header_items_and_total():
    order = Order(
        order_id="abcdef123",
        status="delivered",
        order_type="delivery",
        total_amount=30.0,
        items=[OrderItem("Burger", 2, 12.5)],
        daily_order_number="12",
        delivery_fee=5.0,
    )

    lines = receipt_lines(order, "Downtown")

    assert lines[:2] == ["Downtown", "#12"]
    assert "2 x Burger" in lines
    assert "    QAR 25.00" in lines
    assert "Delivery QAR 5.00" in lines
    assert lines[-1] == "TOTAL QAR 30.00"
