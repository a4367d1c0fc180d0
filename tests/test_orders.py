"""Tests for customers, orders and auto-order generation."""

import threading
from datetime import date

import pytest

from kitchen_mcp.kitchen import customers, orders
from kitchen_mcp.kitchen.exceptions import Conflict, InvalidArgument, NotFound


@pytest.fixture
def customer(test_db):
    return customers.create_customer("Ana", "555-0001", "1 Main St", 1500)


class TestCustomers:
    """Tests for customer registration."""

    def test_duplicate_phone(self, customer):
        """Test: Phone numbers are unique."""
        with pytest.raises(Conflict):
            customers.create_customer("Other", "555-0001")

    def test_invalid_pattern(self, test_db):
        """Test: Only known delivery patterns are accepted."""
        with pytest.raises(InvalidArgument):
            customers.create_customer("Ana", "555-0002", order_pattern="weekly")

    def test_update_fields(self, customer):
        """Test: Only provided fields change."""
        updated = customers.update_customer(customer["id"], calories=2000, is_active=False)

        assert updated["calories"] == 2000
        assert updated["is_active"] is False
        assert updated["address"] == "1 Main St"


class TestCreateOrder:
    """Tests for create_order()."""

    def test_snapshots_customer_fields(self, customer):
        """Test: Address and calories are copied onto the order."""
        order = orders.create_order(customer["id"], "2025-01-15")
        customers.update_customer(customer["id"], address="2 Side St", calories=2200)

        stored = orders.get_order(order["id"])
        assert stored["delivery_address"] == "1 Main St"
        assert stored["calories"] == 1500
        assert stored["delivery_time"] == "12:00"
        assert stored["status"] == "PENDING"

    def test_numbers_increase(self, customer):
        """Test: Sequential orders get strictly increasing numbers."""
        first = orders.create_order(customer["id"], "2025-01-15")
        second = orders.create_order(customer["id"], "2025-01-16")

        assert second["order_number"] == first["order_number"] + 1

    def test_concurrent_numbers_are_contiguous(self, customer):
        """Test: Parallel creation yields distinct, gap-free numbers."""
        numbers = []
        lock = threading.Lock()

        def worker():
            order = orders.create_order(customer["id"], "2025-01-15")
            with lock:
                numbers.append(order["order_number"])

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(numbers) == list(range(1, 11))

    def test_unknown_customer(self, test_db):
        """Test: Orders need an existing customer."""
        with pytest.raises(NotFound):
            orders.create_order(99, "2025-01-15")

    def test_rejects_bad_payment_status(self, customer):
        """Test: Payment status must be a known value."""
        with pytest.raises(InvalidArgument):
            orders.create_order(customer["id"], "2025-01-15", payment_status="FREE")


class TestOrderStatus:
    """Tests for status transitions."""

    def test_moves_forward(self, customer):
        """Test: PENDING -> PREPARING -> DELIVERED is allowed."""
        order = orders.create_order(customer["id"], "2025-01-15")

        orders.update_order_status(order["id"], "PREPARING")
        done = orders.update_order_status(order["id"], "DELIVERED")

        assert done["status"] == "DELIVERED"

    def test_cannot_move_backwards(self, customer):
        """Test: A delivered order cannot go back to preparing."""
        order = orders.create_order(customer["id"], "2025-01-15")
        orders.update_order_status(order["id"], "DELIVERED")

        with pytest.raises(InvalidArgument):
            orders.update_order_status(order["id"], "PREPARING")

    def test_current_order_skips_delivered(self, customer):
        """Test: The current order is the latest undelivered one."""
        first = orders.create_order(customer["id"], "2025-01-15")
        second = orders.create_order(customer["id"], "2025-01-16")
        orders.update_order_status(second["id"], "DELIVERED")

        current = orders.get_current_order(customer["id"])

        assert current["id"] == first["id"]

    def test_list_filters_by_date(self, customer):
        """Test: Listing by date only returns that day's orders."""
        orders.create_order(customer["id"], "2025-01-15")
        orders.create_order(customer["id"], "2025-01-16")

        listed = orders.list_orders(delivery_date="2025-01-15")

        assert len(listed) == 1
        assert listed[0]["customer_name"] == "Ana"


class TestAutoOrders:
    """Tests for the daily auto-order generator."""

    @pytest.mark.parametrize("pattern,day,expected", [
        ("daily", date(2025, 1, 15), True),
        ("every_other_day_even", date(2025, 1, 14), True),
        ("every_other_day_even", date(2025, 1, 15), False),
        ("every_other_day_odd", date(2025, 1, 15), True),
        ("every_other_day_odd", date(2025, 1, 16), False),
    ])
    def test_is_eligible(self, pattern, day, expected):
        """Test: Even/odd patterns follow the day of the month."""
        assert orders.is_eligible(pattern, day) is expected

    def test_generates_for_eligible_active_customers(self, test_db):
        """Test: Only active customers whose pattern matches get orders."""
        customers.create_customer("Daily", "1", calories=1100)
        customers.create_customer("Odd", "2", order_pattern="every_other_day_odd")
        customers.create_customer("Even", "3", order_pattern="every_other_day_even")
        customers.create_customer("Paused", "4", is_active=False)

        result = orders.generate_auto_orders("2025-01-15")

        assert result["processed_date"] == "2025-01-15"
        assert result["eligible_customers"] == 2
        assert result["created_orders"] == 2
        assert all(o["is_auto_order"] for o in result["orders"])
        assert result["next_day_preview"]["date"] == "2025-01-16"
        assert result["next_day_preview"]["eligible_customers"] == 2

    def test_second_run_creates_nothing(self, test_db):
        """Test: Customers with an order for the day are skipped."""
        customers.create_customer("Daily", "1")
        orders.generate_auto_orders("2025-01-15")

        again = orders.generate_auto_orders("2025-01-15")

        assert again["created_orders"] == 0
        assert len(orders.list_orders(delivery_date="2025-01-15")) == 1

    def test_preview_writes_nothing(self, test_db):
        """Test: The preview lists customers without creating orders."""
        customers.create_customer("Daily", "1")

        preview = orders.preview_auto_orders("2025-01-15")

        assert preview["eligible_customers"] == 1
        assert orders.list_orders() == []
