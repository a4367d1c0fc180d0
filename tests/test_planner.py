"""Tests for band demand and the production plan."""

import pytest

from kitchen_mcp.kitchen import (
    customers,
    daily_menu,
    ledger,
    menu_items,
    orders,
    planner,
)


@pytest.fixture
def rice_bowl(test_db):
    rice = ledger.create_ingredient("Rice", 20)
    bowl = menu_items.create_menu_item("Rice Bowl", recipe=[
        {"ingredient_id": rice["id"], "quantity_required": 0.5},
    ])
    return rice, bowl


def _customer(phone, calories=None):
    return customers.create_customer(f"Customer {phone}", phone, "Main St", calories)


class TestBandDemand:
    """Tests for get_band_demand()."""

    def test_counts_every_band(self, test_db):
        """Test: All four bands are present, even with zero orders."""
        c = _customer("100", 1500)
        orders.create_order(c["id"], "2025-01-15")

        demand = planner.get_band_demand("2025-01-15")

        assert demand == {
            "1000-1200": 0,
            "1400-1600": 1,
            "1800-2000": 0,
            "2200-2500": 0,
        }

    def test_order_calories_override_customer(self, test_db):
        """Test: The order snapshot decides the band."""
        c = _customer("100", 1500)
        orders.create_order(c["id"], "2025-01-15", calories=2300)

        assert planner.get_band_demand("2025-01-15")["2200-2500"] == 1

    def test_missing_calories_use_default(self, test_db):
        """Test: No calories anywhere falls into the default 1600 band."""
        c = _customer("100")
        orders.create_order(c["id"], "2025-01-15")

        assert planner.get_band_demand("2025-01-15")["1400-1600"] == 1


class TestProductionPlan:
    """Tests for get_production_plan()."""

    def test_two_orders_same_band(self, rice_bowl):
        """Test: Two 1000-1200 orders at 0.5 kg rice need 1.0 kg."""
        rice, bowl = rice_bowl
        daily_menu.set_daily_menu("2025-01-15", [bowl["id"]], "1000-1200")
        orders.create_order(_customer("1", 1100)["id"], "2025-01-15")
        orders.create_order(_customer("2", 1250)["id"], "2025-01-15")

        plan = planner.get_production_plan("2025-01-15")

        assert plan["total_orders"] == 2
        assert plan["ingredients"] == [{
            "ingredient_id": rice["id"],
            "name": "Rice",
            "total_quantity": 1.0,
            "unit": "kg",
        }]
        assert plan["unplanned_bands"] == []

    def test_sums_across_bands(self, rice_bowl):
        """Test: The same ingredient from several bands is totalled once."""
        rice, bowl = rice_bowl
        beans = ledger.create_ingredient("Beans", 5)
        big = menu_items.create_menu_item("Big Bowl", recipe=[
            {"ingredient_id": rice["id"], "quantity_required": 1},
            {"ingredient_id": beans["id"], "quantity_required": 0.2},
        ])
        daily_menu.set_daily_menu("2025-01-15", [bowl["id"]], "1000-1200")
        daily_menu.set_daily_menu("2025-01-15", [big["id"]], "2200-2500")
        orders.create_order(_customer("1", 1100)["id"], "2025-01-15")
        orders.create_order(_customer("2", 2300)["id"], "2025-01-15")
        orders.create_order(_customer("3", 2400)["id"], "2025-01-15")

        plan = planner.get_production_plan("2025-01-15")

        totals = {i["name"]: i["total_quantity"] for i in plan["ingredients"]}
        assert totals == {"Beans": 0.4, "Rice": 2.5}
        assert [i["name"] for i in plan["ingredients"]] == ["Beans", "Rice"]

    def test_band_without_menu_is_reported(self, rice_bowl):
        """Test: Orders in a band with no menu appear in unplanned_bands."""
        _, bowl = rice_bowl
        daily_menu.set_daily_menu("2025-01-15", [bowl["id"]], "1000-1200")
        orders.create_order(_customer("1", 1900)["id"], "2025-01-15")

        plan = planner.get_production_plan("2025-01-15")

        assert plan["ingredients"] == []
        assert plan["unplanned_bands"] == ["1800-2000"]
        assert len(plan["warnings"]) == 1

    def test_other_days_ignored(self, rice_bowl):
        """Test: Orders for other days do not count."""
        _, bowl = rice_bowl
        daily_menu.set_daily_menu("2025-01-15", [bowl["id"]], "1000-1200")
        orders.create_order(_customer("1", 1100)["id"], "2025-01-16")

        plan = planner.get_production_plan("2025-01-15")

        assert plan["total_orders"] == 0
        assert plan["ingredients"] == []

    def test_plan_is_read_only(self, rice_bowl):
        """Test: Planning never changes ingredient stock."""
        rice, bowl = rice_bowl
        daily_menu.set_daily_menu("2025-01-15", [bowl["id"]], "1000-1200")
        orders.create_order(_customer("1", 1100)["id"], "2025-01-15")

        planner.get_production_plan("2025-01-15")

        assert ledger.get_ingredient(rice["id"])["quantity"] == 20.0
