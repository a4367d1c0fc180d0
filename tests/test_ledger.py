"""Tests for the ingredient ledger.

Tests cover:
- Creating, updating and upserting ingredients
- Atomic adjustments with the stock movement audit trail
- Deleting ingredients still used by recipes
- Low stock queries
"""

import threading

import pytest

from kitchen_mcp.kitchen import ledger, menu_items
from kitchen_mcp.kitchen.exceptions import Conflict, InvalidArgument, NotFound


class TestIngredientCrud:
    """Tests for create/update/upsert."""

    def test_create_uses_default_unit(self, test_db):
        """Test: Unit falls back to the configured default."""
        rice = ledger.create_ingredient("Rice", 3)

        assert rice["unit"] == "kg"
        assert rice["quantity"] == 3.0

    def test_create_rejects_negative_quantity(self, test_db):
        """Test: Stock edits must be >= 0."""
        with pytest.raises(InvalidArgument):
            ledger.create_ingredient("Rice", -1)

    def test_create_rejects_blank_name(self, test_db):
        """Test: Name is required."""
        with pytest.raises(InvalidArgument):
            ledger.create_ingredient("   ", 1)

    def test_update_sets_absolute_quantity(self, test_db):
        """Test: Quantity in an update replaces the stock."""
        rice = ledger.create_ingredient("Rice", 3)

        updated = ledger.update_ingredient(rice["id"], quantity=7.5, actor="anna")

        assert updated["quantity"] == 7.5
        movements = ledger.list_stock_movements(rice["id"])
        assert movements[0]["reason"] == "manual_set"
        assert movements[0]["delta"] == pytest.approx(4.5)
        assert movements[0]["actor"] == "anna"

    def test_update_unknown_ingredient(self, test_db):
        """Test: Updating a missing ingredient raises NotFound."""
        with pytest.raises(NotFound):
            ledger.update_ingredient(999, quantity=1)

    def test_upsert_updates_existing_by_name(self, test_db):
        """Test: Upsert with an existing name updates instead of duplicating."""
        first = ledger.upsert_ingredient("Rice", 2, "kg")
        second = ledger.upsert_ingredient("Rice", 5, "kg")

        assert first["id"] == second["id"]
        assert second["quantity"] == 5.0
        assert len(ledger.list_ingredients()) == 1

    def test_concurrent_upserts_create_one_row(self, test_db):
        """Test: Parallel upserts of a new name never duplicate it."""
        barrier = threading.Barrier(6)

        def worker(quantity):
            barrier.wait()
            ledger.upsert_ingredient("Lentils", quantity)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(1, 7)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lentils = [i for i in ledger.list_ingredients() if i["name"] == "Lentils"]
        assert len(lentils) == 1
        assert lentils[0]["quantity"] in {1.0, 2.0, 3.0, 4.0, 5.0, 6.0}

    def test_list_sorted_by_name(self, test_db):
        """Test: Ingredients are listed alphabetically."""
        ledger.create_ingredient("rice", 1)
        ledger.create_ingredient("Beans", 1)
        ledger.create_ingredient("Apples", 1)

        names = [i["name"] for i in ledger.list_ingredients()]
        assert names == ["Apples", "Beans", "rice"]


class TestStockChanges:
    """Tests for atomic decrement and adjust."""

    def test_adjust_records_movement(self, test_db):
        """Test: Restocks are recorded with reason and actor."""
        rice = ledger.create_ingredient("Rice", 1)

        after = ledger.adjust_ingredient(rice["id"], 4, "restock", actor="sam")

        assert after["quantity"] == 5.0
        latest = ledger.list_stock_movements(rice["id"])[0]
        assert latest["reason"] == "restock"
        assert latest["delta"] == 4.0
        assert latest["actor"] == "sam"

    def test_decrement_does_not_floor_at_zero(self, test_db):
        """Test: The ledger itself allows negative results."""
        rice = ledger.create_ingredient("Rice", 1)

        after = ledger.decrement_ingredient(rice["id"], 3)

        assert after["quantity"] == -2.0

    def test_decrement_unknown_ingredient(self, test_db):
        """Test: Decrementing a missing ingredient raises NotFound."""
        with pytest.raises(NotFound):
            ledger.decrement_ingredient(42, 1)

    def test_concurrent_adjustments_are_not_lost(self, test_db):
        """Test: Parallel decrements all land on the stored quantity."""
        rice = ledger.create_ingredient("Rice", 100)

        def worker():
            for _ in range(5):
                ledger.decrement_ingredient(rice["id"], 1)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert ledger.get_ingredient(rice["id"])["quantity"] == 80.0


class TestDeleteIngredient:
    """Tests for delete_ingredient()."""

    def test_delete_unused(self, test_db):
        """Test: An unused ingredient can be deleted."""
        rice = ledger.create_ingredient("Rice", 1)

        ledger.delete_ingredient(rice["id"])

        with pytest.raises(NotFound):
            ledger.get_ingredient(rice["id"])

    def test_delete_used_by_recipe_conflicts(self, chicken_salad):
        """Test: Deleting an ingredient a recipe uses names the menu item."""
        chicken, _ = chicken_salad

        with pytest.raises(Conflict) as exc:
            ledger.delete_ingredient(chicken["id"])

        assert "Salad" in str(exc.value)
        assert ledger.get_ingredient(chicken["id"])["quantity"] == 10.0

    def test_delete_after_recipe_removed(self, chicken_salad):
        """Test: Once no recipe references it, deletion succeeds."""
        chicken, salad = chicken_salad
        menu_items.replace_recipe(salad["id"], [])

        deleted = ledger.delete_ingredient(chicken["id"])

        assert deleted["name"] == "Chicken"


class TestLowStock:
    """Tests for get_low_stock_ingredients()."""

    def test_uses_configured_threshold(self, test_db):
        """Test: Default threshold is 5 and status separates out from low."""
        ledger.create_ingredient("Rice", 10)
        ledger.create_ingredient("Salt", 2)
        ledger.create_ingredient("Oil", 0)

        low = ledger.get_low_stock_ingredients()

        assert [(i["name"], i["status"]) for i in low] == [
            ("Oil", "out"),
            ("Salt", "low"),
        ]

    def test_threshold_override(self, test_db):
        """Test: An explicit threshold replaces the configured one."""
        ledger.create_ingredient("Rice", 10)

        assert len(ledger.get_low_stock_ingredients(threshold=20)) == 1
