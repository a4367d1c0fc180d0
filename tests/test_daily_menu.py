"""Tests for daily menu assignment."""

from datetime import datetime

import pytest

from kitchen_mcp.kitchen import daily_menu, menu_items
from kitchen_mcp.kitchen.exceptions import Conflict, InvalidArgument, NotFound


@pytest.fixture
def dishes(test_db):
    return [
        menu_items.create_menu_item(f"Dish {n}", calories=300 + n)["id"]
        for n in range(1, 8)
    ]


class TestItemLimits:
    """Tests for the 1-5 item bounds."""

    def test_rejects_empty_list(self, dishes):
        """Test: An empty menu is rejected."""
        with pytest.raises(InvalidArgument) as exc:
            daily_menu.set_daily_menu("2025-01-15", [])

        assert "At least 1" in str(exc.value)

    def test_rejects_six_items(self, dishes):
        """Test: More than five items are rejected."""
        with pytest.raises(InvalidArgument) as exc:
            daily_menu.set_daily_menu("2025-01-15", dishes[:6])

        assert "Maximum 5 items allowed" in str(exc.value)

    @pytest.mark.parametrize("count", [1, 5])
    def test_accepts_bounds(self, dishes, count):
        """Test: One and five items are both accepted."""
        menu = daily_menu.set_daily_menu("2025-01-15", dishes[:count])

        assert menu["menu_item_ids"] == dishes[:count]

    def test_rejects_duplicates(self, dishes):
        """Test: The same menu item cannot appear twice."""
        with pytest.raises(InvalidArgument):
            daily_menu.set_daily_menu("2025-01-15", [dishes[0], dishes[0]])

    def test_unknown_menu_item(self, dishes):
        """Test: Every id must reference an existing menu item."""
        with pytest.raises(NotFound):
            daily_menu.set_daily_menu("2025-01-15", [dishes[0], 999])

        assert daily_menu.get_daily_menu("2025-01-15") is None


class TestSetAndCreate:
    """Tests for create-only and replace semantics."""

    def test_set_replaces_not_merges(self, dishes):
        """Test: Setting {C} after {A, B} leaves exactly {C}."""
        daily_menu.set_daily_menu("2025-01-15", dishes[:2])

        menu = daily_menu.set_daily_menu("2025-01-15", [dishes[2]])

        assert menu["created"] is False
        assert daily_menu.get_daily_menu("2025-01-15")["menu_item_ids"] == [dishes[2]]

    def test_create_conflicts_with_existing(self, dishes):
        """Test: create_daily_menu never overwrites."""
        daily_menu.create_daily_menu("2025-01-15", dishes[:2])

        with pytest.raises(Conflict):
            daily_menu.create_daily_menu("2025-01-15", [dishes[3]])

        assert daily_menu.get_daily_menu("2025-01-15")["menu_item_ids"] == dishes[:2]

    def test_bands_are_independent(self, dishes):
        """Test: Each calorie band has its own menu for the same day."""
        daily_menu.set_daily_menu("2025-01-15", [dishes[0]], "1000-1200")
        daily_menu.set_daily_menu("2025-01-15", [dishes[1]], "1400-1600")

        low = daily_menu.get_daily_menu("2025-01-15", "1000-1200")
        mid = daily_menu.get_daily_menu("2025-01-15", "1400-1600")

        assert low["menu_item_ids"] == [dishes[0]]
        assert mid["menu_item_ids"] == [dishes[1]]
        assert daily_menu.get_daily_menu("2025-01-15") is None
        assert len(daily_menu.list_daily_menus("2025-01-15")) == 2

    def test_unknown_band_rejected(self, dishes):
        """Test: calorie_group must be a known band label."""
        with pytest.raises(InvalidArgument):
            daily_menu.set_daily_menu("2025-01-15", [dishes[0]], "3000-4000")


class TestDateHandling:
    """Tests for calendar-day normalization."""

    def test_datetime_input_matches_day(self, dishes):
        """Test: A value with a time component finds the same day's menu."""
        daily_menu.set_daily_menu("2025-01-15", [dishes[0]])

        assert daily_menu.get_daily_menu("2025-01-15T18:30:00Z") is not None
        assert daily_menu.get_daily_menu(datetime(2025, 1, 15, 23, 59)) is not None
        assert daily_menu.get_daily_menu("2025-01-16") is None

    def test_set_with_time_updates_same_row(self, dishes):
        """Test: Setting with a datetime replaces rather than duplicates."""
        first = daily_menu.set_daily_menu("2025-01-15", [dishes[0]])

        second = daily_menu.set_daily_menu("2025-01-15T09:00:00", [dishes[1]])

        assert second["id"] == first["id"]
        assert second["date"] == "2025-01-15"

    def test_invalid_date(self, dishes):
        """Test: Unparseable dates are rejected."""
        with pytest.raises(InvalidArgument):
            daily_menu.get_daily_menu("15/01/2025")


class TestCustomerMenu:
    """Tests for get_customer_menu() and delete."""

    def test_falls_back_to_shared_menu(self, dishes):
        """Test: Without a band menu the shared menu is used."""
        daily_menu.set_daily_menu("2025-01-15", [dishes[0], dishes[1]])

        view = daily_menu.get_customer_menu("2025-01-15", 1100)

        assert view["calorie_group"] == "1000-1200"
        assert view["menu_calorie_group"] is None
        assert [item["id"] for item in view["items"]] == [dishes[0], dishes[1]]

    def test_prefers_band_menu(self, dishes):
        """Test: The customer's band menu wins over the shared one."""
        daily_menu.set_daily_menu("2025-01-15", [dishes[0]])
        daily_menu.set_daily_menu("2025-01-15", [dishes[4]], "2200-2500")

        view = daily_menu.get_customer_menu("2025-01-15", 2400)

        assert [item["id"] for item in view["items"]] == [dishes[4]]

    def test_no_menu(self, dishes):
        """Test: A day without menus gives an empty item list."""
        assert daily_menu.get_customer_menu("2025-02-01")["items"] == []

    def test_delete(self, dishes):
        """Test: Deleting removes the menu; deleting again raises NotFound."""
        daily_menu.set_daily_menu("2025-01-15", [dishes[0]])

        daily_menu.delete_daily_menu("2025-01-15")

        assert daily_menu.get_daily_menu("2025-01-15") is None
        with pytest.raises(NotFound):
            daily_menu.delete_daily_menu("2025-01-15")
