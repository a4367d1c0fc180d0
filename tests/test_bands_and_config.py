"""Tests for calorie bands, date parsing and persisted configuration."""

import json
from datetime import date

import pytest

from kitchen_mcp.kitchen import bands, config, daily_menu, menu_items
from kitchen_mcp.kitchen.dates import day_range, parse_day
from kitchen_mcp.kitchen.exceptions import InvalidArgument


class TestClassifyCalories:
    """Tests for classify_calories()."""

    @pytest.mark.parametrize("calories,band", [
        (900, "1000-1200"),
        (1299, "1000-1200"),
        (1300, "1400-1600"),
        (1699, "1400-1600"),
        (1700, "1800-2000"),
        (2099, "1800-2000"),
        (2100, "2200-2500"),
        (3500, "2200-2500"),
    ])
    def test_band_edges(self, test_db, calories, band):
        """Test: Boundaries at 1300, 1700 and 2100."""
        assert bands.classify_calories(calories) == band

    def test_none_uses_default(self, test_db):
        """Test: Missing calories use the 1600 default."""
        assert bands.classify_calories(None) == "1400-1600"

    def test_effective_calories_priority(self, test_db):
        """Test: Order snapshot, then customer target, then default."""
        assert bands.effective_calories(1200, 2000) == 1200
        assert bands.effective_calories(None, 2000) == 2000
        assert bands.effective_calories(None, None) == 1600


class TestDates:
    """Tests for calendar-day parsing."""

    def test_parse_variants(self):
        """Test: Dates, datetimes and ISO strings normalize to the day."""
        assert parse_day("2025-01-15") == date(2025, 1, 15)
        assert parse_day("2025-01-15T22:10:00Z") == date(2025, 1, 15)
        assert parse_day(date(2025, 1, 15)) == date(2025, 1, 15)

    def test_day_range_is_half_open(self):
        """Test: The range ends at the next day."""
        assert day_range("2025-01-31") == ("2025-01-31", "2025-02-01")

    @pytest.mark.parametrize("value", ["", "2025-13-01", "tomorrow", None])
    def test_invalid(self, value):
        """Test: Invalid inputs raise InvalidArgument."""
        with pytest.raises(InvalidArgument):
            parse_day(value)


class TestConfig:
    """Tests for the persisted kitchen configuration."""

    def test_update_persists_section(self, test_db):
        """Test: Updates are written under kitchen_config."""
        result = config.update_config(default_calories=1800, unknown=1)

        assert result["success"] is True
        assert result["updated_fields"] == ["default_calories"]
        with open(config.get_config_path()) as f:
            saved = json.load(f)
        assert saved["kitchen_config"]["default_calories"] == 1800

    def test_reload_from_file(self, test_db):
        """Test: A fresh load reads values saved earlier."""
        config.update_config(low_stock_threshold=2.5)
        config.clear_cache()

        assert config.load_config().low_stock_threshold == 2.5

    def test_corrupt_file_falls_back_to_defaults(self, test_db):
        """Test: An unreadable file yields default values."""
        with open(config.get_config_path(), "w") as f:
            f.write("{not json")
        config.clear_cache()

        assert config.load_config().max_daily_menu_items == 5

    def test_menu_limit_follows_config(self, test_db):
        """Test: Lowering max_daily_menu_items tightens validation."""
        ids = [menu_items.create_menu_item(f"Dish {n}")["id"] for n in range(3)]
        config.update_config(max_daily_menu_items=2)

        with pytest.raises(InvalidArgument):
            daily_menu.set_daily_menu("2025-01-15", ids)

    def test_menu_limit_cannot_exceed_five(self, test_db):
        """Test: max_daily_menu_items above 5 is rejected and six items still fail."""
        ids = [menu_items.create_menu_item(f"Dish {n}")["id"] for n in range(6)]

        with pytest.raises(InvalidArgument):
            config.update_config(max_daily_menu_items=6)

        assert config.load_config().max_daily_menu_items == 5
        with pytest.raises(InvalidArgument):
            daily_menu.set_daily_menu("2025-01-15", ids)
        assert len(daily_menu.set_daily_menu("2025-01-15", ids[:5])["menu_item_ids"]) == 5

    def test_hand_edited_limit_is_clamped(self, test_db):
        """Test: A preferences file asking for 8 items is capped at 5."""
        ids = [menu_items.create_menu_item(f"Dish {n}")["id"] for n in range(6)]
        with open(config.get_config_path(), "w") as f:
            json.dump({"kitchen_config": {"max_daily_menu_items": 8}}, f)
        config.clear_cache()

        assert config.load_config().max_daily_menu_items == 5
        with pytest.raises(InvalidArgument):
            daily_menu.set_daily_menu("2025-01-15", ids)

    def test_reset(self, test_db):
        """Test: Reset restores defaults."""
        config.update_config(default_calories=2000)

        config.reset_config()

        assert config.load_config().default_calories == 1600
