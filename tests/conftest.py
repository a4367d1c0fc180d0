"""Shared fixtures: every test gets its own database and preferences file."""

import pytest

from kitchen_mcp.kitchen import config, database
from kitchen_mcp.kitchen import ledger, menu_items


@pytest.fixture
def test_db(tmp_path, monkeypatch):
    """Point the kitchen at a fresh SQLite file and default config."""
    monkeypatch.setenv(database.DB_FILE_ENV, str(tmp_path / "kitchen.db"))
    monkeypatch.setenv(config.CONFIG_FILE_ENV, str(tmp_path / "kitchen_preferences.json"))
    database.reset_initialization()
    config.clear_cache()
    database.ensure_initialized()
    yield tmp_path
    database.reset_initialization()
    config.clear_cache()


@pytest.fixture
def chicken_salad(test_db):
    """Chicken 10 kg and a Salad needing 2 kg of chicken per unit."""
    chicken = ledger.create_ingredient("Chicken", 10, "kg")
    salad = menu_items.create_menu_item(
        "Salad",
        calories=450,
        recipe=[{"ingredient_id": chicken["id"], "quantity_required": 2}],
    )
    return chicken, salad
