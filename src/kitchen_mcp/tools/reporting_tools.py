"""
Reporting and settings tools for the kitchen MCP server.

Provides MCP tools for:
- A kitchen status summary (stock, low items, today's demand)
- Viewing and changing kitchen configuration
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastmcp import Context
from pydantic import Field

from .shared import run_operation
from ..kitchen import config, database, ledger, menu_items, planner


def register_tools(mcp):
    """Register reporting and settings tools with the FastMCP server."""

    # ========== Reports ==========

    @mcp.tool()
    async def get_kitchen_summary(
        date: Optional[str] = Field(
            default=None, description="Day to report demand for (defaults to today)"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Summarize the kitchen: stock levels, low stock alerts, finished
        menu item stock and the day's order demand per calorie band.
        """
        day = date or datetime.now().strftime("%Y-%m-%d")

        def _summary() -> Dict[str, Any]:
            low = ledger.get_low_stock_ingredients()
            items = menu_items.list_menu_items()
            return {
                "generated_at": datetime.now().isoformat(),
                "date": day,
                "band_demand": planner.get_band_demand(day),
                "low_stock": low,
                "menu_item_stock": [
                    {"id": item["id"], "name": item["name"], "stock": item["stock"]}
                    for item in items
                ],
                "table_counts": database.get_table_counts(),
                "summary": {
                    "low_stock_count": len(low),
                    "menu_items": len(items),
                },
            }

        return run_operation(_summary)

    # ========== Configuration ==========

    @mcp.tool()
    async def get_kitchen_config(ctx: Context = None) -> Dict[str, Any]:
        """
        Show the current kitchen configuration.
        """
        return run_operation(lambda: {"config": config.get_config_summary()})

    @mcp.tool()
    async def update_kitchen_config(
        max_daily_menu_items: Optional[int] = Field(
            default=None, ge=1, le=5, description="Maximum items per daily menu (at most 5)"
        ),
        default_calories: Optional[int] = Field(
            default=None, gt=0,
            description="Calories assumed when an order and its customer have none"
        ),
        default_unit: Optional[str] = Field(
            default=None, description="Unit for new ingredients"
        ),
        low_stock_threshold: Optional[float] = Field(
            default=None, ge=0, description="Low stock alert level"
        ),
        default_delivery_time: Optional[str] = Field(
            default=None, description="Delivery time HH:MM for generated orders"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Update kitchen configuration. Only provided values are changed.
        """
        return run_operation(lambda: config.update_config(
            max_daily_menu_items=max_daily_menu_items,
            default_calories=default_calories,
            default_unit=default_unit,
            low_stock_threshold=low_stock_threshold,
            default_delivery_time=default_delivery_time,
        ))

    @mcp.tool()
    async def reset_kitchen_config(ctx: Context = None) -> Dict[str, Any]:
        """
        Reset kitchen configuration to defaults.
        """
        return config.reset_config()
