"""
Daily menu tools for the kitchen MCP server.

Provides tools for:
- Viewing the menu for a day and calorie band
- Creating a menu (create-only) or setting it (create or replace)
- Removing a menu
- The customer's view of today's dishes
"""

from typing import Any, Dict, List, Optional

from fastmcp import Context
from pydantic import Field

from .shared import report, run_operation
from ..kitchen import daily_menu

BAND_DESCRIPTION = (
    "Calorie band: '1000-1200', '1400-1600', '1800-2000' or '2200-2500' "
    "(omit for the menu shared by all bands)"
)


def register_tools(mcp):
    """Register daily menu tools with the FastMCP server."""

    @mcp.tool()
    async def get_daily_menu(
        date: str = Field(description="Menu date YYYY-MM-DD"),
        calorie_group: Optional[str] = Field(default=None, description=BAND_DESCRIPTION),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Get the daily menu for a date and calorie band.

        Returns menu null when nothing is assigned.
        """
        return run_operation(lambda: {
            "menu": daily_menu.get_daily_menu(date, calorie_group)
        })

    @mcp.tool()
    async def list_daily_menus(
        date: str = Field(description="Menu date YYYY-MM-DD"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        List the menus of every calorie band for a date.
        """
        return run_operation(lambda: {
            "menus": daily_menu.list_daily_menus(date)
        })

    @mcp.tool()
    async def create_daily_menu(
        date: str = Field(description="Menu date YYYY-MM-DD"),
        menu_item_ids: List[int] = Field(
            description="1 to 5 distinct menu item ids"
        ),
        calorie_group: Optional[str] = Field(default=None, description=BAND_DESCRIPTION),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Create the daily menu for a date and band.

        Fails with a conflict if a menu already exists; use set_daily_menu
        to replace it.
        """
        result = run_operation(lambda: {
            "menu": daily_menu.create_daily_menu(date, menu_item_ids, calorie_group)
        })
        await report(ctx, result, f"Created menu for {date}")
        return result

    @mcp.tool()
    async def set_daily_menu(
        date: str = Field(description="Menu date YYYY-MM-DD"),
        menu_item_ids: List[int] = Field(
            description="1 to 5 distinct menu item ids"
        ),
        calorie_group: Optional[str] = Field(default=None, description=BAND_DESCRIPTION),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Set the daily menu for a date and band, creating it if needed.

        The item list replaces the previous one completely.
        """
        result = run_operation(lambda: {
            "menu": daily_menu.set_daily_menu(date, menu_item_ids, calorie_group)
        })
        await report(ctx, result, f"Saved menu for {date}")
        return result

    @mcp.tool()
    async def delete_daily_menu(
        date: str = Field(description="Menu date YYYY-MM-DD"),
        calorie_group: Optional[str] = Field(default=None, description=BAND_DESCRIPTION),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Remove the daily menu for a date and band.
        """
        return run_operation(lambda: {
            "deleted": daily_menu.delete_daily_menu(date, calorie_group)
        })

    @mcp.tool()
    async def get_customer_menu(
        date: str = Field(description="Menu date YYYY-MM-DD"),
        calories: Optional[int] = Field(
            default=None, description="Customer's daily calorie target"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Get the dishes a customer sees for a date.

        Uses the menu of the customer's calorie band, falling back to the
        menu shared by all bands.
        """
        return run_operation(lambda: daily_menu.get_customer_menu(date, calories))
