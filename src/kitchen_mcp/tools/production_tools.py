"""
Production tools for the kitchen MCP server.

Provides tools for:
- Producing menu items (deducts recipe ingredients from stock)
- Checking whether stock covers a run before producing
- The daily production plan aggregated from orders and menus
"""

from typing import Any, Dict, Optional

from fastmcp import Context
from pydantic import Field

from .shared import report, run_operation
from ..kitchen import planner, production


def register_tools(mcp):
    """Register production tools with the FastMCP server."""

    # ========== Production Runs ==========

    @mcp.tool()
    async def produce_menu_item(
        menu_item_id: int = Field(description="Menu item to produce"),
        quantity: int = Field(gt=0, description="Units to produce"),
        actor: Optional[str] = Field(
            default=None, description="Who is running production"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Produce units of a menu item.

        Deducts quantity_required x quantity of every recipe ingredient and
        adds the units to the menu item's stock. If any ingredient is short,
        nothing changes and the error names the ingredient with the required
        and available amounts.
        """
        result = run_operation(
            lambda: production.produce_menu_item(menu_item_id, quantity, actor=actor)
        )
        if result.get("success"):
            result["message"] = (
                f"Produced {quantity} x {result['menu_item_name']}, "
                f"stock now {result['new_stock']}"
            )
        await report(ctx, result, result.get("message", ""))
        return result

    @mcp.tool()
    async def check_can_produce(
        menu_item_id: int = Field(description="Menu item to check"),
        quantity: int = Field(gt=0, description="Units to produce"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Check whether current stock covers a production run without
        changing anything.

        Lists every short ingredient, plus the maximum number of units
        that can be produced right now.
        """
        def _check() -> Dict[str, Any]:
            check = production.check_can_produce(menu_item_id, quantity)
            check["max_quantity"] = production.max_producible(menu_item_id)["max_quantity"]
            return check

        return run_operation(_check)

    @mcp.tool()
    async def get_production_runs(
        menu_item_id: Optional[int] = Field(
            default=None, description="Only runs of this menu item"
        ),
        limit: int = Field(
            default=50, ge=1, le=500, description="Maximum runs to return"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Show recent production runs with the ingredients each consumed.
        """
        return run_operation(lambda: {
            "runs": production.list_production_runs(menu_item_id, limit)
        })

    # ========== Planning ==========

    @mcp.tool()
    async def get_production_plan(
        date: str = Field(description="Delivery date YYYY-MM-DD"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Calculate the ingredients needed to cook a day's orders.

        Orders are grouped into calorie bands (1000-1200, 1400-1600,
        1800-2000, 2200-2500); each band's daily menu recipes are multiplied
        by the band's order count and totalled per ingredient.

        This is a planning report only: it never changes stock. Bands with
        orders but no daily menu are listed in unplanned_bands.
        """
        result = run_operation(lambda: planner.get_production_plan(date))
        if ctx and result.get("warnings"):
            for warning in result["warnings"]:
                await ctx.warning(warning)
        return result
