"""
Menu item and recipe tools for the kitchen MCP server.

Provides tools for:
- Saving menu items with their recipes
- Replacing a recipe in full
- Listing and deleting menu items
"""

from typing import Any, Dict, List, Optional

from fastmcp import Context
from pydantic import Field

from .shared import report, run_operation
from ..kitchen import menu_items


def register_tools(mcp):
    """Register menu item tools with the FastMCP server."""

    @mcp.tool()
    async def list_menu_items(ctx: Context = None) -> Dict[str, Any]:
        """
        List all menu items with stock, calories and recipe lines.
        """
        return run_operation(lambda: {
            "menu_items": menu_items.list_menu_items()
        })

    @mcp.tool()
    async def get_menu_item(
        menu_item_id: int = Field(description="Menu item identifier"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Get a menu item with its full recipe.
        """
        return run_operation(lambda: {
            "menu_item": menu_items.get_menu_item(menu_item_id)
        })

    @mcp.tool()
    async def upsert_menu_item(
        name: str = Field(description="Dish name"),
        recipe: Optional[List[Dict[str, Any]]] = Field(
            default=None,
            description="Complete recipe. Each line: ingredient_id and "
            "quantity_required (per one produced unit, > 0)"
        ),
        description: Optional[str] = Field(
            default=None, description="Dish description"
        ),
        calories: int = Field(default=0, ge=0, description="Calories per unit"),
        stock: int = Field(default=0, ge=0, description="Units in stock"),
        image: Optional[str] = Field(default=None, description="Image reference"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Create a menu item or update the one with this name.

        The submitted recipe always replaces the existing recipe in full.

        Example recipe line:
        {"ingredient_id": 3, "quantity_required": 0.25}
        """
        result = run_operation(lambda: {
            "menu_item": menu_items.upsert_menu_item(
                name, description, calories, stock, image, recipe or []
            )
        })
        await report(ctx, result, f"Saved menu item '{name}' with {len(recipe or [])} ingredients")
        return result

    @mcp.tool()
    async def replace_recipe(
        menu_item_id: int = Field(description="Menu item identifier"),
        recipe: List[Dict[str, Any]] = Field(
            description="Complete recipe. Each line: ingredient_id and "
            "quantity_required (per one produced unit, > 0)"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Replace a menu item's entire recipe.

        Lines not included are removed; there is no partial update.
        """
        return run_operation(lambda: {
            "menu_item": menu_items.replace_recipe(menu_item_id, recipe)
        })

    @mcp.tool()
    async def delete_menu_item(
        menu_item_id: int = Field(description="Menu item identifier"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Delete a menu item with its recipe and daily menu placements.

        Fails with a conflict if it is the only dish on a daily menu;
        change that menu first.
        """
        result = run_operation(lambda: {
            "deleted": menu_items.delete_menu_item(menu_item_id)
        })
        await report(ctx, result, "Deleted menu item")
        return result
