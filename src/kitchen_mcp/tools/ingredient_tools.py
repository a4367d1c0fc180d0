"""
Ingredient ledger tools for the kitchen MCP server.

Provides tools for:
- Listing and editing warehouse ingredients
- Restocking and write-offs with an audit trail
- Low stock alerts
"""

from typing import Any, Dict, Optional

from fastmcp import Context
from pydantic import Field

from .shared import report, run_operation
from ..kitchen import ledger


def register_tools(mcp):
    """Register ingredient ledger tools with the FastMCP server."""

    # ========== Ingredient CRUD Tools ==========

    @mcp.tool()
    async def list_ingredients(ctx: Context = None) -> Dict[str, Any]:
        """
        List every ingredient in the warehouse with quantity and unit.

        Sorted by name.
        """
        return run_operation(lambda: {
            "ingredients": ledger.list_ingredients()
        })

    @mcp.tool()
    async def upsert_ingredient(
        name: str = Field(description="Ingredient name (e.g., 'Chicken')"),
        quantity: float = Field(ge=0, description="Stock on hand"),
        unit: Optional[str] = Field(
            default=None,
            description="Unit such as 'kg', 'l' or 'pcs' (defaults to kg)"
        ),
        actor: Optional[str] = Field(
            default=None, description="Who is making the change"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Create an ingredient or set the stock of the one with this name.

        Quantity is an absolute value, not an increment. Use
        adjust_ingredient_stock to add or remove an amount.
        """
        result = run_operation(lambda: {
            "ingredient": ledger.upsert_ingredient(name, quantity, unit, actor=actor)
        })
        await report(ctx, result, f"Saved ingredient '{name}'")
        return result

    @mcp.tool()
    async def update_ingredient(
        ingredient_id: int = Field(description="Ingredient identifier"),
        name: Optional[str] = Field(default=None, description="New name"),
        quantity: Optional[float] = Field(
            default=None, ge=0, description="New absolute stock"
        ),
        unit: Optional[str] = Field(default=None, description="New unit"),
        actor: Optional[str] = Field(
            default=None, description="Who is making the change"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Update ingredient fields. Only provided fields are changed.
        """
        return run_operation(lambda: {
            "ingredient": ledger.update_ingredient(
                ingredient_id, name=name, quantity=quantity, unit=unit,
                actor=actor
            )
        })

    @mcp.tool()
    async def adjust_ingredient_stock(
        ingredient_id: int = Field(description="Ingredient identifier"),
        delta: float = Field(
            description="Amount to add (positive) or remove (negative)"
        ),
        reason: str = Field(
            default="adjustment",
            description="Reason such as 'restock', 'waste' or 'correction'"
        ),
        actor: Optional[str] = Field(
            default=None, description="Who is making the change"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Add or remove stock of an ingredient.

        The change is applied atomically and recorded in the stock
        movement history.
        """
        result = run_operation(lambda: {
            "ingredient": ledger.adjust_ingredient(
                ingredient_id, delta, reason, actor=actor
            )
        })
        await report(ctx, result, f"Adjusted ingredient {ingredient_id} by {delta}")
        return result

    @mcp.tool()
    async def delete_ingredient(
        ingredient_id: int = Field(description="Ingredient identifier"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Delete an ingredient.

        Fails with a conflict if any menu item recipe still uses it.
        """
        result = run_operation(lambda: {
            "deleted": ledger.delete_ingredient(ingredient_id)
        })
        await report(ctx, result, "Deleted ingredient")
        return result

    # ========== Stock Queries ==========

    @mcp.tool()
    async def get_stock_movements(
        ingredient_id: Optional[int] = Field(
            default=None, description="Only movements of this ingredient"
        ),
        limit: int = Field(
            default=50, ge=1, le=500, description="Maximum rows to return"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Show recent stock movements, newest first.

        Each movement records the change, its reason (production,
        restock, manual_set, ...), a reference and who made it.
        """
        return run_operation(lambda: {
            "movements": ledger.list_stock_movements(ingredient_id, limit)
        })

    @mcp.tool()
    async def get_low_stock(
        threshold: Optional[float] = Field(
            default=None,
            description="Stock level to alert at (uses configured level if not set)"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        List ingredients at or below the low stock threshold.
        """
        return run_operation(lambda: {
            "items": ledger.get_low_stock_ingredients(threshold)
        })
