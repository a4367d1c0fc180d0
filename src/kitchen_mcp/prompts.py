"""
MCP prompts for the Kitchen MCP server
"""

from typing import Optional
from fastmcp import Context


def register_prompts(mcp):
    """Register prompts with the FastMCP server"""

    @mcp.prompt()
    async def plan_tomorrows_production(date: str, ctx: Context = None) -> str:
        """
        Generate a prompt that walks through preparing a delivery day.

        Args:
            date: Delivery date YYYY-MM-DD

        Returns:
            A prompt asking for a production checklist
        """
        return f"""I need to get the kitchen ready for deliveries on {date}.

Please:
1. Run generate_auto_orders for {date} with dry_run first and show me who will get an order
2. If the list looks right, generate the orders
3. Use get_production_plan for {date} to total the ingredients per calorie band
4. Compare the totals with list_ingredients and tell me which ingredients are short and by how much
5. Point out any calorie band that has orders but no daily menu

IMPORTANT: Do NOT produce anything or change stock - this is a planning pass only.
"""

    @mcp.prompt()
    async def restock_check(threshold: Optional[float] = None, ctx: Context = None) -> str:
        """
        Generate a prompt asking which ingredients need restocking.

        Args:
            threshold: Optional low stock level to use instead of the configured one

        Returns:
            A prompt asking for a restock list
        """
        threshold_phrase = f" below {threshold:g}" if threshold is not None else ""

        return f"""Which ingredients are running low{threshold_phrase}?

Please use get_low_stock to list them, grouped into items that are already out and items that are low.
For each one, show the current quantity with its unit and the recent stock movements from get_stock_movements
so I can see how quickly it is being used.
"""

    @mcp.prompt()
    async def set_up_weekly_menu(
        start_date: str,
        calorie_group: Optional[str] = None,
        ctx: Context = None
    ) -> str:
        """
        Generate a prompt to assign daily menus for a week.

        Args:
            start_date: First day of the week YYYY-MM-DD
            calorie_group: Optional calorie band to plan for

        Returns:
            A prompt asking for help building a week of menus
        """
        band_phrase = f" for the {calorie_group} calorie band" if calorie_group else ""

        return f"""Help me set up the daily menus for the 7 days starting {start_date}{band_phrase}.

Please:
1. List the menu items with list_menu_items so we can see calories and recipes
2. Suggest between 1 and 5 dishes per day, avoiding the same dish on consecutive days
3. Check with check_can_produce that current stock could cover a typical day
4. Once I confirm, save each day with set_daily_menu

Show the plan as a table with one row per day before saving anything.
"""

    @mcp.prompt()
    async def produce_for_orders(date: str, ctx: Context = None) -> str:
        """
        Generate a prompt to produce the dishes needed for a day's orders.

        Args:
            date: Delivery date YYYY-MM-DD

        Returns:
            A prompt asking to run production
        """
        return f"""Let's cook for the orders on {date}.

Please look at list_daily_menus and get_band_demand via get_kitchen_summary for {date}, then for each dish:
1. Work out how many units the orders need
2. Check with check_can_produce whether stock covers it
3. Produce it with produce_menu_item if it does

If an ingredient is short, stop and tell me the ingredient, the amount required and the amount available.
"""
