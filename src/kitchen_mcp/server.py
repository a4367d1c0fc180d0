"""
FastMCP server entry point for the kitchen tools
"""

import logging
import os

from fastmcp import FastMCP

from .kitchen.database import ensure_initialized
from .prompts import register_prompts
from .tools import (
    daily_menu_tools,
    ingredient_tools,
    menu_item_tools,
    order_tools,
    production_tools,
    reporting_tools,
)

LOG_LEVEL_ENV = "KITCHEN_LOG_LEVEL"


def create_server() -> FastMCP:
    """Create the FastMCP server with all kitchen tools and prompts registered."""
    mcp = FastMCP(
        name="Kitchen MCP",
        instructions="""
        Kitchen MCP manages a meal delivery kitchen: ingredient stock,
        menu items with recipes, production runs, daily menus per calorie
        band, customer orders and the daily production plan.

        Producing a menu item deducts its recipe from stock and either
        fully succeeds or changes nothing. The production plan is a report
        only and never changes stock.
        """,
    )

    ingredient_tools.register_tools(mcp)
    menu_item_tools.register_tools(mcp)
    production_tools.register_tools(mcp)
    daily_menu_tools.register_tools(mcp)
    order_tools.register_tools(mcp)
    reporting_tools.register_tools(mcp)
    register_prompts(mcp)

    return mcp


def main():
    """Run the kitchen MCP server over stdio."""
    logging.basicConfig(
        level=os.environ.get(LOG_LEVEL_ENV, "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ensure_initialized()
    create_server().run()


if __name__ == "__main__":
    main()
