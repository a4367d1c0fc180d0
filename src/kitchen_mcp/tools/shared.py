"""
Shared helpers for the kitchen MCP tools.
"""

import logging
from typing import Any, Callable, Dict

from fastmcp import Context

from ..kitchen.exceptions import KitchenError

logger = logging.getLogger(__name__)


def error_response(error: Exception) -> Dict[str, Any]:
    """
    Convert an exception into the tool failure shape.

    Kitchen errors keep their code and structured details; anything else
    is reported as an internal error.
    """
    if isinstance(error, KitchenError):
        return error.to_dict()

    logger.exception("Unexpected error in kitchen tool")
    return {
        "success": False,
        "error": f"Internal error: {error}",
        "error_code": "internal",
        "details": {},
    }


def run_operation(operation: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    """Call a core operation and wrap its result or error for a tool."""
    try:
        result = operation()
    except Exception as e:
        return error_response(e)
    return {"success": True, **result}


async def report(ctx: Context, result: Dict[str, Any], message: str) -> None:
    """Send an info message to the client on success, a warning on failure."""
    if not ctx:
        return
    if result.get("success"):
        await ctx.info(message)
    else:
        await ctx.warning(result.get("error", "Operation failed"))
