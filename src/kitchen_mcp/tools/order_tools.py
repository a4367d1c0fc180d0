"""
Customer and order tools for the kitchen MCP server.

Provides tools for:
- Registering and updating subscription customers
- Creating orders and moving them through delivery statuses
- Generating each day's automatic orders
"""

from typing import Any, Dict, Optional

from fastmcp import Context
from pydantic import Field

from .shared import report, run_operation
from ..kitchen import customers, orders


def register_tools(mcp):
    """Register customer and order tools with the FastMCP server."""

    # ========== Customers ==========

    @mcp.tool()
    async def list_customers(
        active_only: bool = Field(
            default=False, description="Only customers with active subscriptions"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        List customers with calorie targets and delivery patterns.
        """
        return run_operation(lambda: {
            "customers": customers.list_customers(active_only)
        })

    @mcp.tool()
    async def get_customer(
        customer_id: int = Field(description="Customer identifier"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Get a customer with their current undelivered order, if any.
        """
        return run_operation(lambda: {
            "customer": customers.get_customer(customer_id),
            "current_order": orders.get_current_order(customer_id),
        })

    @mcp.tool()
    async def create_customer(
        name: str = Field(description="Customer name"),
        phone: str = Field(description="Phone number (must be unique)"),
        address: Optional[str] = Field(default=None, description="Delivery address"),
        calories: Optional[int] = Field(
            default=None, gt=0, description="Daily calorie target"
        ),
        order_pattern: str = Field(
            default="daily",
            description="'daily', 'every_other_day_even' or 'every_other_day_odd'"
        ),
        is_active: bool = Field(default=True, description="Subscription active"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Register a subscription customer.
        """
        result = run_operation(lambda: {
            "customer": customers.create_customer(
                name, phone, address, calories, order_pattern, is_active
            )
        })
        await report(ctx, result, f"Registered customer '{name}'")
        return result

    @mcp.tool()
    async def update_customer(
        customer_id: int = Field(description="Customer identifier"),
        name: Optional[str] = Field(default=None, description="New name"),
        phone: Optional[str] = Field(default=None, description="New phone"),
        address: Optional[str] = Field(default=None, description="New address"),
        calories: Optional[int] = Field(
            default=None, gt=0, description="New calorie target"
        ),
        order_pattern: Optional[str] = Field(
            default=None, description="New delivery pattern"
        ),
        is_active: Optional[bool] = Field(
            default=None, description="Activate or pause the subscription"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Update customer fields. Only provided fields are changed.
        """
        return run_operation(lambda: {
            "customer": customers.update_customer(
                customer_id, name, phone, address, calories,
                order_pattern, is_active
            )
        })

    # ========== Orders ==========

    @mcp.tool()
    async def create_order(
        customer_id: int = Field(description="Ordering customer"),
        delivery_date: str = Field(description="Delivery date YYYY-MM-DD"),
        delivery_time: Optional[str] = Field(
            default=None, description="Delivery time HH:MM"
        ),
        quantity: int = Field(default=1, gt=0, description="Portions"),
        calories: Optional[int] = Field(
            default=None, gt=0,
            description="Calories for this order (customer's target if not set)"
        ),
        is_prepaid: bool = Field(default=False, description="Order is prepaid"),
        payment_status: str = Field(
            default="UNPAID", description="'UNPAID', 'PAID' or 'PARTIAL'"
        ),
        notes: Optional[str] = Field(default=None, description="Order notes"),
        actor: Optional[str] = Field(
            default=None, description="Who is placing the order"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Create a delivery order.

        The customer's address and calorie target are copied onto the order
        at creation time. Order numbers increase strictly.
        """
        result = run_operation(lambda: {
            "order": orders.create_order(
                customer_id, delivery_date, delivery_time, quantity, calories,
                is_prepaid, payment_status, notes, actor=actor
            )
        })
        if result.get("success"):
            await report(ctx, result, f"Created order #{result['order']['order_number']}")
        else:
            await report(ctx, result, "")
        return result

    @mcp.tool()
    async def list_orders(
        delivery_date: Optional[str] = Field(
            default=None, description="Only orders for this date YYYY-MM-DD"
        ),
        customer_id: Optional[int] = Field(
            default=None, description="Only orders of this customer"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        List orders by order number.
        """
        return run_operation(lambda: {
            "orders": orders.list_orders(delivery_date, customer_id)
        })

    @mcp.tool()
    async def update_order_status(
        order_id: int = Field(description="Order identifier"),
        status: str = Field(
            description="'PREPARING', 'ON_THE_WAY' or 'DELIVERED'"
        ),
        actor: Optional[str] = Field(
            default=None, description="Who is updating the order"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Move an order forward: PENDING -> PREPARING -> ON_THE_WAY -> DELIVERED.

        Orders never move backwards.
        """
        return run_operation(lambda: {
            "order": orders.update_order_status(order_id, status, actor=actor)
        })

    @mcp.tool()
    async def get_current_order(
        customer_id: int = Field(description="Customer identifier"),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Get a customer's most recent order that has not been delivered.
        """
        return run_operation(lambda: {
            "order": orders.get_current_order(customer_id)
        })

    # ========== Auto Orders ==========

    @mcp.tool()
    async def generate_auto_orders(
        target_date: str = Field(description="Delivery date YYYY-MM-DD"),
        dry_run: bool = Field(
            default=False,
            description="Only list eligible customers without creating orders"
        ),
        actor: Optional[str] = Field(
            default=None, description="Who is triggering generation"
        ),
        ctx: Context = None
    ) -> Dict[str, Any]:
        """
        Create the day's orders for active customers whose delivery pattern
        includes the date.

        Patterns: daily; every_other_day_even (even days of the month);
        every_other_day_odd (odd days). Customers who already have an order
        that day are skipped.
        """
        if dry_run:
            return run_operation(lambda: orders.preview_auto_orders(target_date))

        result = run_operation(
            lambda: orders.generate_auto_orders(target_date, actor=actor)
        )
        if result.get("success"):
            await report(
                ctx, result,
                f"Created {result['created_orders']} orders for {result['processed_date']}"
            )
        return result
