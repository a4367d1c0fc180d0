"""Tests for the tool response helpers."""

import asyncio

from kitchen_mcp.kitchen.exceptions import InsufficientStock, NotFound
from kitchen_mcp.tools.shared import error_response, report, run_operation


class FakeContext:
    def __init__(self):
        self.messages = []

    async def info(self, message):
        self.messages.append(("info", message))

    async def warning(self, message):
        self.messages.append(("warning", message))


class TestRunOperation:
    """Tests for run_operation() and error_response()."""

    def test_success_wraps_result(self):
        """Test: Results are merged into a success response."""
        assert run_operation(lambda: {"value": 3}) == {"success": True, "value": 3}

    def test_kitchen_error_keeps_details(self):
        """Test: Insufficient stock names the ingredient and amounts."""
        def fail():
            raise InsufficientStock("Chicken", 4.0, 2.0, "kg", ingredient_id=1)

        result = run_operation(fail)

        assert result["success"] is False
        assert result["error_code"] == "insufficient_stock"
        assert result["error"] == "Not enough Chicken: required 4 kg, available 2 kg"
        assert result["details"]["required"] == 4.0
        assert result["details"]["available"] == 2.0

    def test_not_found(self):
        """Test: NotFound carries the entity and key."""
        result = error_response(NotFound("Menu item", 7))

        assert result["error_code"] == "not_found"
        assert result["details"] == {"entity": "Menu item", "key": 7}

    def test_unexpected_error_is_internal(self):
        """Test: Other exceptions become internal errors."""
        def fail():
            raise RuntimeError("boom")

        result = run_operation(fail)

        assert result["success"] is False
        assert result["error_code"] == "internal"


class TestReport:
    """Tests for report()."""

    def test_info_on_success(self):
        """Test: Success sends the message as info."""
        ctx = FakeContext()

        asyncio.run(report(ctx, {"success": True}, "Saved"))

        assert ctx.messages == [("info", "Saved")]

    def test_warning_on_failure(self):
        """Test: Failure sends the error as a warning."""
        ctx = FakeContext()

        asyncio.run(report(ctx, {"success": False, "error": "Nope"}, "Saved"))

        assert ctx.messages == [("warning", "Nope")]

    def test_no_context(self):
        """Test: Without a context nothing is sent."""
        asyncio.run(report(None, {"success": True}, "Saved"))
