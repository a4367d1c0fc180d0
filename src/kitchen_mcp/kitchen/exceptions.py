"""
Errors raised by kitchen operations.

Each error carries a stable ``code`` and structured details so callers
can render a specific message instead of a generic failure.
"""

from typing import Any, Dict, Optional


class KitchenError(Exception):
    """Base class for recoverable kitchen errors."""

    code = "kitchen_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "error_code": self.code,
            "details": self.details,
        }


class NotFound(KitchenError):
    """Raised when a referenced ingredient, menu item, menu, customer or order is missing."""

    code = "not_found"

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' not found")

    @property
    def details(self) -> Dict[str, Any]:
        return {"entity": self.entity, "key": self.key}


class InvalidArgument(KitchenError):
    """Raised when an input violates a constraint."""

    code = "invalid_argument"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    @property
    def details(self) -> Dict[str, Any]:
        return {"field": self.field} if self.field else {}


class InsufficientStock(KitchenError):
    """Raised when an ingredient cannot cover a production run."""

    code = "insufficient_stock"

    def __init__(
        self,
        ingredient_name: str,
        required: float,
        available: float,
        unit: str,
        ingredient_id: Optional[int] = None
    ):
        self.ingredient_id = ingredient_id
        self.ingredient_name = ingredient_name
        self.required = required
        self.available = available
        self.unit = unit
        super().__init__(
            f"Not enough {ingredient_name}: required {required:g} {unit}, "
            f"available {available:g} {unit}"
        )

    @property
    def details(self) -> Dict[str, Any]:
        return {
            "ingredient_id": self.ingredient_id,
            "ingredient_name": self.ingredient_name,
            "required": self.required,
            "available": self.available,
            "unit": self.unit,
        }


class Conflict(KitchenError):
    """Raised when a write collides with existing data."""

    code = "conflict"
