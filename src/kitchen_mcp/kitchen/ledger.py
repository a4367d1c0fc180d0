"""
Ingredient ledger - the warehouse stock of named ingredients.

- Quantities change only through single-statement arithmetic updates
  (quantity = quantity + delta), never fetch-then-write
- Every change is recorded as a stock movement with reason and actor
- Non-negativity is not enforced here; production runs check stock first
"""

import logging
import sqlite3
from numbers import Number
from typing import Any, Dict, List, Optional

from .config import load_config
from .database import get_db_connection, ensure_initialized, transaction
from .dates import now_iso
from .exceptions import Conflict, InvalidArgument, NotFound

logger = logging.getLogger(__name__)


def _row_to_ingredient(row: sqlite3.Row) -> Dict[str, Any]:
    return {
        'id': row['id'],
        'name': row['name'],
        'quantity': row['quantity'],
        'unit': row['unit'],
        'updated_at': row['updated_at'],
    }


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgument("Name is required", field='name')
    return name.strip()


def _check_quantity(quantity: Any, field: str = 'quantity') -> float:
    """Stock edits accept any number >= 0."""
    if isinstance(quantity, bool) or not isinstance(quantity, Number):
        raise InvalidArgument(f"{field} must be a number", field=field)
    if quantity < 0:
        raise InvalidArgument(f"{field} must be >= 0", field=field)
    return float(quantity)


def _fetch(conn: sqlite3.Connection, ingredient_id: int) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM ingredients WHERE id = ?", (ingredient_id,)
    ).fetchone()
    if not row:
        raise NotFound('Ingredient', ingredient_id)
    return _row_to_ingredient(row)


def record_movement(
    conn: sqlite3.Connection,
    ingredient_id: int,
    delta: float,
    reason: str,
    reference: Optional[str] = None,
    actor: Optional[str] = None
) -> None:
    """Append a stock movement row using the caller's connection."""
    conn.execute("""
        INSERT INTO stock_movements
        (ingredient_id, delta, reason, reference, actor, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
    """, (ingredient_id, delta, reason, reference, actor, now_iso()))


def apply_delta(
    conn: sqlite3.Connection,
    ingredient_id: int,
    delta: float,
    reason: str,
    reference: Optional[str] = None,
    actor: Optional[str] = None
) -> None:
    """
    Add delta to an ingredient inside the caller's transaction.

    The arithmetic happens in the UPDATE statement itself, so two
    writers can never overwrite each other's change.

    Raises:
        NotFound: If the ingredient does not exist
    """
    cursor = conn.execute("""
        UPDATE ingredients
        SET quantity = quantity + ?, updated_at = ?
        WHERE id = ?
    """, (delta, now_iso(), ingredient_id))
    if cursor.rowcount == 0:
        raise NotFound('Ingredient', ingredient_id)
    record_movement(conn, ingredient_id, delta, reason, reference, actor)


# ============== Ingredient CRUD ==============


def get_ingredient(ingredient_id: int) -> Dict[str, Any]:
    """
    Get a single ingredient by id.

    Raises:
        NotFound: If the ingredient does not exist
    """
    ensure_initialized()

    conn = get_db_connection()
    try:
        return _fetch(conn, ingredient_id)
    finally:
        conn.close()


def list_ingredients() -> List[Dict[str, Any]]:
    """List every ingredient sorted by name."""
    ensure_initialized()

    conn = get_db_connection()
    try:
        cursor = conn.execute(
            "SELECT * FROM ingredients ORDER BY name COLLATE NOCASE, id"
        )
        return [_row_to_ingredient(row) for row in cursor.fetchall()]
    finally:
        conn.close()


def _insert_ingredient(
    conn: sqlite3.Connection,
    name: str,
    quantity: float,
    unit: str,
    actor: Optional[str]
) -> Dict[str, Any]:
    now = now_iso()
    cursor = conn.execute("""
        INSERT INTO ingredients (name, quantity, unit, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
    """, (name, quantity, unit, now, now))
    ingredient_id = cursor.lastrowid
    if quantity:
        record_movement(conn, ingredient_id, quantity, 'opening_stock',
                        actor=actor)

    logger.info("Created ingredient %s (%s %s)", name, quantity, unit)
    return _fetch(conn, ingredient_id)


def _update_ingredient(
    conn: sqlite3.Connection,
    ingredient_id: int,
    name: Optional[str],
    quantity: Optional[float],
    unit: Optional[str],
    actor: Optional[str]
) -> Dict[str, Any]:
    """Apply already validated field changes inside the caller's transaction."""
    current = _fetch(conn, ingredient_id)

    updates = []
    params: List[Any] = []
    if name is not None:
        updates.append("name = ?")
        params.append(name)
    if quantity is not None:
        updates.append("quantity = ?")
        params.append(quantity)
    if unit is not None:
        updates.append("unit = ?")
        params.append(unit)

    if not updates:
        return current

    conn.execute(
        f"UPDATE ingredients SET {', '.join(updates + ['updated_at = ?'])} "
        f"WHERE id = ?",
        params + [now_iso(), ingredient_id]
    )

    if quantity is not None and quantity != current['quantity']:
        record_movement(conn, ingredient_id,
                        quantity - current['quantity'],
                        'manual_set', actor=actor)

    return _fetch(conn, ingredient_id)


def create_ingredient(
    name: str,
    quantity: float = 0,
    unit: Optional[str] = None,
    *,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a stock item.

    Args:
        name: Ingredient name
        quantity: Opening stock (>= 0)
        unit: Free-text unit, defaults to the configured unit
        actor: Who made the change

    Returns:
        The created ingredient
    """
    ensure_initialized()

    name = _check_name(name)
    quantity = _check_quantity(quantity)
    unit = unit or load_config().default_unit

    with transaction() as conn:
        return _insert_ingredient(conn, name, quantity, unit, actor)


def update_ingredient(
    ingredient_id: int,
    name: Optional[str] = None,
    quantity: Optional[float] = None,
    unit: Optional[str] = None,
    *,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Update ingredient fields. Quantity is an absolute stock edit.

    Only provided fields are changed.

    Raises:
        NotFound: If the ingredient does not exist
        InvalidArgument: If quantity is negative or name is blank
    """
    ensure_initialized()

    if name is not None:
        name = _check_name(name)
    if quantity is not None:
        quantity = _check_quantity(quantity)

    with transaction() as conn:
        return _update_ingredient(conn, ingredient_id, name, quantity, unit,
                                  actor)


def upsert_ingredient(
    name: str,
    quantity: float,
    unit: Optional[str] = None,
    *,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Set stock for the ingredient with this exact name, creating it if needed.

    The lookup and the write happen in one transaction, so two callers
    upserting the same new name end up with a single ingredient.

    Returns:
        The created or updated ingredient
    """
    ensure_initialized()

    name = _check_name(name)
    quantity = _check_quantity(quantity)

    with transaction() as conn:
        row = conn.execute(
            "SELECT id FROM ingredients WHERE name = ? ORDER BY id LIMIT 1",
            (name,)
        ).fetchone()

        if row:
            return _update_ingredient(conn, row['id'], None, quantity, unit,
                                      actor)
        return _insert_ingredient(conn, name, quantity,
                                  unit or load_config().default_unit, actor)


def decrement_ingredient(
    ingredient_id: int,
    amount: float,
    *,
    reason: str = 'decrement',
    reference: Optional[str] = None,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Atomically subtract an amount from an ingredient.

    Does not check for negative results; callers needing a floor
    must check inside the same transaction.

    Raises:
        NotFound: If the ingredient does not exist
        InvalidArgument: If amount is negative
    """
    ensure_initialized()

    amount = _check_quantity(amount, 'amount')

    with transaction() as conn:
        apply_delta(conn, ingredient_id, -amount, reason, reference, actor)
        return _fetch(conn, ingredient_id)


def adjust_ingredient(
    ingredient_id: int,
    delta: float,
    reason: str = 'adjustment',
    *,
    reference: Optional[str] = None,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Atomically add a signed delta (restock, waste, correction).

    Raises:
        NotFound: If the ingredient does not exist
    """
    ensure_initialized()

    if isinstance(delta, bool) or not isinstance(delta, Number):
        raise InvalidArgument("delta must be a number", field='delta')

    with transaction() as conn:
        apply_delta(conn, ingredient_id, float(delta), reason, reference, actor)
        ingredient = _fetch(conn, ingredient_id)

    logger.info("Adjusted ingredient %s by %s (%s)",
                ingredient['name'], delta, reason)
    return ingredient


def delete_ingredient(ingredient_id: int) -> Dict[str, Any]:
    """
    Delete an ingredient that no recipe uses.

    Raises:
        NotFound: If the ingredient does not exist
        Conflict: If any menu item recipe references it
    """
    ensure_initialized()

    with transaction() as conn:
        ingredient = _fetch(conn, ingredient_id)

        cursor = conn.execute("""
            SELECT mi.name
            FROM recipe_ingredients ri
            JOIN menu_items mi ON ri.menu_item_id = mi.id
            WHERE ri.ingredient_id = ?
            ORDER BY mi.name
        """, (ingredient_id,))
        used_by = [row['name'] for row in cursor.fetchall()]
        if used_by:
            raise Conflict(
                f"Ingredient '{ingredient['name']}' is used by: "
                f"{', '.join(used_by)}"
            )

        conn.execute("DELETE FROM ingredients WHERE id = ?", (ingredient_id,))

    logger.info("Deleted ingredient %s", ingredient['name'])
    return ingredient


# ============== Stock Queries ==============


def list_stock_movements(
    ingredient_id: Optional[int] = None,
    limit: int = 50
) -> List[Dict[str, Any]]:
    """
    Get recent stock movements, newest first.

    Args:
        ingredient_id: Only movements of this ingredient
        limit: Maximum number of rows
    """
    ensure_initialized()

    conn = get_db_connection()
    try:
        query = """
            SELECT sm.*, i.name as ingredient_name, i.unit
            FROM stock_movements sm
            JOIN ingredients i ON sm.ingredient_id = i.id
            WHERE 1=1
        """
        params: List[Any] = []

        if ingredient_id is not None:
            query += " AND sm.ingredient_id = ?"
            params.append(ingredient_id)

        query += " ORDER BY sm.id DESC LIMIT ?"
        params.append(limit)

        cursor = conn.execute(query, params)
        return [dict(row) for row in cursor.fetchall()]
    finally:
        conn.close()


def get_low_stock_ingredients(
    threshold: Optional[float] = None
) -> List[Dict[str, Any]]:
    """
    Get ingredients at or below a stock threshold.

    Args:
        threshold: Override threshold (configured level if None)
    """
    ensure_initialized()

    if threshold is None:
        threshold = load_config().low_stock_threshold

    conn = get_db_connection()
    try:
        cursor = conn.execute("""
            SELECT * FROM ingredients
            WHERE quantity <= ?
            ORDER BY quantity ASC, name
        """, (threshold,))
        items = []
        for row in cursor.fetchall():
            item = _row_to_ingredient(row)
            item['status'] = 'out' if item['quantity'] <= 0 else 'low'
            items.append(item)
        return items
    finally:
        conn.close()
