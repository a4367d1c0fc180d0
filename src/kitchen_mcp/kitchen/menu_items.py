"""
Menu items and their recipes.

A recipe is the complete list of (ingredient, quantity per one produced
unit) pairs for a menu item. Recipes are replaced wholesale: every edit
deletes the existing lines and inserts the submitted list.
"""

import logging
import sqlite3
from numbers import Number
from typing import Any, Dict, List, Optional

from .database import get_db_connection, ensure_initialized, transaction
from .dates import now_iso
from .exceptions import Conflict, InvalidArgument, NotFound

logger = logging.getLogger(__name__)

_UNSET = object()


def _check_count(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgument(f"{field} must be an integer >= 0", field=field)
    return value


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgument("Name is required", field='name')
    return name.strip()


def _validate_recipe(
    conn: sqlite3.Connection,
    recipe: List[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """
    Check every recipe line before anything is written.

    Raises:
        InvalidArgument: Malformed line, non-positive quantity or duplicate
        NotFound: Unknown ingredient id
    """
    if recipe is None:
        return []
    if not isinstance(recipe, list):
        raise InvalidArgument("recipe must be a list", field='recipe')

    lines = []
    seen = set()
    for i, line in enumerate(recipe):
        if not isinstance(line, dict):
            raise InvalidArgument(
                f"Recipe line {i + 1} must be an object", field='recipe'
            )
        ingredient_id = line.get('ingredient_id')
        quantity = line.get('quantity_required')

        if ingredient_id is None:
            raise InvalidArgument(
                f"Recipe line {i + 1} is missing 'ingredient_id'", field='recipe'
            )
        if (isinstance(quantity, bool) or not isinstance(quantity, Number)
                or quantity <= 0):
            raise InvalidArgument(
                f"Recipe line {i + 1}: quantity_required must be > 0",
                field='recipe'
            )
        if ingredient_id in seen:
            raise InvalidArgument(
                f"Ingredient '{ingredient_id}' is listed more than once",
                field='recipe'
            )
        seen.add(ingredient_id)

        row = conn.execute(
            "SELECT id FROM ingredients WHERE id = ?", (ingredient_id,)
        ).fetchone()
        if not row:
            raise NotFound('Ingredient', ingredient_id)

        lines.append({
            'ingredient_id': ingredient_id,
            'quantity_required': float(quantity),
        })
    return lines


def _write_recipe(
    conn: sqlite3.Connection,
    menu_item_id: int,
    lines: List[Dict[str, Any]]
) -> None:
    conn.execute(
        "DELETE FROM recipe_ingredients WHERE menu_item_id = ?",
        (menu_item_id,)
    )
    conn.executemany("""
        INSERT INTO recipe_ingredients
        (menu_item_id, ingredient_id, quantity_required)
        VALUES (?, ?, ?)
    """, [
        (menu_item_id, line['ingredient_id'], line['quantity_required'])
        for line in lines
    ])


def fetch_recipe(
    conn: sqlite3.Connection,
    menu_item_id: int
) -> List[Dict[str, Any]]:
    """Recipe lines joined with each ingredient's current stock."""
    cursor = conn.execute("""
        SELECT ri.ingredient_id, ri.quantity_required,
               i.name as ingredient_name, i.unit, i.quantity as available
        FROM recipe_ingredients ri
        JOIN ingredients i ON ri.ingredient_id = i.id
        WHERE ri.menu_item_id = ?
        ORDER BY i.name, ri.ingredient_id
    """, (menu_item_id,))
    return [dict(row) for row in cursor.fetchall()]


def fetch_menu_item(
    conn: sqlite3.Connection,
    menu_item_id: int
) -> Dict[str, Any]:
    """
    Load a menu item with its recipe using the caller's connection.

    Raises:
        NotFound: If the menu item does not exist
    """
    row = conn.execute(
        "SELECT * FROM menu_items WHERE id = ?", (menu_item_id,)
    ).fetchone()
    if not row:
        raise NotFound('Menu item', menu_item_id)

    item = {
        'id': row['id'],
        'name': row['name'],
        'description': row['description'],
        'calories': row['calories'],
        'stock': row['stock'],
        'image': row['image'],
    }
    item['recipe'] = [
        {
            'ingredient_id': line['ingredient_id'],
            'ingredient_name': line['ingredient_name'],
            'quantity_required': line['quantity_required'],
            'unit': line['unit'],
        }
        for line in fetch_recipe(conn, menu_item_id)
    ]
    return item


# ============== Menu Item CRUD ==============


def get_menu_item(menu_item_id: int) -> Dict[str, Any]:
    """
    Get a menu item with its recipe.

    Raises:
        NotFound: If the menu item does not exist
    """
    ensure_initialized()

    conn = get_db_connection()
    try:
        return fetch_menu_item(conn, menu_item_id)
    finally:
        conn.close()


def list_menu_items() -> List[Dict[str, Any]]:
    """List menu items sorted by name, each with its recipe."""
    ensure_initialized()

    conn = get_db_connection()
    try:
        cursor = conn.execute(
            "SELECT id FROM menu_items ORDER BY name COLLATE NOCASE, id"
        )
        return [fetch_menu_item(conn, row['id']) for row in cursor.fetchall()]
    finally:
        conn.close()


def create_menu_item(
    name: str,
    description: Optional[str] = None,
    calories: int = 0,
    stock: int = 0,
    image: Optional[str] = None,
    recipe: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """
    Create a menu item together with its recipe.

    Args:
        name: Dish name
        description: Optional description
        calories: Informational calories per unit
        stock: Produced-but-unsold units
        image: Image reference
        recipe: List of {ingredient_id, quantity_required}

    Returns:
        The created menu item with recipe
    """
    ensure_initialized()

    name = _check_name(name)
    calories = _check_count(calories or 0, 'calories')
    stock = _check_count(stock or 0, 'stock')

    with transaction() as conn:
        return _insert_menu_item(conn, name, description, calories, stock,
                                 image, recipe)


def _insert_menu_item(
    conn: sqlite3.Connection,
    name: str,
    description: Optional[str],
    calories: int,
    stock: int,
    image: Optional[str],
    recipe: Optional[List[Dict[str, Any]]]
) -> Dict[str, Any]:
    lines = _validate_recipe(conn, recipe)
    now = now_iso()
    cursor = conn.execute("""
        INSERT INTO menu_items
        (name, description, calories, stock, image, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    """, (name, description, calories, stock, image, now, now))
    menu_item_id = cursor.lastrowid
    _write_recipe(conn, menu_item_id, lines)

    logger.info("Created menu item %s with %d recipe lines", name, len(lines))
    return fetch_menu_item(conn, menu_item_id)


def _collect_updates(
    name: Optional[str] = None,
    description: Any = _UNSET,
    calories: Optional[int] = None,
    stock: Optional[int] = None,
    image: Any = _UNSET
):
    """Validated SET clauses and parameters for the provided fields."""
    updates = []
    params: List[Any] = []

    if name is not None:
        updates.append("name = ?")
        params.append(_check_name(name))
    if description is not _UNSET:
        updates.append("description = ?")
        params.append(description)
    if calories is not None:
        updates.append("calories = ?")
        params.append(_check_count(calories, 'calories'))
    if stock is not None:
        updates.append("stock = ?")
        params.append(_check_count(stock, 'stock'))
    if image is not _UNSET:
        updates.append("image = ?")
        params.append(image)

    return updates, params


def _apply_updates(
    conn: sqlite3.Connection,
    menu_item_id: int,
    updates: List[str],
    params: List[Any],
    recipe: Optional[List[Dict[str, Any]]]
) -> Dict[str, Any]:
    fetch_menu_item(conn, menu_item_id)

    if recipe is not None:
        _write_recipe(conn, menu_item_id, _validate_recipe(conn, recipe))

    conn.execute(
        f"UPDATE menu_items SET {', '.join(updates + ['updated_at = ?'])} "
        f"WHERE id = ?",
        params + [now_iso(), menu_item_id]
    )
    return fetch_menu_item(conn, menu_item_id)


def update_menu_item(
    menu_item_id: int,
    name: Optional[str] = None,
    description: Any = _UNSET,
    calories: Optional[int] = None,
    stock: Optional[int] = None,
    image: Any = _UNSET,
    recipe: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """
    Update a menu item. When recipe is given it replaces the whole recipe.

    Raises:
        NotFound: If the menu item or a recipe ingredient does not exist
        InvalidArgument: If a field or recipe line is invalid
    """
    ensure_initialized()

    updates, params = _collect_updates(name, description, calories, stock, image)

    with transaction() as conn:
        return _apply_updates(conn, menu_item_id, updates, params, recipe)


def upsert_menu_item(
    name: str,
    description: Optional[str] = None,
    calories: int = 0,
    stock: int = 0,
    image: Optional[str] = None,
    recipe: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """
    Update the menu item with this exact name, or create it.

    The recipe always replaces the existing one. The name lookup and the
    write share one transaction, so concurrent upserts of the same name
    never create duplicates.
    """
    ensure_initialized()

    name = _check_name(name)
    calories = _check_count(calories or 0, 'calories')
    stock = _check_count(stock or 0, 'stock')

    with transaction() as conn:
        row = conn.execute(
            "SELECT id FROM menu_items WHERE name = ? ORDER BY id LIMIT 1",
            (name,)
        ).fetchone()

        if row:
            updates, params = _collect_updates(
                description=description, calories=calories,
                stock=stock, image=image
            )
            return _apply_updates(conn, row['id'], updates, params, recipe or [])
        return _insert_menu_item(conn, name, description, calories, stock,
                                 image, recipe)


def replace_recipe(
    menu_item_id: int,
    recipe: List[Dict[str, Any]]
) -> Dict[str, Any]:
    """
    Replace a menu item's entire recipe in one transaction.

    Callers must always submit the complete desired recipe.

    Raises:
        NotFound: If the menu item or an ingredient does not exist
        InvalidArgument: If a line is malformed
    """
    ensure_initialized()

    with transaction() as conn:
        fetch_menu_item(conn, menu_item_id)
        lines = _validate_recipe(conn, recipe if recipe is not None else [])
        _write_recipe(conn, menu_item_id, lines)
        item = fetch_menu_item(conn, menu_item_id)

    logger.info("Replaced recipe of %s (%d lines)", item['name'], len(lines))
    return item


def delete_menu_item(menu_item_id: int) -> Dict[str, Any]:
    """
    Delete a menu item, its recipe and its daily menu placements.

    Production runs keep their name snapshot.

    Raises:
        NotFound: If the menu item does not exist
        Conflict: If it is the only item of any daily menu
    """
    ensure_initialized()

    with transaction() as conn:
        item = fetch_menu_item(conn, menu_item_id)

        cursor = conn.execute("""
            SELECT dm.menu_date, dm.calorie_group
            FROM daily_menus dm
            JOIN daily_menu_items dmi ON dmi.daily_menu_id = dm.id
            WHERE dmi.menu_item_id = ?
              AND (SELECT COUNT(*) FROM daily_menu_items other
                   WHERE other.daily_menu_id = dm.id) = 1
            ORDER BY dm.menu_date, dm.calorie_group
        """, (menu_item_id,))
        sole_item_of = [
            f"{row['menu_date'][:10]} ({row['calorie_group'] or 'all'})"
            for row in cursor.fetchall()
        ]
        if sole_item_of:
            raise Conflict(
                f"Menu item '{item['name']}' is the only dish on daily menus: "
                f"{', '.join(sole_item_of)}"
            )

        # CASCADE removes recipe lines and daily menu links
        conn.execute("DELETE FROM menu_items WHERE id = ?", (menu_item_id,))

    logger.info("Deleted menu item %s", item['name'])
    return item
