"""
Production runs - turn ingredients into finished menu item stock.

A run for quantity q of a menu item:
1. Loads the recipe with current ingredient stock
2. Requires quantity_required * q of every ingredient to be available
3. Deducts every ingredient and adds q to the menu item's stock

Steps 1-3 run inside one write transaction, so either every ingredient
is deducted and the stock incremented, or nothing changes.
"""

import logging
import math
import sqlite3
from typing import Any, Dict, List, Optional

from .database import get_db_connection, ensure_initialized, transaction
from .dates import now_iso
from .exceptions import InsufficientStock, InvalidArgument
from .ledger import apply_delta
from .menu_items import fetch_menu_item, fetch_recipe

logger = logging.getLogger(__name__)

# Tolerance for float rounding when comparing stock to requirements
_EPSILON = 1e-9


def _check_produce_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidArgument(
            "Produced quantity must be a positive integer", field='quantity'
        )
    return quantity


def _requirements(
    recipe: List[Dict[str, Any]],
    quantity: int
) -> List[Dict[str, Any]]:
    """Scale every recipe line linearly by the produced quantity."""
    return [
        {
            'ingredient_id': line['ingredient_id'],
            'ingredient_name': line['ingredient_name'],
            'unit': line['unit'],
            'required': line['quantity_required'] * quantity,
            'available': line['available'],
        }
        for line in recipe
    ]


def _shortages(requirements: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        req for req in requirements
        if req['available'] + _EPSILON < req['required']
    ]


def _load(conn: sqlite3.Connection, menu_item_id: int):
    item = fetch_menu_item(conn, menu_item_id)
    recipe = fetch_recipe(conn, menu_item_id)
    return item, recipe


def check_can_produce(menu_item_id: int, quantity: int) -> Dict[str, Any]:
    """
    Check whether current stock covers a production run, without writing.

    Args:
        menu_item_id: Menu item to produce
        quantity: Units to produce

    Returns:
        Dict with can_produce and every short ingredient in missing

    Raises:
        NotFound: If the menu item does not exist
        InvalidArgument: If quantity is not a positive integer
    """
    ensure_initialized()

    quantity = _check_produce_quantity(quantity)

    conn = get_db_connection()
    try:
        item, recipe = _load(conn, menu_item_id)
    finally:
        conn.close()

    requirements = _requirements(recipe, quantity)
    missing = _shortages(requirements)

    return {
        'menu_item_id': item['id'],
        'menu_item_name': item['name'],
        'quantity': quantity,
        'can_produce': not missing,
        'requirements': requirements,
        'missing': missing,
    }


def max_producible(menu_item_id: int) -> Dict[str, Any]:
    """
    Largest whole number of units current stock allows.

    A menu item without a recipe is not limited by stock, reported as None.

    Raises:
        NotFound: If the menu item does not exist
    """
    ensure_initialized()

    conn = get_db_connection()
    try:
        item, recipe = _load(conn, menu_item_id)
    finally:
        conn.close()

    if not recipe:
        return {'menu_item_id': item['id'], 'menu_item_name': item['name'],
                'max_quantity': None, 'limiting_ingredient': None}

    best = None
    limiting = None
    for line in recipe:
        units = math.floor(
            (max(line['available'], 0) + _EPSILON) / line['quantity_required']
        )
        if best is None or units < best:
            best = units
            limiting = line['ingredient_name']

    return {
        'menu_item_id': item['id'],
        'menu_item_name': item['name'],
        'max_quantity': best,
        'limiting_ingredient': limiting,
    }


def produce_menu_item(
    menu_item_id: int,
    quantity: int,
    *,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Produce units of a menu item, deducting its recipe from stock.

    All-or-nothing: the stock check, every deduction and the stock
    increment happen under one BEGIN IMMEDIATE transaction, so two
    concurrent runs can never both pass the check against stale stock.

    Args:
        menu_item_id: Menu item to produce
        quantity: Positive number of units
        actor: Who ran the production

    Returns:
        Dict with new_stock, run_id and the consumed ingredients

    Raises:
        NotFound: If the menu item does not exist
        InvalidArgument: If quantity is not a positive integer
        InsufficientStock: For the first ingredient that cannot cover the run
    """
    ensure_initialized()

    quantity = _check_produce_quantity(quantity)

    with transaction() as conn:
        item, recipe = _load(conn, menu_item_id)
        requirements = _requirements(recipe, quantity)

        # Fail fast before any write
        for req in requirements:
            if req['available'] + _EPSILON < req['required']:
                logger.warning(
                    "Production of %d x %s blocked: %s needs %s %s, has %s",
                    quantity, item['name'], req['ingredient_name'],
                    req['required'], req['unit'], req['available']
                )
                raise InsufficientStock(
                    ingredient_name=req['ingredient_name'],
                    required=req['required'],
                    available=req['available'],
                    unit=req['unit'],
                    ingredient_id=req['ingredient_id'],
                )

        produced_at = now_iso()
        cursor = conn.execute("""
            INSERT INTO production_runs
            (menu_item_id, menu_item_name, quantity, actor, produced_at)
            VALUES (?, ?, ?, ?, ?)
        """, (menu_item_id, item['name'], quantity, actor, produced_at))
        run_id = cursor.lastrowid
        reference = f"production_run:{run_id}"

        for req in requirements:
            apply_delta(conn, req['ingredient_id'], -req['required'],
                        'production', reference, actor)
            conn.execute("""
                INSERT INTO production_consumptions (run_id, ingredient_id, quantity)
                VALUES (?, ?, ?)
            """, (run_id, req['ingredient_id'], req['required']))

        conn.execute("""
            UPDATE menu_items
            SET stock = stock + ?, updated_at = ?
            WHERE id = ?
        """, (quantity, produced_at, menu_item_id))

        new_stock = conn.execute(
            "SELECT stock FROM menu_items WHERE id = ?", (menu_item_id,)
        ).fetchone()['stock']

    logger.info("Produced %d x %s (run %d), stock now %d",
                quantity, item['name'], run_id, new_stock)

    return {
        'run_id': run_id,
        'menu_item_id': menu_item_id,
        'menu_item_name': item['name'],
        'quantity': quantity,
        'new_stock': new_stock,
        'consumed': [
            {
                'ingredient_id': req['ingredient_id'],
                'ingredient_name': req['ingredient_name'],
                'quantity': req['required'],
                'unit': req['unit'],
                'remaining': round(req['available'] - req['required'], 6),
            }
            for req in requirements
        ],
        'produced_at': produced_at,
    }


def list_production_runs(
    menu_item_id: Optional[int] = None,
    limit: int = 50
) -> List[Dict[str, Any]]:
    """
    Get recent production runs with their consumption lines, newest first.
    """
    ensure_initialized()

    conn = get_db_connection()
    try:
        query = """
            SELECT pr.*
            FROM production_runs pr
            WHERE 1=1
        """
        params: List[Any] = []

        if menu_item_id is not None:
            query += " AND pr.menu_item_id = ?"
            params.append(menu_item_id)

        query += " ORDER BY pr.id DESC LIMIT ?"
        params.append(limit)

        runs = [dict(row) for row in conn.execute(query, params).fetchall()]

        for run in runs:
            cursor = conn.execute("""
                SELECT pc.ingredient_id, pc.quantity,
                       i.name as ingredient_name, i.unit
                FROM production_consumptions pc
                LEFT JOIN ingredients i ON pc.ingredient_id = i.id
                WHERE pc.run_id = ?
                ORDER BY pc.id
            """, (run['id'],))
            run['consumed'] = [dict(r) for r in cursor.fetchall()]

        return runs
    finally:
        conn.close()
