"""
Production planning - the ingredient draw implied by a day's orders.

For a target day:
1. Every order delivered that day is placed in a calorie band using
   its calorie snapshot, else its customer's target, else the default
2. Orders are counted per band
3. Each band's daily menu recipes are multiplied by the band's count
4. Totals are accumulated per ingredient and sorted by name

The plan is read-only; only production runs deduct stock.
"""

import logging
from typing import Any, Dict, List

from .bands import count_by_band, effective_calories
from .database import get_db_connection, ensure_initialized
from .dates import DateLike, day_range

logger = logging.getLogger(__name__)


def get_band_demand(target_date: DateLike) -> Dict[str, int]:
    """
    Count a day's orders per calorie band.

    Returns:
        Dict with every band label mapped to its order count
    """
    ensure_initialized()

    start, end = day_range(target_date)

    conn = get_db_connection()
    try:
        cursor = conn.execute("""
            SELECT o.calories, c.calories as customer_calories
            FROM orders o
            LEFT JOIN customers c ON o.customer_id = c.id
            WHERE o.delivery_date >= ? AND o.delivery_date < ?
        """, (start, end))

        return count_by_band([
            effective_calories(row['calories'], row['customer_calories'])
            for row in cursor.fetchall()
        ])
    finally:
        conn.close()


def get_production_plan(target_date: DateLike) -> Dict[str, Any]:
    """
    Aggregate the ingredients needed to cook a day's orders.

    Args:
        target_date: Delivery day to plan

    Returns:
        Dict with:
        - band_counts: orders per calorie band
        - ingredients: [{ingredient_id, name, total_quantity, unit}]
        - unplanned_bands: bands with orders but no menu assigned
        - warnings: readable notes about unplanned bands
    """
    ensure_initialized()

    start, end = day_range(target_date)
    band_counts = get_band_demand(start)
    demanded = [band for band, count in band_counts.items() if count > 0]

    totals: Dict[int, Dict[str, Any]] = {}
    planned_bands: List[str] = []

    conn = get_db_connection()
    try:
        for band in demanded:
            menu = conn.execute("""
                SELECT id FROM daily_menus
                WHERE menu_date >= ? AND menu_date < ? AND calorie_group = ?
                ORDER BY id LIMIT 1
            """, (start, end, band)).fetchone()
            if not menu:
                continue
            planned_bands.append(band)
            multiplier = band_counts[band]

            cursor = conn.execute("""
                SELECT ri.ingredient_id, ri.quantity_required,
                       i.name, i.unit
                FROM daily_menu_items dmi
                JOIN recipe_ingredients ri ON ri.menu_item_id = dmi.menu_item_id
                JOIN ingredients i ON ri.ingredient_id = i.id
                WHERE dmi.daily_menu_id = ?
            """, (menu['id'],))

            for line in cursor.fetchall():
                key = line['ingredient_id']
                if key not in totals:
                    totals[key] = {
                        'ingredient_id': key,
                        'name': line['name'],
                        'total_quantity': 0.0,
                        'unit': line['unit'],
                    }
                totals[key]['total_quantity'] += line['quantity_required'] * multiplier
    finally:
        conn.close()

    ingredients = sorted(totals.values(),
                         key=lambda ing: (ing['name'], ing['ingredient_id']))
    for ing in ingredients:
        ing['total_quantity'] = round(ing['total_quantity'], 4)

    unplanned = [band for band in demanded if band not in planned_bands]
    warnings = [
        f"{band_counts[band]} order(s) in band {band} have no daily menu"
        for band in unplanned
    ]
    for warning in warnings:
        logger.warning("Production plan %s: %s", start, warning)

    return {
        'date': start,
        'total_orders': sum(band_counts.values()),
        'band_counts': band_counts,
        'ingredients': ingredients,
        'unplanned_bands': unplanned,
        'warnings': warnings,
    }
