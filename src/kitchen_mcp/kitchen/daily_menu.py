"""
Daily menu assignment.

Binds a calendar day, and optionally a calorie band, to a bounded set
of menu items. Provides functions for:
- Looking up the menu for a day and band
- Creating a menu (fails if one exists) or setting it (create or replace)
- Listing and deleting menus for a day
- The customer view of a day's menu
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from .bands import classify_calories, validate_band
from .config import DAILY_MENU_ITEMS_CEILING, load_config
from .database import get_db_connection, ensure_initialized, transaction
from .dates import DateLike, day_range, now_iso
from .exceptions import Conflict, InvalidArgument, NotFound

logger = logging.getLogger(__name__)


def _validate_item_ids(menu_item_ids: Any) -> List[int]:
    """
    Check the size and uniqueness of a menu item id list.

    Raises:
        InvalidArgument: Empty, over the maximum, or containing duplicates
    """
    config = load_config()
    max_items = min(config.max_daily_menu_items, DAILY_MENU_ITEMS_CEILING)

    if not isinstance(menu_item_ids, (list, tuple)):
        raise InvalidArgument("menu_item_ids must be a list", field='menu_item_ids')
    if len(menu_item_ids) < config.min_daily_menu_items:
        raise InvalidArgument(
            f"At least {config.min_daily_menu_items} menu item is required",
            field='menu_item_ids'
        )
    if len(menu_item_ids) > max_items:
        raise InvalidArgument(
            f"Maximum {max_items} items allowed",
            field='menu_item_ids'
        )
    if len(set(menu_item_ids)) != len(menu_item_ids):
        raise InvalidArgument(
            "menu_item_ids contains duplicates", field='menu_item_ids'
        )
    return list(menu_item_ids)


def _check_items_exist(conn: sqlite3.Connection, menu_item_ids: List[int]) -> None:
    for menu_item_id in menu_item_ids:
        row = conn.execute(
            "SELECT id FROM menu_items WHERE id = ?", (menu_item_id,)
        ).fetchone()
        if not row:
            raise NotFound('Menu item', menu_item_id)


def _find_menu_row(
    conn: sqlite3.Connection,
    start: str,
    end: str,
    group_key: str
) -> Optional[sqlite3.Row]:
    return conn.execute("""
        SELECT * FROM daily_menus
        WHERE menu_date >= ? AND menu_date < ? AND calorie_group = ?
        ORDER BY id LIMIT 1
    """, (start, end, group_key)).fetchone()


def _build_menu(conn: sqlite3.Connection, row: sqlite3.Row) -> Dict[str, Any]:
    cursor = conn.execute("""
        SELECT mi.id, mi.name, mi.description, mi.calories, mi.image
        FROM daily_menu_items dmi
        JOIN menu_items mi ON dmi.menu_item_id = mi.id
        WHERE dmi.daily_menu_id = ?
        ORDER BY dmi.position, mi.id
    """, (row['id'],))
    items = [dict(r) for r in cursor.fetchall()]

    return {
        'id': row['id'],
        'date': row['menu_date'][:10],
        'calorie_group': row['calorie_group'] or None,
        'menu_item_ids': [item['id'] for item in items],
        'menu_items': items,
        'updated_at': row['updated_at'],
    }


def _write_items(
    conn: sqlite3.Connection,
    daily_menu_id: int,
    menu_item_ids: List[int]
) -> None:
    conn.execute(
        "DELETE FROM daily_menu_items WHERE daily_menu_id = ?", (daily_menu_id,)
    )
    conn.executemany("""
        INSERT INTO daily_menu_items (daily_menu_id, menu_item_id, position)
        VALUES (?, ?, ?)
    """, [
        (daily_menu_id, menu_item_id, position)
        for position, menu_item_id in enumerate(menu_item_ids)
    ])


def _insert_menu(
    conn: sqlite3.Connection,
    start: str,
    group_key: str,
    menu_item_ids: List[int]
) -> sqlite3.Row:
    now = now_iso()
    cursor = conn.execute("""
        INSERT INTO daily_menus (menu_date, calorie_group, created_at, updated_at)
        VALUES (?, ?, ?, ?)
    """, (start, group_key, now, now))
    _write_items(conn, cursor.lastrowid, menu_item_ids)
    return conn.execute(
        "SELECT * FROM daily_menus WHERE id = ?", (cursor.lastrowid,)
    ).fetchone()


# ============== Daily Menu Operations ==============


def get_daily_menu(
    menu_date: DateLike,
    calorie_group: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Get the menu for a day and calorie band.

    Args:
        menu_date: Calendar day (time components are ignored)
        calorie_group: Band label, or None for the band-less menu

    Returns:
        Menu with its items, or None if no menu is assigned
    """
    ensure_initialized()

    start, end = day_range(menu_date)
    group_key = validate_band(calorie_group) or ''

    conn = get_db_connection()
    try:
        row = _find_menu_row(conn, start, end, group_key)
        return _build_menu(conn, row) if row else None
    finally:
        conn.close()


def list_daily_menus(menu_date: DateLike) -> List[Dict[str, Any]]:
    """Get every band's menu for a day, band-less menu first."""
    ensure_initialized()

    start, end = day_range(menu_date)

    conn = get_db_connection()
    try:
        cursor = conn.execute("""
            SELECT * FROM daily_menus
            WHERE menu_date >= ? AND menu_date < ?
            ORDER BY calorie_group, id
        """, (start, end))
        return [_build_menu(conn, row) for row in cursor.fetchall()]
    finally:
        conn.close()


def create_daily_menu(
    menu_date: DateLike,
    menu_item_ids: List[int],
    calorie_group: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a menu for a day and band. Never overwrites.

    Raises:
        InvalidArgument: Bad date, band or item list size
        NotFound: Unknown menu item id
        Conflict: A menu already exists for this day and band
    """
    ensure_initialized()

    start, end = day_range(menu_date)
    group_key = validate_band(calorie_group) or ''
    menu_item_ids = _validate_item_ids(menu_item_ids)

    with transaction() as conn:
        if _find_menu_row(conn, start, end, group_key):
            raise Conflict(
                f"Menu already exists for {start}"
                + (f" ({group_key})" if group_key else "")
                + ". Use set_daily_menu to replace it."
            )
        _check_items_exist(conn, menu_item_ids)
        row = _insert_menu(conn, start, group_key, menu_item_ids)
        menu = _build_menu(conn, row)

    logger.info("Created daily menu %s %s with %d items",
                start, group_key or '(all)', len(menu_item_ids))
    return menu


def set_daily_menu(
    menu_date: DateLike,
    menu_item_ids: List[int],
    calorie_group: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create or replace the menu for a day and band.

    The item set is replaced in full, never merged with the previous one.

    Raises:
        InvalidArgument: Bad date, band or item list size
        NotFound: Unknown menu item id
    """
    ensure_initialized()

    start, end = day_range(menu_date)
    group_key = validate_band(calorie_group) or ''
    menu_item_ids = _validate_item_ids(menu_item_ids)

    with transaction() as conn:
        _check_items_exist(conn, menu_item_ids)
        row = _find_menu_row(conn, start, end, group_key)

        if row is None:
            row = _insert_menu(conn, start, group_key, menu_item_ids)
            created = True
        else:
            _write_items(conn, row['id'], menu_item_ids)
            conn.execute(
                "UPDATE daily_menus SET updated_at = ? WHERE id = ?",
                (now_iso(), row['id'])
            )
            row = conn.execute(
                "SELECT * FROM daily_menus WHERE id = ?", (row['id'],)
            ).fetchone()
            created = False

        menu = _build_menu(conn, row)

    menu['created'] = created
    logger.info("%s daily menu %s %s with %d items",
                "Created" if created else "Replaced",
                start, group_key or '(all)', len(menu_item_ids))
    return menu


def delete_daily_menu(
    menu_date: DateLike,
    calorie_group: Optional[str] = None
) -> Dict[str, Any]:
    """
    Delete the menu for a day and band.

    Raises:
        NotFound: If no menu is assigned
    """
    ensure_initialized()

    start, end = day_range(menu_date)
    group_key = validate_band(calorie_group) or ''

    with transaction() as conn:
        row = _find_menu_row(conn, start, end, group_key)
        if not row:
            raise NotFound('Daily menu', f"{start} {group_key}".strip())
        menu = _build_menu(conn, row)
        conn.execute("DELETE FROM daily_menus WHERE id = ?", (row['id'],))

    return menu


def get_customer_menu(
    menu_date: DateLike,
    calories: Optional[int] = None
) -> Dict[str, Any]:
    """
    Get the dishes a customer sees for a day.

    Uses the menu of the customer's calorie band, falling back to the
    band-less menu.

    Args:
        menu_date: Calendar day
        calories: Customer calorie target (configured default if None)

    Returns:
        Dict with the band used and the menu items (empty if none)
    """
    band = classify_calories(calories)

    menu = get_daily_menu(menu_date, band) or get_daily_menu(menu_date)
    items = []
    if menu:
        items = [
            {
                'id': item['id'],
                'name': item['name'],
                'description': item['description'] or '',
                'calories': item['calories'],
                'image': item['image'],
            }
            for item in menu['menu_items']
        ]

    return {
        'date': day_range(menu_date)[0],
        'calorie_group': band,
        'menu_calorie_group': menu['calorie_group'] if menu else None,
        'items': items,
    }
