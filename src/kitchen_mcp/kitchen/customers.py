"""
Subscription customers - calorie targets and delivery patterns.
"""

import sqlite3
from typing import Any, Dict, List, Optional

from .database import get_db_connection, ensure_initialized, transaction
from .dates import now_iso
from .exceptions import Conflict, InvalidArgument, NotFound

VALID_ORDER_PATTERNS = ('daily', 'every_other_day_even', 'every_other_day_odd')


def _row_to_customer(row: sqlite3.Row) -> Dict[str, Any]:
    customer = dict(row)
    customer['is_active'] = bool(customer['is_active'])
    return customer


def _check_pattern(order_pattern: str) -> str:
    if order_pattern not in VALID_ORDER_PATTERNS:
        raise InvalidArgument(
            f"Invalid order_pattern. Must be one of: {', '.join(VALID_ORDER_PATTERNS)}",
            field='order_pattern'
        )
    return order_pattern


def _check_calories(calories: Optional[int]) -> Optional[int]:
    if calories is None:
        return None
    if isinstance(calories, bool) or not isinstance(calories, int) or calories <= 0:
        raise InvalidArgument("calories must be a positive integer", field='calories')
    return calories


def fetch_customer(conn: sqlite3.Connection, customer_id: int) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM customers WHERE id = ?", (customer_id,)
    ).fetchone()
    if not row:
        raise NotFound('Customer', customer_id)
    return _row_to_customer(row)


def get_customer(customer_id: int) -> Dict[str, Any]:
    """
    Get a customer by id.

    Raises:
        NotFound: If the customer does not exist
    """
    ensure_initialized()

    conn = get_db_connection()
    try:
        return fetch_customer(conn, customer_id)
    finally:
        conn.close()


def list_customers(active_only: bool = False) -> List[Dict[str, Any]]:
    """List customers sorted by name."""
    ensure_initialized()

    conn = get_db_connection()
    try:
        query = "SELECT * FROM customers"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY name COLLATE NOCASE, id"
        return [_row_to_customer(row) for row in conn.execute(query).fetchall()]
    finally:
        conn.close()


def create_customer(
    name: str,
    phone: str,
    address: Optional[str] = None,
    calories: Optional[int] = None,
    order_pattern: str = 'daily',
    is_active: bool = True
) -> Dict[str, Any]:
    """
    Register a customer.

    Raises:
        InvalidArgument: Missing name/phone, bad pattern or calories
        Conflict: Phone already registered
    """
    ensure_initialized()

    if not name or not phone:
        raise InvalidArgument("Name and phone are required")
    _check_pattern(order_pattern)
    _check_calories(calories)
    now = now_iso()

    with transaction() as conn:
        if conn.execute(
            "SELECT id FROM customers WHERE phone = ?", (phone,)
        ).fetchone():
            raise Conflict(f"Phone '{phone}' is already registered")

        cursor = conn.execute("""
            INSERT INTO customers
            (name, phone, address, calories, order_pattern, is_active,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (name, phone, address, calories, order_pattern,
              int(is_active), now, now))
        return fetch_customer(conn, cursor.lastrowid)


def update_customer(
    customer_id: int,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    calories: Optional[int] = None,
    order_pattern: Optional[str] = None,
    is_active: Optional[bool] = None
) -> Dict[str, Any]:
    """
    Update customer fields. Only provided fields are changed.

    Raises:
        NotFound: If the customer does not exist
        Conflict: If the new phone belongs to another customer
    """
    ensure_initialized()

    updates = []
    params: List[Any] = []

    if name is not None:
        updates.append("name = ?")
        params.append(name)
    if phone is not None:
        updates.append("phone = ?")
        params.append(phone)
    if address is not None:
        updates.append("address = ?")
        params.append(address)
    if calories is not None:
        updates.append("calories = ?")
        params.append(_check_calories(calories))
    if order_pattern is not None:
        updates.append("order_pattern = ?")
        params.append(_check_pattern(order_pattern))
    if is_active is not None:
        updates.append("is_active = ?")
        params.append(int(is_active))

    with transaction() as conn:
        fetch_customer(conn, customer_id)
        if not updates:
            return fetch_customer(conn, customer_id)

        if phone is not None and conn.execute(
            "SELECT id FROM customers WHERE phone = ? AND id != ?",
            (phone, customer_id)
        ).fetchone():
            raise Conflict(f"Phone '{phone}' is already registered")

        updates.append("updated_at = ?")
        params.append(now_iso())
        params.append(customer_id)
        conn.execute(
            f"UPDATE customers SET {', '.join(updates)} WHERE id = ?",
            params
        )
        return fetch_customer(conn, customer_id)
