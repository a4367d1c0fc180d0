"""
Delivery orders and the automatic daily order generator.

Order numbers are assigned as max + 1 while holding the database write
lock, and the column is UNIQUE, so concurrent creators always receive
distinct, contiguous numbers.
"""

import logging
import sqlite3
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .config import load_config
from .customers import fetch_customer, list_customers
from .database import get_db_connection, ensure_initialized, transaction
from .dates import DateLike, day_range, format_day, now_iso, parse_day
from .exceptions import InvalidArgument, NotFound

logger = logging.getLogger(__name__)

ORDER_STATUSES = ('PENDING', 'PREPARING', 'ON_THE_WAY', 'DELIVERED')
ACTIVE_STATUSES = ('PENDING', 'PREPARING', 'ON_THE_WAY')
PAYMENT_STATUSES = ('UNPAID', 'PAID', 'PARTIAL')


def _row_to_order(row: sqlite3.Row) -> Dict[str, Any]:
    order = dict(row)
    order['is_prepaid'] = bool(order['is_prepaid'])
    order['is_auto_order'] = bool(order['is_auto_order'])
    return order


def _fetch(conn: sqlite3.Connection, order_id: int) -> Dict[str, Any]:
    row = conn.execute("SELECT * FROM orders WHERE id = ?", (order_id,)).fetchone()
    if not row:
        raise NotFound('Order', order_id)
    return _row_to_order(row)


def next_order_number(conn: sqlite3.Connection) -> int:
    """Next order number; call only inside transaction()."""
    row = conn.execute("SELECT MAX(order_number) FROM orders").fetchone()
    return (row[0] or 0) + 1


def _insert_order(
    conn: sqlite3.Connection,
    customer: Dict[str, Any],
    delivery_day: str,
    delivery_time: Optional[str],
    quantity: int,
    calories: Optional[int],
    is_prepaid: bool,
    payment_status: str,
    notes: Optional[str],
    is_auto_order: bool,
    actor: Optional[str]
) -> Dict[str, Any]:
    config = load_config()
    # Calories and address are snapshots taken at creation time
    snapshot_calories = calories or customer.get('calories') or config.default_calories

    cursor = conn.execute("""
        INSERT INTO orders
        (order_number, customer_id, delivery_address, delivery_date,
         delivery_time, quantity, calories, status, payment_status,
         is_prepaid, is_auto_order, notes, actor, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, 'PENDING', ?, ?, ?, ?, ?, ?)
    """, (
        next_order_number(conn),
        customer['id'],
        customer.get('address'),
        delivery_day,
        delivery_time or config.default_delivery_time,
        quantity,
        snapshot_calories,
        payment_status,
        int(is_prepaid),
        int(is_auto_order),
        notes,
        actor,
        now_iso()
    ))
    return _fetch(conn, cursor.lastrowid)


# ============== Orders ==============


def create_order(
    customer_id: int,
    delivery_date: DateLike,
    delivery_time: Optional[str] = None,
    quantity: int = 1,
    calories: Optional[int] = None,
    is_prepaid: bool = False,
    payment_status: str = 'UNPAID',
    notes: Optional[str] = None,
    *,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create an order for a customer.

    Args:
        customer_id: Ordering customer
        delivery_date: Calendar day of delivery
        delivery_time: HH:MM, configured default if None
        quantity: Number of portions (> 0)
        calories: Calorie snapshot, the customer's target if None
        is_prepaid: Whether the order is prepaid
        payment_status: One of PAYMENT_STATUSES
        notes: Free-text notes
        actor: Who placed the order

    Raises:
        NotFound: Unknown customer
        InvalidArgument: Bad date, quantity or payment status
    """
    ensure_initialized()

    delivery_day = format_day(parse_day(delivery_date, 'delivery_date'))
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidArgument("quantity must be a positive integer", field='quantity')
    if payment_status not in PAYMENT_STATUSES:
        raise InvalidArgument(
            f"Invalid payment_status. Must be one of: {', '.join(PAYMENT_STATUSES)}",
            field='payment_status'
        )

    with transaction() as conn:
        customer = fetch_customer(conn, customer_id)
        order = _insert_order(
            conn, customer, delivery_day, delivery_time, quantity, calories,
            is_prepaid, payment_status, notes, False, actor
        )

    logger.info("Created order #%d for customer %s on %s",
                order['order_number'], customer['name'], delivery_day)
    return order


def get_order(order_id: int) -> Dict[str, Any]:
    ensure_initialized()

    conn = get_db_connection()
    try:
        return _fetch(conn, order_id)
    finally:
        conn.close()


def list_orders(
    delivery_date: Optional[DateLike] = None,
    customer_id: Optional[int] = None
) -> List[Dict[str, Any]]:
    """
    List orders, optionally for one delivery day and/or customer.

    Each order carries its customer's name and calorie target.
    """
    ensure_initialized()

    conn = get_db_connection()
    try:
        query = """
            SELECT o.*, c.name as customer_name,
                   c.calories as customer_calories
            FROM orders o
            JOIN customers c ON o.customer_id = c.id
            WHERE 1=1
        """
        params: List[Any] = []

        if delivery_date is not None:
            start, end = day_range(delivery_date, 'delivery_date')
            query += " AND o.delivery_date >= ? AND o.delivery_date < ?"
            params.extend([start, end])

        if customer_id is not None:
            query += " AND o.customer_id = ?"
            params.append(customer_id)

        query += " ORDER BY o.order_number"

        return [_row_to_order(row) for row in conn.execute(query, params).fetchall()]
    finally:
        conn.close()


def update_order_status(
    order_id: int,
    status: str,
    *,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Move an order forward through PENDING, PREPARING, ON_THE_WAY, DELIVERED.

    Steps may be skipped but never reversed.

    Raises:
        NotFound: Unknown order
        InvalidArgument: Unknown status or backwards transition
    """
    ensure_initialized()

    if status not in ORDER_STATUSES:
        raise InvalidArgument(
            f"Invalid status. Must be one of: {', '.join(ORDER_STATUSES)}",
            field='status'
        )

    with transaction() as conn:
        order = _fetch(conn, order_id)
        current = order['status']
        if ORDER_STATUSES.index(status) <= ORDER_STATUSES.index(current):
            raise InvalidArgument(
                f"Cannot move order from {current} to {status}", field='status'
            )
        conn.execute(
            "UPDATE orders SET status = ?, updated_at = ? WHERE id = ?",
            (status, now_iso(), order_id)
        )
        order = _fetch(conn, order_id)

    logger.info("Order #%d %s -> %s (by %s)",
                order['order_number'], current, status, actor or 'unknown')
    return order


def get_current_order(customer_id: int) -> Optional[Dict[str, Any]]:
    """Latest order of a customer that has not been delivered yet."""
    ensure_initialized()

    conn = get_db_connection()
    try:
        fetch_customer(conn, customer_id)
        row = conn.execute(f"""
            SELECT * FROM orders
            WHERE customer_id = ?
              AND status IN ({', '.join('?' for _ in ACTIVE_STATUSES)})
            ORDER BY created_at DESC, id DESC
            LIMIT 1
        """, (customer_id, *ACTIVE_STATUSES)).fetchone()
        return _row_to_order(row) if row else None
    finally:
        conn.close()


# ============== Auto Orders ==============


def is_eligible(order_pattern: Optional[str], day: date) -> bool:
    """
    Check whether a delivery pattern includes a calendar day.

    Even/odd patterns use the parity of the day of the month.
    """
    if order_pattern == 'every_other_day_even':
        return day.day % 2 == 0
    if order_pattern == 'every_other_day_odd':
        return day.day % 2 == 1
    return True


def preview_auto_orders(target_date: DateLike) -> Dict[str, Any]:
    """
    List the active customers whose pattern matches a day, without writing.
    """
    day = parse_day(target_date, 'target_date')
    eligible = [
        {
            'id': c['id'],
            'name': c['name'],
            'phone': c['phone'],
            'order_pattern': c['order_pattern'],
        }
        for c in list_customers(active_only=True)
        if is_eligible(c['order_pattern'], day)
    ]
    return {
        'date': format_day(day),
        'eligible_customers': len(eligible),
        'customers': eligible,
    }


def generate_auto_orders(
    target_date: DateLike,
    *,
    actor: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create the day's orders for every eligible active customer.

    Customers who already have an order for the day are skipped, so
    running the generator twice for the same day creates nothing new.

    Returns:
        Summary with the processed date, eligible count and created orders
    """
    ensure_initialized()

    day = parse_day(target_date, 'target_date')
    day_str = format_day(day)
    start, end = day_range(day)

    created: List[Dict[str, Any]] = []
    eligible_count = 0

    with transaction() as conn:
        customers = [
            dict(row) for row in conn.execute(
                "SELECT * FROM customers WHERE is_active = 1 ORDER BY id"
            ).fetchall()
        ]
        for customer in customers:
            if not is_eligible(customer['order_pattern'], day):
                continue
            eligible_count += 1

            existing = conn.execute("""
                SELECT id FROM orders
                WHERE customer_id = ? AND delivery_date >= ? AND delivery_date < ?
                LIMIT 1
            """, (customer['id'], start, end)).fetchone()
            if existing:
                continue

            order = _insert_order(
                conn, customer, day_str, None, 1, None,
                False, 'UNPAID', None, True, actor
            )
            order['customer_name'] = customer['name']
            created.append(order)

    logger.info("Auto-created %d orders for %s (%d eligible customers)",
                len(created), day_str, eligible_count)

    return {
        'processed_date': day_str,
        'eligible_customers': eligible_count,
        'created_orders': len(created),
        'orders': created,
        'next_day_preview': preview_auto_orders(day + timedelta(days=1)),
    }
