"""
SQLite database connection and schema management for the kitchen ledger.
"""

import os
import sqlite3
from contextlib import contextmanager

# Database file location (working directory)
DB_FILE = "kitchen.db"
DB_FILE_ENV = "KITCHEN_DB_FILE"

# Default seconds to wait on a locked database
DEFAULT_TIMEOUT = 30.0

# Global initialization flag
_initialized = False


def get_db_path() -> str:
    """Get the full path to the database file."""
    return os.environ.get(DB_FILE_ENV) or DB_FILE


def _get_timeout() -> float:
    from .config import load_config
    return load_config().db_timeout_seconds or DEFAULT_TIMEOUT


def get_db_connection(autocommit: bool = False) -> sqlite3.Connection:
    """
    Get a connection to the SQLite database.

    Args:
        autocommit: Open with isolation_level=None so the caller controls
            BEGIN/COMMIT explicitly

    Returns:
        sqlite3.Connection: Database connection with row_factory set to Row
    """
    conn = sqlite3.connect(
        get_db_path(),
        timeout=_get_timeout(),
        isolation_level=None if autocommit else "",
    )
    conn.row_factory = sqlite3.Row
    # Enable foreign keys
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db_cursor():
    """
    Context manager for database operations with automatic commit/rollback.

    Usage:
        with get_db_cursor() as cursor:
            cursor.execute("INSERT INTO ...")
    """
    conn = get_db_connection()
    cursor = conn.cursor()
    try:
        yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def transaction():
    """
    Context manager for a write transaction that holds the database lock.

    Issues BEGIN IMMEDIATE before yielding, so every read made inside the
    block sees stock that no other writer can change until COMMIT.
    Check-then-act sequences (production runs, order numbering) must
    run inside this block.

    Usage:
        with transaction() as conn:
            row = conn.execute("SELECT ...").fetchone()
            conn.execute("UPDATE ...")
    """
    conn = get_db_connection(autocommit=True)
    try:
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
    finally:
        conn.close()


def initialize_database() -> None:
    """
    Create all database tables if they don't exist.
    """
    with get_db_cursor() as cursor:
        cursor.executescript("""
            -- Warehouse stock items
            CREATE TABLE IF NOT EXISTS ingredients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                quantity REAL NOT NULL DEFAULT 0,
                unit TEXT NOT NULL DEFAULT 'kg',
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            );

            -- Every change to an ingredient quantity
            CREATE TABLE IF NOT EXISTS stock_movements (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                ingredient_id INTEGER NOT NULL,
                delta REAL NOT NULL,
                reason TEXT NOT NULL,
                reference TEXT,
                actor TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY (ingredient_id) REFERENCES ingredients(id)
                    ON DELETE CASCADE
            );

            -- Dishes offered to customers
            CREATE TABLE IF NOT EXISTS menu_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT,
                calories INTEGER NOT NULL DEFAULT 0,
                stock INTEGER NOT NULL DEFAULT 0,
                image TEXT,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            );

            -- Recipe lines, quantity per one produced unit
            CREATE TABLE IF NOT EXISTS recipe_ingredients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                menu_item_id INTEGER NOT NULL,
                ingredient_id INTEGER NOT NULL,
                quantity_required REAL NOT NULL,
                FOREIGN KEY (menu_item_id) REFERENCES menu_items(id)
                    ON DELETE CASCADE,
                FOREIGN KEY (ingredient_id) REFERENCES ingredients(id),
                UNIQUE(menu_item_id, ingredient_id)
            );

            -- Completed production runs
            -- Run history outlives the menu item; the name is a snapshot
            CREATE TABLE IF NOT EXISTS production_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                menu_item_id INTEGER,
                menu_item_name TEXT NOT NULL,
                quantity INTEGER NOT NULL,
                actor TEXT,
                produced_at TEXT NOT NULL,
                FOREIGN KEY (menu_item_id) REFERENCES menu_items(id)
                    ON DELETE SET NULL
            );

            CREATE TABLE IF NOT EXISTS production_consumptions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                run_id INTEGER NOT NULL,
                ingredient_id INTEGER NOT NULL,
                quantity REAL NOT NULL,
                FOREIGN KEY (run_id) REFERENCES production_runs(id)
                    ON DELETE CASCADE
            );

            -- Menus per calendar day and calorie band ('' = no band)
            CREATE TABLE IF NOT EXISTS daily_menus (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                menu_date TEXT NOT NULL,
                calorie_group TEXT NOT NULL DEFAULT '',
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(menu_date, calorie_group)
            );

            CREATE TABLE IF NOT EXISTS daily_menu_items (
                daily_menu_id INTEGER NOT NULL,
                menu_item_id INTEGER NOT NULL,
                position INTEGER NOT NULL DEFAULT 0,
                PRIMARY KEY (daily_menu_id, menu_item_id),
                FOREIGN KEY (daily_menu_id) REFERENCES daily_menus(id)
                    ON DELETE CASCADE,
                FOREIGN KEY (menu_item_id) REFERENCES menu_items(id)
                    ON DELETE CASCADE
            );

            -- Subscription customers
            CREATE TABLE IF NOT EXISTS customers (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                phone TEXT UNIQUE NOT NULL,
                address TEXT,
                calories INTEGER,
                order_pattern TEXT NOT NULL DEFAULT 'daily',
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            );

            -- Delivery orders
            CREATE TABLE IF NOT EXISTS orders (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                order_number INTEGER UNIQUE NOT NULL,
                customer_id INTEGER NOT NULL,
                delivery_address TEXT,
                delivery_date TEXT NOT NULL,
                delivery_time TEXT,
                quantity INTEGER NOT NULL DEFAULT 1,
                calories INTEGER,
                status TEXT NOT NULL DEFAULT 'PENDING',
                payment_status TEXT NOT NULL DEFAULT 'UNPAID',
                is_prepaid INTEGER NOT NULL DEFAULT 0,
                is_auto_order INTEGER NOT NULL DEFAULT 0,
                notes TEXT,
                actor TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT,
                FOREIGN KEY (customer_id) REFERENCES customers(id)
            );

            -- Indexes for performance
            CREATE INDEX IF NOT EXISTS idx_ingredients_name
                ON ingredients(name);
            CREATE INDEX IF NOT EXISTS idx_stock_movements_ingredient
                ON stock_movements(ingredient_id);
            CREATE INDEX IF NOT EXISTS idx_recipe_ingredients_menu_item
                ON recipe_ingredients(menu_item_id);
            CREATE INDEX IF NOT EXISTS idx_recipe_ingredients_ingredient
                ON recipe_ingredients(ingredient_id);
            CREATE INDEX IF NOT EXISTS idx_production_runs_menu_item
                ON production_runs(menu_item_id);
            CREATE INDEX IF NOT EXISTS idx_daily_menus_date
                ON daily_menus(menu_date);
            CREATE INDEX IF NOT EXISTS idx_orders_delivery_date
                ON orders(delivery_date);
            CREATE INDEX IF NOT EXISTS idx_orders_customer
                ON orders(customer_id);
        """)


def ensure_initialized() -> None:
    """
    Ensure the database schema exists.

    This should be called before any kitchen operations.
    """
    global _initialized
    if _initialized:
        return

    initialize_database()
    _initialized = True


def reset_initialization() -> None:
    """Reset the initialization flag (for testing purposes)."""
    global _initialized
    _initialized = False


def get_table_counts() -> dict:
    """
    Get row counts for all tables (for diagnostics).

    Returns:
        Dict with table names as keys and row counts as values
    """
    ensure_initialized()
    conn = get_db_connection()
    try:
        counts = {}
        for table in ['ingredients', 'stock_movements', 'menu_items',
                      'recipe_ingredients', 'production_runs',
                      'production_consumptions', 'daily_menus',
                      'daily_menu_items', 'customers', 'orders']:
            cursor = conn.execute(f"SELECT COUNT(*) FROM {table}")
            counts[table] = cursor.fetchone()[0]
        return counts
    finally:
        conn.close()
