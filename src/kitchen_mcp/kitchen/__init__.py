"""
Kitchen package for ingredient stock, recipes and production planning.

This package provides:
- SQLite-based ingredient ledger with an audit trail of stock movements
- Menu items with replace-all recipes
- All-or-nothing production runs that deduct recipe ingredients
- Daily menus per calendar day and calorie band
- Customers, orders and the automatic daily order generator
- Production plans aggregating a day's ingredient demand
"""

from .database import (
    get_db_connection,
    initialize_database,
    ensure_initialized,
    get_table_counts,
)
from .exceptions import (
    KitchenError,
    NotFound,
    InvalidArgument,
    InsufficientStock,
    Conflict,
)
from .bands import (
    CALORIE_BANDS,
    classify_calories,
    effective_calories,
)
from .ledger import (
    get_ingredient,
    list_ingredients,
    create_ingredient,
    update_ingredient,
    upsert_ingredient,
    decrement_ingredient,
    adjust_ingredient,
    delete_ingredient,
    list_stock_movements,
    get_low_stock_ingredients,
)
from .menu_items import (
    get_menu_item,
    list_menu_items,
    create_menu_item,
    update_menu_item,
    upsert_menu_item,
    replace_recipe,
    delete_menu_item,
)
from .production import (
    produce_menu_item,
    check_can_produce,
    max_producible,
    list_production_runs,
)
from .daily_menu import (
    get_daily_menu,
    list_daily_menus,
    create_daily_menu,
    set_daily_menu,
    delete_daily_menu,
    get_customer_menu,
)
from .customers import (
    get_customer,
    list_customers,
    create_customer,
    update_customer,
)
from .orders import (
    create_order,
    get_order,
    list_orders,
    update_order_status,
    get_current_order,
    preview_auto_orders,
    generate_auto_orders,
)
from .planner import (
    get_band_demand,
    get_production_plan,
)
from .config import (
    load_config,
    save_config,
    update_config,
    reset_config,
    get_config_summary,
    KitchenConfig,
)

__all__ = [
    # Database
    'get_db_connection',
    'initialize_database',
    'ensure_initialized',
    'get_table_counts',
    # Errors
    'KitchenError',
    'NotFound',
    'InvalidArgument',
    'InsufficientStock',
    'Conflict',
    # Bands
    'CALORIE_BANDS',
    'classify_calories',
    'effective_calories',
    # Ingredient ledger
    'get_ingredient',
    'list_ingredients',
    'create_ingredient',
    'update_ingredient',
    'upsert_ingredient',
    'decrement_ingredient',
    'adjust_ingredient',
    'delete_ingredient',
    'list_stock_movements',
    'get_low_stock_ingredients',
    # Menu items and recipes
    'get_menu_item',
    'list_menu_items',
    'create_menu_item',
    'update_menu_item',
    'upsert_menu_item',
    'replace_recipe',
    'delete_menu_item',
    # Production
    'produce_menu_item',
    'check_can_produce',
    'max_producible',
    'list_production_runs',
    # Daily menus
    'get_daily_menu',
    'list_daily_menus',
    'create_daily_menu',
    'set_daily_menu',
    'delete_daily_menu',
    'get_customer_menu',
    # Customers
    'get_customer',
    'list_customers',
    'create_customer',
    'update_customer',
    # Orders
    'create_order',
    'get_order',
    'list_orders',
    'update_order_status',
    'get_current_order',
    'preview_auto_orders',
    'generate_auto_orders',
    # Planning
    'get_band_demand',
    'get_production_plan',
    # Config
    'load_config',
    'save_config',
    'update_config',
    'reset_config',
    'get_config_summary',
    'KitchenConfig',
]
