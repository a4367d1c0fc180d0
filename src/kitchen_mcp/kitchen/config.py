"""
Centralized configuration for the kitchen ledger and planners.

Provides menu limits, the default calorie target, stock thresholds and
delivery defaults with persistence to kitchen_preferences.json.
"""

import json
import os
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Optional

from .exceptions import InvalidArgument

# Config file location (same directory as the database)
CONFIG_FILE = "kitchen_preferences.json"
CONFIG_FILE_ENV = "KITCHEN_CONFIG_FILE"
CONFIG_SECTION = "kitchen_config"

# Hard ceiling on items per daily menu; config may only lower it
DAILY_MENU_ITEMS_CEILING = 5


@dataclass
class KitchenConfig:
    """Configuration for menu assignment, planning and stock parameters."""

    # Daily menu size bounds
    max_daily_menu_items: int = 5
    min_daily_menu_items: int = 1

    # Calories used when neither the order nor its customer has a target
    default_calories: int = 1600

    # Ingredient defaults
    default_unit: str = "kg"
    low_stock_threshold: float = 5.0

    # Orders
    default_delivery_time: str = "12:00"

    # Seconds a writer waits for the database lock
    db_timeout_seconds: float = 30.0


# Global config instance (lazy loaded)
_config: Optional[KitchenConfig] = None


def get_config_path() -> str:
    """Get the path of the preferences file."""
    return os.environ.get(CONFIG_FILE_ENV) or CONFIG_FILE


def _coerce(name: str, value: Any) -> Any:
    """Cast a raw value to the type of the matching dataclass field."""
    default = getattr(KitchenConfig, name)
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def load_config() -> KitchenConfig:
    """
    Load configuration from file or return defaults.

    Returns:
        KitchenConfig instance
    """
    global _config

    if _config is not None:
        return _config

    _config = KitchenConfig()

    path = get_config_path()
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                data = json.load(f)

            section = data.get(CONFIG_SECTION, {})
            for field in fields(KitchenConfig):
                if field.name in section:
                    setattr(_config, field.name,
                            _coerce(field.name, section[field.name]))

        except (json.JSONDecodeError, IOError, KeyError, ValueError, TypeError):
            # On any error, use defaults
            _config = KitchenConfig()

    # Hand-edited files cannot lift the ceiling
    _config.max_daily_menu_items = min(_config.max_daily_menu_items,
                                       DAILY_MENU_ITEMS_CEILING)
    return _config


def _check_menu_bounds(config: KitchenConfig) -> None:
    """
    Raises:
        InvalidArgument: If the daily menu bounds leave 1..5
    """
    if not 1 <= config.max_daily_menu_items <= DAILY_MENU_ITEMS_CEILING:
        raise InvalidArgument(
            f"max_daily_menu_items must be between 1 and {DAILY_MENU_ITEMS_CEILING}",
            field='max_daily_menu_items'
        )
    if not 1 <= config.min_daily_menu_items <= config.max_daily_menu_items:
        raise InvalidArgument(
            "min_daily_menu_items must be between 1 and max_daily_menu_items",
            field='min_daily_menu_items'
        )


def save_config(config: KitchenConfig) -> Dict[str, Any]:
    """
    Save configuration to file.

    Args:
        config: KitchenConfig to save

    Returns:
        Dict with success status
    """
    global _config

    path = get_config_path()

    # Load existing preferences to preserve other settings
    existing = {}
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                existing = json.load(f)
        except (json.JSONDecodeError, IOError):
            existing = {}

    existing[CONFIG_SECTION] = asdict(config)

    try:
        with open(path, 'w') as f:
            json.dump(existing, f, indent=2)

        _config = config
        return {'success': True, 'config': asdict(config)}
    except IOError as e:
        return {'success': False, 'error': str(e)}


def update_config(**kwargs) -> Dict[str, Any]:
    """
    Update specific configuration values.

    Args:
        **kwargs: Configuration fields to update

    Returns:
        Dict with success status and updated config

    Raises:
        InvalidArgument: If the daily menu bounds would leave 1..5
    """
    config = replace(load_config())

    valid_fields = {field.name for field in fields(KitchenConfig)}

    updated = []
    for key, value in kwargs.items():
        if key in valid_fields and value is not None:
            setattr(config, key, _coerce(key, value))
            updated.append(key)

    if updated:
        _check_menu_bounds(config)
        result = save_config(config)
        result['updated_fields'] = updated
        return result

    return {'success': True, 'message': 'No changes made', 'config': asdict(config)}


def reset_config() -> Dict[str, Any]:
    """
    Reset configuration to defaults.

    Returns:
        Dict with success status
    """
    global _config
    _config = KitchenConfig()
    return save_config(_config)


def clear_cache() -> None:
    """Forget the loaded config so the next load re-reads the file."""
    global _config
    _config = None


def get_config_summary() -> Dict[str, Any]:
    """
    Get current configuration as a summary.

    Returns:
        Dict with all config values
    """
    config = load_config()
    return {
        'daily_menu': {
            'min_items': config.min_daily_menu_items,
            'max_items': config.max_daily_menu_items,
            'description': 'Bounds on menu items per day and calorie band'
        },
        'planning': {
            'default_calories': config.default_calories,
            'description': 'Calories assumed when order and customer have none'
        },
        'stock': {
            'default_unit': config.default_unit,
            'low_stock_threshold': config.low_stock_threshold,
            'description': 'Ingredient defaults and low stock alert level'
        },
        'orders': {
            'default_delivery_time': config.default_delivery_time,
            'description': 'Delivery time used for generated orders'
        },
        'database': {
            'timeout_seconds': config.db_timeout_seconds,
            'description': 'How long a writer waits for the database lock'
        }
    }
