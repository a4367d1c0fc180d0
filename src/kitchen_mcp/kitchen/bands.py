"""
Calorie band classification.

Bands:
- 1000-1200: below 1300 kcal
- 1400-1600: 1300-1699 kcal
- 1800-2000: 1700-2099 kcal
- 2200-2500: 2100 kcal and above
"""

from typing import Any, Dict, List, Optional

from .config import load_config
from .exceptions import InvalidArgument

CALORIE_BANDS: List[str] = ['1000-1200', '1400-1600', '1800-2000', '2200-2500']

# Lower edge of every band above the first
_BAND_EDGES = [
    (2100, '2200-2500'),
    (1700, '1800-2000'),
    (1300, '1400-1600'),
]


def classify_calories(calories: Optional[float]) -> str:
    """
    Classify a daily calorie target into its band label.

    Args:
        calories: Calorie target; None uses the configured default

    Returns:
        One of CALORIE_BANDS
    """
    if calories is None:
        calories = load_config().default_calories

    for edge, label in _BAND_EDGES:
        if calories >= edge:
            return label
    return CALORIE_BANDS[0]


def effective_calories(
    order_calories: Optional[int],
    customer_calories: Optional[int] = None
) -> int:
    """Pick the order snapshot, else the customer target, else the default."""
    if order_calories:
        return order_calories
    if customer_calories:
        return customer_calories
    return load_config().default_calories


def validate_band(calorie_group: Optional[str]) -> Optional[str]:
    """
    Check that a calorie group is a known band label.

    Returns:
        The label, or None when no band was given

    Raises:
        InvalidArgument: If the label is not one of CALORIE_BANDS
    """
    if calorie_group is None or calorie_group == '':
        return None
    if calorie_group not in CALORIE_BANDS:
        raise InvalidArgument(
            f"Invalid calorie_group '{calorie_group}'. "
            f"Must be one of: {', '.join(CALORIE_BANDS)}",
            field='calorie_group'
        )
    return calorie_group


def empty_band_counts() -> Dict[str, int]:
    return {label: 0 for label in CALORIE_BANDS}


def count_by_band(calorie_values: List[Any]) -> Dict[str, int]:
    """Count how many calorie values fall into each band."""
    counts = empty_band_counts()
    for value in calorie_values:
        counts[classify_calories(value)] += 1
    return counts
