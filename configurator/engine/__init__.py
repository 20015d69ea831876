"""
Configuration engine: pure functions of (definition, selection).

Usage:
    from configurator.engine import resolve_defaults, validate, calculate_price, check_availability

    selection = resolve_defaults(definition)
    violations = validate(definition, selection)
    price = calculate_price(definition, selection)
    verdict = check_availability(definition, selection)
"""

from configurator.engine.availability import check_availability, item_stock
from configurator.engine.consistency import find_inconsistencies
from configurator.engine.defaults import resolve_defaults, resolve_item_defaults
from configurator.engine.pricing import calculate_price, price_bounds
from configurator.engine.validation import validate

__all__ = [
    "calculate_price",
    "check_availability",
    "find_inconsistencies",
    "item_stock",
    "price_bounds",
    "resolve_defaults",
    "resolve_item_defaults",
    "validate",
]
