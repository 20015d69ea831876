"""
Stock sufficiency of a selection.

A stock-tracked axis limits the configuration through the stock of the
option chosen on it; a quantity at or below zero makes the configuration
unavailable. With no tracked axis selected, the product-level stock (if
tracked) applies instead.

Every required bundle item, and every selected optional one, is checked
against the stock of its own nested selection by the same rule. Any of
them at zero makes the whole configuration unavailable, whatever the
parent's own stock.
"""

from collections.abc import Callable, Iterable
from typing import Any

from configurator.engine.options import chosen_option
from configurator.protocols.catalog import BundleItem, ProductDefinition, VariationAxis
from configurator.protocols.results import AvailabilityVerdict, AxisStock, BundleItemStock
from configurator.selection import SelectionState

# (bundle item, nested configuration) -> sellable stock, None when untracked
BundleStockLookup = Callable[[BundleItem, dict], "int | None"]


def _tracked_stock(
    axes: Iterable[VariationAxis],
    value_of: Callable[[VariationAxis], Any],
    bundle_item_id: int | None = None,
) -> list[AxisStock]:
    details = []
    for axis in axes:
        if not axis.tracks_stock:
            continue
        option = chosen_option(axis, value_of(axis))
        if option is None:
            continue
        quantity = option.stock_quantity or 0
        threshold = option.low_stock_threshold
        details.append(
            AxisStock(
                axis_id=axis.id,
                option_id=option.id,
                available=quantity,
                bundle_item_id=bundle_item_id,
                low_stock=quantity > 0 and threshold is not None and quantity <= threshold,
            )
        )
    return details


def item_stock(item: BundleItem, config: dict) -> int | None:
    """Stock of a bundle item as configured, from its nested tracked axes or its own stock."""
    details = _tracked_stock(item.nested_axes, lambda axis: config.get(axis.id), item.id)
    if details:
        return min(d.available for d in details)
    return item.stock


def check_availability(
    definition: ProductDefinition,
    selection: SelectionState,
    bundle_stock: BundleStockLookup | None = None,
) -> AvailabilityVerdict:
    """
    Args:
        definition: Product being configured
        selection: Current selection
        bundle_stock: Optional authoritative lookup for bundle item stock;
            defaults to computing it from the item's nested options

    Returns:
        AvailabilityVerdict. ``limiting_quantity`` is the smallest stock among
        all tracked factors when every one of them is positive, else None.
    """
    details = _tracked_stock(definition.variations, selection.value_for)
    factors = [d.available for d in details]
    if not details and definition.stock is not None:
        factors.append(definition.stock)

    bundle_lines = []
    for item in definition.bundle_items:
        if item.is_optional and item.id not in selection.selected_optional_bundle_items:
            continue
        config = selection.configuration_for(item.id)
        details.extend(_tracked_stock(item.nested_axes, lambda axis: config.get(axis.id), item.id))
        quantity = bundle_stock(item, dict(config)) if bundle_stock else item_stock(item, config)
        bundle_lines.append(BundleItemStock(bundle_item_id=item.id, available=quantity, required=item.is_required))
        if quantity is not None:
            factors.append(quantity)

    available = all(f > 0 for f in factors)
    return AvailabilityVerdict(
        available=available,
        limiting_quantity=min(factors) if factors and available else None,
        per_axis_detail=tuple(details),
        bundle_items=tuple(bundle_lines),
    )
