"""
Itemized pricing of a selection.

    total = base_price
          + sum(variation adjustments)
          + required bundle adjustments
          + sum(optional item base price + its variation adjustments)

Terms are summed exactly and rounded once, at the end.

Required bundle items are already included in the parent's base price:
they contribute only the adjustments of their nested options, never their
own ``base_price_adjustment``. Optional items contribute both once
selected. Missing or unknown selections contribute nothing, and an option
marked unavailable still prices (availability is checked separately).
"""

from decimal import Decimal
from typing import Any

from configurator.engine.options import affirmative_option, priced_option
from configurator.protocols.catalog import BundleItem, ProductDefinition, VariationAxis, VariationKind
from configurator.protocols.results import (
    OptionalBundleLine,
    PriceBreakdown,
    VariationAdjustment,
    quantize_money,
)
from configurator.selection import SelectionState

ZERO = Decimal("0")


def nested_adjustments(item: BundleItem, config: dict[int, Any]) -> Decimal:
    """Sum of the adjustments chosen inside one bundle item."""
    total = ZERO
    for axis in item.nested_axes:
        option = priced_option(axis, config.get(axis.id))
        if option is not None:
            total += option.price_adjustment
    return total


def calculate_price(definition: ProductDefinition, selection: SelectionState, places: int = 2) -> PriceBreakdown:
    adjustments = []
    for axis in definition.variations:
        option = priced_option(axis, selection.value_for(axis))
        if option is not None:
            adjustments.append(
                VariationAdjustment(axis_id=axis.id, option_id=option.id, amount=option.price_adjustment)
            )

    required_adjustments = ZERO
    for item in definition.required_items:
        required_adjustments += nested_adjustments(item, selection.configuration_for(item.id))

    optional_lines = [
        OptionalBundleLine(
            bundle_item_id=item.id,
            base_price=item.base_price_adjustment,
            variation_adjustments=nested_adjustments(item, selection.configuration_for(item.id)),
        )
        for item in definition.optional_items
        if item.id in selection.selected_optional_bundle_items
    ]

    subtotal = (
        definition.base_price
        + sum((adj.amount for adj in adjustments), ZERO)
        + required_adjustments
        + sum((line.amount for line in optional_lines), ZERO)
    )

    return PriceBreakdown(
        base_price=definition.base_price,
        variation_adjustments=tuple(adjustments),
        required_bundle_adjustments=required_adjustments,
        optional_bundle_items=tuple(optional_lines),
        subtotal=subtotal,
        total=quantize_money(subtotal, places),
        currency=definition.currency,
        places=places,
    )


def _axis_bounds(axis: VariationAxis) -> tuple[Decimal, Decimal]:
    if axis.kind == VariationKind.TEXT or not axis.options:
        return ZERO, ZERO
    if axis.kind == VariationKind.BOOLEAN:
        yes = affirmative_option(axis)
        amounts = [ZERO] + ([yes.price_adjustment] if yes else [])
    else:
        amounts = [opt.price_adjustment for opt in axis.options]
        if not axis.is_required:
            amounts.append(ZERO)
    return min(amounts), max(amounts)


def _axes_bounds(axes) -> tuple[Decimal, Decimal]:
    low = high = ZERO
    for axis in axes:
        axis_low, axis_high = _axis_bounds(axis)
        low += axis_low
        high += axis_high
    return low, high


def price_bounds(definition: ProductDefinition, places: int = 2) -> tuple[Decimal, Decimal]:
    """Cheapest and dearest totals any selection can reach ("from $X" display)."""
    low, high = _axes_bounds(definition.variations)
    low += definition.base_price
    high += definition.base_price

    for item in definition.required_items:
        item_low, item_high = _axes_bounds(item.nested_axes)
        low += item_low
        high += item_high

    for item in definition.optional_items:
        item_low, item_high = _axes_bounds(item.nested_axes)
        low += min(ZERO, item.base_price_adjustment + item_low)
        high += max(ZERO, item.base_price_adjustment + item_high)

    return quantize_money(low, places), quantize_money(high, places)
