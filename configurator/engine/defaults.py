"""Initial selection for a product definition."""

from typing import Any

from configurator.engine.options import affirmative_option
from configurator.protocols.catalog import BundleItem, ProductDefinition, VariationAxis, VariationKind
from configurator.selection import SelectionState


def default_value(axis: VariationAxis) -> Any:
    """
    Default stored value for one axis, or None to leave it unset.

    Option axes take the flagged default, else the first option. Boolean
    axes are False unless the default option is the "yes" option. Text
    axes take the default option's label as preset text, if any.
    """
    default = axis.default_option
    if axis.kind == VariationKind.BOOLEAN:
        if default is None or not default.is_default:
            return False
        return default is affirmative_option(axis)
    if default is None:
        return None
    if axis.kind == VariationKind.TEXT:
        return default.label
    return default.id


def resolve_item_defaults(item: BundleItem) -> dict[int, Any]:
    """Default nested configuration of a bundle item."""
    config = {}
    for axis in item.nested_axes:
        value = default_value(axis)
        if value is not None:
            config[axis.id] = value
    return config


def resolve_defaults(definition: ProductDefinition) -> SelectionState:
    """Populate a fresh SelectionState. Pure and deterministic."""
    selection = SelectionState()
    for axis in definition.variations:
        value = default_value(axis)
        if value is not None:
            selection.set_value(axis, value)
    for item in definition.required_items:
        config = resolve_item_defaults(item)
        if config:
            selection.bundle_item_configurations[item.id] = config
    return selection
