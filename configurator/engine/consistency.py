"""Detection of selections that reference ids the catalog no longer has."""

from typing import Any

from configurator.protocols.catalog import ProductDefinition, VariationAxis, VariationKind
from configurator.selection import SelectionState, is_option_id


def _value_fits(axis: VariationAxis, value: Any) -> bool:
    if axis.kind.picks_option:
        return is_option_id(value) and axis.option(value) is not None
    if axis.kind == VariationKind.BOOLEAN:
        return isinstance(value, bool)
    return isinstance(value, str)


def find_inconsistencies(definition: ProductDefinition, selection: SelectionState) -> list[str]:
    """
    List every reference in ``selection`` that ``definition`` cannot resolve.

    An empty list means the selection still fits the catalog. Anything else
    is a CatalogInconsistency: the caller resets to defaults and tells the
    user, it never patches the selection.
    """
    problems = []

    model_option = selection.chosen_model_option_id
    if model_option is not None:
        model_axis = definition.model_axis
        if model_axis is None:
            problems.append(f"Model option {model_option} selected but the product has no model axis")
        elif not _value_fits(model_axis, model_option):
            problems.append(f'Option {model_option} no longer exists on "{model_axis.name}"')

    stores = (
        (VariationKind.DROPDOWN, selection.chosen_dropdown_by_axis),
        (VariationKind.IMAGE, selection.chosen_image_by_axis),
        (VariationKind.TEXT, selection.chosen_text_by_axis),
        (VariationKind.BOOLEAN, selection.chosen_boolean_by_axis),
    )
    for kind, store in stores:
        for axis_id, value in store.items():
            axis = definition.axis(axis_id)
            if axis is None or axis.kind != kind:
                problems.append(f"{kind.value.capitalize()} axis {axis_id} no longer exists")
            elif not _value_fits(axis, value):
                problems.append(f'Value {value!r} is not valid for "{axis.name}"')

    for item_id in sorted(selection.selected_optional_bundle_items):
        item = definition.bundle_item(item_id)
        if item is None or not item.is_optional:
            problems.append(f"Optional bundle item {item_id} no longer exists")

    for item_id, config in sorted(selection.bundle_item_configurations.items()):
        item = definition.bundle_item(item_id)
        if item is None:
            problems.append(f"Bundle item {item_id} no longer exists")
            continue
        for axis_id, value in config.items():
            axis = item.axis(axis_id)
            if axis is None:
                problems.append(f'Axis {axis_id} no longer exists on "{item.display_name}"')
            elif not _value_fits(axis, value):
                problems.append(f'Value {value!r} is not valid for "{axis.name}" on "{item.display_name}"')

    return problems
