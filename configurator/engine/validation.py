"""
Structural validation of a selection.

Rules, in message order:
    1. Every required product axis is filled.
    2. Every required configurable bundle item is configured, with its
       required nested axes filled.
    3. Every selected optional configurable item has its required nested
       axes filled.

Stock is never looked at here: a selection can be valid and unavailable
at the same time, and both are reported independently.
"""

from configurator.engine.options import is_satisfied
from configurator.protocols.catalog import BundleItem, ProductDefinition
from configurator.protocols.results import StructuralViolation
from configurator.selection import SelectionState


def _item_violations(
    item: BundleItem, selection: SelectionState, require_configuration: bool = True
) -> list[StructuralViolation]:
    axes = item.nested_axes
    if not axes:
        return []
    config = selection.configuration_for(item.id)
    required = [axis for axis in axes if axis.is_required]
    if require_configuration and not config and not required:
        return [
            StructuralViolation(
                code="BUNDLE_ITEM_NOT_CONFIGURED",
                message=f'Configuration required for "{item.display_name}"',
                bundle_item_id=item.id,
            )
        ]
    return [
        StructuralViolation(
            code="NESTED_AXIS_REQUIRED",
            message=f'"{axis.name}" is required for "{item.display_name}"',
            axis_id=axis.id,
            bundle_item_id=item.id,
        )
        for axis in required
        if not is_satisfied(axis, config.get(axis.id))
    ]


def validate(definition: ProductDefinition, selection: SelectionState) -> list[StructuralViolation]:
    """Return unmet required constraints; an empty list means valid."""
    violations = [
        StructuralViolation(
            code="AXIS_REQUIRED",
            message=f'"{axis.name}" is required',
            axis_id=axis.id,
        )
        for axis in definition.variations
        if axis.is_required and not is_satisfied(axis, selection.value_for(axis))
    ]

    for item in definition.required_items:
        violations.extend(_item_violations(item, selection))

    for item in definition.optional_items:
        if item.id in selection.selected_optional_bundle_items:
            violations.extend(_item_violations(item, selection, require_configuration=False))

    return violations
