"""
SelectionState: what the user has currently chosen.

The state is the unit of truth carried into the cart and order history,
so it serializes losslessly with ``to_dict()``/``from_dict()``. A key that
is absent after deserialization means "unset", which for boolean axes is
different from an explicit ``False``.

Serialized shape (JSON-compatible, ids as string keys):

    {
        "model_option_id": 12,
        "dropdowns": {"3": 31},
        "texts": {"4": "For Ana"},
        "images": {"5": 52},
        "booleans": {"6": false},
        "optional_bundle_items": [8],
        "bundle_configurations": {"7": {"70": 701, "71": true}},
    }
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Union

from configurator.exceptions import ConfiguratorError
from configurator.protocols.catalog import ProductDefinition, VariationAxis, VariationKind

NestedValue = Union[int, str, bool]


def is_option_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_value(axis: VariationAxis, value: Any) -> None:
    """Raise INVALID_VALUE unless ``value`` fits ``axis``: right type, and a listed option for option axes."""
    if axis.kind.picks_option:
        valid = is_option_id(value)
    elif axis.kind == VariationKind.BOOLEAN:
        valid = isinstance(value, bool)
    else:
        valid = isinstance(value, str)
    if not valid:
        raise ConfiguratorError("INVALID_VALUE", axis_id=axis.id, kind=axis.kind.value, value=value)
    if axis.kind.picks_option and axis.option(value) is None:
        raise ConfiguratorError(
            "INVALID_VALUE",
            f'Option {value} is not offered for "{axis.name}"',
            axis_id=axis.id,
            value=value,
        )


def _int_key(key: Any) -> int:
    return int(key)


def _option_value(value: Any) -> Any:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


def _bool_value(value: Any) -> Any:
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


def _nested_config(definition: ProductDefinition | None, item_id: int, config: dict | None) -> dict[int, Any]:
    item = definition.bundle_item(item_id) if definition is not None else None
    result = {}
    for axis_id, value in (config or {}).items():
        axis_id = _int_key(axis_id)
        axis = item.axis(axis_id) if item is not None else None
        if axis is not None and axis.kind.picks_option:
            value = _option_value(value)
        elif axis is not None and axis.kind == VariationKind.BOOLEAN:
            value = _bool_value(value)
        result[axis_id] = value
    return result


@dataclass
class SelectionState:
    chosen_model_option_id: int | None = None
    chosen_dropdown_by_axis: dict[int, int] = field(default_factory=dict)
    chosen_text_by_axis: dict[int, str] = field(default_factory=dict)
    chosen_image_by_axis: dict[int, int] = field(default_factory=dict)
    chosen_boolean_by_axis: dict[int, bool] = field(default_factory=dict)
    selected_optional_bundle_items: set[int] = field(default_factory=set)
    bundle_item_configurations: dict[int, dict[int, NestedValue]] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Product axes
    # ------------------------------------------------------------------

    def value_for(self, axis: VariationAxis) -> Any:
        """Stored value for a product axis, or None when unset."""
        if axis.kind == VariationKind.MODEL:
            return self.chosen_model_option_id
        if axis.kind == VariationKind.DROPDOWN:
            return self.chosen_dropdown_by_axis.get(axis.id)
        if axis.kind == VariationKind.IMAGE:
            return self.chosen_image_by_axis.get(axis.id)
        if axis.kind == VariationKind.BOOLEAN:
            return self.chosen_boolean_by_axis.get(axis.id)
        return self.chosen_text_by_axis.get(axis.id)

    def set_value(self, axis: VariationAxis, value: Any) -> None:
        check_value(axis, value)
        if axis.kind == VariationKind.MODEL:
            self.chosen_model_option_id = value
        elif axis.kind == VariationKind.DROPDOWN:
            self.chosen_dropdown_by_axis[axis.id] = value
        elif axis.kind == VariationKind.IMAGE:
            self.chosen_image_by_axis[axis.id] = value
        elif axis.kind == VariationKind.BOOLEAN:
            self.chosen_boolean_by_axis[axis.id] = value
        else:
            self.chosen_text_by_axis[axis.id] = value

    def clear(self, axis: VariationAxis) -> None:
        """Return a product axis to "unset"."""
        if axis.kind == VariationKind.MODEL:
            self.chosen_model_option_id = None
            return
        store = {
            VariationKind.DROPDOWN: self.chosen_dropdown_by_axis,
            VariationKind.IMAGE: self.chosen_image_by_axis,
            VariationKind.BOOLEAN: self.chosen_boolean_by_axis,
            VariationKind.TEXT: self.chosen_text_by_axis,
        }[axis.kind]
        store.pop(axis.id, None)

    # ------------------------------------------------------------------
    # Bundle items
    # ------------------------------------------------------------------

    def configuration_for(self, bundle_item_id: int) -> dict[int, NestedValue]:
        return self.bundle_item_configurations.get(bundle_item_id, {})

    def set_item_value(self, bundle_item_id: int, axis: VariationAxis, value: Any) -> None:
        check_value(axis, value)
        self.bundle_item_configurations.setdefault(bundle_item_id, {})[axis.id] = value

    def clear_item_value(self, bundle_item_id: int, axis_id: int) -> None:
        config = self.bundle_item_configurations.get(bundle_item_id)
        if config is not None:
            config.pop(axis_id, None)

    def select_optional(self, bundle_item_id: int) -> None:
        self.selected_optional_bundle_items.add(bundle_item_id)

    def deselect_optional(self, bundle_item_id: int) -> None:
        self.selected_optional_bundle_items.discard(bundle_item_id)

    # ------------------------------------------------------------------
    # Snapshots and persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> SelectionState:
        """Independent deep copy handed to background computations."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "model_option_id": self.chosen_model_option_id,
            "dropdowns": {str(k): v for k, v in sorted(self.chosen_dropdown_by_axis.items())},
            "texts": {str(k): v for k, v in sorted(self.chosen_text_by_axis.items())},
            "images": {str(k): v for k, v in sorted(self.chosen_image_by_axis.items())},
            "booleans": {str(k): v for k, v in sorted(self.chosen_boolean_by_axis.items())},
            "optional_bundle_items": sorted(self.selected_optional_bundle_items),
            "bundle_configurations": {
                str(item_id): {str(axis_id): value for axis_id, value in sorted(config.items())}
                for item_id, config in sorted(self.bundle_item_configurations.items())
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None, definition: ProductDefinition | None = None) -> SelectionState:
        """
        Rebuild a selection from its persisted form.

        Missing sections are empty. Numeric strings are accepted where an
        option id is expected, and "true"/"false" where a boolean is, so
        form-encoded payloads load the same as JSON ones. Bundle
        configurations mix axis kinds, so their values are only coerced
        when ``definition`` is given; without it they must be JSON-typed.
        """
        data = data or {}
        model = data.get("model_option_id")
        return cls(
            chosen_model_option_id=_option_value(model) if model is not None else None,
            chosen_dropdown_by_axis={
                _int_key(k): _option_value(v) for k, v in (data.get("dropdowns") or {}).items()
            },
            chosen_text_by_axis={_int_key(k): v for k, v in (data.get("texts") or {}).items()},
            chosen_image_by_axis={
                _int_key(k): _option_value(v) for k, v in (data.get("images") or {}).items()
            },
            chosen_boolean_by_axis={
                _int_key(k): _bool_value(v) for k, v in (data.get("booleans") or {}).items()
            },
            selected_optional_bundle_items={_int_key(i) for i in data.get("optional_bundle_items") or ()},
            bundle_item_configurations={
                _int_key(item_id): _nested_config(definition, _int_key(item_id), config)
                for item_id, config in (data.get("bundle_configurations") or {}).items()
            },
        )
