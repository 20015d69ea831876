"""
ConfiguratorSession: one user's live configuration of one product.

The session owns the SelectionState and routes every mutation through a
RecalculationCoordinator, so validation, price and stock always describe
the latest selection. Mutations are synchronous; recalculation runs on the
event loop, so the session must be driven from inside one.

Usage:
    session = ConfiguratorSession(definition, on_publish=render)
    session.choose(finish_axis_id, walnut_option_id)
    session.select_optional(arm_rest_item_id)
    evaluation = await session.settle()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import Any

from configurator.coordinator import Evaluation, RecalculationCoordinator
from configurator.engine import calculate_price, check_availability, resolve_defaults, resolve_item_defaults, validate
from configurator.exceptions import ConfiguratorError
from configurator.protocols.catalog import BundleItem, ProductDefinition, VariationAxis
from configurator.selection import SelectionState

logger = logging.getLogger(__name__)


class ConfiguratorSession:
    def __init__(
        self,
        definition: ProductDefinition,
        selection: SelectionState | None = None,
        pricer: Callable[[SelectionState], Any] | None = None,
        availability: Callable[[SelectionState], Any] | None = None,
        on_publish: Callable[[Evaluation], None] | None = None,
        on_error: Callable[[int, Exception], None] | None = None,
        debounce: float = 0.0,
        places: int = 2,
    ) -> None:
        """
        Args:
            definition: Product being configured
            selection: Starting selection (e.g. restored from a cart line);
                defaults to the product's default selection
            pricer: Price callable; defaults to local calculation
            availability: Stock callable; defaults to local calculation
            on_publish: Called with each published Evaluation
            on_error: Called with (sequence, exception) on non-transient failures
            debounce: Seconds to wait before recomputing after a change
            places: Decimal places of the rounded total
        """
        self.definition = definition
        self.selection = selection if selection is not None else resolve_defaults(definition)
        self.coordinator = RecalculationCoordinator(
            validator=partial(validate, definition),
            pricer=pricer or partial(calculate_price, definition, places=places),
            availability=availability or partial(check_availability, definition),
            on_publish=on_publish,
            on_error=on_error,
            debounce=debounce,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _axis(self, axis_id: int) -> VariationAxis:
        axis = self.definition.axis(axis_id)
        if axis is None:
            raise ConfiguratorError("UNKNOWN_AXIS", product_id=self.definition.id, axis_id=axis_id)
        return axis

    def _item(self, bundle_item_id: int) -> BundleItem:
        item = self.definition.bundle_item(bundle_item_id)
        if item is None:
            raise ConfiguratorError(
                "UNKNOWN_BUNDLE_ITEM", product_id=self.definition.id, bundle_item_id=bundle_item_id
            )
        return item

    def _nested_axis(self, item: BundleItem, axis_id: int) -> VariationAxis:
        axis = item.axis(axis_id)
        if axis is None:
            raise ConfiguratorError(
                "UNKNOWN_AXIS", product_id=self.definition.id, bundle_item_id=item.id, axis_id=axis_id
            )
        return axis

    # ------------------------------------------------------------------
    # Mutations (each schedules a recalculation)
    #
    # Each works on a copy that replaces ``self.selection`` only once the
    # recalculation is scheduled, so a rejected value or a missing event
    # loop leaves the session as it was.
    # ------------------------------------------------------------------

    def choose(self, axis_id: int, value: Any) -> int:
        """Set a product axis: option id, text, or bool depending on its kind."""
        axis = self._axis(axis_id)
        selection = self.selection.snapshot()
        selection.set_value(axis, value)
        return self._commit(selection)

    def clear(self, axis_id: int) -> int:
        axis = self._axis(axis_id)
        selection = self.selection.snapshot()
        selection.clear(axis)
        return self._commit(selection)

    def select_optional(self, bundle_item_id: int) -> int:
        """
        Add an optional bundle item, seeding its nested defaults.

        An existing nested configuration (from an earlier toggle) is kept.
        """
        item = self._item(bundle_item_id)
        if not item.is_optional:
            raise ConfiguratorError(
                "INVALID_VALUE",
                "Bundle item is not optional",
                product_id=self.definition.id,
                bundle_item_id=bundle_item_id,
            )
        selection = self.selection.snapshot()
        selection.select_optional(item.id)
        if item.is_configurable and item.id not in selection.bundle_item_configurations:
            defaults = resolve_item_defaults(item)
            if defaults:
                selection.bundle_item_configurations[item.id] = defaults
        return self._commit(selection)

    def deselect_optional(self, bundle_item_id: int) -> int:
        item = self._item(bundle_item_id)
        selection = self.selection.snapshot()
        selection.deselect_optional(item.id)
        return self._commit(selection)

    def toggle_optional(self, bundle_item_id: int) -> int:
        if bundle_item_id in self.selection.selected_optional_bundle_items:
            return self.deselect_optional(bundle_item_id)
        return self.select_optional(bundle_item_id)

    def configure_item(self, bundle_item_id: int, axis_id: int, value: Any) -> int:
        """Set a nested axis inside a bundle item."""
        item = self._item(bundle_item_id)
        axis = self._nested_axis(item, axis_id)
        selection = self.selection.snapshot()
        selection.set_item_value(item.id, axis, value)
        return self._commit(selection)

    def clear_item_value(self, bundle_item_id: int, axis_id: int) -> int:
        item = self._item(bundle_item_id)
        axis = self._nested_axis(item, axis_id)
        selection = self.selection.snapshot()
        selection.clear_item_value(item.id, axis.id)
        return self._commit(selection)

    def reset(self) -> int:
        """Discard the selection and start again from the product's defaults."""
        sequence = self._commit(resolve_defaults(self.definition))
        logger.debug("Configuration of product %s reset to defaults", self.definition.id)
        return sequence

    def _commit(self, selection: SelectionState) -> int:
        # schedule() raises RuntimeError outside a running event loop
        sequence = self.coordinator.schedule(selection.snapshot())
        self.selection = selection
        return sequence

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def evaluation(self) -> Evaluation | None:
        """Last published evaluation, which may trail the selection while a recalculation runs."""
        return self.coordinator.published

    def refresh(self) -> int:
        """Recalculate without changing the selection (e.g. on first render)."""
        return self._commit(self.selection)

    async def settle(self) -> Evaluation | None:
        """Wait until the latest recalculation has been published or dropped."""
        return await self.coordinator.wait()
