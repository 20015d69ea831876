"""Tests for the pricing engine."""

from decimal import Decimal

from configurator.engine import calculate_price, price_bounds, resolve_defaults
from configurator.selection import SelectionState


class TestDeskScenario:
    """Base $400, Premium finish +$50, optional Extension Kit $69."""

    def test_premium_with_extension_kit(self, desk):
        selection = resolve_defaults(desk)
        selection.set_value(desk.axis(10), 102)
        selection.select_optional(20)

        assert calculate_price(desk, selection).total == Decimal("519.00")

    def test_deselecting_kit(self, desk):
        selection = resolve_defaults(desk)
        selection.set_value(desk.axis(10), 102)
        selection.select_optional(20)
        selection.deselect_optional(20)

        assert calculate_price(desk, selection).total == Decimal("450.00")

    def test_breakdown_is_itemized(self, desk):
        selection = resolve_defaults(desk)
        selection.set_value(desk.axis(10), 102)
        selection.select_optional(20)

        breakdown = calculate_price(desk, selection)

        assert breakdown.base_price == Decimal("400")
        assert [(a.axis_id, a.option_id, a.amount) for a in breakdown.variation_adjustments] == [
            (10, 102, Decimal("50"))
        ]
        assert breakdown.optional_bundle_total == Decimal("69")
        assert breakdown.required_bundle_adjustments == Decimal("0")


class TestPricingRules:
    def test_order_of_selection_does_not_matter(self, rig):
        first = resolve_defaults(rig)
        first.set_value(rig.axis(41), 412)
        first.set_value(rig.axis(42), True)
        first.select_optional(51)
        first.set_item_value(51, rig.bundle_item(51).axis(70), 702)

        second = resolve_defaults(rig)
        second.set_item_value(51, rig.bundle_item(51).axis(70), 702)
        second.select_optional(51)
        second.set_value(rig.axis(42), True)
        second.set_value(rig.axis(41), 412)

        assert calculate_price(rig, first).total == calculate_price(rig, second).total

    def test_boolean_toggle_restores_breakdown(self, rig):
        selection = resolve_defaults(rig)
        tray = rig.axis(42)
        before = calculate_price(rig, selection)

        selection.set_value(tray, True)
        with_tray = calculate_price(rig, selection)
        selection.set_value(tray, False)

        assert with_tray.total == before.total + Decimal("25.00")
        assert calculate_price(rig, selection) == before

    def test_required_item_base_price_never_added(self, rig):
        breakdown = calculate_price(rig, resolve_defaults(rig))

        # 1000 base + 150 Formula; Seat's 80 is already in the base price
        assert breakdown.total == Decimal("1150.00")

    def test_required_item_nested_adjustment_is_added(self, rig):
        selection = resolve_defaults(rig)
        selection.set_item_value(50, rig.bundle_item(50).axis(60), 602)

        breakdown = calculate_price(rig, selection)

        assert breakdown.required_bundle_adjustments == Decimal("30.00")
        assert breakdown.total == Decimal("1180.00")

    def test_optional_item_adds_base_and_nested(self, rig):
        selection = resolve_defaults(rig)
        selection.select_optional(51)
        selection.set_item_value(51, rig.bundle_item(51).axis(70), 702)

        breakdown = calculate_price(rig, selection)

        assert [line.amount for line in breakdown.optional_bundle_items] == [Decimal("135.00")]
        assert breakdown.total == Decimal("1285.00")

    def test_configuration_of_unselected_optional_item_is_ignored(self, rig):
        selection = resolve_defaults(rig)
        selection.set_item_value(51, rig.bundle_item(51).axis(70), 702)

        assert calculate_price(rig, selection).total == Decimal("1150.00")

    def test_rounds_once_at_the_end(self, rig):
        selection = resolve_defaults(rig)
        selection.set_value(rig.axis(41), 413)  # +9.995

        breakdown = calculate_price(rig, selection)

        assert breakdown.subtotal == Decimal("1159.995")
        assert breakdown.total == Decimal("1160.00")
        # 3 x 1159.995 = 3479.985, not 3 x 1160.00
        assert breakdown.extended(3) == Decimal("3479.99")

    def test_unknown_ids_contribute_nothing(self, desk):
        selection = SelectionState(chosen_dropdown_by_axis={10: 999, 77: 1}, selected_optional_bundle_items={404})

        assert calculate_price(desk, selection).total == Decimal("400.00")

    def test_unavailable_option_still_prices(self, rig):
        selection = resolve_defaults(rig)
        selection.set_value(rig.axis(41), 412)  # out of stock, +19.99

        assert calculate_price(rig, selection).total == Decimal("1169.99")

    def test_text_never_prices(self, rig):
        selection = resolve_defaults(rig)
        selection.set_value(rig.axis(43), "Lap record 1:32.4")

        assert calculate_price(rig, selection).total == Decimal("1150.00")


class TestPriceBounds:
    def test_desk(self, desk):
        assert price_bounds(desk) == (Decimal("400.00"), Decimal("519.00"))

    def test_rig(self, rig):
        # high: 1000 + 150 + 19.99 + 25 + seat 30 + arm 135 + shifter 49.50
        assert price_bounds(rig) == (Decimal("1000.00"), Decimal("1409.49"))
