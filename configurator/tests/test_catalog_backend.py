"""Tests for the database-backed CatalogBackend."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from configurator.adapters import ModelCatalogBackend
from configurator.exceptions import ConfiguratorError
from configurator.protocols import CatalogBackend, VariationKind
from configurator.selection import SelectionState
from configurator.service import ConfiguratorService

pytestmark = pytest.mark.django_db


@pytest.fixture
def backend():
    return ModelCatalogBackend()


@pytest.fixture
def ids(desk_product, bracket, extension_kit):
    finish = desk_product.variations.get(name="Finish")
    side = bracket.variations.get(name="Side")
    return {
        "finish": finish.pk,
        "standard": finish.options.get(label="Standard").pk,
        "premium": finish.options.get(label="Premium").pk,
        "side": side.pk,
        "right": side.options.get(label="Right").pk,
        "bracket_item": desk_product.bundle_items.get(product=bracket).pk,
        "kit_item": desk_product.bundle_items.get(product=extension_kit).pk,
    }


def _selection(ids, finish="premium", kit=True):
    return SelectionState.from_dict(
        {
            "dropdowns": {str(ids["finish"]): ids[finish]},
            "optional_bundle_items": [ids["kit_item"]] if kit else [],
            "bundle_configurations": {str(ids["bracket_item"]): {str(ids["side"]): ids["right"]}},
        }
    )


class TestDefinition:
    def test_implements_protocol(self, backend):
        assert isinstance(backend, CatalogBackend)

    def test_builds_definition(self, backend, desk_product, ids):
        definition = backend.get_product_definition(desk_product.pk)

        assert definition.base_price == Decimal("400")
        assert definition.sku == "DESK"
        finish = definition.axis(ids["finish"])
        assert finish.kind is VariationKind.DROPDOWN
        assert finish.is_required and finish.tracks_stock
        assert [o.label for o in finish.options] == ["Standard", "Premium"]

    def test_option_stock_is_net_of_reservations(self, backend, desk_product, ids):
        premium = backend.get_product_definition(desk_product.pk).axis(ids["finish"]).option(ids["premium"])

        assert premium.stock_quantity == 3
        assert premium.price_adjustment == Decimal("50")

    def test_bundle_items(self, backend, desk_product, ids):
        definition = backend.get_product_definition(desk_product.pk)

        bracket_item = definition.bundle_item(ids["bracket_item"])
        kit_item = definition.bundle_item(ids["kit_item"])
        assert bracket_item.is_required and bracket_item.is_configurable
        assert [a.name for a in bracket_item.nested_axes] == ["Side"]
        assert kit_item.is_optional and kit_item.variations is None
        assert kit_item.base_price_adjustment == Decimal("69")
        assert kit_item.stock == 10

    def test_unknown_or_inactive_product(self, backend, desk_product):
        assert backend.get_product_definition(999999) is None

        desk_product.is_active = False
        desk_product.save()
        assert backend.get_product_definition(desk_product.pk) is None


class TestComputations:
    def test_price(self, backend, desk_product, ids):
        assert backend.calculate_price(desk_product.pk, _selection(ids)).total == Decimal("519.00")

    def test_price_unknown_product(self, backend):
        with pytest.raises(ConfiguratorError) as exc:
            backend.calculate_price(999999, SelectionState())

        assert exc.value.code == "PRODUCT_NOT_FOUND"

    def test_availability_reflects_database(self, backend, desk_product, ids):
        verdict = backend.check_availability(desk_product.pk, _selection(ids))

        assert verdict.available is True
        assert verdict.limiting_quantity == 3
        assert verdict.per_axis_detail[0].low_stock is True

        desk_product.variations.get(pk=ids["finish"]).options.filter(pk=ids["premium"]).update(reserved_quantity=4)
        assert backend.check_availability(desk_product.pk, _selection(ids)).available is False

    def test_availability_asks_stock_per_bundle_item(self, backend, desk_product, ids):
        with patch.object(backend, "get_bundle_item_stock", wraps=backend.get_bundle_item_stock) as lookup:
            backend.check_availability(desk_product.pk, _selection(ids))

        assert {c.args[0] for c in lookup.call_args_list} == {ids["bracket_item"], ids["kit_item"]}

    def test_sold_out_bundle_item_blocks_configuration(self, backend, desk_product, extension_kit, ids):
        extension_kit.stock = 0
        extension_kit.save()

        verdict = backend.check_availability(desk_product.pk, _selection(ids))

        assert verdict.available is False
        assert backend.check_availability(desk_product.pk, _selection(ids, kit=False)).available is True

    def test_bundle_item_stock(self, backend, ids):
        assert backend.get_bundle_item_stock(ids["kit_item"], {}) == 10
        assert backend.get_bundle_item_stock(ids["bracket_item"], {str(ids["side"]): ids["right"]}) is None

    def test_unknown_bundle_item(self, backend):
        with pytest.raises(ConfiguratorError) as exc:
            backend.get_bundle_item_stock(999999, {})

        assert exc.value.code == "UNKNOWN_BUNDLE_ITEM"


class TestServiceOverDatabase:
    def test_finalize_then_reprice(self, desk_product, ids):
        line = ConfiguratorService.finalize(desk_product.pk, _selection(ids), quantity=2)

        assert ConfiguratorService.authoritative_price(line).extended(line.quantity) == Decimal("1038.00")

    def test_price_change_reaches_order_time(self, desk_product, ids):
        line = ConfiguratorService.finalize(desk_product.pk, _selection(ids))

        premium = desk_product.variations.get(pk=ids["finish"]).options.get(pk=ids["premium"])
        premium.price_adjustment = Decimal("60")
        premium.save()

        assert ConfiguratorService.authoritative_price(line).total == Decimal("529.00")

    def test_quantity_above_stock(self, desk_product, ids):
        with pytest.raises(ConfiguratorError) as exc:
            ConfiguratorService.finalize(desk_product.pk, _selection(ids), quantity=4)

        assert exc.value.code == "UNAVAILABLE"
