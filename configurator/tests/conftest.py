"""Pytest fixtures for Configurator tests."""

from decimal import Decimal

import pytest

from configurator import conf, engine
from configurator.exceptions import ConfiguratorError
from configurator.models import BundleItem, ConfigurableProduct, Variation, VariationOption
from configurator.protocols import BundleItem as BundleItemDef
from configurator.protocols import ProductDefinition, VariationAxis, VariationOption as OptionDef


# ═══════════════════════════════════════════════════════════════════
# Definitions (no database)
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def desk():
    """$400 desk: required Finish (Standard +0, Premium +50), optional $69 Extension Kit."""
    return ProductDefinition(
        id=1,
        base_price=Decimal("400"),
        name="Standing Desk",
        sku="DESK",
        variations=(
            VariationAxis(
                id=10,
                kind="dropdown",
                name="Finish",
                is_required=True,
                options=(
                    OptionDef(id=101, label="Standard", price_adjustment=Decimal("0")),
                    OptionDef(id=102, label="Premium", price_adjustment=Decimal("50")),
                ),
            ),
        ),
        bundle_items=(
            BundleItemDef(
                id=20,
                referenced_product_id=200,
                item_type="optional",
                base_price_adjustment=Decimal("69"),
                display_name="Extension Kit",
            ),
        ),
    )


@pytest.fixture
def bracket_product():
    """Required configurable "Mounting Bracket" with a required "Side" (Left/Right)."""
    return ProductDefinition(
        id=2,
        base_price=Decimal("250"),
        name="Monitor Stand",
        bundle_items=(
            BundleItemDef(
                id=21,
                referenced_product_id=210,
                item_type="required",
                is_configurable=True,
                base_price_adjustment=Decimal("35"),
                display_name="Mounting Bracket",
                variations=(
                    VariationAxis(
                        id=30,
                        kind="dropdown",
                        name="Side",
                        is_required=True,
                        options=(
                            OptionDef(id=301, label="Left"),
                            OptionDef(id=302, label="Right"),
                        ),
                    ),
                ),
            ),
        ),
    )


@pytest.fixture
def rig():
    """Every axis kind, stock tracking and both kinds of bundle item."""
    return ProductDefinition(
        id=3,
        base_price=Decimal("1000.00"),
        name="Sim Rig",
        sku="RIG",
        stock=7,
        variations=(
            VariationAxis(
                id=40,
                kind="model",
                name="Model",
                is_required=True,
                options=(
                    OptionDef(id=401, label="GT", price_adjustment=Decimal("0")),
                    OptionDef(id=402, label="Formula", price_adjustment=Decimal("150.00"), is_default=True),
                ),
            ),
            VariationAxis(
                id=41,
                kind="image",
                name="Color",
                tracks_stock=True,
                options=(
                    OptionDef(id=411, label="Black", stock_quantity=5, low_stock_threshold=5),
                    OptionDef(id=412, label="Red", price_adjustment=Decimal("19.99"), stock_quantity=0),
                    OptionDef(id=413, label="Blue", price_adjustment=Decimal("9.995"), stock_quantity=12),
                ),
            ),
            VariationAxis(
                id=42,
                kind="boolean",
                name="Cable Tray",
                options=(
                    OptionDef(id=421, label="Yes", price_adjustment=Decimal("25.00")),
                    OptionDef(id=422, label="No"),
                ),
            ),
            VariationAxis(id=43, kind="text", name="Engraving"),
        ),
        bundle_items=(
            BundleItemDef(
                id=50,
                referenced_product_id=500,
                item_type="required",
                is_configurable=True,
                base_price_adjustment=Decimal("80.00"),
                display_name="Seat",
                variations=(
                    VariationAxis(
                        id=60,
                        kind="dropdown",
                        name="Seat Size",
                        is_required=True,
                        tracks_stock=True,
                        options=(
                            OptionDef(id=601, label="Medium", stock_quantity=3),
                            OptionDef(id=602, label="Large", price_adjustment=Decimal("30.00"), stock_quantity=0),
                        ),
                    ),
                ),
            ),
            BundleItemDef(
                id=51,
                referenced_product_id=510,
                item_type="optional",
                is_configurable=True,
                base_price_adjustment=Decimal("120.00"),
                display_name="Monitor Arm",
                variations=(
                    VariationAxis(
                        id=70,
                        kind="dropdown",
                        name="Arm Finish",
                        options=(
                            OptionDef(id=701, label="Silver"),
                            OptionDef(id=702, label="Gold", price_adjustment=Decimal("15.00")),
                        ),
                    ),
                ),
                stock=2,
            ),
            BundleItemDef(
                id=52,
                referenced_product_id=520,
                item_type="optional",
                base_price_adjustment=Decimal("49.50"),
                display_name="Shifter Mount",
                stock=0,
            ),
        ),
    )


class DefinitionBackend:
    """CatalogBackend over in-memory definitions, computing locally."""

    def __init__(self, *definitions):
        self.definitions = {d.id: d for d in definitions}
        self.price_calls = 0

    def get_product_definition(self, product_id):
        return self.definitions.get(product_id)

    def _definition(self, product_id):
        definition = self.definitions.get(product_id)
        if definition is None:
            raise ConfiguratorError("PRODUCT_NOT_FOUND", product_id=product_id)
        return definition

    def get_bundle_item_stock(self, bundle_item_id, nested_selection):
        for definition in self.definitions.values():
            item = definition.bundle_item(bundle_item_id)
            if item is not None:
                return engine.item_stock(item, nested_selection)
        raise ConfiguratorError("UNKNOWN_BUNDLE_ITEM", bundle_item_id=bundle_item_id)

    def calculate_price(self, product_id, selection):
        self.price_calls += 1
        return engine.calculate_price(self._definition(product_id), selection)

    def check_availability(self, product_id, selection):
        return engine.check_availability(self._definition(product_id), selection)


@pytest.fixture(autouse=True)
def _reset_backend():
    conf.reset_catalog_backend()
    yield
    conf.reset_catalog_backend()


@pytest.fixture
def definition_backend(desk, bracket_product, rig):
    """Install an in-memory backend holding the three test definitions."""
    backend = DefinitionBackend(desk, bracket_product, rig)
    conf._catalog_backend_instance = backend
    return backend


# ═══════════════════════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def extension_kit(db):
    return ConfigurableProduct.objects.create(sku="EXT-KIT", name="Extension Kit", base_price_q=6900, stock=10)


@pytest.fixture
def bracket(db):
    """Bracket product with a required Side variation."""
    prod = ConfigurableProduct.objects.create(sku="BRACKET", name="Mounting Bracket", base_price_q=3500)
    side = Variation.objects.create(product=prod, name="Side", kind="dropdown", is_required=True)
    VariationOption.objects.create(variation=side, label="Left", sort_order=1)
    VariationOption.objects.create(variation=side, label="Right", sort_order=2)
    return prod


@pytest.fixture
def desk_product(db, extension_kit, bracket):
    """Desk with a stock-tracked Finish, a required bracket and an optional kit."""
    prod = ConfigurableProduct.objects.create(sku="DESK", name="Standing Desk", base_price_q=40000)
    finish = Variation.objects.create(
        product=prod, name="Finish", kind="dropdown", is_required=True, tracks_stock=True
    )
    VariationOption.objects.create(variation=finish, label="Standard", stock_quantity=10, sort_order=1)
    VariationOption.objects.create(
        variation=finish,
        label="Premium",
        price_adjustment_q=5000,
        stock_quantity=4,
        reserved_quantity=1,
        low_stock_threshold=3,
        sort_order=2,
    )
    BundleItem.objects.create(parent=prod, product=bracket, item_type="required", is_configurable=True)
    BundleItem.objects.create(
        parent=prod, product=extension_kit, item_type="optional", base_price_adjustment_q=6900
    )
    return prod
