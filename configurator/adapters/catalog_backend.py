"""CatalogBackend implementation over the configurator's own models."""

from configurator import engine, protocols
from configurator.conf import configurator_settings
from configurator.exceptions import ConfiguratorError
from configurator.models import BundleItem, ConfigurableProduct, Variation
from configurator.selection import SelectionState


def _axis(variation: Variation) -> protocols.VariationAxis:
    return protocols.VariationAxis(
        id=variation.pk,
        kind=variation.kind,
        name=variation.name,
        is_required=variation.is_required,
        tracks_stock=variation.tracks_stock,
        options=tuple(
            protocols.VariationOption(
                id=option.pk,
                label=option.label,
                price_adjustment=option.price_adjustment,
                is_default=option.is_default,
                is_available=option.is_available,
                stock_quantity=option.available_quantity if variation.tracks_stock else None,
                low_stock_threshold=option.low_stock_threshold,
            )
            for option in variation.options.all()
        ),
    )


def _bundle_item(item: BundleItem) -> protocols.BundleItem:
    variations = None
    if item.is_configurable:
        variations = tuple(_axis(v) for v in item.product.variations.all())
    return protocols.BundleItem(
        id=item.pk,
        referenced_product_id=item.product_id,
        item_type=item.item_type,
        is_configurable=item.is_configurable,
        base_price_adjustment=item.base_price_adjustment,
        display_name=item.name,
        variations=variations,
        stock=item.product.stock,
        quantity=item.quantity,
    )


def build_definition(product: ConfigurableProduct) -> protocols.ProductDefinition:
    """Snapshot a product and its bundle tree as an immutable definition."""
    return protocols.ProductDefinition(
        id=product.pk,
        base_price=product.base_price,
        variations=tuple(_axis(v) for v in product.variations.all()),
        bundle_items=tuple(_bundle_item(item) for item in product.bundle_items.all()),
        name=product.name,
        sku=product.sku,
        stock=product.stock,
        currency=configurator_settings.CURRENCY,
    )


class ModelCatalogBackend:
    """
    CatalogBackend reading definitions and stock from the database.

    Price and availability are computed by the engine over a freshly
    loaded definition, so they reflect the database at call time.
    Option stock is reported net of reservations.
    """

    def get_product_definition(self, product_id: int) -> protocols.ProductDefinition | None:
        product = (
            ConfigurableProduct.objects.active()
            .prefetch_related(
                "variations__options",
                "bundle_items__product__variations__options",
            )
            .filter(pk=product_id)
            .first()
        )
        if product is None:
            return None
        return build_definition(product)

    def get_bundle_item_stock(self, bundle_item_id: int, nested_selection: dict) -> int | None:
        item = (
            BundleItem.objects.select_related("product")
            .prefetch_related("product__variations__options")
            .filter(pk=bundle_item_id)
            .first()
        )
        if item is None:
            raise ConfiguratorError("UNKNOWN_BUNDLE_ITEM", bundle_item_id=bundle_item_id)
        config = {int(axis_id): value for axis_id, value in (nested_selection or {}).items()}
        return engine.item_stock(_bundle_item(item), config)

    def _definition(self, product_id: int) -> protocols.ProductDefinition:
        definition = self.get_product_definition(product_id)
        if definition is None:
            raise ConfiguratorError("PRODUCT_NOT_FOUND", product_id=product_id)
        return definition

    def calculate_price(self, product_id: int, selection: SelectionState) -> protocols.PriceBreakdown:
        return engine.calculate_price(
            self._definition(product_id),
            selection,
            places=configurator_settings.CURRENCY_DECIMAL_PLACES,
        )

    def check_availability(self, product_id: int, selection: SelectionState) -> protocols.AvailabilityVerdict:
        return engine.check_availability(
            self._definition(product_id),
            selection,
            bundle_stock=lambda item, config: self.get_bundle_item_stock(item.id, config),
        )


# Verify implementation at import time
if not isinstance(ModelCatalogBackend(), protocols.CatalogBackend):
    raise TypeError("ModelCatalogBackend does not implement CatalogBackend protocol")
