"""Configurator models."""

from configurator.models.bundle_item import BundleItem, BundleItemType
from configurator.models.configurable_product import ConfigurableProduct
from configurator.models.shared_configuration import SharedConfiguration, generate_short_code
from configurator.models.variation import Variation, VariationKind, VariationOption

__all__ = [
    "BundleItem",
    "BundleItemType",
    "ConfigurableProduct",
    "SharedConfiguration",
    "Variation",
    "VariationKind",
    "VariationOption",
    "generate_short_code",
]
