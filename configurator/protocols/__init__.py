"""Configurator protocols."""

from configurator.protocols.catalog import (
    BundleItem,
    BundleItemType,
    CatalogBackend,
    ProductDefinition,
    VariationAxis,
    VariationKind,
    VariationOption,
)
from configurator.protocols.results import (
    AvailabilityVerdict,
    AxisStock,
    BundleItemStock,
    CartLineItem,
    OptionalBundleLine,
    PriceBreakdown,
    PriceCheck,
    StructuralViolation,
    VariationAdjustment,
)

__all__ = [
    "AvailabilityVerdict",
    "AxisStock",
    "BundleItem",
    "BundleItemStock",
    "BundleItemType",
    "CartLineItem",
    "CatalogBackend",
    "OptionalBundleLine",
    "PriceBreakdown",
    "PriceCheck",
    "ProductDefinition",
    "StructuralViolation",
    "VariationAdjustment",
    "VariationAxis",
    "VariationKind",
    "VariationOption",
]
