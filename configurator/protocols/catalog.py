"""Catalog protocols.

Immutable description of a configurable product: its customization axes,
their options and the bundle items attached to it. The same
``VariationAxis``/``VariationOption`` pair describes a product's own axes
and the nested axes of each bundle item.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from configurator.protocols.results import AvailabilityVerdict, PriceBreakdown
    from configurator.selection import SelectionState


class VariationKind(str, Enum):
    """Kind of customization axis."""

    TEXT = "text"
    DROPDOWN = "dropdown"
    IMAGE = "image"
    BOOLEAN = "boolean"
    MODEL = "model"

    @property
    def picks_option(self) -> bool:
        """True if a selection on this axis is an option id."""
        return self in (VariationKind.DROPDOWN, VariationKind.IMAGE, VariationKind.MODEL)


class BundleItemType(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


@dataclass(frozen=True)
class VariationOption:
    """One choice on an axis.

    ``price_adjustment`` is added to the base price, never multiplied.
    ``stock_quantity`` is the sellable quantity (stock minus reservations)
    and is only meaningful when the owning axis tracks stock.
    """

    id: int
    label: str
    price_adjustment: Decimal = Decimal("0")
    is_default: bool = False
    is_available: bool = True
    stock_quantity: int | None = None
    low_stock_threshold: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> VariationOption:
        return cls(
            id=int(data["id"]),
            label=data.get("label", ""),
            price_adjustment=_decimal(data.get("price_adjustment")),
            is_default=bool(data.get("is_default", False)),
            is_available=bool(data.get("is_available", True)),
            stock_quantity=data.get("stock_quantity"),
            low_stock_threshold=data.get("low_stock_threshold"),
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "price_adjustment": str(self.price_adjustment),
            "is_default": self.is_default,
            "is_available": self.is_available,
            "stock_quantity": self.stock_quantity,
            "low_stock_threshold": self.low_stock_threshold,
        }


@dataclass(frozen=True)
class VariationAxis:
    """Independent customization dimension (finish, side, engraving...)."""

    id: int
    kind: VariationKind
    name: str
    is_required: bool = False
    tracks_stock: bool = False
    options: tuple[VariationOption, ...] = ()

    def __post_init__(self):
        if not isinstance(self.kind, VariationKind):
            object.__setattr__(self, "kind", VariationKind(self.kind))
        object.__setattr__(self, "options", tuple(self.options))
        if sum(1 for opt in self.options if opt.is_default) > 1:
            raise ValueError(f"Axis {self.id} ({self.name}) has more than one default option")
        if self.tracks_stock:
            missing = [opt.id for opt in self.options if opt.stock_quantity is None]
            if missing:
                raise ValueError(
                    f"Axis {self.id} ({self.name}) tracks stock but options {missing} have no stock quantity"
                )

    def option(self, option_id: Any) -> VariationOption | None:
        """Return the option with the given id, or None."""
        if isinstance(option_id, bool):
            return None
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None

    @property
    def default_option(self) -> VariationOption | None:
        """Flagged default, else the first option in declared order."""
        for opt in self.options:
            if opt.is_default:
                return opt
        return self.options[0] if self.options else None

    @classmethod
    def from_dict(cls, data: dict) -> VariationAxis:
        return cls(
            id=int(data["id"]),
            kind=VariationKind(data["kind"]),
            name=data.get("name", ""),
            is_required=bool(data.get("is_required", False)),
            tracks_stock=bool(data.get("tracks_stock", False)),
            options=tuple(VariationOption.from_dict(o) for o in data.get("options") or ()),
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "is_required": self.is_required,
            "tracks_stock": self.tracks_stock,
            "options": [opt.as_dict() for opt in self.options],
        }


@dataclass(frozen=True)
class BundleItem:
    """Sub-product attached to a parent product.

    A required item is already paid for by the parent's base price; an
    optional item is sold at ``base_price_adjustment`` once selected.
    """

    id: int
    referenced_product_id: int
    item_type: BundleItemType
    is_configurable: bool = False
    base_price_adjustment: Decimal = Decimal("0")
    display_name: str = ""
    variations: tuple[VariationAxis, ...] | None = None
    stock: int | None = None
    quantity: int = 1

    def __post_init__(self):
        if not isinstance(self.item_type, BundleItemType):
            object.__setattr__(self, "item_type", BundleItemType(self.item_type))
        if self.variations is not None:
            object.__setattr__(self, "variations", tuple(self.variations))

    @property
    def is_required(self) -> bool:
        return self.item_type == BundleItemType.REQUIRED

    @property
    def is_optional(self) -> bool:
        return self.item_type == BundleItemType.OPTIONAL

    @property
    def nested_axes(self) -> tuple[VariationAxis, ...]:
        """Axes the user configures on this item (empty unless configurable)."""
        if not self.is_configurable or not self.variations:
            return ()
        return self.variations

    def axis(self, axis_id: Any) -> VariationAxis | None:
        for axis in self.nested_axes:
            if axis.id == axis_id:
                return axis
        return None

    @classmethod
    def from_dict(cls, data: dict) -> BundleItem:
        variations = data.get("variations")
        return cls(
            id=int(data["id"]),
            referenced_product_id=int(data["referenced_product_id"]),
            item_type=BundleItemType(data["item_type"]),
            is_configurable=bool(data.get("is_configurable", False)),
            base_price_adjustment=_decimal(data.get("base_price_adjustment")),
            display_name=data.get("display_name", ""),
            variations=None if variations is None else tuple(VariationAxis.from_dict(v) for v in variations),
            stock=data.get("stock"),
            quantity=int(data.get("quantity", 1)),
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "referenced_product_id": self.referenced_product_id,
            "item_type": self.item_type.value,
            "is_configurable": self.is_configurable,
            "base_price_adjustment": str(self.base_price_adjustment),
            "display_name": self.display_name,
            "variations": None if self.variations is None else [v.as_dict() for v in self.variations],
            "stock": self.stock,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class ProductDefinition:
    """Everything needed to configure, price and stock-check one product."""

    id: int
    base_price: Decimal
    variations: tuple[VariationAxis, ...] = ()
    bundle_items: tuple[BundleItem, ...] = ()
    name: str = ""
    sku: str = ""
    stock: int | None = None
    currency: str = "USD"

    def __post_init__(self):
        object.__setattr__(self, "base_price", _decimal(self.base_price))
        object.__setattr__(self, "variations", tuple(self.variations))
        object.__setattr__(self, "bundle_items", tuple(self.bundle_items))
        if sum(1 for axis in self.variations if axis.kind == VariationKind.MODEL) > 1:
            raise ValueError(f"Product {self.id} declares more than one model axis")

    def axis(self, axis_id: Any) -> VariationAxis | None:
        for axis in self.variations:
            if axis.id == axis_id:
                return axis
        return None

    @property
    def model_axis(self) -> VariationAxis | None:
        for axis in self.variations:
            if axis.kind == VariationKind.MODEL:
                return axis
        return None

    def bundle_item(self, item_id: Any) -> BundleItem | None:
        for item in self.bundle_items:
            if item.id == item_id:
                return item
        return None

    @property
    def required_items(self) -> list[BundleItem]:
        return [item for item in self.bundle_items if item.is_required]

    @property
    def optional_items(self) -> list[BundleItem]:
        return [item for item in self.bundle_items if item.is_optional]

    @classmethod
    def from_dict(cls, data: dict) -> ProductDefinition:
        return cls(
            id=int(data["id"]),
            base_price=_decimal(data.get("base_price")),
            variations=tuple(VariationAxis.from_dict(v) for v in data.get("variations") or ()),
            bundle_items=tuple(BundleItem.from_dict(b) for b in data.get("bundle_items") or ()),
            name=data.get("name", ""),
            sku=data.get("sku", ""),
            stock=data.get("stock"),
            currency=data.get("currency", "USD"),
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "base_price": str(self.base_price),
            "variations": [v.as_dict() for v in self.variations],
            "bundle_items": [b.as_dict() for b in self.bundle_items],
            "name": self.name,
            "sku": self.sku,
            "stock": self.stock,
            "currency": self.currency,
        }


@runtime_checkable
class CatalogBackend(Protocol):
    """Interface to the catalog/inventory service."""

    def get_product_definition(self, product_id: int) -> ProductDefinition | None:
        """Return the product definition, or None if unknown."""
        ...

    def get_bundle_item_stock(self, bundle_item_id: int, nested_selection: dict) -> int | None:
        """Return sellable stock for a bundle item configured as given (None = untracked)."""
        ...

    def calculate_price(self, product_id: int, selection: SelectionState) -> PriceBreakdown:
        """Server-authoritative price."""
        ...

    def check_availability(self, product_id: int, selection: SelectionState) -> AvailabilityVerdict:
        """Server-authoritative stock verdict."""
        ...
