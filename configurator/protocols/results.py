"""Result shapes produced by the engine and exchanged with the catalog service."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def quantize_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round once, half up, to currency precision."""
    return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class VariationAdjustment:
    axis_id: int
    option_id: int
    amount: Decimal


@dataclass(frozen=True)
class OptionalBundleLine:
    """Price contribution of one selected optional bundle item."""

    bundle_item_id: int
    base_price: Decimal
    variation_adjustments: Decimal

    @property
    def amount(self) -> Decimal:
        return self.base_price + self.variation_adjustments


@dataclass(frozen=True)
class PriceBreakdown:
    """Itemized price of one configured unit.

    ``subtotal`` is the exact sum of every term; ``total`` is that sum
    rounded once to currency precision.
    """

    base_price: Decimal
    variation_adjustments: tuple[VariationAdjustment, ...] = ()
    required_bundle_adjustments: Decimal = Decimal("0")
    optional_bundle_items: tuple[OptionalBundleLine, ...] = ()
    subtotal: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    currency: str = "USD"
    places: int = 2

    @property
    def variations_total(self) -> Decimal:
        return sum((adj.amount for adj in self.variation_adjustments), Decimal("0"))

    @property
    def optional_bundle_total(self) -> Decimal:
        return sum((line.amount for line in self.optional_bundle_items), Decimal("0"))

    def extended(self, quantity: int) -> Decimal:
        """Line total for ``quantity`` units, rounded once."""
        return quantize_money(self.subtotal * quantity, self.places)

    @classmethod
    def from_dict(cls, data: dict) -> PriceBreakdown:
        places = int(data.get("places", 2))
        adjustments = tuple(
            VariationAdjustment(
                axis_id=int(adj["axis_id"]),
                option_id=int(adj["option_id"]),
                amount=Decimal(str(adj["amount"])),
            )
            for adj in data.get("variation_adjustments") or ()
        )
        optional = tuple(
            OptionalBundleLine(
                bundle_item_id=int(line["bundle_item_id"]),
                base_price=Decimal(str(line["base_price"])),
                variation_adjustments=Decimal(str(line["variation_adjustments"])),
            )
            for line in data.get("optional_bundle_items") or ()
        )
        base_price = Decimal(str(data["base_price"]))
        required = Decimal(str(data.get("required_bundle_adjustments", "0")))
        subtotal = data.get("subtotal")
        if subtotal is None:
            subtotal = (
                base_price
                + sum((adj.amount for adj in adjustments), Decimal("0"))
                + required
                + sum((line.amount for line in optional), Decimal("0"))
            )
        return cls(
            base_price=base_price,
            variation_adjustments=adjustments,
            required_bundle_adjustments=required,
            optional_bundle_items=optional,
            subtotal=Decimal(str(subtotal)),
            total=Decimal(str(data["total"])),
            currency=data.get("currency", "USD"),
            places=places,
        )

    def as_dict(self) -> dict:
        return {
            "base_price": str(self.base_price),
            "variation_adjustments": [
                {"axis_id": adj.axis_id, "option_id": adj.option_id, "amount": str(adj.amount)}
                for adj in self.variation_adjustments
            ],
            "required_bundle_adjustments": str(self.required_bundle_adjustments),
            "optional_bundle_items": [
                {
                    "bundle_item_id": line.bundle_item_id,
                    "base_price": str(line.base_price),
                    "variation_adjustments": str(line.variation_adjustments),
                }
                for line in self.optional_bundle_items
            ],
            "subtotal": str(self.subtotal),
            "total": str(self.total),
            "currency": self.currency,
            "places": self.places,
        }


@dataclass(frozen=True)
class AxisStock:
    """Stock of the option chosen on one tracked axis."""

    axis_id: int
    option_id: int
    available: int
    bundle_item_id: int | None = None
    low_stock: bool = False


@dataclass(frozen=True)
class BundleItemStock:
    bundle_item_id: int
    available: int | None
    required: bool


@dataclass(frozen=True)
class AvailabilityVerdict:
    available: bool
    limiting_quantity: int | None = None
    per_axis_detail: tuple[AxisStock, ...] = ()
    bundle_items: tuple[BundleItemStock, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> AvailabilityVerdict:
        return cls(
            available=bool(data["available"]),
            limiting_quantity=data.get("limiting_quantity"),
            per_axis_detail=tuple(
                AxisStock(
                    axis_id=int(d["axis_id"]),
                    option_id=int(d["option_id"]),
                    available=int(d["available"]),
                    bundle_item_id=d.get("bundle_item_id"),
                    low_stock=bool(d.get("low_stock", False)),
                )
                for d in data.get("per_axis_detail") or ()
            ),
            bundle_items=tuple(
                BundleItemStock(
                    bundle_item_id=int(b["bundle_item_id"]),
                    available=b.get("available"),
                    required=bool(b.get("required", False)),
                )
                for b in data.get("bundle_items") or ()
            ),
        )

    def as_dict(self) -> dict:
        return {
            "available": self.available,
            "limiting_quantity": self.limiting_quantity,
            "per_axis_detail": [
                {
                    "axis_id": d.axis_id,
                    "option_id": d.option_id,
                    "available": d.available,
                    "bundle_item_id": d.bundle_item_id,
                    "low_stock": d.low_stock,
                }
                for d in self.per_axis_detail
            ],
            "bundle_items": [
                {"bundle_item_id": b.bundle_item_id, "available": b.available, "required": b.required}
                for b in self.bundle_items
            ],
        }


@dataclass(frozen=True)
class StructuralViolation:
    """An unmet required constraint. Recoverable: the user must fix it."""

    code: str
    message: str
    axis_id: int | None = None
    bundle_item_id: int | None = None

    def __str__(self):
        return self.message

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "axis_id": self.axis_id,
            "bundle_item_id": self.bundle_item_id,
        }


@dataclass(frozen=True)
class CartLineItem:
    """Finalized configuration handed to the cart.

    Carries the serialized selection, never a price: the order is priced
    again from ``selection`` when it is placed.
    """

    product_id: int
    quantity: int
    selection: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> CartLineItem:
        return cls(
            product_id=int(data["product_id"]),
            quantity=int(data.get("quantity", 1)),
            selection=dict(data.get("selection") or {}),
        )

    def as_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "selection": self.selection,
        }


@dataclass(frozen=True)
class PriceCheck:
    """Local price compared against the server-authoritative one."""

    local: PriceBreakdown
    server: PriceBreakdown
    tolerance: Decimal = Decimal("0")

    @property
    def difference(self) -> Decimal:
        return self.server.total - self.local.total

    @property
    def matches(self) -> bool:
        return abs(self.difference) <= self.tolerance
