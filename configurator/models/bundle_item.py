"""BundleItem model."""

from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords


class BundleItemType(models.TextChoices):
    REQUIRED = "required", _("Required")
    OPTIONAL = "optional", _("Optional")


class BundleItem(models.Model):
    """
    Product attached to a parent product.

    Required items are included in the parent's base price; optional
    items are sold at ``base_price_adjustment_q`` when selected. A
    configurable item exposes the referenced product's own variations.
    """

    parent = models.ForeignKey(
        "configurator.ConfigurableProduct",
        on_delete=models.CASCADE,
        related_name="bundle_items",
        verbose_name=_("parent product"),
    )
    product = models.ForeignKey(
        "configurator.ConfigurableProduct",
        on_delete=models.PROTECT,
        related_name="used_in_bundles",
        verbose_name=_("item product"),
    )
    item_type = models.CharField(
        _("type"),
        max_length=20,
        choices=BundleItemType.choices,
        default=BundleItemType.REQUIRED,
    )
    is_configurable = models.BooleanField(_("configurable"), default=False)

    # Signed, in cents. Ignored in pricing for required items.
    base_price_adjustment_q = models.BigIntegerField(_("price"), default=0)

    display_name = models.CharField(_("display name"), max_length=200, blank=True)
    quantity = models.PositiveIntegerField(_("quantity"), default=1, validators=[MinValueValidator(1)])
    sort_order = models.PositiveIntegerField(_("order"), default=0)

    history = HistoricalRecords()

    class Meta:
        verbose_name = _("bundle item")
        verbose_name_plural = _("bundle items")
        ordering = ["sort_order", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["parent", "product"],
                name="unique_bundle_parent_product",
            ),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.product.sku} in {self.parent.sku} ({self.item_type})"

    @property
    def name(self) -> str:
        return self.display_name or self.product.name

    @property
    def base_price_adjustment(self) -> Decimal:
        return Decimal(self.base_price_adjustment_q) / 100

    @base_price_adjustment.setter
    def base_price_adjustment(self, value: Decimal):
        self.base_price_adjustment_q = int((Decimal(str(value)) * 100).to_integral_value(rounding=ROUND_HALF_UP))

    def clean(self):
        """Validation: cannot bundle itself, no cycles, max depth."""
        from configurator.conf import configurator_settings

        if self.parent_id == self.product_id:
            raise ValidationError(_("Product cannot be a bundle item of itself"))

        is_circular, depth = self._check_depth_and_cycles()
        if is_circular:
            raise ValidationError(_("Circular bundle reference detected"))

        if depth > configurator_settings.BUNDLE_MAX_DEPTH:
            raise ValidationError(
                f"Max bundle depth ({configurator_settings.BUNDLE_MAX_DEPTH}) exceeded."
            )

    def _check_depth_and_cycles(self) -> tuple[bool, int]:
        """Walk the item's own bundle tree; return (cycle found, deepest level)."""
        max_depth = 1

        def walk(product_id, level, path):
            nonlocal max_depth
            if product_id in path:
                return True
            max_depth = max(max_depth, level)
            child_ids = BundleItem.objects.filter(parent_id=product_id).values_list("product_id", flat=True)
            return any(walk(child_id, level + 1, path | {product_id}) for child_id in child_ids)

        is_circular = walk(self.product_id, 2, frozenset({self.parent_id}))
        return is_circular, max_depth

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)
