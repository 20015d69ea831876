"""Variation and VariationOption models."""

from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords


class VariationKind(models.TextChoices):
    TEXT = "text", _("Text")
    DROPDOWN = "dropdown", _("Dropdown")
    IMAGE = "image", _("Image")
    BOOLEAN = "boolean", _("Yes/No")
    MODEL = "model", _("Model")


class Variation(models.Model):
    """
    Customization axis of a product.

    The same rows serve as the nested axes of every bundle item that
    references this product.
    """

    product = models.ForeignKey(
        "configurator.ConfigurableProduct",
        on_delete=models.CASCADE,
        related_name="variations",
        verbose_name=_("product"),
    )
    name = models.CharField(_("name"), max_length=100)
    kind = models.CharField(_("kind"), max_length=20, choices=VariationKind.choices, default=VariationKind.DROPDOWN)
    is_required = models.BooleanField(_("required"), default=False)
    tracks_stock = models.BooleanField(_("tracks stock"), default=False)
    sort_order = models.PositiveIntegerField(_("order"), default=0)

    class Meta:
        verbose_name = _("variation")
        verbose_name_plural = _("variations")
        ordering = ["sort_order", "id"]

    def __str__(self):
        return f"{self.name} ({self.get_kind_display()})"

    def clean(self):
        """Validation: one model axis per product, tracked options carry stock."""
        if self.kind == VariationKind.MODEL and self.product_id:
            others = Variation.objects.filter(product_id=self.product_id, kind=VariationKind.MODEL)
            if self.pk:
                others = others.exclude(pk=self.pk)
            if others.exists():
                raise ValidationError(_("A product can have only one model variation"))

        if self.tracks_stock and self.pk and self.options.filter(stock_quantity__isnull=True).exists():
            raise ValidationError(_("Every option of a stock-tracked variation needs a stock quantity"))

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)


class VariationOption(models.Model):
    """One choice on a Variation."""

    variation = models.ForeignKey(
        Variation,
        on_delete=models.CASCADE,
        related_name="options",
        verbose_name=_("variation"),
    )
    label = models.CharField(_("label"), max_length=200)

    # Signed: an option may make the product cheaper
    price_adjustment_q = models.BigIntegerField(
        _("price adjustment"),
        default=0,
        help_text=_("Added to the base price, in cents"),
    )

    is_default = models.BooleanField(_("default"), default=False)
    is_available = models.BooleanField(_("available"), default=True)

    # Stock (only meaningful when the variation tracks stock)
    stock_quantity = models.PositiveIntegerField(_("stock"), null=True, blank=True)
    reserved_quantity = models.PositiveIntegerField(_("reserved"), default=0)
    low_stock_threshold = models.PositiveIntegerField(_("low stock threshold"), null=True, blank=True)

    sort_order = models.PositiveIntegerField(_("order"), default=0)

    # History tracking (price and stock audit)
    history = HistoricalRecords()

    class Meta:
        verbose_name = _("variation option")
        verbose_name_plural = _("variation options")
        ordering = ["sort_order", "id"]

    def __str__(self):
        return f"{self.variation.name}: {self.label}"

    def clean(self):
        """Validation: one default per variation, stock when tracked."""
        if self.is_default and self.variation_id:
            others = VariationOption.objects.filter(variation_id=self.variation_id, is_default=True)
            if self.pk:
                others = others.exclude(pk=self.pk)
            if others.exists():
                raise ValidationError(_("Variation already has a default option"))

        if self.variation_id and self.variation.tracks_stock and self.stock_quantity is None:
            raise ValidationError(_("Stock quantity is required for a stock-tracked variation"))

    def save(self, *args, **kwargs):
        self.full_clean()
        old_price_adjustment_q = None
        if not self._state.adding:
            old = VariationOption.objects.filter(pk=self.pk).values_list("price_adjustment_q", flat=True).first()
            if old is not None and old != self.price_adjustment_q:
                old_price_adjustment_q = old
        super().save(*args, **kwargs)
        if old_price_adjustment_q is not None:
            from configurator.signals import price_adjustment_changed

            price_adjustment_changed.send(
                sender=self.__class__,
                instance=self,
                old_price_adjustment_q=old_price_adjustment_q,
                new_price_adjustment_q=self.price_adjustment_q,
            )

    @property
    def price_adjustment(self) -> Decimal:
        return Decimal(self.price_adjustment_q) / 100

    @price_adjustment.setter
    def price_adjustment(self, value: Decimal):
        self.price_adjustment_q = int((Decimal(str(value)) * 100).to_integral_value(rounding=ROUND_HALF_UP))

    @property
    def available_quantity(self) -> int | None:
        """Sellable stock: on hand minus reserved, never negative."""
        if self.stock_quantity is None:
            return None
        return max(0, self.stock_quantity - self.reserved_quantity)

    @property
    def is_low_stock(self) -> bool:
        available = self.available_quantity
        if available is None or self.low_stock_threshold is None:
            return False
        return 0 < available <= self.low_stock_threshold
