"""ConfigurableProduct model."""

import uuid as uuid_lib
from decimal import ROUND_HALF_UP, Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords


class ConfigurableProductQuerySet(models.QuerySet):
    def active(self):
        """Products that can be configured and sold."""
        return self.filter(is_active=True)


class ConfigurableProduct(models.Model):
    """
    Product with customization axes and bundle items.

    ``base_price_q`` already includes every required bundle item.
    """

    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True, verbose_name=_("UUID"))

    sku = models.CharField(_("SKU"), max_length=100, unique=True)
    name = models.CharField(_("name"), max_length=200)
    description = models.TextField(_("description"), blank=True)

    # Base price (in cents)
    base_price_q = models.BigIntegerField(
        _("base price"),
        default=0,
        validators=[MinValueValidator(0)],
        help_text=_("Base price in cents, including required bundle items"),
    )

    # Product-level stock, used when no stock-tracked axis is selected
    stock = models.PositiveIntegerField(
        _("stock"),
        null=True,
        blank=True,
        help_text=_("Empty = stock not tracked at product level"),
    )

    is_active = models.BooleanField(_("active"), default=True, db_index=True)

    metadata = models.JSONField(_("metadata"), default=dict, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    history = HistoricalRecords()

    objects = ConfigurableProductQuerySet.as_manager()

    class Meta:
        verbose_name = _("configurable product")
        verbose_name_plural = _("configurable products")
        ordering = ["name"]

    def __str__(self):
        return f"{self.sku} - {self.name}"

    @property
    def base_price(self) -> Decimal:
        """Base price in currency units."""
        return Decimal(self.base_price_q) / 100

    @base_price.setter
    def base_price(self, value: Decimal):
        self.base_price_q = int((Decimal(str(value)) * 100).to_integral_value(rounding=ROUND_HALF_UP))

    @property
    def is_bundle(self) -> bool:
        return self.bundle_items.exists()
