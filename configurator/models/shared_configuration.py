"""SharedConfiguration model."""

import secrets
import string

from django.db import models
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

CODE_ALPHABET = string.ascii_letters + string.digits


def generate_short_code(length: int = 8) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class SharedConfiguration(models.Model):
    """
    A selection saved under a short code so it can be shared as a link.

    ``selection`` holds ``SelectionState.to_dict()``; it is re-checked
    against the catalog every time it is opened.
    """

    code = models.CharField(_("code"), max_length=20, unique=True, editable=False)
    product = models.ForeignKey(
        "configurator.ConfigurableProduct",
        on_delete=models.CASCADE,
        related_name="shared_configurations",
        verbose_name=_("product"),
    )
    selection = models.JSONField(_("selection"), default=dict)
    view_count = models.PositiveIntegerField(_("views"), default=0)
    last_viewed_at = models.DateTimeField(_("last viewed at"), null=True, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("shared configuration")
        verbose_name_plural = _("shared configurations")
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.code} ({self.product.sku})"

    def record_view(self):
        """Increment view_count atomically and refresh it on this instance."""
        now = timezone.now()
        SharedConfiguration.objects.filter(pk=self.pk).update(view_count=F("view_count") + 1, last_viewed_at=now)
        self.refresh_from_db(fields=["view_count", "last_viewed_at"])
