import uuid

import django.core.validators
import django.db.models.deletion
import simple_history.models
from django.conf import settings
from django.db import migrations, models


HISTORY_TYPE_CHOICES = [("+", "Created"), ("~", "Changed"), ("-", "Deleted")]


def history_fields():
    return [
        ("history_id", models.AutoField(primary_key=True, serialize=False)),
        ("history_date", models.DateTimeField(db_index=True)),
        ("history_change_reason", models.CharField(max_length=100, null=True)),
        ("history_type", models.CharField(choices=HISTORY_TYPE_CHOICES, max_length=1)),
        (
            "history_user",
            models.ForeignKey(
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def history_options(name):
    return {
        "verbose_name": f"historical {name}",
        "verbose_name_plural": f"historical {name}s",
        "ordering": ("-history_date", "-history_id"),
        "get_latest_by": ("history_date", "history_id"),
    }


def history_fk(to, verbose_name):
    return models.ForeignKey(
        blank=True,
        db_constraint=False,
        null=True,
        on_delete=django.db.models.deletion.DO_NOTHING,
        related_name="+",
        to=to,
        verbose_name=verbose_name,
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ConfigurableProduct
        migrations.CreateModel(
            name="ConfigurableProduct",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID")),
                ("sku", models.CharField(max_length=100, unique=True, verbose_name="SKU")),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "base_price_q",
                    models.BigIntegerField(
                        default=0,
                        help_text="Base price in cents, including required bundle items",
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="base price",
                    ),
                ),
                (
                    "stock",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Empty = stock not tracked at product level",
                        null=True,
                        verbose_name="stock",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="metadata")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "configurable product",
                "verbose_name_plural": "configurable products",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalConfigurableProduct",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                ("uuid", models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID")),
                ("sku", models.CharField(db_index=True, max_length=100, verbose_name="SKU")),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "base_price_q",
                    models.BigIntegerField(
                        default=0,
                        help_text="Base price in cents, including required bundle items",
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="base price",
                    ),
                ),
                (
                    "stock",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Empty = stock not tracked at product level",
                        null=True,
                        verbose_name="stock",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="metadata")),
                ("created_at", models.DateTimeField(blank=True, editable=False, verbose_name="created at")),
                ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="updated at")),
                *history_fields(),
            ],
            options=history_options("configurable product"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        # Variation
        migrations.CreateModel(
            name="Variation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, verbose_name="name")),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("text", "Text"),
                            ("dropdown", "Dropdown"),
                            ("image", "Image"),
                            ("boolean", "Yes/No"),
                            ("model", "Model"),
                        ],
                        default="dropdown",
                        max_length=20,
                        verbose_name="kind",
                    ),
                ),
                ("is_required", models.BooleanField(default=False, verbose_name="required")),
                ("tracks_stock", models.BooleanField(default=False, verbose_name="tracks stock")),
                ("sort_order", models.PositiveIntegerField(default=0, verbose_name="order")),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="variations",
                        to="configurator.configurableproduct",
                        verbose_name="product",
                    ),
                ),
            ],
            options={
                "verbose_name": "variation",
                "verbose_name_plural": "variations",
                "ordering": ["sort_order", "id"],
            },
        ),
        # VariationOption
        migrations.CreateModel(
            name="VariationOption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("label", models.CharField(max_length=200, verbose_name="label")),
                (
                    "price_adjustment_q",
                    models.BigIntegerField(
                        default=0, help_text="Added to the base price, in cents", verbose_name="price adjustment"
                    ),
                ),
                ("is_default", models.BooleanField(default=False, verbose_name="default")),
                ("is_available", models.BooleanField(default=True, verbose_name="available")),
                ("stock_quantity", models.PositiveIntegerField(blank=True, null=True, verbose_name="stock")),
                ("reserved_quantity", models.PositiveIntegerField(default=0, verbose_name="reserved")),
                (
                    "low_stock_threshold",
                    models.PositiveIntegerField(blank=True, null=True, verbose_name="low stock threshold"),
                ),
                ("sort_order", models.PositiveIntegerField(default=0, verbose_name="order")),
                (
                    "variation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="options",
                        to="configurator.variation",
                        verbose_name="variation",
                    ),
                ),
            ],
            options={
                "verbose_name": "variation option",
                "verbose_name_plural": "variation options",
                "ordering": ["sort_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalVariationOption",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                ("label", models.CharField(max_length=200, verbose_name="label")),
                (
                    "price_adjustment_q",
                    models.BigIntegerField(
                        default=0, help_text="Added to the base price, in cents", verbose_name="price adjustment"
                    ),
                ),
                ("is_default", models.BooleanField(default=False, verbose_name="default")),
                ("is_available", models.BooleanField(default=True, verbose_name="available")),
                ("stock_quantity", models.PositiveIntegerField(blank=True, null=True, verbose_name="stock")),
                ("reserved_quantity", models.PositiveIntegerField(default=0, verbose_name="reserved")),
                (
                    "low_stock_threshold",
                    models.PositiveIntegerField(blank=True, null=True, verbose_name="low stock threshold"),
                ),
                ("sort_order", models.PositiveIntegerField(default=0, verbose_name="order")),
                ("variation", history_fk("configurator.variation", "variation")),
                *history_fields(),
            ],
            options=history_options("variation option"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        # BundleItem
        migrations.CreateModel(
            name="BundleItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "item_type",
                    models.CharField(
                        choices=[("required", "Required"), ("optional", "Optional")],
                        default="required",
                        max_length=20,
                        verbose_name="type",
                    ),
                ),
                ("is_configurable", models.BooleanField(default=False, verbose_name="configurable")),
                ("base_price_adjustment_q", models.BigIntegerField(default=0, verbose_name="price")),
                ("display_name", models.CharField(blank=True, max_length=200, verbose_name="display name")),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="quantity",
                    ),
                ),
                ("sort_order", models.PositiveIntegerField(default=0, verbose_name="order")),
                (
                    "parent",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bundle_items",
                        to="configurator.configurableproduct",
                        verbose_name="parent product",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="used_in_bundles",
                        to="configurator.configurableproduct",
                        verbose_name="item product",
                    ),
                ),
            ],
            options={
                "verbose_name": "bundle item",
                "verbose_name_plural": "bundle items",
                "ordering": ["sort_order", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="bundleitem",
            constraint=models.UniqueConstraint(fields=("parent", "product"), name="unique_bundle_parent_product"),
        ),
        migrations.CreateModel(
            name="HistoricalBundleItem",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                (
                    "item_type",
                    models.CharField(
                        choices=[("required", "Required"), ("optional", "Optional")],
                        default="required",
                        max_length=20,
                        verbose_name="type",
                    ),
                ),
                ("is_configurable", models.BooleanField(default=False, verbose_name="configurable")),
                ("base_price_adjustment_q", models.BigIntegerField(default=0, verbose_name="price")),
                ("display_name", models.CharField(blank=True, max_length=200, verbose_name="display name")),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="quantity",
                    ),
                ),
                ("sort_order", models.PositiveIntegerField(default=0, verbose_name="order")),
                ("parent", history_fk("configurator.configurableproduct", "parent product")),
                ("product", history_fk("configurator.configurableproduct", "item product")),
                *history_fields(),
            ],
            options=history_options("bundle item"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        # SharedConfiguration
        migrations.CreateModel(
            name="SharedConfiguration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(editable=False, max_length=20, unique=True, verbose_name="code")),
                ("selection", models.JSONField(default=dict, verbose_name="selection")),
                ("view_count", models.PositiveIntegerField(default=0, verbose_name="views")),
                ("last_viewed_at", models.DateTimeField(blank=True, null=True, verbose_name="last viewed at")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="shared_configurations",
                        to="configurator.configurableproduct",
                        verbose_name="product",
                    ),
                ),
            ],
            options={
                "verbose_name": "shared configuration",
                "verbose_name_plural": "shared configurations",
                "ordering": ["-created_at"],
            },
        ),
    ]
