import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid6
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True, default=django.utils.timezone.now
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sku", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=200)),
                (
                    "description",
                    models.TextField(blank=True, default="", max_length=1000),
                ),
                ("brand", models.CharField(blank=True, default="", max_length=100)),
                ("format", models.CharField(blank=True, default="", max_length=100)),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0"))
                        ],
                    ),
                ),
                (
                    "cost_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0"))
                        ],
                    ),
                ),
                (
                    "stock_current",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=12,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0"))
                        ],
                    ),
                ),
                (
                    "min_stock",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=12,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0"))
                        ],
                    ),
                ),
                (
                    "category",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                (
                    "unit_of_measure",
                    models.CharField(
                        choices=[
                            ("unidad", "Unidad"),
                            ("par", "Par"),
                            ("metro", "Metro"),
                            ("caja", "Caja"),
                            ("kg", "Kilogramo"),
                            ("litro", "Litro"),
                            ("pack", "Pack"),
                        ],
                        default="unidad",
                        max_length=10,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "products",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["is_active"], name="products_active_idx"),
                    models.Index(fields=["category"], name="products_category_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(unit_price__gte=0),
                        name="products_unit_price_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(stock_current__gte=0)
                        & models.Q(min_stock__gte=0),
                        name="products_stock_non_negative",
                    ),
                ],
            },
        ),
    ]
