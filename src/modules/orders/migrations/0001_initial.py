import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid6
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("pendiente", "Pendiente"),
    ("compra", "Compra"),
    ("facturado", "Facturado"),
    ("nulo", "Nulo"),
]


def _base_fields():
    return [
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
            models.DateTimeField(db_index=True, default=django.utils.timezone.now),
        ),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


def _user_fk():
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name="+",
        to=settings.AUTH_USER_MODEL,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("customers", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                *_base_fields(),
                (
                    "order_number",
                    models.CharField(editable=False, max_length=20, unique=True),
                ),
                (
                    "status",
                    models.CharField(
                        choices=STATUS_CHOICES, default="pendiente", max_length=20
                    ),
                ),
                ("delivery_due", models.DateField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                (
                    "notes",
                    models.TextField(blank=True, default="", max_length=1000),
                ),
                (
                    "location",
                    models.CharField(blank=True, default="", max_length=200),
                ),
                (
                    "idempotency_key",
                    models.CharField(
                        blank=True, max_length=255, null=True, unique=True
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="customers.customer",
                    ),
                ),
                ("created_by", _user_fk()),
                ("updated_by", _user_fk()),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                    models.Index(
                        fields=["customer", "status", "created_at"],
                        name="orders_consolidation_idx",
                    ),
                    models.Index(
                        fields=["delivery_due"], name="orders_delivery_due_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                *_base_fields(),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "unit_price",
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
                ("brand", models.CharField(blank=True, default="", max_length=100)),
                ("format", models.CharField(blank=True, default="", max_length=100)),
                (
                    "status",
                    models.CharField(
                        choices=STATUS_CHOICES, default="pendiente", max_length=20
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "db_table": "order_items",
                "ordering": ["position", "created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gt=0),
                        name="order_items_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(unit_price__gte=0),
                        name="order_items_unit_price_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                *_base_fields(),
                (
                    "old_status",
                    models.CharField(
                        blank=True, choices=STATUS_CHOICES, max_length=20, null=True
                    ),
                ),
                (
                    "new_status",
                    models.CharField(choices=STATUS_CHOICES, max_length=20),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="orders.order",
                    ),
                ),
                ("user", _user_fk()),
            ],
            options={
                "db_table": "order_status_history",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["order", "-created_at"],
                        name="osh_order_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItemMerge",
            fields=[
                *_base_fields(),
                (
                    "previous_quantity",
                    models.DecimalField(decimal_places=2, max_digits=12),
                ),
                (
                    "added_quantity",
                    models.DecimalField(decimal_places=2, max_digits=12),
                ),
                (
                    "idempotency_key",
                    models.CharField(
                        blank=True, db_index=True, max_length=255, null=True
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="merges",
                        to="orders.order",
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="merges",
                        to="orders.orderitem",
                    ),
                ),
                ("created_by", _user_fk()),
            ],
            options={
                "db_table": "order_item_merges",
                "ordering": ["created_at"],
            },
        ),
    ]
