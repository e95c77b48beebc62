from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from modules.accounts.models import Role
from modules.customers.models import Customer
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem
from modules.products.models import Product, UnitOfMeasure

SEED_PASSWORD = "123456"

USERS = [
    ("admin", "admin@empresa.cl", "Administrador", Role.ADMIN),
    ("vendedor", "vendedor@empresa.cl", "Juan Vendedor", Role.VENDEDOR),
    ("facturador", "facturador@empresa.cl", "María Facturadora", Role.FACTURADOR),
]

CUSTOMERS = [
    {
        "name": "Ferretería El Martillo",
        "tax_id": "96.789.123-4",
        "email": "compras@elmartillo.cl",
        "phone": "+56912345678",
        "street": "Av. Libertador 1234",
        "city": "Santiago",
        "region": "Región Metropolitana",
        "postal_code": "8320000",
        "notes": "Cliente VIP con descuentos especiales",
    },
    {
        "name": "Construcciones Pérez",
        "tax_id": "78.456.789-1",
        "email": "info@construccionesperez.cl",
        "phone": "+56987654321",
        "street": "Calle San Martín 567",
        "city": "Valparaíso",
        "region": "Región de Valparaíso",
        "postal_code": "2340000",
        "notes": "Solicita factura electrónica siempre",
    },
    {
        "name": "Taller Mecánico Los Andes",
        "tax_id": "12.345.678-9",
        "email": "taller@losandes.cl",
        "phone": "+56956781234",
        "street": "Ruta 57 Km 45",
        "city": "Los Andes",
        "region": "Región de Valparaíso",
        "postal_code": "2100000",
        "notes": "Pago contra entrega únicamente",
    },
    {
        "name": "Supermercado Santa Isabel",
        "tax_id": "89.123.456-7",
        "email": "compras@santaisabel.cl",
        "phone": "+56922334455",
        "street": "Av. Providencia 2890",
        "city": "Santiago",
        "region": "Región Metropolitana",
        "postal_code": "7500000",
    },
]

# sku, name, brand, format, unit price, cost, stock, min stock, category, unit
PRODUCTS = [
    ("MART-001", "Martillo Carpintero 16oz", "Stanley", "Unidad", "15990", "9500", "25", "5", "Herramientas Manuales", UnitOfMeasure.UNIT),
    ("TORN-002", 'Tornillos Autorroscantes 3/4"', "Hilti", "Caja 100 unidades", "4500", "2800", "8", "10", "Tornillería", UnitOfMeasure.BOX),
    ("PINT-003", "Pintura Látex Blanco", "Sherwin Williams", "Galón 3.78L", "28900", "18500", "15", "8", "Pinturas", UnitOfMeasure.LITER),
    ("TUBE-004", "Tubería PVC 110mm", "Tigre", "6 metros", "12300", "8900", "30", "12", "Plomería", UnitOfMeasure.METER),
    ("ALAM-005", "Alambre Galvanizado N°8", "Gerdau", "Rollo 25kg", "35700", "24500", "5", "8", "Fierrería", UnitOfMeasure.KG),
    ("CEMN-006", "Cemento Especial", "Melón", "Saco 25kg", "6890", "5200", "50", "20", "Cemento", UnitOfMeasure.KG),
]


class Command(BaseCommand):
    help = "Seed database with development users, customers, products and orders."

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        admin, users_created = self._seed_users()
        customers = self._seed_customers(admin)
        products = self._seed_products(admin)
        orders_created = self._seed_orders(admin, customers, products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self):
        User = get_user_model()
        created = 0
        admin = None
        for username, email, full_name, role in USERS:
            first_name, _, last_name = full_name.partition(" ")
            user, was_created = User.objects.get_or_create(
                username=username,
                defaults={
                    "email": email,
                    "first_name": first_name,
                    "last_name": last_name,
                    "role": role,
                    "is_staff": role == Role.ADMIN,
                },
            )
            if was_created:
                user.set_password(SEED_PASSWORD)
                user.save(update_fields=["password"])
                created += 1
            if role == Role.ADMIN:
                admin = user
        return admin, created

    def _seed_customers(self, admin) -> List[Customer]:
        self.stdout.write("Creating customers...")
        customers: List[Customer] = []
        for data in CUSTOMERS:
            defaults: Dict[str, Any] = {k: v for k, v in data.items() if k != "tax_id"}
            customer, _ = Customer.objects.get_or_create(
                tax_id=data["tax_id"], defaults={**defaults, "created_by": admin}
            )
            customers.append(customer)
        self.stdout.write(self.style.SUCCESS("Creating customers... Done!"))
        return customers

    def _seed_products(self, admin) -> List[Product]:
        self.stdout.write("Creating products...")
        products: List[Product] = []
        for sku, name, brand, fmt, price, cost, stock, min_stock, category, unit in PRODUCTS:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "brand": brand,
                    "format": fmt,
                    "unit_price": Decimal(price),
                    "cost_price": Decimal(cost),
                    "stock_current": Decimal(stock),
                    "min_stock": Decimal(min_stock),
                    "category": category,
                    "unit_of_measure": unit,
                    "created_by": admin,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, admin, customers: List[Customer], products: List[Product]) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        now = timezone.now()
        today = timezone.localdate()
        plans = [
            (customers[0], [(products[0], 5), (products[1], 2)], OrderStatus.INVOICED, 2, None, "Entrega en horario de mañana", "Bodega principal"),
            (customers[1], [(products[2], 3), (products[3], 10)], OrderStatus.PURCHASING, 5, None, "Confirmar disponibilidad antes de facturar", ""),
            (customers[2], [(products[4], 1)], OrderStatus.PENDING, 7, None, "Cliente requiere cotización formal", ""),
            (customers[0], [(products[0], 2)], OrderStatus.INVOICED, -2, now - timedelta(days=1), "Pedido urgente - entregado exitosamente", ""),
        ]
        for customer, lines, status, due_in_days, delivered_at, notes, location in plans:
            order = Order.objects.create(
                customer=customer,
                status=status,
                delivery_due=today + timedelta(days=due_in_days),
                delivered_at=delivered_at,
                notes=notes,
                location=location,
                created_by=admin,
            )
            OrderItem.objects.bulk_create(
                [
                    OrderItem(
                        order=order,
                        product=product,
                        position=position,
                        quantity=Decimal(quantity),
                        unit_price=product.unit_price,
                        unit_of_measure=product.unit_of_measure,
                        brand=product.brand,
                        format=product.format,
                        status=status,
                    )
                    for position, (product, quantity) in enumerate(lines)
                ]
            )
        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return len(plans)
