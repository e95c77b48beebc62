import django_filters
from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    customer = django_filters.UUIDFilter(field_name="customer_id")
    start_date = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__gte"
    )
    end_date = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__lte"
    )
    overdue = django_filters.BooleanFilter(method="filter_overdue")
    delivered = django_filters.BooleanFilter(method="filter_delivered")

    class Meta:
        model = Order
        fields = [
            "status",
            "customer",
            "start_date",
            "end_date",
            "overdue",
            "delivered",
        ]

    def filter_overdue(self, queryset, name, value):
        overdue = {
            "status": OrderStatus.INVOICED,
            "delivered_at__isnull": True,
            "delivery_due__lt": timezone.localdate(),
        }
        if value:
            return queryset.filter(**overdue)
        return queryset.exclude(**overdue)

    def filter_delivered(self, queryset, name, value):
        return queryset.filter(delivered_at__isnull=not value)
