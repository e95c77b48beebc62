import django_filters
from django.db.models import F

from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    sku = django_filters.CharFilter(field_name="sku", lookup_expr="iexact")
    brand = django_filters.CharFilter(field_name="brand", lookup_expr="icontains")
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    unit_of_measure = django_filters.CharFilter(field_name="unit_of_measure")
    min_price = django_filters.NumberFilter(field_name="unit_price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="unit_price", lookup_expr="lte")
    active = django_filters.BooleanFilter(field_name="is_active")
    low_stock = django_filters.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = Product
        fields = [
            "name",
            "sku",
            "brand",
            "category",
            "unit_of_measure",
            "min_price",
            "max_price",
            "active",
            "low_stock",
        ]

    def filter_low_stock(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(stock_current__lte=F("min_stock"))
        return queryset.filter(stock_current__gt=F("min_stock"))
