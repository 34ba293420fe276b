from django.db import models as db_models
from django_filters import rest_framework as filters
from apps.catalog.models import Product, Variant, InventoryTracking


class ProductFilter(filters.FilterSet):
    """Filter for products by status, organization and price."""

    category_slug = filters.CharFilter(field_name='category__slug')
    vendor_slug = filters.CharFilter(field_name='vendor__slug')
    tag = filters.CharFilter(field_name='tags__slug')

    # Price filters
    min_price = filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = filters.NumberFilter(field_name='price', lookup_expr='lte')

    on_sale = filters.BooleanFilter(method='filter_on_sale')

    class Meta:
        model = Product
        fields = ['status', 'category', 'vendor', 'category_slug', 'vendor_slug', 'tag']

    def filter_on_sale(self, queryset, name, value):
        on_sale = db_models.Q(
            compare_at_price__isnull=False,
            compare_at_price__gt=db_models.F('price')
        )
        if value is True:
            return queryset.filter(on_sale)
        elif value is False:
            return queryset.exclude(on_sale)
        return queryset


class VariantFilter(filters.FilterSet):
    """Filter for variants."""

    product_slug = filters.CharFilter(field_name='product__slug')
    in_stock = filters.BooleanFilter(method='filter_in_stock')

    class Meta:
        model = Variant
        fields = ['product', 'product_slug', 'is_default', 'sku']

    def filter_in_stock(self, queryset, name, value):
        if value is True:
            return queryset.filter(inventory__available__gt=0)
        elif value is False:
            return queryset.exclude(inventory__available__gt=0)
        return queryset


class InventoryTrackingFilter(filters.FilterSet):
    created_after = filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_before = filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = InventoryTracking
        fields = ['variant', 'product', 'type']
