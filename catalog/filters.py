import django_filters
from django.db.models import Q, Value
from django.db.models.functions import Coalesce, NullIf
from suppliers.pricing import is_all_suppliers
from .engine import is_all_categories
from .models import Product


def with_effective_category(queryset):
    """Annotate category, falling back to the legacy type; empty strings count as missing"""
    return queryset.annotate(
        effective_category_value=Coalesce(
            NullIf('category', Value('')),
            NullIf('legacy_type', Value('')),
            Value(''),
        )
    )


class ProductFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    supplier = django_filters.CharFilter(method='filter_supplier')
    category = django_filters.CharFilter(method='filter_category')
    is_active = django_filters.BooleanFilter(method='filter_is_active')

    class Meta:
        model = Product
        fields = ['store', 'supplier', 'category', 'is_active', 'featured']

    def filter_search(self, queryset, name, value):
        if not value.strip():
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(code__icontains=value))

    def filter_supplier(self, queryset, name, value):
        if is_all_suppliers(value):
            return queryset
        return queryset.filter(supplier__key=value)

    def filter_category(self, queryset, name, value):
        if is_all_categories(value):
            return queryset
        return with_effective_category(queryset).filter(effective_category_value=value)

    def filter_is_active(self, queryset, name, value):
        # A missing flag counts as active
        if value:
            return queryset.exclude(active=False)
        return queryset.filter(active=False)
