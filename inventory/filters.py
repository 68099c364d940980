from django.db.models import F
from django_filters import rest_framework as filters

from .models import MenuItem, Inventory, MAX_ID


class MenuItemFilter(filters.FilterSet):
    """`category` takes either the numeric id or the slug"""
    category = filters.CharFilter(method='filter_category')
    available = filters.BooleanFilter(field_name='is_available')

    class Meta:
        model = MenuItem
        fields = ['category', 'available']

    def filter_category(self, queryset, name, value):
        value = value.strip()
        if value.isascii() and value.isdigit():
            category_id = int(value)
            if category_id > MAX_ID:
                return queryset.none()
            return queryset.filter(category_id=category_id)
        return queryset.filter(category__slug=value)


class InventoryFilter(filters.FilterSet):
    low_stock_only = filters.BooleanFilter(method='filter_low_stock')

    class Meta:
        model = Inventory
        fields = ['low_stock_only']

    def filter_low_stock(self, queryset, name, value):
        if value:
            return queryset.filter(quantity__lte=F('low_stock_threshold'))
        return queryset
