from rest_framework import serializers
from .models import Category, MenuItem, Inventory, MAX_ID, MAX_QUANTITY


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'sort_order', 'created_at', 'updated_at']
        read_only_fields = fields


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'slug']


class MenuItemListSerializer(serializers.ModelSerializer):
    category = CategorySummarySerializer(read_only=True)

    class Meta:
        model = MenuItem
        fields = [
            'id', 'name', 'description', 'price', 'image_url', 'category',
            'is_available', 'tags', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class MenuItemSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuItem
        fields = ['id', 'name', 'price', 'is_available']


class InventorySerializer(serializers.ModelSerializer):
    menu_item = MenuItemSummarySerializer(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Inventory
        fields = [
            'id', 'menu_item', 'quantity', 'low_stock_threshold', 'unit',
            'is_low_stock', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class InventoryCreateSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)
    quantity = serializers.IntegerField(min_value=0, max_value=MAX_QUANTITY, default=0)
    low_stock_threshold = serializers.IntegerField(min_value=0, max_value=MAX_QUANTITY, default=0)
    unit = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')

    def validate_menu_item_id(self, value):
        if not MenuItem.objects.filter(pk=value).exists():
            raise serializers.ValidationError("Menu item not found")
        return value


class InventoryUpdateSerializer(serializers.Serializer):
    """Absolute `quantity` and relative `adjust` may be sent together; absolute wins"""
    quantity = serializers.IntegerField(min_value=0, max_value=MAX_QUANTITY, required=False)
    # the ledger clamps the result to [0, MAX_QUANTITY]
    adjust = serializers.IntegerField(min_value=-MAX_QUANTITY, max_value=MAX_QUANTITY, required=False)
    low_stock_threshold = serializers.IntegerField(min_value=0, max_value=MAX_QUANTITY, required=False)
    unit = serializers.CharField(max_length=20, required=False, allow_blank=True)
