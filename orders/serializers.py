from rest_framework import serializers

from inventory.models import MAX_ID, MAX_QUANTITY
from .models import Cart, CartItem, Order, OrderItem


class CartItemSerializer(serializers.ModelSerializer):
    menu_item_id = serializers.IntegerField(read_only=True)
    line_total = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ['id', 'menu_item_id', 'name', 'price', 'qty', 'line_total']
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)

    class Meta:
        model = Cart
        fields = ['id', 'items', 'subtotal', 'total', 'updated_at']
        read_only_fields = fields


class CartItemAddSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)
    qty = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY, default=1)


class CartItemQuantitySerializer(serializers.Serializer):
    """qty of zero or less removes the line"""
    qty = serializers.IntegerField(min_value=-MAX_QUANTITY, max_value=MAX_QUANTITY)


class OrderItemReadSerializer(serializers.ModelSerializer):
    menu_item_id = serializers.IntegerField(read_only=True)
    line_total = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'menu_item_id', 'name', 'price', 'qty', 'line_total']
        read_only_fields = fields


class OrderReadSerializer(serializers.ModelSerializer):
    items = OrderItemReadSerializer(many=True, read_only=True)
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'user_id', 'items', 'subtotal', 'total', 'status', 'notes',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)


class OrderCreateSerializer(serializers.Serializer):
    """Without `items` the order is placed from the user's cart"""
    items = OrderLineSerializer(many=True, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)


class OrderStatusSerializer(serializers.Serializer):
    # validated against Order.STATUS_CHOICES in services.update_order_status
    status = serializers.CharField()
