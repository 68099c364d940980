from rest_framework import status, generics
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from drf_yasg.utils import swagger_auto_schema, no_body
from drf_yasg import openapi

from authentication.permissions import HasRolePermission, IsAdminOrStaff, IsOrderOwner, Permissions
from canteen.pagination import OrderResultsPagination
from . import services
from .models import Order
from .serializers import (
    CartSerializer, CartItemAddSerializer, CartItemQuantitySerializer,
    OrderReadSerializer, OrderCreateSerializer, OrderStatusSerializer
)


status_parameter = openapi.Parameter(
    'status', openapi.IN_QUERY, description="Filter by order status", type=openapi.TYPE_STRING,
    enum=Order.allowed_statuses(),
)


def _orders_queryset():
    return Order.objects.select_related('user').prefetch_related('items')


def _filter_status(queryset, request):
    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    return queryset


# =============== CART ===============

class CartView(generics.GenericAPIView):
    """
    get: Current user's cart (created empty on first access)
    delete: Remove every line from the cart
    """
    serializer_class = CartSerializer
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Permissions.MANAGE_CART

    def get(self, request):
        cart = services.get_or_create_cart(request.user)
        return Response(CartSerializer(cart).data)

    def delete(self, request):
        cart = services.clear_cart(request.user)
        return Response(CartSerializer(cart).data)


class CartItemCreateView(generics.GenericAPIView):
    serializer_class = CartItemAddSerializer
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Permissions.MANAGE_CART

    @swagger_auto_schema(
        operation_description="Add a menu item to the cart; adding an item already present increases its quantity",
        request_body=CartItemAddSerializer,
        responses={200: CartSerializer, 404: 'Menu item not found'}
    )
    def post(self, request):
        serializer = CartItemAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = services.add_cart_item(
            request.user, serializer.validated_data['menu_item_id'], serializer.validated_data['qty']
        )
        return Response(CartSerializer(cart).data)


class CartItemDetailView(generics.GenericAPIView):
    serializer_class = CartItemQuantitySerializer
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Permissions.MANAGE_CART

    @swagger_auto_schema(
        operation_description="Set the quantity of a cart line; zero or less removes it",
        request_body=CartItemQuantitySerializer,
        responses={200: CartSerializer, 404: 'Item not in cart'}
    )
    def patch(self, request, menu_item_id):
        serializer = CartItemQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = services.set_cart_item_quantity(request.user, menu_item_id, serializer.validated_data['qty'])
        return Response(CartSerializer(cart).data)

    @swagger_auto_schema(responses={200: CartSerializer, 404: 'Item not in cart'})
    def delete(self, request, menu_item_id):
        cart = services.remove_cart_item(request.user, menu_item_id)
        return Response(CartSerializer(cart).data)


# =============== ORDERS (owner) ===============

class OrderListCreateView(generics.ListAPIView):
    """
    get: Current user's orders, newest first
    post: Place an order from inline items or from the cart
    """
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated, HasRolePermission]
    pagination_class = OrderResultsPagination

    @property
    def required_permission(self):
        # listing your own orders needs no extra grant
        if self.request.method == 'POST':
            return Permissions.PLACE_ORDERS
        return None

    def get_queryset(self):
        queryset = _orders_queryset().filter(user=self.request.user)
        return _filter_status(queryset, self.request)

    @swagger_auto_schema(manual_parameters=[status_parameter])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_description="Place an order. Omit `items` to order the contents of the cart.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                'items': openapi.Schema(
                    type=openapi.TYPE_ARRAY,
                    items=openapi.Schema(
                        type=openapi.TYPE_OBJECT,
                        required=['menu_item_id', 'quantity'],
                        properties={
                            'menu_item_id': openapi.Schema(type=openapi.TYPE_INTEGER),
                            'quantity': openapi.Schema(type=openapi.TYPE_INTEGER, minimum=1),
                        }
                    )
                ),
                'notes': openapi.Schema(type=openapi.TYPE_STRING),
            }
        ),
        responses={
            201: OrderReadSerializer,
            400: 'Empty cart, insufficient stock or unknown item',
            500: 'Order could not be persisted'
        }
    )
    def post(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = services.place_order(
            request.user,
            items=serializer.validated_data.get('items'),
            notes=serializer.validated_data.get('notes'),
        )

        # Return the created order with full details
        order = _orders_queryset().get(pk=order.pk)
        return Response(OrderReadSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(generics.RetrieveAPIView):
    """Retrieve one of the current user's orders"""
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated, IsOrderOwner]
    queryset = _orders_queryset()


class OrderCancelView(generics.GenericAPIView):
    """Cancel an order while it is still placed and within the cancellation window"""
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Permissions.CANCEL_OWN_ORDERS

    @swagger_auto_schema(
        request_body=no_body,
        responses={
            200: OrderReadSerializer,
            400: 'Order cannot be cancelled at this stage / Cancellation window expired',
            403: 'Forbidden',
            404: 'Order not found'
        }
    )
    def patch(self, request, pk):
        order = services.cancel_order(request.user, pk)
        order = _orders_queryset().get(pk=order.pk)
        return Response(OrderReadSerializer(order).data)


# =============== ORDERS (staff/admin) ===============

class AdminOrderListView(generics.ListAPIView):
    """All orders, newest first"""
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated, IsAdminOrStaff, HasRolePermission]
    required_permission = Permissions.VIEW_ORDERS
    pagination_class = OrderResultsPagination

    def get_queryset(self):
        return _filter_status(_orders_queryset(), self.request)

    @swagger_auto_schema(manual_parameters=[status_parameter])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminOrderDetailView(generics.RetrieveAPIView):
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated, IsAdminOrStaff, HasRolePermission]
    required_permission = Permissions.VIEW_ORDERS
    queryset = _orders_queryset()


class AdminOrderStatusView(generics.GenericAPIView):
    serializer_class = OrderStatusSerializer
    permission_classes = [IsAuthenticated, IsAdminOrStaff, HasRolePermission]
    required_permission = Permissions.UPDATE_ORDER_STATUS

    @swagger_auto_schema(
        operation_description="Set an order's status",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=['status'],
            properties={
                'status': openapi.Schema(type=openapi.TYPE_STRING, enum=Order.allowed_statuses()),
            }
        ),
        responses={200: OrderReadSerializer, 400: 'Invalid status', 404: 'Order not found'}
    )
    def patch(self, request, pk):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = services.update_order_status(pk, serializer.validated_data['status'], actor=request.user)
        order = get_object_or_404(_orders_queryset(), pk=order.pk)
        return Response(OrderReadSerializer(order).data)
