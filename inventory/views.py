from rest_framework import generics, status, filters
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import HasRolePermission, IsAdminOrStaff, Permissions
from canteen.pagination import InventoryResultsPagination
from . import ledger
from .filters import MenuItemFilter, InventoryFilter
from .models import Category, MenuItem, Inventory
from .serializers import (
    CategorySerializer, MenuItemListSerializer, InventorySerializer,
    InventoryCreateSerializer, InventoryUpdateSerializer
)


# =============== CATALOG (public) ===============

class CategoryListView(generics.ListAPIView):
    """List all categories sorted by sort order then name"""
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [AllowAny]
    pagination_class = None
    filter_backends = []


class MenuListView(generics.ListAPIView):
    """
    get: List menu items with search, category, availability filters and sorting
    """
    queryset = MenuItem.objects.select_related('category')
    serializer_class = MenuItemListSerializer
    permission_classes = [AllowAny]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = MenuItemFilter
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'created_at']
    ordering = ['name']

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('q', openapi.IN_QUERY, description="Search name and description", type=openapi.TYPE_STRING),
            openapi.Parameter('category', openapi.IN_QUERY, description="Category id or slug", type=openapi.TYPE_STRING),
            openapi.Parameter('available', openapi.IN_QUERY, description="Filter by availability", type=openapi.TYPE_BOOLEAN),
            openapi.Parameter('ordering', openapi.IN_QUERY, description="name, price or created_at; prefix - for descending", type=openapi.TYPE_STRING),
            openapi.Parameter('limit', openapi.IN_QUERY, description="Page size (max 100)", type=openapi.TYPE_INTEGER),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


# =============== INVENTORY (staff/admin) ===============

class InventoryAccessMixin:
    """Reads need view_inventory, writes need manage_inventory"""
    permission_classes = [IsAuthenticated, IsAdminOrStaff, HasRolePermission]

    @property
    def required_permission(self):
        if self.request.method in ('GET', 'HEAD', 'OPTIONS'):
            return Permissions.VIEW_INVENTORY
        return Permissions.MANAGE_INVENTORY


class InventoryListCreateView(InventoryAccessMixin, generics.ListAPIView):
    """
    get: List inventory records, optionally only those at or below their low-stock threshold
    post: Create the inventory record of a menu item
    """
    queryset = Inventory.objects.select_related('menu_item')
    serializer_class = InventorySerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = InventoryFilter
    pagination_class = InventoryResultsPagination

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('low_stock_only', openapi.IN_QUERY, description="Only items at or below threshold", type=openapi.TYPE_BOOLEAN),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_description="Create an inventory record for a menu item",
        request_body=InventoryCreateSerializer,
        responses={201: InventorySerializer, 400: 'Bad Request', 409: 'Inventory already exists'}
    )
    def post(self, request, *args, **kwargs):
        serializer = InventoryCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        menu_item = MenuItem.objects.get(pk=data['menu_item_id'])
        inventory = ledger.create(
            menu_item,
            quantity=data['quantity'],
            low_stock_threshold=data['low_stock_threshold'],
            unit=data.get('unit', ''),
        )
        return Response(InventorySerializer(inventory).data, status=status.HTTP_201_CREATED)


class InventoryDetailView(InventoryAccessMixin, generics.GenericAPIView):
    """
    get: Inventory of one menu item
    patch: Absolute set (quantity), relative adjust (adjust), threshold and unit
    """
    serializer_class = InventorySerializer

    def get(self, request, menu_item_id):
        inventory = ledger.get(menu_item_id)
        return Response(InventorySerializer(inventory).data)

    @swagger_auto_schema(
        operation_description="Update stock. Missing records are created when quantity or adjust is given; results are floored at 0.",
        request_body=InventoryUpdateSerializer,
        responses={200: InventorySerializer, 404: 'Inventory not found'}
    )
    def patch(self, request, menu_item_id):
        serializer = InventoryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        inventory = ledger.update(menu_item_id, **serializer.validated_data)
        inventory = ledger.get(inventory.menu_item_id)
        return Response(InventorySerializer(inventory).data)
