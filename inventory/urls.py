from django.urls import path
from canteen import converters  # noqa: F401  registers <id:...>
from . import views


urlpatterns = [
    # Catalog URLs
    path('categories/', views.CategoryListView.as_view(), name='category-list'),
    path('menu/', views.MenuListView.as_view(), name='menu-list'),

    # Inventory URLs
    path('admin/inventory/', views.InventoryListCreateView.as_view(), name='inventory-list-create'),
    path('admin/inventory/<id:menu_item_id>/', views.InventoryDetailView.as_view(), name='inventory-detail'),
]
