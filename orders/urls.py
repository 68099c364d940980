from django.urls import path
from canteen import converters  # noqa: F401  registers <id:...>
from . import views


urlpatterns = [
    # Cart URLs
    path('cart/', views.CartView.as_view(), name='cart'),
    path('cart/items/', views.CartItemCreateView.as_view(), name='cart-item-create'),
    path('cart/items/<id:menu_item_id>/', views.CartItemDetailView.as_view(), name='cart-item-detail'),

    # Order URLs
    path('orders/', views.OrderListCreateView.as_view(), name='order-list-create'),
    path('orders/<id:pk>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('orders/<id:pk>/cancel/', views.OrderCancelView.as_view(), name='order-cancel'),

    # Counter URLs
    path('admin/orders/', views.AdminOrderListView.as_view(), name='admin-order-list'),
    path('admin/orders/<id:pk>/', views.AdminOrderDetailView.as_view(), name='admin-order-detail'),
    path('admin/orders/<id:pk>/status/', views.AdminOrderStatusView.as_view(), name='admin-order-status'),
]
