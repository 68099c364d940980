from django.contrib import admin
from django.urls import path, include
from drf_yasg.views import get_schema_view
from drf_yasg import openapi
from rest_framework import permissions

from authentication import views as auth_views

# Setup Swagger schema view
schema_view = get_schema_view(
    openapi.Info(
        title='Canteen API',
        default_version='v1',
        description="Catalog, cart, order placement and inventory for the canteen",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', auth_views.health_check, name='health_check'),
    path('api/v1/', include('authentication.urls')),
    path('api/v1/', include('inventory.urls')),
    path('api/v1/', include('orders.urls')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
]
