from rest_framework import permissions

from .models import CustomUser


# Permission constants
class Permissions:
    # Ordering
    PLACE_ORDERS = 'place_orders'
    MANAGE_CART = 'manage_cart'
    CANCEL_OWN_ORDERS = 'cancel_own_orders'

    # Counter
    VIEW_ORDERS = 'view_orders'
    UPDATE_ORDER_STATUS = 'update_order_status'

    # Inventory
    VIEW_INVENTORY = 'view_inventory'
    MANAGE_INVENTORY = 'manage_inventory'


# Default permissions for each role
ROLE_PERMISSIONS = {
    CustomUser.ROLE_ADMIN: ['all'],
    CustomUser.ROLE_STAFF: [
        Permissions.PLACE_ORDERS, Permissions.MANAGE_CART, Permissions.CANCEL_OWN_ORDERS,
        Permissions.VIEW_ORDERS, Permissions.UPDATE_ORDER_STATUS,
        Permissions.VIEW_INVENTORY, Permissions.MANAGE_INVENTORY,
    ],
    CustomUser.ROLE_STUDENT: [
        Permissions.PLACE_ORDERS, Permissions.MANAGE_CART, Permissions.CANCEL_OWN_ORDERS,
    ],
}


def role_has_permission(role, permission):
    granted = ROLE_PERMISSIONS.get(role, [])
    return 'all' in granted or permission in granted


class HasRolePermission(permissions.BasePermission):
    """
    Check the user's role grants the view's `required_permission`
    """
    message = 'Your role does not allow this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        required = getattr(view, 'required_permission', None)
        if required is None:
            return True

        return role_has_permission(request.user.role, required)


class IsAdminOrStaff(permissions.BasePermission):
    """
    Permission to only allow canteen staff and admins
    """
    message = 'Staff or admin role required.'

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.is_canteen_staff
        )


class IsOrderOwner(permissions.BasePermission):
    """
    Object permission: the order belongs to the requesting user
    """
    message = 'Forbidden'

    def has_object_permission(self, request, view, obj):
        return obj.user_id == request.user.pk
