from rest_framework import status
from rest_framework.exceptions import APIException

from authentication.exceptions import BusinessRuleError


class EmptyCart(BusinessRuleError):
    default_detail = 'Cart is empty'
    default_code = 'empty_cart'


class OrderNotCancellable(BusinessRuleError):
    default_detail = 'Order cannot be cancelled at this stage'
    default_code = 'order_not_cancellable'


class CancellationWindowExpired(BusinessRuleError):
    default_detail = 'Cancellation window expired'
    default_code = 'cancellation_window_expired'


class InvalidStatusTransition(BusinessRuleError):
    default_detail = 'Invalid order status'
    default_code = 'invalid_status_transition'


class OrderPersistenceError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Failed to place order'
    default_code = 'order_persistence_failed'
