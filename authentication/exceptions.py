# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework.exceptions import APIException
from rest_framework import status
from django.core.exceptions import ValidationError
from django.db import IntegrityError
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


class BusinessRuleError(APIException):
    """
    A request that was well formed but breaks a canteen rule
    (empty cart, not enough stock, cancellation too late, ...).
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request violates a business rule.'
    default_code = 'business_rule'

    def __init__(self, detail=None, code=None, **context):
        super().__init__(detail=detail, code=code)
        self.context = context


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


STATUS_MESSAGES = {
    400: 'Validation error',
    401: 'Authentication required',
    403: 'Permission denied',
    404: 'Resource not found',
    405: 'Method not allowed',
    409: 'Conflict',
    500: 'Internal server error',
}


def _error_body(message, code, details, status_code):
    return {
        'error': True,
        'message': message,
        'code': code,
        'details': details,
        'status_code': status_code,
    }


def custom_exception_handler(exc, context):
    """
    Custom exception handler for the canteen API
    """
    view = context.get('view')
    view_name = view.__class__.__name__ if view is not None else 'unknown'

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, BusinessRuleError):
            logger.warning(f"Business rule rejected in {view_name}: {exc.detail} {exc.context}")
            response.data = _error_body(
                str(exc.detail), exc.detail.code, exc.context, response.status_code
            )
            return response

        if isinstance(exc, APIException):
            codes = exc.get_codes()
            code = codes if isinstance(codes, str) else exc.default_code
        else:
            # Http404 / PermissionDenied from django are converted by DRF
            code = 'not_found' if response.status_code == 404 else 'permission_denied'

        if response.status_code >= 500:
            logger.error(f"Server error in {view_name}: {exc}")

        message = STATUS_MESSAGES.get(response.status_code, 'An error occurred')
        if isinstance(exc, APIException) and isinstance(exc.detail, str) and response.status_code != 400:
            message = str(exc.detail)

        response.data = _error_body(message, code, response.data, response.status_code)

    # Handle Django ValidationError
    elif isinstance(exc, ValidationError):
        logger.error(f"Validation Error in {view_name}: {exc}")
        response = Response(
            _error_body('Validation error', 'invalid', {'non_field_errors': exc.messages}, 400),
            status=status.HTTP_400_BAD_REQUEST,
        )

    # Handle Django IntegrityError
    elif isinstance(exc, IntegrityError):
        logger.error(f"Integrity Error in {view_name}: {exc}")
        response = Response(
            _error_body(
                'Database integrity error',
                'conflict',
                {'error': 'This operation violates database constraints'},
                409,
            ),
            status=status.HTTP_409_CONFLICT,
        )

    # Handle unexpected errors
    else:
        logger.exception(f"Unexpected Error in {view_name}: {exc}")
        response = Response(
            _error_body(
                'An unexpected error occurred',
                'error',
                {'error': str(exc)} if settings.DEBUG else {},
                500,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return response
