# =============== MIDDLEWARE FOR REQUEST LOGGING ===============
import logging
import time

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """Log method, path, status, user and duration of every request"""
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000

        # DRF copies the JWT-authenticated user back onto the Django request
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            user_id = str(user.pk)
        else:
            user_id = 'anonymous'

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.path} {response.status_code} user={user_id} {elapsed_ms:.1f}ms",
        )
        return response
