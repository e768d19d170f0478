"""
Request logging middleware for the stock ledger service.
"""
import logging
import time
import uuid

from django.http import HttpRequest, HttpResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


def get_client_ip(request: HttpRequest) -> str:
    """Extract client IP address, honouring the first X-Forwarded-For hop."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')


class RequestLoggingMiddleware(MiddlewareMixin):
    """
    Structured logging of every request with a correlation id.

    The user is logged on completion only: DRF authenticates bearer
    tokens inside the view and then sets ``user`` on the Django request.
    """

    def process_request(self, request: HttpRequest) -> None:
        request._start_time = time.time()
        request.request_id = request.META.get('HTTP_X_REQUEST_ID') or str(uuid.uuid4())

        logger.info("Request started", extra={
            'request_id': request.request_id,
            'method': request.method,
            'path': request.path,
            'ip_address': get_client_ip(request),
            'user_agent': request.META.get('HTTP_USER_AGENT', '')[:200],
            'event_type': 'request_start'
        })

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        if hasattr(request, '_start_time'):
            duration = time.time() - request._start_time

            logger.info("Request completed", extra={
                'request_id': getattr(request, 'request_id', ''),
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': round(duration * 1000, 2),
                'user_id': self._user_id(request),
                'event_type': 'request_end'
            })
            response['X-Request-ID'] = getattr(request, 'request_id', '')

        return response

    @staticmethod
    def _user_id(request: HttpRequest):
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            return user.pk
        return None
