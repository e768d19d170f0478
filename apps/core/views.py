"""
Health endpoints for the stock ledger service.
"""
import cloudinary
from django.core.cache import cache
from django.db import connection
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_http_methods

from apps import __version__


@never_cache
@require_http_methods(["GET"])
def health_check(request):
    """
    Report database, cache and image host status.
    Returns 503 when the database or the cache is unusable.
    """
    status = {
        'status': 'healthy',
        'version': __version__,
        'timestamp': timezone.now().isoformat(),
        'checks': {}
    }

    overall_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        status['checks']['database'] = {'status': 'healthy'}
    except Exception as e:
        status['checks']['database'] = {'status': 'unhealthy', 'error': str(e)}
        overall_healthy = False

    try:
        cache.set('health_check', 'ok', 10)
        cache.get('health_check')
        status['checks']['cache'] = {'status': 'healthy'}
    except Exception as e:
        status['checks']['cache'] = {'status': 'unhealthy', 'error': str(e)}
        overall_healthy = False

    # Without a cloud name photos stored as public ids show the fallback image
    status['checks']['image_host'] = {
        'status': 'configured' if cloudinary.config().cloud_name else 'unconfigured'
    }

    if not overall_healthy:
        status['status'] = 'unhealthy'

    return JsonResponse(status, status=200 if overall_healthy else 503)


@never_cache
@require_http_methods(["GET"])
def liveness_check(request):
    """Return 200 while the process is able to serve requests."""
    return HttpResponse("Alive", content_type="text/plain")
