"""
Production settings for the stock ledger service.
"""
from .base import *

DEBUG = False

# Require environment variables for production
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable is required in production")

if not ALLOWED_HOSTS:
    raise ValueError("ALLOWED_HOSTS environment variable is required in production")

if not env('DATABASE_URL', default=''):
    raise ValueError("DATABASE_URL environment variable is required in production")

if not CLOUDINARY_CLOUD_NAME:
    raise ValueError("CLOUDINARY_CLOUD_NAME environment variable is required in production")

SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

SESSION_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = 'Strict'

CSRF_COOKIE_SECURE = True
CSRF_COOKIE_SAMESITE = 'Strict'

CORS_ALLOW_ALL_ORIGINS = False

REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {
    'anon': '50/hour',
    'user': '500/hour'
}

# Structured JSON logs for the log collector
LOGGING['handlers']['json_console'] = {
    'class': 'logging.StreamHandler',
    'formatter': 'json',
}
LOGGING['loggers']['django']['level'] = 'WARNING'
LOGGING['loggers']['django']['handlers'] = ['json_console']
LOGGING['loggers']['apps']['level'] = 'INFO'
LOGGING['loggers']['apps']['handlers'] = ['json_console']

CONN_MAX_AGE = 60

SESSION_ENGINE = 'django.contrib.sessions.backends.cache'
SESSION_CACHE_ALIAS = 'default'

CELERY_TASK_ALWAYS_EAGER = False
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_ACKS_LATE = True

CELERY_BEAT_SCHEDULE['check-stock-levels']['schedule'] = 6 * 3600.0

MIDDLEWARE.insert(0, 'django.middleware.security.SecurityMiddleware')
