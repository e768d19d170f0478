"""
Celery configuration for the stock ledger service.
The beat schedule lives in settings as ``CELERY_BEAT_SCHEDULE``.
"""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

app = Celery('stock_ledger')

app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()
