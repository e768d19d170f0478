from django.urls import path

from apps.core.views import health_check, liveness_check

urlpatterns = [
    path('', health_check, name='health'),
    path('live/', liveness_check, name='liveness'),
]
