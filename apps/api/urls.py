"""
API URLs for the stock ledger service.
"""
from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from apps.api.views import auth_views, stock_views
from apps.core.views import health_check

app_name = 'api'

auth_urlpatterns = [
    path('login/', TokenObtainPairView.as_view(), name='login'),
    path('refresh/', TokenRefreshView.as_view(), name='refresh_token'),
    path('me/', auth_views.me, name='me'),
]

stock_urlpatterns = [
    path('', stock_views.stock_overview, name='stock_overview'),
    path('search/', stock_views.stock_search, name='stock_search'),
    path('restock/', stock_views.restock, name='restock'),
    path('set/', stock_views.set_stock, name='set_stock'),
    path('<int:product_id>/movements/', stock_views.movement_history, name='movement_history'),
]

urlpatterns = [
    path('health/', health_check, name='health'),
    path('auth/', include(auth_urlpatterns)),
    path('stock/', include(stock_urlpatterns)),
]
