"""
Admin registration for the product catalog and the stock ledger.
"""
from django.contrib import admin

from apps.inventory.models import Product, StockMovement


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'photo', 'updated_at']
    search_fields = ['name', 'code']


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    """Ledger rows are read-only here; mutations go through the API."""
    list_display = ['product', 'kind', 'initial_quantity', 'current_quantity',
                    'minimum_stock', 'maximum_stock', 'moved_at', 'performed_by']
    list_filter = ['kind']
    search_fields = ['product__name', 'product__code']
    list_select_related = ['product', 'performed_by']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
