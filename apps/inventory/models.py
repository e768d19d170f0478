"""
Inventory models for the stock ledger service.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import TimestampedModel


class MovementKind(models.TextChoices):
    """Stock movement kinds. Values are the legacy column values."""
    INITIAL = 'Inicial', _('Initial')
    RESTOCK = 'Reabastecimiento', _('Restock')


class Product(TimestampedModel):
    """
    Catalog product. Read-only from the ledger's point of view.
    """
    name = models.CharField(
        max_length=200,
        verbose_name=_('Name')
    )

    code = models.CharField(
        max_length=50,
        verbose_name=_('Code'),
        help_text=_('Product code printed on the label')
    )

    photo = models.CharField(
        max_length=500,
        blank=True,
        default='',
        verbose_name=_('Photo'),
        help_text=_('Absolute image URL or Cloudinary public id')
    )

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        db_table = 'inventory_product'
        indexes = [
            models.Index(fields=['name'], name='product_name_idx'),
            models.Index(fields=['code'], name='product_code_idx'),
        ]
        ordering = ['name', 'id']

    def __str__(self):
        return f"{self.code} - {self.name}"


class StockMovement(TimestampedModel):
    """
    One entry of the stock ledger.

    The current stock of a product is the ``current_quantity`` of its
    movement with the latest ``moved_at``; the highest id wins on ties.
    Rows are appended, except that a direct stock set overwrites the
    quantities of the product's first movement.
    """
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name='stock_movements',
        verbose_name=_('Product')
    )

    initial_quantity = models.IntegerField(
        verbose_name=_('Initial quantity'),
        help_text=_('Quantity set or added by this movement')
    )

    current_quantity = models.IntegerField(
        verbose_name=_('Current quantity'),
        help_text=_('Stock on hand after this movement')
    )

    minimum_stock = models.IntegerField(
        verbose_name=_('Minimum stock')
    )

    maximum_stock = models.IntegerField(
        verbose_name=_('Maximum stock')
    )

    kind = models.CharField(
        max_length=20,
        choices=MovementKind.choices,
        blank=True,
        default='',
        verbose_name=_('Movement kind')
    )

    moved_at = models.DateTimeField(
        default=timezone.now,
        verbose_name=_('Movement timestamp')
    )

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stock_movements',
        verbose_name=_('Performed by')
    )

    class Meta:
        verbose_name = _('Stock Movement')
        verbose_name_plural = _('Stock Movements')
        db_table = 'inventory_stock_movement'
        indexes = [
            models.Index(fields=['product', '-moved_at', '-id'], name='movement_latest_idx'),
            models.Index(fields=['kind'], name='movement_kind_idx'),
        ]
        ordering = ['-moved_at', '-id']

    def __str__(self):
        return f"Product {self.product_id}: {self.current_quantity} ({self.kind or '-'})"
