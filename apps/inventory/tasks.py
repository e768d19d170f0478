"""
Celery tasks for inventory monitoring.
"""
import logging

from celery import shared_task
from django.utils import timezone

from apps.core.exceptions import PersistenceError
from apps.inventory.services.stock_level_service import StockLevelService

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def check_stock_levels(self):
    """
    Periodic task logging products whose stock is outside their thresholds.
    """
    try:
        logger.info("Starting stock level check")
        report = StockLevelService.report()
    except PersistenceError as e:
        logger.error(
            f"Stock level check failed: {e}",
            extra={
                'task_id': self.request.id,
                'error': str(e),
                'event_type': 'stock_level_check_failed'
            },
            exc_info=True
        )
        raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))

    for product, movement in report.below_minimum:
        logger.warning(
            f"Product {product.code} below minimum: {movement.current_quantity} <= {movement.minimum_stock}",
            extra={
                'product_id': product.id,
                'current_quantity': movement.current_quantity,
                'minimum_stock': movement.minimum_stock,
                'event_type': 'stock_below_minimum'
            }
        )

    logger.info(
        f"Stock level check completed. {len(report.below_minimum)} below minimum, "
        f"{len(report.above_maximum)} above maximum",
        extra={
            'task_id': self.request.id,
            'below_minimum': len(report.below_minimum),
            'above_maximum': len(report.above_maximum),
            'without_stock': len(report.without_stock),
            'event_type': 'stock_level_check_completed'
        }
    )

    return {
        'status': 'success',
        'below_minimum': [product.id for product, _movement in report.below_minimum],
        'above_maximum': [product.id for product, _movement in report.above_maximum],
        'without_stock': [product.id for product in report.without_stock],
        'timestamp': timezone.now().isoformat()
    }
