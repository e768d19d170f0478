"""
Stock ledger service for the stock ledger service.
Answers "what is the latest movement for a product" and records movements.
"""
import logging
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import OuterRef, Subquery
from django.utils import timezone

from apps.core.exceptions import ProductNotFound, translate_database_errors
from apps.core.principal import Principal
from apps.inventory.models import MovementKind, Product, StockMovement
from apps.inventory.records import MovementRecord

logger = logging.getLogger(__name__)

# Newest first; equal timestamps resolve to the highest row id.
LATEST_FIRST = ('-moved_at', '-id')


class StockLedger:
    """
    Service class for the stock movement ledger.

    Mutations lock the product row before reading the ledger, so two
    requests touching the same product are serialized and a restock is
    always computed from the real latest movement.
    """

    @staticmethod
    def latest_movement(product_id: int) -> Optional[MovementRecord]:
        """
        Latest movement of a product.

        Args:
            product_id: Product to look up

        Returns:
            The movement with the greatest ``moved_at`` (highest id on
            ties), or None when the product has no movements
        """
        with translate_database_errors('latest_movement'):
            movement = StockMovement.objects.filter(
                product_id=product_id
            ).order_by(*LATEST_FIRST).first()
        return MovementRecord.from_model(movement) if movement else None

    @staticmethod
    def latest_movement_per_product(product_ids: Iterable[int]) -> Dict[int, MovementRecord]:
        """
        Batch form of ``latest_movement`` in a single query.

        Only products with at least one movement appear in the result.
        """
        product_ids = set(product_ids)
        if not product_ids:
            return {}

        latest_id = StockMovement.objects.filter(
            product_id=OuterRef('product_id')
        ).order_by(*LATEST_FIRST).values('pk')[:1]

        with translate_database_errors('latest_movement_per_product'):
            movements = list(StockMovement.objects.filter(
                product_id__in=product_ids,
                pk=Subquery(latest_id),
            ))

        return {m.product_id: MovementRecord.from_model(m) for m in movements}

    @staticmethod
    def append_restock(
        product_id: int,
        amount: int,
        performed_by: Principal
    ) -> Optional[MovementRecord]:
        """
        Append a restock movement on top of the latest one.

        A product without any movement is left untouched and None is
        returned: a restock needs thresholds to copy, which only an
        existing movement provides. Use ``set_stock`` to create the first
        record.

        Args:
            product_id: Product being restocked
            amount: Quantity added; any integer is accepted
            performed_by: Principal recorded on the movement

        Returns:
            The appended movement, or None when nothing was recorded
        """
        with translate_database_errors('append_restock'), transaction.atomic():
            StockLedger._lock_product(product_id)
            latest = StockMovement.objects.filter(
                product_id=product_id
            ).order_by(*LATEST_FIRST).first()

            if latest is None:
                logger.warning(
                    f"Restock ignored for product {product_id}: no stock record",
                    extra={
                        'product_id': product_id,
                        'amount': amount,
                        'user_id': performed_by.user_id,
                        'event_type': 'restock_without_stock'
                    }
                )
                return None

            movement = StockMovement.objects.create(
                product_id=product_id,
                initial_quantity=amount,
                current_quantity=latest.current_quantity + amount,
                minimum_stock=latest.minimum_stock,
                maximum_stock=latest.maximum_stock,
                kind=MovementKind.RESTOCK,
                moved_at=timezone.now(),
                performed_by_id=performed_by.user_id,
            )

        logger.info(
            f"Restocked product {product_id}: {latest.current_quantity} -> {movement.current_quantity}",
            extra={
                'product_id': product_id,
                'movement_id': movement.pk,
                'amount': amount,
                'balance_before': latest.current_quantity,
                'balance_after': movement.current_quantity,
                'user_id': performed_by.user_id,
                'event_type': 'stock_restocked'
            }
        )
        return MovementRecord.from_model(movement)

    @staticmethod
    def set_stock(product_id: int, quantity: int, performed_by: Principal) -> MovementRecord:
        """
        Set a product's stock directly.

        Creates the product's first movement (kind Initial, default
        thresholds) when it has none. Otherwise overwrites the initial and
        current quantity of its first recorded movement in place, keeping
        that movement's timestamp and kind. When restocks were appended
        after that first movement, the latest one still defines the
        current stock.

        Args:
            product_id: Product whose stock is set
            quantity: Absolute quantity; any integer is accepted
            performed_by: Principal recorded on a newly created movement

        Returns:
            The created or overwritten movement
        """
        with translate_database_errors('set_stock'), transaction.atomic():
            StockLedger._lock_product(product_id)
            movement = StockMovement.objects.filter(
                product_id=product_id
            ).order_by('id').first()

            if movement is None:
                ledger_settings = settings.STOCK_LEDGER
                movement = StockMovement.objects.create(
                    product_id=product_id,
                    initial_quantity=quantity,
                    current_quantity=quantity,
                    minimum_stock=ledger_settings['DEFAULT_MINIMUM_STOCK'],
                    maximum_stock=ledger_settings['DEFAULT_MAXIMUM_STOCK'],
                    kind=MovementKind.INITIAL,
                    moved_at=timezone.now(),
                    performed_by_id=performed_by.user_id,
                )
                action = 'stock_initialized'
                balance_before = None
            else:
                balance_before = movement.current_quantity
                movement.initial_quantity = quantity
                movement.current_quantity = quantity
                movement.save(update_fields=['initial_quantity', 'current_quantity', 'updated_at'])
                action = 'stock_overwritten'

        logger.info(
            f"Stock set for product {product_id}: {quantity}",
            extra={
                'product_id': product_id,
                'movement_id': movement.pk,
                'balance_before': balance_before,
                'balance_after': quantity,
                'user_id': performed_by.user_id,
                'event_type': action
            }
        )
        return MovementRecord.from_model(movement)

    @staticmethod
    def movement_history(product_id: int, limit: Optional[int] = None) -> List[MovementRecord]:
        """Movements of a product, newest first."""
        if limit is None:
            limit = settings.STOCK_LEDGER['MOVEMENT_HISTORY_LIMIT']
        with translate_database_errors('movement_history'):
            movements = StockMovement.objects.filter(
                product_id=product_id
            ).order_by(*LATEST_FIRST)[:limit]
            return [MovementRecord.from_model(m) for m in movements]

    @staticmethod
    def movement_count(product_id: int) -> int:
        with translate_database_errors('movement_count'):
            return StockMovement.objects.filter(product_id=product_id).count()

    @staticmethod
    def _lock_product(product_id: int) -> None:
        """Take the row lock that serializes mutations of one product."""
        locked = list(
            Product.objects.select_for_update().filter(pk=product_id).values_list('pk', flat=True)
        )
        if not locked:
            raise ProductNotFound(product_id)
