"""
Stock reconciliation for the stock ledger service.
Classifies products as having or lacking a stock record.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from apps.core.exceptions import ExternalServiceError
from apps.inventory.records import MovementRecord, ProductRecord
from apps.inventory.services.catalog_service import CatalogService
from apps.inventory.services.image_service import ImageUrlResolver
from apps.inventory.services.ledger_service import StockLedger


@dataclass(frozen=True)
class StockOverview:
    """Result of a reconciliation, ready for display."""
    without_stock: List[ProductRecord]
    with_stock: List[ProductRecord]
    latest_by_product: Dict[int, MovementRecord]
    image_urls: Dict[int, str] = field(default_factory=dict)

    def current_stock(self, product_id: int) -> Optional[int]:
        movement = self.latest_by_product.get(product_id)
        return movement.current_quantity if movement else None


class StockReconciliationService:
    """Builds stock overviews from the catalog and the ledger."""

    def __init__(self, image_resolver: Optional[ImageUrlResolver] = None):
        self.image_resolver = image_resolver or ImageUrlResolver()

    def reconcile(self, products: Sequence[ProductRecord]) -> StockOverview:
        """
        Partition ``products`` by whether the ledger holds a movement for them.

        One batched ledger query; the input order is kept in both lists.
        """
        latest = StockLedger.latest_movement_per_product(p.id for p in products)

        without_stock = []
        with_stock = []
        for product in products:
            if product.id in latest:
                with_stock.append(product)
            else:
                without_stock.append(product)

        return StockOverview(
            without_stock=without_stock,
            with_stock=with_stock,
            latest_by_product=latest,
            image_urls={p.id: self._image_url(p) for p in products},
        )

    def _image_url(self, product: ProductRecord) -> str:
        try:
            return self.image_resolver.resolve(product.photo)
        except ExternalServiceError:
            # Already logged by the resolver
            return self.image_resolver.fallback

    def overview(self) -> StockOverview:
        """Reconcile the whole catalog."""
        return self.reconcile(CatalogService.list_products())

    def search(
        self,
        query: Optional[str],
        products: Optional[Sequence[ProductRecord]] = None
    ) -> Optional[StockOverview]:
        """
        Reconcile the products whose name or code contains ``query``.

        Args:
            query: Search text; matching ignores case
            products: Products to filter in memory; the catalog is
                queried when omitted

        Returns:
            The overview of the matches, or None for a blank query, in
            which case the caller shows the unfiltered overview instead
        """
        if query is None or not query.strip():
            return None

        if products is None:
            matches = CatalogService.search_products(query)
        else:
            matches = CatalogService.filter_products(query, products)

        return self.reconcile(matches)
