"""
Stock level monitoring against movement thresholds.
"""
from dataclasses import dataclass, field
from typing import List, Tuple

from apps.inventory.records import MovementRecord, ProductRecord
from apps.inventory.services.catalog_service import CatalogService
from apps.inventory.services.ledger_service import StockLedger


@dataclass
class StockLevelReport:
    below_minimum: List[Tuple[ProductRecord, MovementRecord]] = field(default_factory=list)
    above_maximum: List[Tuple[ProductRecord, MovementRecord]] = field(default_factory=list)
    without_stock: List[ProductRecord] = field(default_factory=list)


class StockLevelService:
    """Service class for stock threshold checks."""

    @staticmethod
    def report() -> StockLevelReport:
        """
        Compare every product's current stock with the thresholds of its
        latest movement. Products without movements are listed apart.
        """
        products = CatalogService.list_products()
        latest = StockLedger.latest_movement_per_product(p.id for p in products)

        report = StockLevelReport()
        for product in products:
            movement = latest.get(product.id)
            if movement is None:
                report.without_stock.append(product)
            elif movement.is_below_minimum:
                report.below_minimum.append((product, movement))
            elif movement.is_above_maximum:
                report.above_maximum.append((product, movement))

        return report
