"""
Catalog service for the stock ledger service.
Read-only product queries.
"""
from typing import Iterable, List

from django.db.models import Q

from apps.core.exceptions import ProductNotFound, translate_database_errors
from apps.inventory.models import Product
from apps.inventory.records import ProductRecord


class CatalogService:
    """Service class for product catalog queries."""

    @staticmethod
    def list_products() -> List[ProductRecord]:
        """Return every product, ordered by name."""
        with translate_database_errors('list_products'):
            return [ProductRecord.from_model(p) for p in Product.objects.order_by('name', 'id')]

    @staticmethod
    def search_products(query: str) -> List[ProductRecord]:
        """
        Products whose name or code contains ``query``, ignoring case.

        Args:
            query: Text to look for; surrounding whitespace is stripped

        Returns:
            Matching products ordered by name
        """
        query = query.strip()
        with translate_database_errors('search_products'):
            products = Product.objects.filter(
                Q(name__icontains=query) | Q(code__icontains=query)
            ).order_by('name', 'id')
            return [ProductRecord.from_model(p) for p in products]

    @staticmethod
    def get_product(product_id: int) -> ProductRecord:
        """Return a product or raise ``ProductNotFound``."""
        with translate_database_errors('get_product'):
            try:
                return ProductRecord.from_model(Product.objects.get(pk=product_id))
            except Product.DoesNotExist:
                raise ProductNotFound(product_id)

    @staticmethod
    def filter_products(query: str, products: Iterable[ProductRecord]) -> List[ProductRecord]:
        """In-memory counterpart of ``search_products`` for an already loaded list."""
        needle = query.strip().casefold()
        return [
            p for p in products
            if needle in p.name.casefold() or needle in p.code.casefold()
        ]
