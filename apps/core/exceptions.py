"""
Exception taxonomy for the stock ledger service.
"""
from contextlib import contextmanager

from django.db import DatabaseError


class StockLedgerError(Exception):
    """Base exception for stock ledger errors."""
    pass


class NotFound(StockLedgerError):
    """A referenced entity does not exist."""
    pass


class ProductNotFound(NotFound):
    """The referenced product is absent from the catalog."""

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ValidationError(StockLedgerError):
    """Malformed input that got past the serializers."""
    pass


class PersistenceError(StockLedgerError):
    """The backing store is unreachable or rejected a write."""
    pass


class ExternalServiceError(StockLedgerError):
    """The image host failed to build a URL."""
    pass


@contextmanager
def translate_database_errors(operation: str):
    """Re-raise any ``DatabaseError`` raised inside the block as ``PersistenceError``."""
    try:
        yield
    except DatabaseError as exc:
        raise PersistenceError(f"{operation} failed: {exc}") from exc
