"""
Plain records returned by the inventory services.

Services hand these out instead of model instances so callers can never
trigger a lazy query by touching a relation.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from apps.inventory.models import Product, StockMovement


@dataclass(frozen=True)
class ProductRecord:
    id: int
    name: str
    code: str
    photo: str

    @classmethod
    def from_model(cls, product: Product) -> 'ProductRecord':
        return cls(
            id=product.pk,
            name=product.name,
            code=product.code,
            photo=product.photo or '',
        )


@dataclass(frozen=True)
class MovementRecord:
    id: int
    product_id: int
    initial_quantity: int
    current_quantity: int
    minimum_stock: int
    maximum_stock: int
    kind: str
    moved_at: datetime
    performed_by_id: Optional[int] = None

    @classmethod
    def from_model(cls, movement: StockMovement) -> 'MovementRecord':
        return cls(
            id=movement.pk,
            product_id=movement.product_id,
            initial_quantity=movement.initial_quantity,
            current_quantity=movement.current_quantity,
            minimum_stock=movement.minimum_stock,
            maximum_stock=movement.maximum_stock,
            kind=movement.kind,
            moved_at=movement.moved_at,
            performed_by_id=movement.performed_by_id,
        )

    @property
    def is_below_minimum(self) -> bool:
        return self.current_quantity <= self.minimum_stock

    @property
    def is_above_maximum(self) -> bool:
        return self.current_quantity >= self.maximum_stock
