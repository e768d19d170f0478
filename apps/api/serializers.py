"""
Serializers for the stock ledger API.
"""
from rest_framework import serializers


class MovementSerializer(serializers.Serializer):
    """Serializer for ``MovementRecord``."""
    id = serializers.IntegerField(read_only=True)
    product_id = serializers.IntegerField(read_only=True)
    initial_quantity = serializers.IntegerField(read_only=True)
    current_quantity = serializers.IntegerField(read_only=True)
    minimum_stock = serializers.IntegerField(read_only=True)
    maximum_stock = serializers.IntegerField(read_only=True)
    kind = serializers.CharField(read_only=True)
    moved_at = serializers.DateTimeField(read_only=True)
    performed_by_id = serializers.IntegerField(read_only=True, allow_null=True)
    is_below_minimum = serializers.BooleanField(read_only=True)
    is_above_maximum = serializers.BooleanField(read_only=True)


class ProductStockSerializer(serializers.Serializer):
    """
    A product as shown in the stock overview.
    Expects ``overview`` in the context to resolve image and stock.
    """
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    code = serializers.CharField(read_only=True)
    image_url = serializers.SerializerMethodField()
    stock = serializers.SerializerMethodField()

    def get_image_url(self, product):
        return self.context['overview'].image_urls.get(product.id)

    def get_stock(self, product):
        movement = self.context['overview'].latest_by_product.get(product.id)
        return MovementSerializer(movement).data if movement else None


def serialize_overview(overview) -> dict:
    """Render a ``StockOverview`` as the overview payload."""
    context = {'overview': overview}
    return {
        'products_without_stock': ProductStockSerializer(
            overview.without_stock, many=True, context=context
        ).data,
        'products_with_stock': ProductStockSerializer(
            overview.with_stock, many=True, context=context
        ).data,
        'stock_by_product': {
            str(product_id): MovementSerializer(movement).data
            for product_id, movement in overview.latest_by_product.items()
        },
    }


INTEGER_COLUMN_MIN = -2 ** 31
INTEGER_COLUMN_MAX = 2 ** 31 - 1


class StockQuantitySerializer(serializers.Serializer):
    """
    Form fields posted by the restock and set stock endpoints.
    Bounds match the integer columns of the ledger.
    """
    id = serializers.IntegerField(source='product_id', min_value=1, max_value=INTEGER_COLUMN_MAX)
    nuevoStock = serializers.IntegerField(
        source='quantity',
        min_value=INTEGER_COLUMN_MIN,
        max_value=INTEGER_COLUMN_MAX
    )


class StockSearchSerializer(serializers.Serializer):
    query = serializers.CharField(required=False, allow_blank=True, default='', trim_whitespace=False)


class MovementHistoryQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=1000)
