"""
Stock API views for the stock ledger service.
"""
import logging

from django.contrib import messages
from django.shortcuts import redirect
from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.api.serializers import (
    MovementHistoryQuerySerializer, MovementSerializer, StockQuantitySerializer,
    StockSearchSerializer, serialize_overview
)
from apps.core.exceptions import NotFound, PersistenceError
from apps.core.principal import Principal
from apps.inventory.services.catalog_service import CatalogService
from apps.inventory.services.ledger_service import StockLedger
from apps.inventory.services.reconciliation_service import StockReconciliationService

logger = logging.getLogger(__name__)


def _read_failure(error):
    return Response({'error': str(error)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_overview(request):
    """
    Products split into those with and without a stock record.
    """
    try:
        overview = StockReconciliationService().overview()
    except PersistenceError as e:
        return _read_failure(e)

    return Response(serialize_overview(overview))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_search(request):
    """
    Same as the overview, restricted to products whose name or code
    contains ``query``. A blank query redirects to the overview.
    """
    serializer = StockSearchSerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        overview = StockReconciliationService().search(serializer.validated_data['query'])
    except PersistenceError as e:
        return _read_failure(e)

    if overview is None:
        return redirect('api:stock_overview')

    return Response(serialize_overview(overview))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def restock(request):
    """
    Add ``nuevoStock`` units on top of the product's latest movement.
    Redirects to the overview; only an appended movement is confirmed.
    """
    serializer = StockQuantitySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        movement = StockLedger.append_restock(
            product_id=data['product_id'],
            amount=data['quantity'],
            performed_by=Principal.from_user(request.user)
        )
    except NotFound as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except PersistenceError as e:
        logger.error(f"Restock of product {data['product_id']} failed: {e}", exc_info=True)
        return redirect('api:stock_overview')

    if movement is None:
        messages.warning(
            request._request,
            _("Product has no stock record yet. Set its stock first.")
        )
    else:
        messages.success(request._request, _("Stock updated successfully."))

    return redirect('api:stock_overview')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def set_stock(request):
    """
    Set the product's stock to ``nuevoStock``, creating its first
    movement when needed. Redirects to the overview.
    """
    serializer = StockQuantitySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        StockLedger.set_stock(
            product_id=data['product_id'],
            quantity=data['quantity'],
            performed_by=Principal.from_user(request.user)
        )
    except NotFound as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except PersistenceError as e:
        logger.error(f"Stock set of product {data['product_id']} failed: {e}", exc_info=True)
        return redirect('api:stock_overview')

    messages.success(request._request, _("Stock updated successfully."))
    return redirect('api:stock_overview')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def movement_history(request, product_id):
    """
    Ledger movements of one product, newest first.
    """
    query = MovementHistoryQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        product = CatalogService.get_product(product_id)
        movements = StockLedger.movement_history(
            product.id, limit=query.validated_data.get('limit')
        )
    except NotFound as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except PersistenceError as e:
        return _read_failure(e)

    return Response({
        'product': {'id': product.id, 'name': product.name, 'code': product.code},
        'movements': MovementSerializer(movements, many=True).data,
    })
