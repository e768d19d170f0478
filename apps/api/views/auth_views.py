"""
Authentication API views for the stock ledger service.
Token issuing is delegated to djangorestframework-simplejwt.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.principal import Principal


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    """
    Get the principal the request is authenticated as.
    """
    principal = Principal.from_user(request.user)
    return Response({
        'id': principal.user_id,
        'username': principal.username,
        'email': request.user.email,
        'is_staff': request.user.is_staff,
    })
