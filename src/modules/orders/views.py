"""Checkout API view.

Exposes ``CheckoutService`` via HTTP.  Domain exceptions are caught and
translated into HTTP status codes; the view never swallows generic
exceptions.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.registry import get_services
from modules.orders.exceptions import (
    PersistenceError,
    ProductNotFoundError,
    ValidationError,
)
from modules.payments.exceptions import PaymentProviderError


class CheckoutView(APIView):
    """POST /api/create-payment

    Responds 200 once the order is persisted and the payment preference
    exists, even if some notification emails failed (see ``emailStatus``).
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_scope = "checkout"

    def post(self, request: Request) -> Response:
        service = get_services().checkout_service()
        try:
            result = service.checkout(request.data)
        except (ValidationError, ProductNotFoundError) as exc:
            return Response(exc.to_dict(), status=status.HTTP_400_BAD_REQUEST)
        except (PersistenceError, PaymentProviderError) as exc:
            return Response(exc.to_dict(), status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response(result.to_response(), status=status.HTTP_200_OK)
