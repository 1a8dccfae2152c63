"""Shipping API views.

Public endpoints used by the storefront cart: carrier quotes, CEP
validation and the deprecated flat-rate look-up.  Domain exceptions are
translated explicitly into HTTP responses.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.registry import get_services
from modules.shipping.dtos import ShippingItemDTO
from modules.shipping.exceptions import (
    CepNotFoundError,
    InvalidCepError,
    ShippingUnavailableError,
)


class ShippingBaseView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_scope = "shipping"

    @staticmethod
    def error_response(exc) -> Response:
        return Response(exc.to_dict(), status=exc.status_code)


class ShippingCalculateView(ShippingBaseView):
    def post(self, request: Request) -> Response:
        """POST /api/shipping/calculate"""
        data = request.data if isinstance(request.data, dict) else {}
        cep = data.get("cep")
        raw_items = data.get("items")
        if not cep or not isinstance(cep, str) or not isinstance(raw_items, list) or not raw_items:
            return Response(
                {"error": "cep and items are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            items = [ShippingItemDTO.model_validate(item) for item in raw_items]
        except PydanticValidationError as exc:
            return Response(
                {"error": "Invalid items", "details": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            options = get_services().shipping_service.calculate(cep, items)
        except (InvalidCepError, CepNotFoundError) as exc:
            return self.error_response(exc)
        except ShippingUnavailableError:
            return Response(
                {"error": "Failed to calculate shipping"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response([option.to_dict() for option in options])


class ValidateCepView(ShippingBaseView):
    def get(self, request: Request, cep: str) -> Response:
        """GET /api/shipping/validate-cep/{cep}"""
        try:
            address = get_services().shipping_service.validate_cep(cep)
        except (InvalidCepError, CepNotFoundError) as exc:
            return self.error_response(exc)
        except ShippingUnavailableError:
            return Response(
                {"error": "Failed to validate CEP"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"valid": True, "address": address.to_dict()})


class LegacyShippingView(ShippingBaseView):
    def get(self, request: Request) -> Response:
        """GET /api/shipping?cep=... (deprecated, flat zone price)"""
        try:
            cost = get_services().shipping_service.legacy_cost(request.query_params.get("cep", ""))
        except (InvalidCepError, CepNotFoundError) as exc:
            return self.error_response(exc)
        except ShippingUnavailableError:
            return Response(
                {"error": "Failed to calculate shipping"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"cost": int(cost)})
