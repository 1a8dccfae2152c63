"""Payment provider webhook receiver.

Mercado Pago posts payment status notifications here.  The payload is
logged and acknowledged with 200 unconditionally: no signature check and
no order status reconciliation happen yet.
"""

from __future__ import annotations

from typing import Any, Dict

import structlog
from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

logger = structlog.get_logger(__name__)


def _notification_fields(request: Request) -> Dict[str, Any]:
    try:
        payload = request.data
    except ParseError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    data = payload.get("data")
    resource_id = data.get("id") if isinstance(data, dict) else None
    return {
        "topic": payload.get("type") or request.query_params.get("topic"),
        "action": payload.get("action"),
        "resource_id": resource_id or request.query_params.get("id"),
    }


class MercadoPagoWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request: Request) -> Response:
        """POST /api/webhook/mercadopago (and legacy /api/mp-webhook)"""
        logger.info("payment.webhook_received", **_notification_fields(request))
        return Response(status=status.HTTP_200_OK)
