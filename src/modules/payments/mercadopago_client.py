"""Mercado Pago adapter for ``PaymentProviderClient``.

Uses the official ``mercadopago`` SDK.  The SDK returns
``{"status": <http status>, "response": <body>}`` instead of raising on
HTTP errors, so non-2xx statuses are translated here.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import mercadopago
import requests
import structlog

from modules.payments.exceptions import PaymentProviderError
from modules.payments.port import PaymentPreference, PaymentProviderClient

logger = structlog.get_logger(__name__)


class MercadoPagoClient(PaymentProviderClient):
    def __init__(self, access_token: str) -> None:
        self._access_token = access_token
        self._sdk: Optional[mercadopago.SDK] = None

    @property
    def sdk(self) -> mercadopago.SDK:
        if self._sdk is None:
            if not self._access_token:
                raise PaymentProviderError("Payment provider is not configured")
            self._sdk = mercadopago.SDK(self._access_token)
        return self._sdk

    def create_preference(
        self,
        items: List[Dict[str, Any]],
        payer: Dict[str, Any],
        back_urls: Dict[str, str],
        notification_url: str,
        external_reference: Optional[str] = None,
    ) -> PaymentPreference:
        data: Dict[str, Any] = {
            "items": items,
            "payer": payer,
            "back_urls": back_urls,
            "auto_return": "approved",
            "notification_url": notification_url,
        }
        if external_reference:
            data["external_reference"] = external_reference

        log = logger.bind(external_reference=external_reference, item_count=len(items))
        try:
            result = self.sdk.preference().create(data)
        except requests.RequestException as exc:
            log.error("mercadopago.unreachable", error=str(exc))
            raise PaymentProviderError("Payment provider unreachable") from exc

        status = result.get("status")
        body = result.get("response") or {}
        if not isinstance(status, int) or not 200 <= status < 300:
            message = body.get("message") if isinstance(body, dict) else None
            log.error("mercadopago.rejected", provider_status=status, provider_message=message)
            raise PaymentProviderError(
                f"Payment provider rejected the preference: {message or 'unknown error'}",
                provider_status=status if isinstance(status, int) else None,
            )

        if not body.get("id") or not body.get("init_point"):
            log.error("mercadopago.malformed_response", provider_status=status)
            raise PaymentProviderError("Payment provider returned an incomplete preference")

        log.info("mercadopago.preference_created", preference_id=body["id"])
        return PaymentPreference(
            id=str(body["id"]),
            init_point=body["init_point"],
            sandbox_init_point=body.get("sandbox_init_point"),
        )
