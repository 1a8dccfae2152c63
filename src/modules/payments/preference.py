"""Payment Preference Builder.

Maps a persisted order into the payment provider's preference format.
Every product line uses the catalogue name and the price snapshot stored
on the order item; the shipping cost travels as its own synthetic line
(id ``"shipping"``) so the provider's total matches the order total.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List

import structlog

from modules.orders.constants import CURRENCY

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem
    from modules.payments.port import PaymentPreference, PaymentProviderClient

logger = structlog.get_logger(__name__)

SHIPPING_ITEM_ID = "shipping"
WEBHOOK_PATH = "/api/webhook/mercadopago"


class PaymentPreferenceBuilder:
    def __init__(
        self,
        client: PaymentProviderClient,
        frontend_url: str,
        backend_url: str,
    ) -> None:
        self._client = client
        self._frontend_url = frontend_url.rstrip("/")
        self._backend_url = backend_url.rstrip("/")

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def picture_url(self, image: str) -> str:
        if not image or image.startswith(("http://", "https://")):
            return image
        return f"{self._backend_url}/images/{image.lstrip('/')}"

    def item_line(self, item: OrderItem) -> Dict[str, Any]:
        product = item.product
        line: Dict[str, Any] = {
            "id": str(product.id),
            "title": product.name,
            "description": f"Tamanho: {item.size}",
            "quantity": item.quantity,
            "unit_price": float(item.unit_price),
            "currency_id": CURRENCY,
        }
        picture = self.picture_url(product.image_url)
        if picture:
            line["picture_url"] = picture
        if product.category:
            line["category_id"] = product.category
        return line

    def shipping_line(self, order: Order) -> Dict[str, Any]:
        title = f"Frete - {order.shipping_method}" if order.shipping_method else "Frete"
        return {
            "id": SHIPPING_ITEM_ID,
            "title": title,
            "quantity": 1,
            "unit_price": float(order.shipping_cost),
            "currency_id": CURRENCY,
        }

    def payer(self, order: Order) -> Dict[str, Any]:
        payer: Dict[str, Any] = {
            "name": order.customer_name,
            "email": order.customer_email,
            "address": {
                "zip_code": order.address_cep,
                "street_name": order.address_street,
                "street_number": str(order.address_number),
            },
        }
        if order.customer_cpf:
            payer["identification"] = {"type": "CPF", "number": order.customer_cpf}
        return payer

    def back_urls(self) -> Dict[str, str]:
        return {
            "success": f"{self._frontend_url}/success",
            "failure": f"{self._frontend_url}/failure",
            "pending": f"{self._frontend_url}/pending",
        }

    def build(self, order: Order) -> Dict[str, Any]:
        """Return the keyword arguments for ``create_preference``."""
        items: List[Dict[str, Any]] = [self.item_line(item) for item in order.items.all()]
        if order.shipping_cost > Decimal("0"):
            items.append(self.shipping_line(order))
        return {
            "items": items,
            "payer": self.payer(order),
            "back_urls": self.back_urls(),
            "notification_url": f"{self._backend_url}{WEBHOOK_PATH}",
            "external_reference": str(order.id),
        }

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def create(self, order: Order) -> PaymentPreference:
        """Build the request for ``order`` and submit it to the provider.

        Raises:
            PaymentProviderError: propagated from the client.
        """
        request = self.build(order)
        logger.debug(
            "payment.preference_requested",
            order_id=str(order.id),
            line_count=len(request["items"]),
        )
        return self._client.create_preference(**request)
