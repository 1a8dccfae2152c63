"""Payment domain exceptions."""

from __future__ import annotations

from typing import Optional

from modules.core.exceptions import CheckoutError


class PaymentProviderError(CheckoutError):
    """The payment provider could not create a preference.

    Raised after the order has already been committed; ``order_id`` (when
    known) lets the client and support staff find the stranded order.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        order_id: Optional[str] = None,
        provider_status: Optional[int] = None,
    ) -> None:
        details = {}
        if order_id is not None:
            details["orderId"] = order_id
        if provider_status is not None:
            details["providerStatus"] = provider_status
        super().__init__(message, details)
        self.order_id = order_id
        self.provider_status = provider_status
