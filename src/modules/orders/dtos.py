"""Checkout DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (the checkout view, after
``normalize_checkout_payload`` and ``OrderValidator``) and the Service
layer.  DTOs are immutable (``frozen=True``).

- ``CheckoutAddressDTO``: delivery address.
- ``CheckoutItemDTO``: a single cart line (client-submitted).
- ``ShippingSelectionDTO``: the shipping option the customer picked.
- ``NotificationOptionsDTO``: which emails to attempt.
- ``CheckoutDTO``: the whole canonical checkout request.
- ``CheckoutResultDTO``: the unified response of a successful checkout.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from modules.notifications.dtos import EmailStatusDTO
from modules.payments.port import PaymentPreference


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CheckoutAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    cep: str
    street: str
    number: str
    complement: str = ""
    neighborhood: str
    city: str
    state: str

    @field_validator("state")
    @classmethod
    def state_upper(cls, v: str) -> str:
        return v.strip().upper()


class CheckoutItemDTO(BaseModel):
    """Immutable DTO for one cart line.

    Only ``quantity`` and ``size`` are trusted downstream; ``price`` is kept
    to cross-check the client total against catalogue prices.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    quantity: int
    size: str
    price: Decimal


class ShippingSelectionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str = ""
    service: str = ""
    delivery_time: str = ""
    melhor_envio_id: Optional[str] = None


class NotificationOptionsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    send_to_admin: bool = True
    send_to_customer: bool = True


class CheckoutDTO(BaseModel):
    """Immutable DTO for a checkout request in canonical form."""

    model_config = ConfigDict(frozen=True)

    customer_name: str
    customer_email: str
    customer_cpf: str = ""
    address: CheckoutAddressDTO
    items: List[CheckoutItemDTO]
    shipping_cost: Decimal
    total_amount: Decimal
    shipping: Optional[ShippingSelectionDTO] = None
    notifications: NotificationOptionsDTO = NotificationOptionsDTO()

    @property
    def product_ids(self) -> List[int]:
        """Distinct product ids in first-appearance order."""
        return list(dict.fromkeys(item.id for item in self.items))


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class CheckoutResultDTO(BaseModel):
    """Result of a checkout that reached the payment provider."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    order_id: str
    preference: PaymentPreference
    email_status: EmailStatusDTO

    def to_response(self) -> Dict[str, Any]:
        return {
            "id": self.preference.id,
            "init_point": self.preference.init_point,
            "sandbox_init_point": self.preference.sandbox_init_point,
            "orderId": self.order_id,
            "emailStatus": self.email_status.to_dict(),
        }

