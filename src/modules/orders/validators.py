"""Order Validator.

Checks the shape of a canonical checkout payload (see
``modules.orders.adapters``) and turns it into a ``CheckoutDTO``.

Validation is fail-fast: the first violation raises ``ValidationError``
naming the field (and the cart index for item errors) and nothing else is
checked.  Fields are checked in this order: customer name, customer email,
items, customer CPF, address, shipping cost, total amount, shipping
selection, notification options.

Numbers must be real JSON numbers (``true``/``false`` are rejected).  Money
values, quantities and text lengths are bounded by the columns they are
stored in, so a payload that passes here can always be persisted.  The
customer name ends up in an email subject and may not contain control
characters.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from validate_docbr import CPF

from modules.orders.constants import (
    ADDRESS_MAX_LENGTHS,
    CEP_LENGTH,
    CPF_LENGTH,
    CUSTOMER_EMAIL_MAX_LENGTH,
    CUSTOMER_NAME_MAX_LENGTH,
    MAX_MONEY,
    MAX_QUANTITY,
    MAX_SIZE_LENGTH,
    SHIPPING_MAX_LENGTHS,
)
from modules.orders.dtos import (
    CheckoutAddressDTO,
    CheckoutDTO,
    CheckoutItemDTO,
    NotificationOptionsDTO,
    ShippingSelectionDTO,
)
from modules.orders.exceptions import ValidationError

logger = structlog.get_logger(__name__)

_EMAIL = TypeAdapter(EmailStr)

REQUIRED_ADDRESS_FIELDS = ("cep", "street", "number", "neighborhood", "city", "state")
CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")


def only_digits(value: str) -> str:
    return re.sub(r"\D", "", value)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, Decimal)):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _to_decimal(value: Any) -> Decimal:
    # str() first so 159.9 stays 159.9 rather than its binary expansion.
    return Decimal(str(value))


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class OrderValidator:
    """Stateless validator for checkout payloads."""

    cpf_validator = CPF()

    def validate(self, payload: Any) -> CheckoutDTO:
        """Validate ``payload`` and return the canonical ``CheckoutDTO``.

        Raises:
            ValidationError: on the first violation found.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object", field="body")

        name = payload.get("customerName")
        if not _non_empty_str(name):
            raise ValidationError("customerName is required", field="customerName")
        name = name.strip()
        if CONTROL_CHARACTERS.search(name):
            raise ValidationError(
                "customerName must not contain control characters", field="customerName"
            )
        if len(name) > CUSTOMER_NAME_MAX_LENGTH:
            raise ValidationError("customerName is too long", field="customerName")

        email = payload.get("customerEmail")
        if not _non_empty_str(email):
            raise ValidationError("customerEmail is required", field="customerEmail")
        if len(email.strip()) > CUSTOMER_EMAIL_MAX_LENGTH:
            raise ValidationError("customerEmail is too long", field="customerEmail")
        try:
            email = _EMAIL.validate_python(email.strip())
        except PydanticValidationError:
            raise ValidationError(
                "customerEmail is not a valid email address", field="customerEmail"
            ) from None

        items = self._validate_items(payload.get("items"))
        cpf = self._validate_cpf(payload.get("customerCPF"))
        address = self._validate_address(payload.get("address"))

        shipping_cost = payload.get("shippingCost")
        if not _is_number(shipping_cost):
            raise ValidationError("shippingCost must be a number", field="shippingCost")
        if shipping_cost < 0:
            raise ValidationError("shippingCost cannot be negative", field="shippingCost")
        if _to_decimal(shipping_cost) > MAX_MONEY:
            raise ValidationError("shippingCost is too large", field="shippingCost")

        total_amount = payload.get("totalAmount")
        if not _is_number(total_amount):
            raise ValidationError("totalAmount must be a number", field="totalAmount")
        if _to_decimal(total_amount) > MAX_MONEY:
            raise ValidationError("totalAmount is too large", field="totalAmount")
        items_total = sum((item.price * item.quantity for item in items), Decimal("0"))
        if items_total + _to_decimal(shipping_cost) > MAX_MONEY:
            raise ValidationError(
                "Order total exceeds the maximum amount", field="totalAmount"
            )

        dto = CheckoutDTO(
            customer_name=name,
            customer_email=email,
            customer_cpf=cpf,
            address=address,
            items=items,
            shipping_cost=_to_decimal(shipping_cost),
            total_amount=_to_decimal(total_amount),
            shipping=self._validate_shipping(payload.get("shipping")),
            notifications=self._validate_notifications(payload.get("notifications")),
        )
        logger.debug("checkout.payload_valid", item_count=len(items))
        return dto

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _validate_items(self, items: Any) -> List[CheckoutItemDTO]:
        if not isinstance(items, list) or not items:
            raise ValidationError("items must be a non-empty list", field="items")

        result = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValidationError("Item must be an object", field="items", index=index)

            product_id = item.get("id")
            if isinstance(product_id, str) and product_id.strip().isdigit():
                product_id = int(product_id.strip())
            if not _is_number(product_id) or product_id != int(product_id) or product_id <= 0:
                raise ValidationError(
                    "Item id must be a positive integer", field="items.id", index=index
                )

            quantity = item.get("quantity")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValidationError(
                    "Item quantity must be a positive integer",
                    field="items.quantity",
                    index=index,
                )
            if quantity > MAX_QUANTITY:
                raise ValidationError(
                    "Item quantity is too large", field="items.quantity", index=index
                )

            size = item.get("size")
            if isinstance(size, int) and not isinstance(size, bool):
                size = str(size)
            if not _non_empty_str(size):
                raise ValidationError("Item size is required", field="items.size", index=index)
            if len(size.strip()) > MAX_SIZE_LENGTH:
                raise ValidationError("Item size is too long", field="items.size", index=index)

            price = item.get("price")
            if not _is_number(price) or price <= 0:
                raise ValidationError(
                    "Item price must be a positive number", field="items.price", index=index
                )
            price = _to_decimal(price)
            if price > MAX_MONEY:
                raise ValidationError("Item price is too large", field="items.price", index=index)
            if price * quantity > MAX_MONEY:
                raise ValidationError(
                    "Item subtotal exceeds the maximum amount",
                    field="items.quantity",
                    index=index,
                )

            result.append(
                CheckoutItemDTO(
                    id=int(product_id),
                    quantity=quantity,
                    size=size.strip(),
                    price=price,
                )
            )
        return result

    def _validate_cpf(self, value: Any) -> str:
        if value is None or value == "":
            return ""
        if not isinstance(value, str):
            raise ValidationError("customerCPF must be a string", field="customerCPF")
        digits = only_digits(value)
        if len(digits) != CPF_LENGTH or not self.cpf_validator.validate(digits):
            raise ValidationError("customerCPF is not a valid CPF", field="customerCPF")
        return digits

    def _validate_address(self, address: Any) -> CheckoutAddressDTO:
        if not isinstance(address, dict):
            raise ValidationError("address is required", field="address")

        values: Dict[str, str] = {}
        for key in REQUIRED_ADDRESS_FIELDS:
            value = address.get(key)
            if isinstance(value, int) and not isinstance(value, bool):
                value = str(value)
            if not _non_empty_str(value):
                raise ValidationError(f"address.{key} is required", field=f"address.{key}")
            values[key] = value.strip()
            if key in ADDRESS_MAX_LENGTHS:
                self._bounded(values[key], f"address.{key}", ADDRESS_MAX_LENGTHS[key])

        cep = only_digits(values["cep"])
        if len(cep) != CEP_LENGTH:
            raise ValidationError("address.cep must have 8 digits", field="address.cep")
        values["cep"] = cep

        complement = address.get("complement") or ""
        if not isinstance(complement, str):
            raise ValidationError("address.complement must be a string", field="address.complement")
        complement = self._bounded(
            complement.strip(), "address.complement", ADDRESS_MAX_LENGTHS["complement"]
        )
        return CheckoutAddressDTO(complement=complement, **values)

    def _validate_shipping(self, shipping: Any) -> Optional[ShippingSelectionDTO]:
        if shipping is None:
            return None
        if not isinstance(shipping, dict):
            raise ValidationError("shipping must be an object", field="shipping")

        values = {}
        for key, attr in (
            ("method", "method"),
            ("service", "service"),
            ("deliveryTime", "delivery_time"),
        ):
            value = shipping.get(key)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (str, int)):
                raise ValidationError(f"shipping.{key} must be a string", field=f"shipping.{key}")
            values[attr] = self._bounded(str(value), f"shipping.{key}", SHIPPING_MAX_LENGTHS[key])

        melhor_envio_id = shipping.get("melhorEnvioId")
        if melhor_envio_id is not None:
            if isinstance(melhor_envio_id, bool) or not isinstance(melhor_envio_id, (str, int)):
                raise ValidationError(
                    "shipping.melhorEnvioId must be a string or integer",
                    field="shipping.melhorEnvioId",
                )
            values["melhor_envio_id"] = self._bounded(
                str(melhor_envio_id), "shipping.melhorEnvioId", SHIPPING_MAX_LENGTHS["melhorEnvioId"]
            )
        return ShippingSelectionDTO(**values)

    @staticmethod
    def _bounded(value: str, field: str, max_length: int) -> str:
        if len(value) > max_length:
            raise ValidationError(f"{field} is too long", field=field)
        return value

    def _validate_notifications(self, options: Any) -> NotificationOptionsDTO:
        if options is None:
            return NotificationOptionsDTO()
        if not isinstance(options, dict):
            raise ValidationError("notifications must be an object", field="notifications")

        values = {}
        for key, attr in (("sendToAdmin", "send_to_admin"), ("sendToCustomer", "send_to_customer")):
            value = options.get(key)
            if value is None:
                continue
            if not isinstance(value, bool):
                raise ValidationError(
                    f"notifications.{key} must be a boolean", field=f"notifications.{key}"
                )
            values[attr] = value
        return NotificationOptionsDTO(**values)
