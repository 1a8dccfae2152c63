"""Checkout domain exceptions.

Raised by the Service Layer when a checkout step fails.  The API layer
(Views) catches them and translates them into HTTP responses using
``status_code`` and ``to_dict()``.

Errors before persistence abort the request with no side effects;
``PaymentProviderError`` (see ``modules.payments.exceptions``) is the only
fatal error raised after the order is already committed.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from modules.core.exceptions import CheckoutError


class ValidationError(CheckoutError):
    """The checkout payload is missing a field or has a malformed one.

    ``field`` names the offending payload key (dotted for nested keys) and
    ``index`` the cart position for item errors.
    """

    status_code = 400

    def __init__(self, message: str, field: str, index: Optional[int] = None) -> None:
        details = {"field": field}
        if index is not None:
            details["index"] = index
        super().__init__(message, details)
        self.field = field
        self.index = index


class ProductNotFoundError(CheckoutError):
    """One or more cart items reference products that do not exist.

    Always lists *every* missing id, in cart order.
    """

    status_code = 400

    def __init__(self, missing_ids: Iterable[int]) -> None:
        self.missing_ids: List[int] = list(missing_ids)
        joined = ", ".join(str(pid) for pid in self.missing_ids)
        super().__init__(
            f"Products not found: {joined}",
            {"missingIds": self.missing_ids},
        )


class PersistenceError(CheckoutError):
    """The order could not be durably recorded (nothing was written)."""

    status_code = 500
