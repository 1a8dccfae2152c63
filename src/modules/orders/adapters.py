"""Checkout payload adapter.

Storefront builds in the wild still post the older nested payload::

    {
        "customerData": {"name" | "fullName", "email", "cpf",
                         "address" | "fullAddress": {...}},
        "orderSummary": {"shippingCost", "totalAmount"},
        "shippingDetails": {"company", "service", "deliveryTime",
                            "melhorEnvioId", "cost"},
        "emailNotification": {"sendToAdmin", "sendToCustomer"},
        "items": [...],
    }

``normalize_checkout_payload`` rewrites it into the canonical flat shape
accepted by ``OrderValidator``.  Canonical keys always win when both shapes
are present.  Anything that is not a JSON object is returned unchanged so
the validator can reject it.
"""

from __future__ import annotations

from typing import Any, Dict

import structlog

logger = structlog.get_logger(__name__)

LEGACY_SECTIONS = ("customerData", "orderSummary", "shippingDetails", "emailNotification")


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


def normalize_checkout_payload(raw: Any) -> Any:
    """Return ``raw`` in canonical form (a new dict; ``raw`` is untouched)."""
    if not isinstance(raw, dict):
        return raw

    customer = _section(raw, "customerData")
    summary = _section(raw, "orderSummary")
    shipping_details = _section(raw, "shippingDetails")
    email_options = _section(raw, "emailNotification")

    legacy_keys = [key for key in LEGACY_SECTIONS if key in raw]
    if legacy_keys:
        logger.info("checkout.legacy_payload", legacy_keys=legacy_keys)

    canonical: Dict[str, Any] = {
        key: value
        for key, value in raw.items()
        if key not in LEGACY_SECTIONS
    }

    fallbacks = {
        "customerName": _first(customer.get("name"), customer.get("fullName")),
        "customerEmail": _first(customer.get("email")),
        "customerCPF": _first(customer.get("cpf"), customer.get("cpfNumbers")),
        "address": _first(customer.get("address"), customer.get("fullAddress")),
        "shippingCost": _first(summary.get("shippingCost"), shipping_details.get("cost")),
        "totalAmount": _first(summary.get("totalAmount")),
    }
    for key, value in fallbacks.items():
        if canonical.get(key) is None and value is not None:
            canonical[key] = value

    if canonical.get("shipping") is None and shipping_details:
        canonical["shipping"] = {
            "method": shipping_details.get("company", ""),
            "service": shipping_details.get("service", ""),
            "deliveryTime": shipping_details.get("deliveryTime", ""),
            "melhorEnvioId": shipping_details.get("melhorEnvioId"),
        }

    if canonical.get("notifications") is None and email_options:
        canonical["notifications"] = {
            key: email_options[key]
            for key in ("sendToAdmin", "sendToCustomer")
            if key in email_options
        }

    return canonical
