"""Checkout domain constants.

``CheckoutStage`` names the states of the checkout flow; every stage
transition is logged with the stage value so a request can be followed
through the logs.  Terminal outcomes are ``RESPONDED`` or ``FAILED``.
"""

from decimal import Decimal

from django.db import models


class CheckoutStage(models.TextChoices):
    RECEIVED = "received", "Recebido"
    VALIDATED = "validated", "Validado"
    RECONCILED = "reconciled", "Conciliado"
    PERSISTED = "persisted", "Persistido"
    PREFERENCE_CREATED = "preference_created", "Preferência criada"
    NOTIFIED = "notified", "Notificado"
    RESPONDED = "responded", "Respondido"
    FAILED = "failed", "Falhou"


CURRENCY = "BRL"
MONEY_QUANTUM = Decimal("0.01")
TOTAL_TOLERANCE = Decimal("0.01")

CEP_LENGTH = 8
CPF_LENGTH = 11
MAX_SIZE_LENGTH = 20

# Largest value a DecimalField(max_digits=10, decimal_places=2) column holds.
MAX_MONEY = Decimal("99999999.99")
# PositiveIntegerField upper bound on every supported database.
MAX_QUANTITY = 2147483647

CUSTOMER_NAME_MAX_LENGTH = 255
CUSTOMER_EMAIL_MAX_LENGTH = 254
ADDRESS_MAX_LENGTHS = {
    "street": 255,
    "number": 20,
    "complement": 255,
    "neighborhood": 255,
    "city": 255,
    "state": 50,
}
SHIPPING_MAX_LENGTHS = {
    "method": 100,
    "service": 100,
    "deliveryTime": 100,
    "melhorEnvioId": 50,
}
