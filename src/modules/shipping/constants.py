"""Shipping constants: package defaults, provider URLs and the fallback
zone table (keyed by destination state)."""

from decimal import Decimal
from typing import NamedTuple

MELHOR_ENVIO_URL = "https://melhorenvio.com.br/api/v2/me"
MELHOR_ENVIO_SANDBOX_URL = "https://sandbox.melhorenvio.com.br/api/v2/me"
MELHOR_ENVIO_USER_AGENT = "Loja Checkout (contato@loja.com.br)"
VIACEP_URL = "https://viacep.com.br/ws/{cep}/json/"

# Single box used for every quote (cm).
BOX_WIDTH = 20
BOX_HEIGHT = 10
BOX_LENGTH = 30

DEFAULT_ITEM_WEIGHT_KG = Decimal("0.5")
MIN_PACKAGE_WEIGHT_KG = Decimal("0.1")


class ShippingZone(NamedTuple):
    cost: Decimal
    delivery_days: int


ZONES: dict[str, ShippingZone] = {}
for _states, _zone in (
    (("SC", "RS", "PR"), ShippingZone(Decimal("15"), 5)),
    (("SP", "RJ", "MG", "ES"), ShippingZone(Decimal("25"), 7)),
    (("BA", "PE", "CE"), ShippingZone(Decimal("30"), 8)),
):
    for _state in _states:
        ZONES[_state] = _zone

DEFAULT_ZONE = ShippingZone(Decimal("40"), 10)

# Extra days between the fastest and slowest fallback delivery estimate.
FALLBACK_DELIVERY_SPREAD = 2
FALLBACK_CARRIER = "Correios"
FALLBACK_SERVICE = "PAC"
