"""Shipping quote service.

Quotes come from Melhor Envio when a carrier token is configured.  When
there is no token, the carrier fails, or it returns no usable option, the
deterministic zone fallback answers instead: the destination state is
looked up on ViaCEP and priced from ``ZONES``.  An unknown CEP is never
quoted (``CepNotFoundError``).
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, List, Optional

import structlog

from modules.shipping.constants import (
    BOX_HEIGHT,
    BOX_LENGTH,
    BOX_WIDTH,
    DEFAULT_ITEM_WEIGHT_KG,
    DEFAULT_ZONE,
    FALLBACK_CARRIER,
    FALLBACK_DELIVERY_SPREAD,
    FALLBACK_SERVICE,
    MIN_PACKAGE_WEIGHT_KG,
    ZONES,
    ShippingZone,
)
from modules.shipping.dtos import (
    CarrierDTO,
    CepAddressDTO,
    PackageDTO,
    ShippingItemDTO,
    ShippingOptionDTO,
)
from modules.shipping.exceptions import (
    CepNotFoundError,
    InvalidCepError,
    ShippingUnavailableError,
)

if TYPE_CHECKING:
    from modules.shipping.clients import MelhorEnvioClient, ViaCepClient

logger = structlog.get_logger(__name__)


def clean_cep(cep: str) -> str:
    return re.sub(r"\D", "", cep or "")


def zone_for_state(state: str) -> ShippingZone:
    return ZONES.get((state or "").upper(), DEFAULT_ZONE)


def build_package(items: Iterable[ShippingItemDTO]) -> PackageDTO:
    weight = Decimal("0")
    insurance = Decimal("0")
    for item in items:
        weight += (item.weight or DEFAULT_ITEM_WEIGHT_KG) * item.quantity
        insurance += item.price * item.quantity
    return PackageDTO(
        width=BOX_WIDTH,
        height=BOX_HEIGHT,
        length=BOX_LENGTH,
        weight=max(weight, MIN_PACKAGE_WEIGHT_KG),
        insurance_value=insurance,
    )


class ShippingQuoteService:
    def __init__(
        self,
        cep_lookup: ViaCepClient,
        origin_cep: str,
        carrier: Optional[MelhorEnvioClient] = None,
    ) -> None:
        self._cep_lookup = cep_lookup
        self._origin_cep = clean_cep(origin_cep)
        self._carrier = carrier

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def calculate(self, cep: str, items: List[ShippingItemDTO]) -> List[ShippingOptionDTO]:
        """Quote shipping of ``items`` to ``cep``.

        Raises:
            InvalidCepError: ``cep`` does not have 8 digits.
            CepNotFoundError: the fallback could not find ``cep``.
            ShippingUnavailableError: the fallback CEP lookup failed.
        """
        destination = self._require_cep(cep)
        package = build_package(items)
        log = logger.bind(cep=destination, weight=str(package.weight))

        if self._carrier is None:
            log.info("shipping.carrier_not_configured")
            return self.fallback_options(destination)

        try:
            raw_options = self._carrier.calculate(self._origin_cep, destination, package)
        except ShippingUnavailableError:
            log.warning("shipping.carrier_failed")
            return self.fallback_options(destination)

        options = [
            ShippingOptionDTO.from_provider(option)
            for option in raw_options
            if isinstance(option, dict) and not option.get("error")
        ]
        if not options:
            log.info("shipping.carrier_no_options", received=len(raw_options))
            return self.fallback_options(destination)

        log.info("shipping.quoted", option_count=len(options))
        return options

    def fallback_options(self, cep: str) -> List[ShippingOptionDTO]:
        address = self._lookup(cep)
        zone = zone_for_state(address.state)
        price = f"{zone.cost:.2f}"
        logger.info("shipping.fallback_quoted", cep=cep, state=address.state, cost=price)
        return [
            ShippingOptionDTO(
                id=1,
                name=FALLBACK_SERVICE,
                company=CarrierDTO(id=1, name=FALLBACK_CARRIER, picture=""),
                price=price,
                custom_price=price,
                delivery_time=zone.delivery_days,
                delivery_min=zone.delivery_days,
                delivery_max=zone.delivery_days + FALLBACK_DELIVERY_SPREAD,
            )
        ]

    def validate_cep(self, cep: str) -> CepAddressDTO:
        """Resolve ``cep`` to an address (``InvalidCepError`` / ``CepNotFoundError``)."""
        return self._lookup(self._require_cep(cep))

    def legacy_cost(self, cep: str) -> Decimal:
        """Flat zone price for ``cep`` (deprecated ``GET /api/shipping``)."""
        digits = clean_cep(cep)
        if not digits:
            raise InvalidCepError("CEP is required")
        address = self._lookup(digits)
        return zone_for_state(address.state).cost

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _require_cep(cep: str) -> str:
        digits = clean_cep(cep)
        if len(digits) != 8:
            raise InvalidCepError()
        return digits

    def _lookup(self, cep: str) -> CepAddressDTO:
        address = self._cep_lookup.lookup(cep)
        if address is None:
            logger.info("shipping.cep_not_found", cep=cep)
            raise CepNotFoundError(cep)
        return address
