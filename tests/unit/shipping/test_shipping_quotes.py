from decimal import Decimal

import pytest

from modules.shipping.dtos import ShippingItemDTO
from modules.shipping.exceptions import CepNotFoundError, InvalidCepError
from modules.shipping.services import (
    ShippingQuoteService,
    build_package,
    clean_cep,
    zone_for_state,
)
from checkout_fakes import FakeCarrier

pytestmark = pytest.mark.unit

ITEMS = [
    ShippingItemDTO(price=Decimal("159.90"), quantity=2),
    ShippingItemDTO(price=Decimal("119.90"), quantity=1, weight=Decimal("0.3")),
]

CARRIER_OPTIONS = [
    {
        "id": 1,
        "name": "PAC",
        "price": "22.50",
        "custom_price": "22.50",
        "delivery_time": 6,
        "delivery_range": {"min": 5, "max": 7},
        "company": {"id": 1, "name": "Correios", "picture": "https://me/correios.png"},
    },
    {"id": 2, "name": "SEDEX", "error": "Serviço indisponível para o trecho"},
    {
        "id": 3,
        "name": ".Package",
        "price": "18.90",
        "delivery_time": 8,
        "company": {"id": 2, "name": "Jadlog"},
    },
]


@pytest.fixture()
def fallback_service(cep_lookup):
    return ShippingQuoteService(cep_lookup=cep_lookup, origin_cep="01310-100")


class TestHelpers:
    def test_clean_cep(self):
        assert clean_cep("88010-000") == "88010000"
        assert clean_cep(None) == ""

    @pytest.mark.parametrize(
        ("state", "cost", "days"),
        [("SC", "15", 5), ("rs", "15", 5), ("SP", "25", 7), ("BA", "30", 8), ("AM", "40", 10), ("", "40", 10)],
    )
    def test_zone_for_state(self, state, cost, days):
        zone = zone_for_state(state)
        assert zone.cost == Decimal(cost)
        assert zone.delivery_days == days

    def test_build_package(self):
        package = build_package(ITEMS)
        assert package.weight == Decimal("1.3")
        assert package.insurance_value == Decimal("439.70")
        assert (package.width, package.height, package.length) == (20, 10, 30)

    def test_build_package_minimum_weight(self):
        package = build_package([ShippingItemDTO(price=Decimal("1"), quantity=1, weight=Decimal("0.01"))])
        assert package.weight == Decimal("0.1")


class TestFallbackQuotes:
    def test_quotes_by_destination_state(self, fallback_service):
        [option] = fallback_service.calculate("88010-000", ITEMS)
        data = option.to_dict()
        assert data["name"] == "PAC"
        assert data["company"]["name"] == "Correios"
        assert data["price"] == "15.00"
        assert data["delivery_time"] == 5
        assert data["delivery_range"] == {"min": 5, "max": 7}

    def test_unknown_state_uses_default_zone(self, fallback_service):
        [option] = fallback_service.calculate("69005-000", ITEMS)
        assert option.price == "40.00"

    def test_unknown_cep_is_not_found(self, fallback_service):
        with pytest.raises(CepNotFoundError) as exc_info:
            fallback_service.calculate("99999-999", ITEMS)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "CEP not found"

    @pytest.mark.parametrize("cep", ["", "1234", "123456789", "abcdefgh"])
    def test_invalid_cep(self, fallback_service, cep):
        with pytest.raises(InvalidCepError):
            fallback_service.calculate(cep, ITEMS)


class TestCarrierQuotes:
    def test_returns_carrier_options_without_errors(self, cep_lookup):
        carrier = FakeCarrier(CARRIER_OPTIONS)
        service = ShippingQuoteService(cep_lookup, "01310-100", carrier=carrier)
        options = service.calculate("88010-000", ITEMS)

        assert [option.name for option in options] == ["PAC", ".Package"]
        assert options[1].delivery_min == 8
        assert options[1].custom_price == "18.90"
        assert carrier.calls[0]["origin"] == "01310100"
        assert carrier.calls[0]["destination"] == "88010000"
        assert cep_lookup.lookups == []

    def test_carrier_failure_falls_back(self, cep_lookup):
        carrier = FakeCarrier(CARRIER_OPTIONS)
        carrier.unavailable = True
        service = ShippingQuoteService(cep_lookup, "01310-100", carrier=carrier)
        [option] = service.calculate("01310-100", ITEMS)
        assert option.price == "25.00"

    def test_only_errored_options_falls_back(self, cep_lookup):
        carrier = FakeCarrier([CARRIER_OPTIONS[1]])
        service = ShippingQuoteService(cep_lookup, "01310-100", carrier=carrier)
        [option] = service.calculate("40010-000", ITEMS)
        assert option.price == "30.00"


class TestCepQueries:
    def test_validate_cep(self, fallback_service):
        address = fallback_service.validate_cep("88010000")
        assert address.to_dict()["state"] == "SC"

    def test_validate_unknown_cep(self, fallback_service):
        with pytest.raises(CepNotFoundError):
            fallback_service.validate_cep("99999-999")

    def test_legacy_cost(self, fallback_service):
        assert fallback_service.legacy_cost("01310-100") == Decimal("25")

    def test_legacy_cost_requires_cep(self, fallback_service):
        with pytest.raises(InvalidCepError, match="CEP is required"):
            fallback_service.legacy_cost("")
