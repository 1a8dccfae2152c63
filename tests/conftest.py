from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.core.registry import Services, reset_services, set_services
from modules.notifications.email_log import EmailLog
from modules.orders.repositories import OrderDjangoRepository
from modules.products.models import Product
from modules.products.repositories import ProductDjangoRepository
from modules.shipping.services import ShippingQuoteService
from checkout_fakes import FakeCepLookup, FakeMailTransport, FakePaymentClient

VALID_CPF = "529.982.247-25"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _isolate_process_state():
    """Start every test with an empty cache and unbuilt services."""
    cache.clear()
    reset_services()
    yield
    reset_services()
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def staff_user():
    return get_user_model().objects.create_user(
        username="ops", password="ops-pass-123", is_staff=True
    )


@pytest.fixture()
def staff_client(api_client, staff_user):
    api_client.force_authenticate(user=staff_user)
    return api_client


@pytest.fixture()
def pijama():
    return Product.objects.create(
        id=1,
        name="Pijama Longo",
        price=Decimal("159.90"),
        image_url="pijama.jpg",
        category="Pijamas",
    )


@pytest.fixture()
def camisola():
    return Product.objects.create(
        id=2,
        name="Camisola Infantil",
        price=Decimal("119.90"),
        image_url="https://cdn.example.com/camisola.jpg",
        category="Infantil",
    )


@pytest.fixture()
def products(pijama, camisola):
    return {pijama.id: pijama, camisola.id: camisola}


@pytest.fixture()
def checkout_payload():
    """Two-line cart: 2 x 159.90 + 1 x 119.90 + 25.00 shipping = 464.70."""
    return {
        "customerName": "Maria Silva",
        "customerEmail": "maria@example.com",
        "customerCPF": VALID_CPF,
        "address": {
            "cep": "88010-000",
            "street": "Rua Felipe Schmidt",
            "number": "100",
            "complement": "Apto 12",
            "neighborhood": "Centro",
            "city": "Florianópolis",
            "state": "sc",
        },
        "items": [
            {"id": 1, "quantity": 2, "size": "M", "price": 159.9},
            {"id": 2, "quantity": 1, "size": 4, "price": 119.9},
        ],
        "shippingCost": 25,
        "totalAmount": 464.7,
        "shipping": {
            "method": "Correios",
            "service": "PAC",
            "deliveryTime": "5",
            "melhorEnvioId": 1,
        },
    }


@pytest.fixture()
def payment_client():
    return FakePaymentClient()


@pytest.fixture()
def mail_transport():
    return FakeMailTransport()


@pytest.fixture()
def cep_lookup():
    return FakeCepLookup(
        {
            "88010000": "SC",
            "01310100": "SP",
            "40010000": "BA",
            "69005000": "AM",
        }
    )


@pytest.fixture()
def email_log():
    return EmailLog(max_entries=100)


@pytest.fixture()
def services(payment_client, mail_transport, cep_lookup, email_log):
    """Real repositories with fake external collaborators."""
    return set_services(
        Services(
            product_repository=ProductDjangoRepository(),
            order_repository=OrderDjangoRepository(),
            payment_client=payment_client,
            mail_transport=mail_transport,
            email_log=email_log,
            shipping_service=ShippingQuoteService(
                cep_lookup=cep_lookup, origin_cep="01310-100"
            ),
        )
    )
