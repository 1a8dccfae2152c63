from decimal import Decimal, InvalidOperation

import pytest
from structlog.testing import capture_logs

from modules.core.registry import set_services
from modules.orders.exceptions import (
    PersistenceError,
    ProductNotFoundError,
    ValidationError,
)
from modules.orders.models import Order, OrderItem
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import CheckoutService, compute_total
from modules.orders.validators import OrderValidator
from modules.payments.exceptions import PaymentProviderError
from modules.payments.preference import PaymentPreferenceBuilder

pytestmark = pytest.mark.unit


@pytest.fixture()
def checkout(services):
    return services.checkout_service()


def events(logs, name):
    return [entry for entry in logs if entry["event"] == name]


class TestComputeTotal:
    def test_uses_catalogue_prices_and_shipping(self, products, checkout_payload):
        checkout_payload["items"][0]["price"] = 1
        dto = OrderValidator().validate(checkout_payload)
        assert compute_total(dto, products) == Decimal("464.70")


class TestCheckoutHappyPath:
    def test_persists_order_and_returns_preference(self, checkout, products, checkout_payload, payment_client):
        result = checkout.checkout(checkout_payload)

        order = Order.objects.get(id=result.order_id)
        assert order.total_amount == Decimal("464.70")
        assert order.shipping_cost == Decimal("25.00")
        assert order.customer_cpf == "52998224725"
        assert order.address_state == "SC"
        assert order.shipping_method == "Correios"
        assert order.melhor_envio_id == "1"
        assert OrderItem.objects.filter(order=order).count() == 2
        assert result.preference.id == "pref-1"
        assert payment_client.calls[0]["external_reference"] == result.order_id

    def test_item_prices_come_from_catalogue(self, checkout, products, checkout_payload):
        checkout_payload["items"][0]["price"] = 1.0
        result = checkout.checkout(checkout_payload)
        prices = list(
            OrderItem.objects.filter(order_id=result.order_id).values_list("unit_price", flat=True)
        )
        assert prices == [Decimal("159.90"), Decimal("119.90")]

    def test_response_shape(self, checkout, products, checkout_payload):
        response = checkout.checkout(checkout_payload).to_response()
        assert response["id"] == "pref-1"
        assert response["init_point"].endswith("pref_id=pref-1")
        assert response["emailStatus"] == {
            "success": True,
            "admin": True,
            "customer": True,
            "errors": [],
        }

    def test_sends_both_emails(self, checkout, products, checkout_payload, mail_transport):
        checkout.checkout(checkout_payload)
        assert [mail["to"] for mail in mail_transport.sent] == [
            "loja@example.com",
            "maria@example.com",
        ]

    def test_logs_every_stage(self, checkout, products, checkout_payload):
        with capture_logs() as logs:
            checkout.checkout(checkout_payload)
        stages = [entry["stage"] for entry in logs if "stage" in entry]
        assert stages == [
            "received",
            "validated",
            "reconciled",
            "persisted",
            "preference_created",
            "notified",
        ]


class TestCheckoutTotals:
    def test_mismatch_is_logged_and_server_total_is_kept(self, checkout, products, checkout_payload):
        checkout_payload["totalAmount"] = 10
        with capture_logs() as logs:
            result = checkout.checkout(checkout_payload)
        mismatch = events(logs, "checkout.total_mismatch")
        assert mismatch[0]["server_total"] == "464.70"
        assert mismatch[0]["enforced"] is False
        assert Order.objects.get(id=result.order_id).total_amount == Decimal("464.70")

    def test_difference_within_a_cent_is_accepted(self, checkout, products, checkout_payload):
        checkout_payload["totalAmount"] = 464.69
        with capture_logs() as logs:
            checkout.checkout(checkout_payload)
        assert events(logs, "checkout.total_mismatch") == []

    def test_mismatch_is_rejected_when_enforced(self, services, products, checkout_payload, settings):
        settings.CHECKOUT_ENFORCE_TOTALS = True
        service = services.checkout_service()
        checkout_payload["totalAmount"] = 10
        with pytest.raises(ValidationError) as exc_info:
            service.checkout(checkout_payload)
        assert exc_info.value.field == "totalAmount"
        assert Order.objects.count() == 0


class TestCheckoutFailures:
    def test_validation_failure_writes_nothing(self, checkout, products, checkout_payload, payment_client, mail_transport):
        del checkout_payload["customerEmail"]
        with capture_logs() as logs:
            with pytest.raises(ValidationError):
                checkout.checkout(checkout_payload)
        assert Order.objects.count() == 0
        assert payment_client.calls == []
        assert mail_transport.sent == []
        assert events(logs, "checkout.failed")[0]["failed_at"] == "validated"

    def test_missing_products_write_nothing(self, checkout, pijama, checkout_payload, payment_client):
        checkout_payload["items"].append({"id": 77, "quantity": 1, "size": "P", "price": 10})
        with pytest.raises(ProductNotFoundError) as exc_info:
            checkout.checkout(checkout_payload)
        assert exc_info.value.missing_ids == [2, 77]
        assert Order.objects.count() == 0
        assert payment_client.calls == []

    def test_persistence_failure_stops_before_payment(self, services, products, checkout_payload, payment_client, mail_transport):
        class BrokenRepository:
            def create(self, data):
                raise PersistenceError("Could not save the order")

        service = CheckoutService(
            product_repository=services.product_repository,
            order_repository=BrokenRepository(),
            preference_builder=PaymentPreferenceBuilder(
                payment_client, "http://localhost:3000", "http://localhost:8000"
            ),
            dispatcher=services.notification_dispatcher(),
        )
        with pytest.raises(PersistenceError):
            service.checkout(checkout_payload)
        assert payment_client.calls == []
        assert mail_transport.sent == []

    def test_provider_failure_keeps_order_and_sends_no_email(self, checkout, products, checkout_payload, payment_client, mail_transport):
        payment_client.should_fail = True
        with pytest.raises(PaymentProviderError) as exc_info:
            checkout.checkout(checkout_payload)

        order = Order.objects.get()
        error = exc_info.value
        assert error.order_id == str(order.id)
        assert error.provider_status == 503
        assert error.to_dict()["details"]["orderId"] == str(order.id)
        assert mail_transport.sent == []

    def test_mail_failure_degrades_email_status_only(self, checkout, products, checkout_payload, mail_transport):
        mail_transport.fail_for.add("maria@example.com")
        result = checkout.checkout(checkout_payload)
        status = result.email_status.to_dict()
        assert status["success"] is False
        assert status["admin"] is True
        assert status["customer"] is False
        assert status["errors"] == ["Customer: SMTP connection refused"]
        assert Order.objects.count() == 1

    def test_disabled_notifications_are_skipped(self, checkout, products, checkout_payload, mail_transport):
        checkout_payload["notifications"] = {"sendToCustomer": False}
        result = checkout.checkout(checkout_payload)
        assert [mail["to"] for mail in mail_transport.sent] == ["loja@example.com"]
        assert result.email_status.to_dict() == {
            "success": True,
            "admin": True,
            "customer": False,
            "errors": [],
        }


class TestCheckoutColumnBounds:
    def test_catalogue_subtotal_overflow_writes_nothing(self, checkout, products, checkout_payload, payment_client):
        checkout_payload["items"][0]["price"] = 0.01
        checkout_payload["items"][0]["quantity"] = 1_000_000
        with pytest.raises(ValidationError) as exc_info:
            checkout.checkout(checkout_payload)
        assert exc_info.value.field == "items.quantity"
        assert exc_info.value.index == 0
        assert Order.objects.count() == 0
        assert payment_client.calls == []

    def test_failed_reload_keeps_the_saved_order(self, services, products, checkout_payload, mail_transport):
        class FlakyReadRepository(OrderDjangoRepository):
            def get_by_id(self, id):
                raise InvalidOperation("decimal overflow")

        overridden = set_services(order_repository=FlakyReadRepository())
        with capture_logs() as logs:
            result = overridden.checkout_service().checkout(checkout_payload)

        assert Order.objects.filter(id=result.order_id).exists()
        assert result.preference.id == "pref-1"
        assert result.email_status.success is True
        assert events(logs, "checkout.reload_failed")[0]["error_type"] == "InvalidOperation"
