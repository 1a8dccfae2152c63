import pytest

from modules.orders.models import Order
from modules.payments.preference import PaymentPreferenceBuilder

pytestmark = pytest.mark.unit


@pytest.fixture()
def builder(payment_client):
    return PaymentPreferenceBuilder(
        client=payment_client,
        frontend_url="https://loja.example.com/",
        backend_url="https://api.loja.example.com",
    )


@pytest.fixture()
def order(services, products, checkout_payload):
    result = services.checkout_service().checkout(checkout_payload)
    return services.order_repository.get_by_id(result.order_id)


class TestPaymentPreferenceBuilder:
    def test_product_lines_use_catalogue_data(self, builder, order):
        items = builder.build(order)["items"]
        assert items[0] == {
            "id": "1",
            "title": "Pijama Longo",
            "description": "Tamanho: M",
            "quantity": 2,
            "unit_price": 159.9,
            "currency_id": "BRL",
            "picture_url": "https://api.loja.example.com/images/pijama.jpg",
            "category_id": "Pijamas",
        }

    def test_absolute_image_urls_are_kept(self, builder, order):
        items = builder.build(order)["items"]
        assert items[1]["picture_url"] == "https://cdn.example.com/camisola.jpg"

    def test_shipping_becomes_synthetic_line(self, builder, order):
        items = builder.build(order)["items"]
        assert items[-1] == {
            "id": "shipping",
            "title": "Frete - Correios",
            "quantity": 1,
            "unit_price": 25.0,
            "currency_id": "BRL",
        }

    def test_line_total_matches_order_total(self, builder, order):
        items = builder.build(order)["items"]
        total = sum(line["unit_price"] * line["quantity"] for line in items)
        assert round(total, 2) == float(order.total_amount)

    def test_free_shipping_adds_no_line(self, builder, order):
        Order.objects.filter(id=order.id).update(shipping_cost=0)
        order.refresh_from_db()
        ids = [line["id"] for line in builder.build(order)["items"]]
        assert ids == ["1", "2"]

    def test_payer_and_urls(self, builder, order):
        request = builder.build(order)
        assert request["payer"] == {
            "name": "Maria Silva",
            "email": "maria@example.com",
            "address": {
                "zip_code": "88010000",
                "street_name": "Rua Felipe Schmidt",
                "street_number": "100",
            },
            "identification": {"type": "CPF", "number": "52998224725"},
        }
        assert request["back_urls"] == {
            "success": "https://loja.example.com/success",
            "failure": "https://loja.example.com/failure",
            "pending": "https://loja.example.com/pending",
        }
        assert request["notification_url"] == "https://api.loja.example.com/api/webhook/mercadopago"
        assert request["external_reference"] == str(order.id)

    def test_payer_without_cpf_has_no_identification(self, builder, order):
        order.customer_cpf = ""
        assert "identification" not in builder.payer(order)

    def test_create_submits_to_client(self, builder, order, payment_client):
        preference = builder.create(order)
        assert preference.id == f"pref-{len(payment_client.calls)}"
        assert payment_client.calls[-1]["external_reference"] == str(order.id)
