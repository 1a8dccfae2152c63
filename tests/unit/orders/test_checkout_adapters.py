import pytest

from modules.orders.adapters import normalize_checkout_payload

pytestmark = pytest.mark.unit


@pytest.fixture()
def legacy_payload():
    return {
        "customerData": {
            "fullName": "Maria Silva",
            "email": "maria@example.com",
            "cpfNumbers": "52998224725",
            "fullAddress": {"cep": "88010000", "state": "SC"},
        },
        "orderSummary": {"shippingCost": 25, "totalAmount": 464.7},
        "shippingDetails": {
            "company": "Jadlog",
            "service": ".Package",
            "deliveryTime": "6",
            "melhorEnvioId": 3,
            "cost": 30,
        },
        "emailNotification": {"sendToAdmin": False},
        "items": [{"id": 1, "quantity": 1, "size": "M", "price": 159.9}],
    }


class TestNormalizeCheckoutPayload:
    def test_maps_legacy_sections_to_canonical_fields(self, legacy_payload):
        result = normalize_checkout_payload(legacy_payload)
        assert result["customerName"] == "Maria Silva"
        assert result["customerEmail"] == "maria@example.com"
        assert result["customerCPF"] == "52998224725"
        assert result["address"] == {"cep": "88010000", "state": "SC"}
        assert result["shippingCost"] == 25
        assert result["totalAmount"] == 464.7
        assert result["items"] == legacy_payload["items"]

    def test_legacy_sections_are_removed(self, legacy_payload):
        result = normalize_checkout_payload(legacy_payload)
        for key in ("customerData", "orderSummary", "shippingDetails", "emailNotification"):
            assert key not in result

    def test_shipping_details_become_shipping_selection(self, legacy_payload):
        result = normalize_checkout_payload(legacy_payload)
        assert result["shipping"] == {
            "method": "Jadlog",
            "service": ".Package",
            "deliveryTime": "6",
            "melhorEnvioId": 3,
        }

    def test_email_notification_becomes_notifications(self, legacy_payload):
        result = normalize_checkout_payload(legacy_payload)
        assert result["notifications"] == {"sendToAdmin": False}

    def test_shipping_cost_falls_back_to_shipping_details(self, legacy_payload):
        del legacy_payload["orderSummary"]["shippingCost"]
        result = normalize_checkout_payload(legacy_payload)
        assert result["shippingCost"] == 30

    def test_canonical_fields_win_over_legacy(self, legacy_payload):
        legacy_payload["customerName"] = "Ana Souza"
        legacy_payload["shippingCost"] = 0
        result = normalize_checkout_payload(legacy_payload)
        assert result["customerName"] == "Ana Souza"
        assert result["shippingCost"] == 0

    def test_does_not_mutate_input(self, legacy_payload):
        normalize_checkout_payload(legacy_payload)
        assert "customerData" in legacy_payload
        assert "customerName" not in legacy_payload

    def test_canonical_payload_passes_through(self, checkout_payload):
        assert normalize_checkout_payload(checkout_payload) == checkout_payload

    @pytest.mark.parametrize("raw", [None, [], "text", 42])
    def test_non_object_is_returned_unchanged(self, raw):
        assert normalize_checkout_payload(raw) is raw
