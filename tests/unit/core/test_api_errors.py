import pytest

from modules.core.exceptions import ApiError, CheckoutError

pytestmark = pytest.mark.unit


class TestApiError:
    def test_body_without_details(self):
        assert ApiError("boom").to_dict() == {"error": "boom"}

    def test_body_with_details(self):
        error = CheckoutError("boom", {"orderId": "abc"})
        assert error.to_dict() == {"error": "boom", "details": {"orderId": "abc"}}
        assert error.status_code == 500
        assert str(error) == "boom"
