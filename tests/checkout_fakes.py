"""In-memory collaborators installed through the service registry."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from modules.notifications.exceptions import MailTransportError
from modules.notifications.transport import MailTransport
from modules.payments.exceptions import PaymentProviderError
from modules.payments.port import PaymentPreference, PaymentProviderClient
from modules.shipping.dtos import CepAddressDTO
from modules.shipping.exceptions import ShippingUnavailableError


class FakePaymentClient(PaymentProviderClient):
    """Records preference requests; can be told to fail."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.should_fail = False
        self.failure_message = "Payment provider unreachable"

    def create_preference(
        self,
        items,
        payer,
        back_urls,
        notification_url,
        external_reference=None,
    ) -> PaymentPreference:
        self.calls.append(
            {
                "items": items,
                "payer": payer,
                "back_urls": back_urls,
                "notification_url": notification_url,
                "external_reference": external_reference,
            }
        )
        if self.should_fail:
            raise PaymentProviderError(self.failure_message, provider_status=503)
        number = len(self.calls)
        return PaymentPreference(
            id=f"pref-{number}",
            init_point=f"https://www.mercadopago.com.br/checkout/v1/redirect?pref_id=pref-{number}",
            sandbox_init_point=f"https://sandbox.mercadopago.com.br/checkout/v1/redirect?pref_id=pref-{number}",
        )


class FakeMailTransport(MailTransport):
    """Records sent messages; fails for the recipients in ``fail_for``."""

    def __init__(self, fail_for: Iterable[str] = ()) -> None:
        self.sent: List[Dict[str, str]] = []
        self.fail_for = set(fail_for)
        self.fail_all = False
        self.failure_message = "SMTP connection refused"

    def send_mail(self, from_email: str, to: str, subject: str, html: str) -> str:
        if self.fail_all or to in self.fail_for:
            raise MailTransportError(self.failure_message)
        message_id = f"<msg-{len(self.sent) + 1}@test>"
        self.sent.append(
            {
                "from_email": from_email,
                "to": to,
                "subject": subject,
                "html": html,
                "message_id": message_id,
            }
        )
        return message_id


class FakeCepLookup:
    """ViaCEP stand-in backed by a dict of known CEPs."""

    def __init__(self, known: Optional[Dict[str, str]] = None) -> None:
        self.known = dict(known or {})
        self.unavailable = False
        self.lookups: List[str] = []

    def lookup(self, cep: str) -> Optional[CepAddressDTO]:
        self.lookups.append(cep)
        if self.unavailable:
            raise ShippingUnavailableError("CEP lookup unavailable")
        state = self.known.get(cep)
        if state is None:
            return None
        return CepAddressDTO(
            cep=cep,
            street="Rua Teste",
            neighborhood="Centro",
            city="Cidade",
            state=state,
        )


class FakeCarrier:
    """Melhor Envio stand-in returning canned options."""

    def __init__(self, options: Optional[List[Dict[str, Any]]] = None) -> None:
        self.options = options or []
        self.unavailable = False
        self.calls: List[Dict[str, Any]] = []

    def calculate(self, origin_cep, destination_cep, package):
        self.calls.append(
            {"origin": origin_cep, "destination": destination_cep, "package": package}
        )
        if self.unavailable:
            raise ShippingUnavailableError("Shipping provider unavailable")
        return self.options


class StubResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self) -> None:
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class StubSession:
    """``requests.Session`` stand-in returning queued responses."""

    def __init__(self, response: Any = None) -> None:
        self.response = response
        self.requests: List[Dict[str, Any]] = []

    def _respond(self, method: str, url: str, **kwargs: Any) -> StubResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def get(self, url: str, **kwargs: Any) -> StubResponse:
        return self._respond("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> StubResponse:
        return self._respond("POST", url, **kwargs)
