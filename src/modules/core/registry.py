"""Process-scoped service registry.

The checkout collaborators (repositories, payment client, mail transport,
email log and shipping service) are built once per process from Django
settings and handed to views through ``get_services()``.  Tests swap in
fakes with ``set_services()`` and go back to the real wiring with
``reset_services()``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Optional

import structlog
from django.conf import settings

if TYPE_CHECKING:
    from modules.notifications.dispatcher import NotificationDispatcher
    from modules.notifications.email_log import EmailLog
    from modules.notifications.transport import MailTransport
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.services import CheckoutService
    from modules.payments.port import PaymentProviderClient
    from modules.products.repositories.interfaces import IProductRepository
    from modules.shipping.services import ShippingQuoteService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Services:
    product_repository: IProductRepository
    order_repository: IOrderRepository
    payment_client: PaymentProviderClient
    mail_transport: MailTransport
    email_log: EmailLog
    shipping_service: ShippingQuoteService

    def notification_dispatcher(self) -> NotificationDispatcher:
        from modules.notifications.dispatcher import NotificationDispatcher

        return NotificationDispatcher(
            transport=self.mail_transport,
            email_log=self.email_log,
            notify_email=settings.NOTIFY_EMAIL,
            from_email=settings.FROM_EMAIL,
            from_name=settings.FROM_NAME,
        )

    def checkout_service(self) -> CheckoutService:
        from modules.orders.services import CheckoutService
        from modules.payments.preference import PaymentPreferenceBuilder

        return CheckoutService(
            product_repository=self.product_repository,
            order_repository=self.order_repository,
            preference_builder=PaymentPreferenceBuilder(
                client=self.payment_client,
                frontend_url=settings.FRONTEND_URL,
                backend_url=settings.BACKEND_URL,
            ),
            dispatcher=self.notification_dispatcher(),
            enforce_totals=settings.CHECKOUT_ENFORCE_TOTALS,
        )


def build_services() -> Services:
    """Wire the production collaborators from Django settings."""
    from modules.notifications.email_log import EmailLog
    from modules.notifications.transport import DjangoMailTransport
    from modules.orders.repositories import OrderDjangoRepository
    from modules.payments.mercadopago_client import MercadoPagoClient
    from modules.products.repositories import ProductDjangoRepository
    from modules.shipping.clients import MelhorEnvioClient, ViaCepClient
    from modules.shipping.services import ShippingQuoteService

    carrier = None
    if settings.MELHOR_ENVIO_TOKEN:
        carrier = MelhorEnvioClient(
            token=settings.MELHOR_ENVIO_TOKEN,
            sandbox=settings.MELHOR_ENVIO_SANDBOX,
            timeout=settings.SHIPPING_HTTP_TIMEOUT,
        )

    services = Services(
        product_repository=ProductDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        payment_client=MercadoPagoClient(settings.MERCADO_PAGO_ACCESS_TOKEN),
        mail_transport=DjangoMailTransport(),
        email_log=EmailLog(max_entries=settings.EMAIL_LOG_MAX_ENTRIES),
        shipping_service=ShippingQuoteService(
            cep_lookup=ViaCepClient(
                timeout=settings.SHIPPING_HTTP_TIMEOUT,
                cache_timeout=settings.CEP_CACHE_TIMEOUT,
            ),
            origin_cep=settings.STORE_CEP,
            carrier=carrier,
        ),
    )
    logger.info(
        "services.built",
        payment_configured=bool(settings.MERCADO_PAGO_ACCESS_TOKEN),
        carrier_configured=carrier is not None,
        notify_configured=bool(settings.NOTIFY_EMAIL),
    )
    return services


_lock = threading.Lock()
_services: Optional[Services] = None


def get_services() -> Services:
    """Return the process-wide services, building them on first use."""
    global _services
    if _services is None:
        with _lock:
            if _services is None:
                _services = build_services()
    return _services


def set_services(services: Optional[Services] = None, **overrides: Any) -> Services:
    """Install ``services`` (or the current ones with ``overrides`` applied)."""
    global _services
    base = services or get_services()
    with _lock:
        _services = replace(base, **overrides) if overrides else base
        return _services


def reset_services() -> None:
    global _services
    with _lock:
        _services = None
