"""Notification Dispatcher.

Sends the checkout emails: an admin notification to the store owner and a
confirmation to the customer.  The two sends are independent: each one
captures its own failure (a ``MailTransportError`` or anything raised while
rendering the template) into an ``EmailResultDTO``, so a failure never
stops the other send and never undoes the order or the payment
preference.  Every attempt is recorded in the rolling ``EmailLog``.
"""

from __future__ import annotations

from email.utils import formataddr
from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.template.loader import render_to_string
from django.utils import timezone

from modules.notifications.dtos import EmailResultDTO, EmailStatusDTO, EmailType
from modules.notifications.exceptions import MailTransportError

if TYPE_CHECKING:
    from modules.notifications.email_log import EmailLog
    from modules.notifications.transport import MailTransport
    from modules.orders.dtos import NotificationOptionsDTO
    from modules.orders.models import Order
    from modules.payments.port import PaymentPreference

logger = structlog.get_logger(__name__)

ADMIN_SUBJECT = "Novo Pedido - {name}"
CUSTOMER_SUBJECT = "Confirmação do seu pedido"
TEST_SUBJECT = "Teste de configuração de email"


def format_cpf(cpf: str) -> str:
    if len(cpf) != 11:
        return cpf
    return f"{cpf[:3]}.{cpf[3:6]}.{cpf[6:9]}-{cpf[9:]}"


class NotificationDispatcher:
    def __init__(
        self,
        transport: MailTransport,
        email_log: EmailLog,
        notify_email: str,
        from_email: str = "",
        from_name: str = "",
    ) -> None:
        self._transport = transport
        self._email_log = email_log
        self._notify_email = notify_email
        self._from_email = from_email
        self._from_name = from_name

    @property
    def sender(self) -> str:
        if self._from_email and self._from_name:
            return formataddr((self._from_name, self._from_email))
        return self._from_email

    # ------------------------------------------------------------------
    # Checkout emails
    # ------------------------------------------------------------------

    def dispatch(
        self,
        order: Order,
        preference: PaymentPreference,
        options: Optional[NotificationOptionsDTO] = None,
    ) -> EmailStatusDTO:
        """Attempt every enabled checkout email and aggregate the outcome."""
        send_admin = options.send_to_admin if options else True
        send_customer = options.send_to_customer if options else True

        admin = customer = None
        errors = []
        if send_admin:
            admin = self.send_admin_notification(order, preference)
            if not admin.success:
                errors.append(f"Admin: {admin.error}")
        if send_customer:
            customer = self.send_customer_confirmation(order, preference)
            if not customer.success:
                errors.append(f"Customer: {customer.error}")

        return EmailStatusDTO(admin=admin, customer=customer, errors=errors)

    def send_admin_notification(
        self, order: Order, preference: PaymentPreference
    ) -> EmailResultDTO:
        return self._send(
            email_type=EmailType.ADMIN_NOTIFICATION,
            to=self._notify_email,
            subject=ADMIN_SUBJECT.format(name=order.customer_name),
            template="notifications/admin_order.html",
            order=order,
            preference=preference,
        )

    def send_customer_confirmation(
        self, order: Order, preference: PaymentPreference
    ) -> EmailResultDTO:
        return self._send(
            email_type=EmailType.CUSTOMER_CONFIRMATION,
            to=order.customer_email,
            subject=CUSTOMER_SUBJECT,
            template="notifications/customer_order.html",
            order=order,
            preference=preference,
        )

    # ------------------------------------------------------------------
    # Ops
    # ------------------------------------------------------------------

    def send_test_email(self) -> EmailResultDTO:
        """Send a configuration test to the store owner (not logged)."""
        try:
            html = render_to_string("notifications/test_email.html", {"sent_at": timezone.now()})
            message_id = self._deliver(self._notify_email, TEST_SUBJECT, html)
        except MailTransportError as exc:
            logger.warning("email.test_failed", error=exc.message)
            return EmailResultDTO(
                success=False,
                type=EmailType.CONFIGURATION_TEST,
                recipient=self._notify_email or None,
                error=exc.message,
            )
        logger.info("email.test_sent", message_id=message_id)
        return EmailResultDTO(
            success=True,
            type=EmailType.CONFIGURATION_TEST,
            recipient=self._notify_email,
            message_id=message_id,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _deliver(self, to: str, subject: str, html: str) -> str:
        if not to:
            raise MailTransportError("Recipient address is not configured")
        return self._transport.send_mail(
            from_email=self.sender,
            to=to,
            subject=subject,
            html=html,
        )

    def _send(
        self,
        email_type: EmailType,
        to: str,
        subject: str,
        template: str,
        order: Order,
        preference: PaymentPreference,
    ) -> EmailResultDTO:
        items = list(order.items.all())
        error = None
        try:
            html = render_to_string(
                template,
                {
                    "order": order,
                    "items": items,
                    "subtotal": sum(item.subtotal for item in items),
                    "cpf": format_cpf(order.customer_cpf),
                    "preference": preference,
                },
            )
            message_id = self._deliver(to, subject, html)
        except MailTransportError as exc:
            error = exc.message
        except Exception as exc:
            logger.exception("email.unexpected_error", email_type=email_type.value)
            error = str(exc) or type(exc).__name__

        if error is not None:
            result = EmailResultDTO(
                success=False,
                type=email_type,
                recipient=to or None,
                error=error,
            )
        else:
            result = EmailResultDTO(
                success=True,
                type=email_type,
                recipient=to,
                message_id=message_id,
            )
        self._email_log.record(result, order=self._log_context(order, items))
        return result

    @staticmethod
    def _log_context(order: Order, items: list) -> Dict[str, Any]:
        return {
            "orderId": str(order.id),
            "customerName": order.customer_name,
            "customerEmail": order.customer_email,
            "totalAmount": float(order.total_amount),
            "itemsCount": len(items),
        }
