"""Mail transport port and its Django mail adapter.

``DjangoMailTransport`` sends through whatever ``EMAIL_BACKEND`` is
configured (SMTP in production, locmem in tests).  Each message gets an
explicit ``Message-ID`` so the id can be reported back to callers.  Header,
socket and SMTP failures all surface as ``MailTransportError``.
"""

from __future__ import annotations

import smtplib
from abc import ABC, abstractmethod

import structlog
from django.core.mail import DNS_NAME, EmailMultiAlternatives
from django.core.mail.message import make_msgid
from django.utils.html import strip_tags

from modules.notifications.exceptions import MailTransportError

logger = structlog.get_logger(__name__)


class MailTransport(ABC):
    @abstractmethod
    def send_mail(self, from_email: str, to: str, subject: str, html: str) -> str:
        """Send one HTML message and return its message id.

        Raises:
            MailTransportError: the message could not be handed to the server.
        """


class DjangoMailTransport(MailTransport):
    def send_mail(self, from_email: str, to: str, subject: str, html: str) -> str:
        if not to:
            raise MailTransportError("Recipient address is empty")

        message_id = make_msgid(domain=str(DNS_NAME))
        message = EmailMultiAlternatives(
            subject=subject,
            body=strip_tags(html),
            from_email=from_email or None,
            to=[to],
            headers={"Message-ID": message_id},
        )
        message.attach_alternative(html, "text/html")

        # Django raises BadHeaderError (a ValueError) for newlines in headers.
        try:
            sent = message.send(fail_silently=False)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            logger.warning("mail.transport_error", error_type=type(exc).__name__)
            raise MailTransportError(str(exc) or type(exc).__name__) from exc

        if not sent:
            raise MailTransportError("Message was not accepted by the mail backend")
        return message_id
