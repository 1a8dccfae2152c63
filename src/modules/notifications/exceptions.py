"""Notification domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import CheckoutError


class MailTransportError(CheckoutError):
    """The mail server refused or could not be reached.

    Never fails a checkout: the dispatcher captures it per send attempt and
    reports it in ``emailStatus.errors``.
    """

    status_code = 500
