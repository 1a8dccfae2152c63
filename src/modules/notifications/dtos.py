"""Notification DTOs.

- ``EmailResultDTO``: outcome of one send attempt.
- ``EmailStatusDTO``: outcome of the checkout notifications, folded into
  the checkout response as ``emailStatus``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class EmailType(str, Enum):
    ADMIN_NOTIFICATION = "admin_notification"
    CUSTOMER_CONFIRMATION = "customer_confirmation"
    CONFIGURATION_TEST = "configuration_test"


class EmailResultDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    type: EmailType
    recipient: Optional[str] = None
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "type": self.type.value,
            "recipient": self.recipient,
        }
        if self.message_id:
            data["messageId"] = self.message_id
        if self.error:
            data["error"] = self.error
        return data


class EmailStatusDTO(BaseModel):
    """Aggregated notification outcome.

    ``admin`` / ``customer`` are ``None`` when that send was not attempted.
    ``success`` is true only if every attempted send succeeded.
    """

    model_config = ConfigDict(frozen=True)

    admin: Optional[EmailResultDTO] = None
    customer: Optional[EmailResultDTO] = None
    errors: List[str] = []

    @property
    def success(self) -> bool:
        attempted = [result for result in (self.admin, self.customer) if result is not None]
        return all(result.success for result in attempted)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "admin": bool(self.admin and self.admin.success),
            "customer": bool(self.customer and self.customer.success),
            "errors": list(self.errors),
        }
