"""Payment provider port (abstract interface).

Defines the contract every payment provider adapter must implement, so the
checkout can run against Mercado Pago in production and an in-memory fake
in tests without changing any service code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class PaymentPreference:
    """A purchase intent registered with the provider."""

    id: str
    init_point: str
    sandbox_init_point: Optional[str] = None


class PaymentProviderClient(ABC):
    @abstractmethod
    def create_preference(
        self,
        items: List[Dict[str, Any]],
        payer: Dict[str, Any],
        back_urls: Dict[str, str],
        notification_url: str,
        external_reference: Optional[str] = None,
    ) -> PaymentPreference:
        """Register a preference and return its id and redirect URLs.

        Raises:
            PaymentProviderError: the provider was unreachable or rejected
                the request.
        """
