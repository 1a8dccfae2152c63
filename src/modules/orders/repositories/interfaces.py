"""Order repository interface.

Contract of the Order Persister: atomic creation of the Order aggregate
plus the reads the checkout and the admin need.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderRepository(ABC):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderItem children.  Creation must be
    all-or-nothing.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` holds the Order field values plus ``items``: a list of
        dicts with ``product`` (or ``product_id``), ``quantity``, ``size``
        and ``unit_price``.

        Raises:
            PersistenceError: nothing was written.
        """

    @abstractmethod
    def get_by_id(self, id: object) -> Optional[Order]:
        """Retrieve an order with prefetched items and products."""
