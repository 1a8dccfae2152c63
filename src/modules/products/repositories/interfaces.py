"""Product repository interface.

The checkout only reads the catalogue: one batch look-up per cart
(reconciliation) and single look-ups for the public API.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(ABC):
    @abstractmethod
    def get_by_id(self, id: object) -> Optional[Product]:
        """Return the product or ``None`` (also for malformed ids)."""

    @abstractmethod
    def find_many(self, ids: Iterable[int]) -> List[Product]:
        """Return every product whose id is in ``ids`` (missing ids are skipped)."""

    @abstractmethod
    def find_unique(self, id: int) -> Optional[Product]:
        """Return the product with ``id`` or ``None``."""
