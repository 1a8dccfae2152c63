"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: look-ups return ``None`` or
a shorter list instead of raising; the Service Layer decides how to
translate a missing product into an API response.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import structlog

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: object) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return Product.objects.filter(id=int(id)).first()
        except (TypeError, ValueError):
            return None

    def find_unique(self, id: int) -> Optional[Product]:
        return self.get_by_id(id)

    def find_many(self, ids: Iterable[int]) -> List[Product]:
        """Fetch all products in ``ids`` with a single ``IN`` query."""
        wanted = list(ids)
        if not wanted:
            return []
        products = list(Product.objects.filter(id__in=wanted))
        logger.debug(
            "product.find_many",
            requested=len(wanted),
            found=len(products),
        )
        return products
