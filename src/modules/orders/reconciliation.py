"""Product Reconciler.

Confirms every cart line references a product that exists and returns
the authoritative records.  Later steps read name, price, image and
category from these records; only quantity and size come from the client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable

import structlog

from modules.orders.exceptions import ProductNotFoundError

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductReconciler:
    def __init__(self, product_repository: IProductRepository) -> None:
        self._product_repo = product_repository

    def reconcile(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Map each requested id to its product record.

        Raises:
            ProductNotFoundError: listing every missing id, in the order
                the ids were requested.
        """
        wanted = list(dict.fromkeys(product_ids))
        products = {product.id: product for product in self._product_repo.find_many(wanted)}

        missing = [pid for pid in wanted if pid not in products]
        if missing:
            logger.warning("checkout.products_missing", missing_ids=missing)
            raise ProductNotFoundError(missing)

        return products
