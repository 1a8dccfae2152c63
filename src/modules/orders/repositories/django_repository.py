"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
``create`` wraps the Order aggregate (Order + OrderItems) in
``transaction.atomic()`` so that either every row exists afterwards or
none does; database failures surface as ``PersistenceError`` once the
transaction has been rolled back.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from modules.orders.exceptions import PersistenceError
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> Order:
        fields = dict(data)
        items = fields.pop("items", [])
        try:
            with transaction.atomic():
                order = Order(**fields)
                order.save()
                for item_data in items:
                    item = OrderItem(order=order, **item_data)
                    item.save()
        except DatabaseError as exc:
            logger.error(
                "order.persist_failed",
                item_count=len(items),
                error=str(exc),
            )
            raise PersistenceError("Could not save the order") from exc

        logger.info("order.created", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: object) -> Optional[Order]:
        """Retrieve an order with eager-loaded items and products.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Order.objects.prefetch_related("items__product").filter(id=id).first()
        except (ValueError, ValidationError):
            return None
