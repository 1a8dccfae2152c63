"""Product model (storefront catalogue).

Business rules implemented:
- Price must be greater than zero (DB check constraint + ``clean``).
- Products are read-only from the checkout flow's perspective: the flow only
  looks them up by id to obtain the authoritative name, price, image and
  category of each cart line.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import TimestampedModel

logger = structlog.get_logger(__name__)


class Product(TimestampedModel):
    """Catalogue item sold by the store.

    The primary key is a plain auto-increment integer: storefront carts
    reference products by that numeric id.  ``image_url`` holds either a
    file name served from ``/images/`` or an absolute URL.
    """

    name = models.CharField(max_length=255)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    image_url = models.CharField(max_length=500, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    description = models.TextField(blank=True, default="")

    class Meta:
        db_table = "products"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=self.id,
                name=self.name,
            )

    def __str__(self) -> str:
        return f"#{self.id} - {self.name}"
