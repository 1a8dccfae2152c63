"""Order and OrderItem models.

Business rules implemented:
- An order is created once per checkout and is not modified by the
  checkout flow afterwards.
- Order + items are written as one unit (see ``OrderDjangoRepository``).
- ``total_amount`` is computed server-side from catalogue prices.
- OrderItem snapshots product price at creation time (``unit_price``).
- OrderItem subtotal is always ``quantity * unit_price`` (calculated on save).
- Product FK uses PROTECT to preserve order history.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import TimestampedModel, UUIDv7Model


class Order(UUIDv7Model):
    """Order aggregate root.

    The UUIDv7 ``id`` doubles as the payment ``external_reference``.
    Customer and address data are stored flat on the order: the store has
    no customer accounts.
    """

    customer_name: models.CharField = models.CharField(max_length=255)
    customer_email: models.EmailField = models.EmailField(max_length=254)
    customer_cpf: models.CharField = models.CharField(max_length=11, blank=True, default="")

    address_cep: models.CharField = models.CharField(max_length=8)
    address_street: models.CharField = models.CharField(max_length=255)
    address_number: models.CharField = models.CharField(max_length=20)
    address_complement: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    address_neighborhood: models.CharField = models.CharField(max_length=255)
    address_city: models.CharField = models.CharField(max_length=255)
    address_state: models.CharField = models.CharField(max_length=50)

    shipping_cost: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    shipping_method: models.CharField = models.CharField(max_length=100, blank=True, default="")
    shipping_service: models.CharField = models.CharField(max_length=100, blank=True, default="")
    shipping_delivery_time: models.CharField = models.CharField(
        max_length=100, blank=True, default=""
    )
    melhor_envio_id: models.CharField = models.CharField(  # noqa: DJ01
        max_length=50, null=True, blank=True
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["customer_email"], name="orders_customer_email_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(shipping_cost__gte=0),
                name="orders_shipping_cost_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="orders_total_amount_non_negative",
            ),
        ]

    @property
    def items_total(self) -> Decimal:
        return sum((item.subtotal for item in self.items.all()), Decimal("0.00"))

    @property
    def full_address(self) -> str:
        street = f"{self.address_street}, {self.address_number}"
        if self.address_complement:
            street = f"{street} - {self.address_complement}"
        return (
            f"{street}, {self.address_neighborhood}, "
            f"{self.address_city}/{self.address_state}, CEP {self.formatted_cep}"
        )

    @property
    def formatted_cep(self) -> str:
        cep = self.address_cep
        return f"{cep[:5]}-{cep[5:]}" if len(cep) == 8 else cep

    def __str__(self) -> str:
        return f"{self.id} ({self.customer_name})"


class OrderItem(TimestampedModel):
    """Line item linking an Order to a Product.

    ``unit_price`` is a **snapshot** of the product price at the time of
    purchase; it never changes even if the product price is updated later.
    ``subtotal`` is always ``quantity * unit_price``, recalculated on every save.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    size: models.CharField = models.CharField(max_length=20)
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.unit_price:
            unit_price = getattr(self.product, "price", None)
            if unit_price is None:
                raise ValidationError({"unit_price": "Product price is required."})
            self.unit_price = unit_price
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product} x{self.quantity} ({self.size})"
