"""Checkout service layer (Use Case).

Orchestrates the checkout flow::

    received -> validated -> reconciled -> persisted
             -> preference_created -> notified -> responded

with an early exit to ``failed`` at validation, reconciliation,
persistence or preference creation.  Only the persistence step is
transactional; the orchestration itself is not, so an order stays
committed when the payment provider fails afterwards.  Once the order is
persisted the flow never reports a total failure except for the payment
provider error, and notification problems only degrade ``emailStatus``.

Business rules enforced:
- Every cart line must reference an existing product (all missing ids
  are reported together).
- Names, prices, images and categories come from the catalogue; the
  client only decides quantity and size.
- The persisted total is recomputed from catalogue prices; a client total
  that disagrees is logged, or rejected when ``enforce_totals`` is on.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import DatabaseError

from modules.core.exceptions import CheckoutError
from modules.orders.adapters import normalize_checkout_payload
from modules.orders.constants import MAX_MONEY, MONEY_QUANTUM, TOTAL_TOLERANCE, CheckoutStage
from modules.orders.dtos import CheckoutResultDTO
from modules.orders.exceptions import ValidationError
from modules.orders.reconciliation import ProductReconciler
from modules.orders.validators import OrderValidator
from modules.payments.exceptions import PaymentProviderError

if TYPE_CHECKING:
    from modules.notifications.dispatcher import NotificationDispatcher
    from modules.orders.dtos import CheckoutDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.payments.preference import PaymentPreferenceBuilder
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def compute_total(dto: CheckoutDTO, products: Dict[int, Product]) -> Decimal:
    """``sum(catalogue price x quantity) + shipping``, rounded to cents."""
    items_total = sum(
        (products[item.id].price * item.quantity for item in dto.items),
        Decimal("0"),
    )
    return (items_total + dto.shipping_cost).quantize(MONEY_QUANTUM)


class CheckoutService:
    """Application service for the checkout use-case.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        product_repository: IProductRepository,
        order_repository: IOrderRepository,
        preference_builder: PaymentPreferenceBuilder,
        dispatcher: NotificationDispatcher,
        validator: Optional[OrderValidator] = None,
        enforce_totals: bool = False,
    ) -> None:
        self._order_repo = order_repository
        self._reconciler = ProductReconciler(product_repository)
        self._preference_builder = preference_builder
        self._dispatcher = dispatcher
        self._validator = validator or OrderValidator()
        self._enforce_totals = enforce_totals

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def checkout(self, payload: Any) -> CheckoutResultDTO:
        """Run the whole checkout for a raw request payload.

        Raises:
            ValidationError: malformed payload (or total mismatch when
                totals are enforced).  Nothing was written.
            ProductNotFoundError: unknown product ids.  Nothing was written.
            PersistenceError: the order could not be saved.
            PaymentProviderError: the order was saved but no preference
                could be created; carries the order id.
        """
        log = logger.bind()
        log.debug("checkout.received", stage=CheckoutStage.RECEIVED.value)

        dto = self._run_stage(
            log,
            CheckoutStage.VALIDATED,
            lambda: self._validator.validate(normalize_checkout_payload(payload)),
        )
        log = log.bind(item_count=len(dto.items))
        log.info("checkout.validated", stage=CheckoutStage.VALIDATED.value)

        products = self._run_stage(
            log,
            CheckoutStage.RECONCILED,
            lambda: self._reconciler.reconcile(dto.product_ids),
        )
        log.info("checkout.reconciled", stage=CheckoutStage.RECONCILED.value)

        total = self._run_stage(
            log, CheckoutStage.RECONCILED, lambda: self._check_total(dto, products, log)
        )

        order = self._run_stage(
            log,
            CheckoutStage.PERSISTED,
            lambda: self._order_repo.create(self._order_data(dto, products, total)),
        )
        order_id = str(order.id)
        log = log.bind(order_id=order_id)
        log.info("checkout.persisted", stage=CheckoutStage.PERSISTED.value, total=str(total))

        order = self._reload(order, log)
        preference = self._create_preference(order, log)
        log.info(
            "checkout.preference_created",
            stage=CheckoutStage.PREFERENCE_CREATED.value,
            preference_id=preference.id,
        )

        email_status = self._dispatcher.dispatch(order, preference, dto.notifications)
        log.info(
            "checkout.notified",
            stage=CheckoutStage.NOTIFIED.value,
            email_success=email_status.success,
            email_errors=len(email_status.errors),
        )

        return CheckoutResultDTO(
            order_id=order_id,
            preference=preference,
            email_status=email_status,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _run_stage(log, stage: CheckoutStage, step):
        try:
            return step()
        except CheckoutError as exc:
            log.warning(
                "checkout.failed",
                stage=CheckoutStage.FAILED.value,
                failed_at=stage.value,
                error_type=type(exc).__name__,
            )
            raise

    def _check_total(
        self, dto: CheckoutDTO, products: Dict[int, Product], log
    ) -> Decimal:
        for index, item in enumerate(dto.items):
            if products[item.id].price * item.quantity > MAX_MONEY:
                raise ValidationError(
                    "Item subtotal exceeds the maximum amount",
                    field="items.quantity",
                    index=index,
                )
        total = compute_total(dto, products)
        if total > MAX_MONEY:
            raise ValidationError("Order total exceeds the maximum amount", field="totalAmount")
        difference = abs(total - dto.total_amount)
        if difference > TOTAL_TOLERANCE:
            log.warning(
                "checkout.total_mismatch",
                client_total=str(dto.total_amount),
                server_total=str(total),
                enforced=self._enforce_totals,
            )
            if self._enforce_totals:
                raise ValidationError(
                    f"totalAmount does not match the order total ({total})",
                    field="totalAmount",
                )
        return total

    def _reload(self, order: Order, log) -> Order:
        """Re-read the order with its items prefetched.

        Falls back to the saved instance when the read fails.
        """
        try:
            return self._order_repo.get_by_id(order.id) or order
        except (DatabaseError, ArithmeticError) as exc:
            log.warning("checkout.reload_failed", error_type=type(exc).__name__)
            return order

    def _create_preference(self, order: Order, log):
        try:
            return self._preference_builder.create(order)
        except PaymentProviderError as exc:
            log.error(
                "checkout.failed",
                stage=CheckoutStage.FAILED.value,
                failed_at=CheckoutStage.PREFERENCE_CREATED.value,
                error_type=type(exc).__name__,
                error=exc.message,
            )
            raise PaymentProviderError(
                exc.message,
                order_id=str(order.id),
                provider_status=exc.provider_status,
            ) from exc

    @staticmethod
    def _order_data(
        dto: CheckoutDTO, products: Dict[int, Product], total: Decimal
    ) -> Dict[str, Any]:
        shipping = dto.shipping
        return {
            "customer_name": dto.customer_name,
            "customer_email": dto.customer_email,
            "customer_cpf": dto.customer_cpf,
            "address_cep": dto.address.cep,
            "address_street": dto.address.street,
            "address_number": dto.address.number,
            "address_complement": dto.address.complement,
            "address_neighborhood": dto.address.neighborhood,
            "address_city": dto.address.city,
            "address_state": dto.address.state,
            "shipping_cost": dto.shipping_cost.quantize(MONEY_QUANTUM),
            "total_amount": total,
            "shipping_method": shipping.method if shipping else "",
            "shipping_service": shipping.service if shipping else "",
            "shipping_delivery_time": shipping.delivery_time if shipping else "",
            "melhor_envio_id": shipping.melhor_envio_id if shipping else None,
            "items": [
                {
                    "product": products[item.id],
                    "quantity": item.quantity,
                    "size": item.size,
                    "unit_price": products[item.id].price,
                }
                for item in dto.items
            ],
        }
