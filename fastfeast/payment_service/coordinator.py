"""
Bridges orders and the payment processor.

The coordinator owns its transaction: each operation either commits all of
its order writes or none of them, and no order write happens before the
processor call it depends on has succeeded. A newly created processor
customer id is the exception: it is committed as soon as the customer exists.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from fastfeast.database import get_db
from fastfeast.errors import NotFoundError, ProcessorError, ValidationError
from fastfeast.order_service import pricing
from fastfeast.order_service.models import Order
from fastfeast.order_service.repository import OrderRepository
from fastfeast.order_service.status import OrderStatus, PaymentStatus, check_payment_transition
from fastfeast.payment_service.processor import (
    SUCCEEDED,
    PaymentIntent,
    WebhookEvent,
    get_payment_processor,
)
from fastfeast.restaurant_service.repository import CatalogRepository
from fastfeast.user_service.repository import UserRepository

logger = logging.getLogger(__name__)

INTENT_SUCCEEDED = "payment_intent.succeeded"
INTENT_FAILED = "payment_intent.payment_failed"


@dataclass
class ConfirmResult:
    success: bool
    message: str
    order: Optional[Order] = None
    newly_paid: bool = False


class PaymentCoordinator:
    def __init__(self, db: Session, processor):
        self.db = db
        self.processor = processor
        self.orders = OrderRepository(db)
        self.users = UserRepository(db)
        self.catalog = CatalogRepository(db)

    def expected_total(self, order: Order) -> float:
        """Re-price an order from current catalog prices."""
        lines = []
        for item in order.items:
            try:
                food_item = self.catalog.get_food_item(item.food_item_id)
            except NotFoundError:
                raise ValidationError(f"Food item {item.food_item_id} is no longer on the menu")
            lines.append((food_item.price, item.quantity))
        return pricing.quote(lines).total

    def create_intent(self, order_id: int, amount: float, user_id: int) -> str:
        """Open a processor intent for the order and return its client secret."""
        order = self.orders.get_for_user(order_id, user_id)
        # pending (first attempt) or failed (retry after a decline); never paid
        check_payment_transition(order.payment_status, PaymentStatus.PENDING)

        expected = self.expected_total(order)
        if not pricing.amounts_match(amount, expected):
            raise ValidationError(
                f"Payment amount {amount:.2f} does not match order total {expected:.2f}"
            )

        try:
            customer_id = self._ensure_customer(user_id)
            intent = self.processor.create_intent(
                pricing.to_minor_units(amount),
                metadata={"orderId": str(order.id), "userId": str(user_id)},
                customer=customer_id,
            )
        except ProcessorError as e:
            raise ProcessorError(f"Error creating payment intent: {e.message}")

        try:
            self.orders.update_payment_status(order.id, PaymentStatus.PENDING, intent.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Payment intent %s created for order %s (%s)", intent.id, order_id, amount)
        return intent.client_secret

    def confirm_intent(self, intent_id: str, user_id: Optional[int] = None) -> ConfirmResult:
        """Mark the intent's order paid and confirmed if the processor reports success."""
        try:
            intent = self.processor.retrieve_intent(intent_id)
        except ProcessorError as e:
            raise ProcessorError(f"Error confirming payment: {e.message}")

        if intent.status != SUCCEEDED:
            logger.info("Payment intent %s not completed (status=%s)", intent_id, intent.status)
            return ConfirmResult(False, "Payment not completed")

        order = self._order_for_intent(intent, user_id)
        if order.payment_status == PaymentStatus.PAID:
            return ConfirmResult(True, "Payment already confirmed", order)

        try:
            self.orders.update_payment_status(order.id, PaymentStatus.PAID, intent.id)
            self.orders.update_status(order.id, OrderStatus.CONFIRMED)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Order %s paid via %s", order.id, intent.id)
        return ConfirmResult(True, "Payment confirmed", order, newly_paid=True)

    def fail_intent(self, intent_id: str) -> Order:
        """Record a failed charge against the order holding this intent."""
        order = self.orders.get_by_payment_intent(intent_id)
        if order.payment_status == PaymentStatus.FAILED:
            return order
        if order.payment_status == PaymentStatus.PAID:
            # a decline reported after a later attempt already succeeded
            logger.info("Ignoring failure for paid order %s (%s)", order.id, intent_id)
            return order
        try:
            self.orders.update_payment_status(order.id, PaymentStatus.FAILED)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.warning("Payment failed for order %s (%s)", order.id, intent_id)
        return order

    def handle_webhook(self, event: WebhookEvent) -> Optional[ConfirmResult]:
        if event.type == INTENT_SUCCEEDED:
            return self.confirm_intent(event.object_id)
        if event.type == INTENT_FAILED:
            self.fail_intent(event.object_id)
            return ConfirmResult(False, "Payment failed")
        logger.debug("Ignoring webhook event %s", event.type)
        return None

    def _order_for_intent(self, intent: PaymentIntent, user_id: Optional[int]) -> Order:
        raw_order_id = intent.metadata.get("orderId")
        if not raw_order_id:
            raise NotFoundError("Payment intent is not linked to an order")
        try:
            order_id = int(raw_order_id)
        except ValueError:
            raise NotFoundError("Order not found")
        if user_id is None:
            return self.orders.get_by_id(order_id)
        return self.orders.get_for_user(order_id, user_id)

    def _ensure_customer(self, user_id: int) -> str:
        user = self.users.get_by_id(user_id)
        if user.stripe_customer_id:
            return user.stripe_customer_id
        customer_id = self.processor.create_customer(email=user.email, name=user.username)
        # Committed on its own so a later intent failure does not orphan the customer
        try:
            self.users.update_billing_ids(user.id, customer_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return customer_id


def get_payment_coordinator(db: Session = Depends(get_db),
                            processor=Depends(get_payment_processor)) -> PaymentCoordinator:
    return PaymentCoordinator(db, processor)
