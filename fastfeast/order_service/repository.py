import datetime
from typing import Any, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session, joinedload

from fastfeast.errors import NotFoundError, ValidationError
from fastfeast.order_service.models import Order, OrderItem
from fastfeast.order_service.status import (
    OrderStatus,
    PaymentStatus,
    check_order_transition,
    check_payment_transition,
)


class OrderRepository:
    """Orders are created once and then only have their status fields moved.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, restaurant_id: int,
               line_items: Sequence[Mapping[str, Any]], total_amount: float,
               delivery_address: str, delivery_fee: float,
               estimated_delivery_time: str,
               special_instructions: Optional[str] = None) -> Order:
        if not line_items:
            raise ValidationError("Order must contain at least one item")

        now = datetime.datetime.utcnow()
        order = Order(
            user_id=user_id,
            restaurant_id=restaurant_id,
            total_amount=total_amount,
            delivery_address=delivery_address,
            delivery_fee=delivery_fee,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            estimated_delivery_time=estimated_delivery_time,
            special_instructions=special_instructions,
            created_at=now,
            updated_at=now,
        )
        for position, line in enumerate(line_items):
            order.items.append(OrderItem(
                position=position,
                food_item_id=line["food_item_id"],
                quantity=line["quantity"],
                price=line["price"],
            ))
        self.db.add(order)
        self.db.flush()
        return order

    def get_by_id(self, order_id: int, for_update: bool = False) -> Order:
        query = self.db.query(Order).filter(Order.id == order_id)
        if for_update:
            query = query.with_for_update()
        order = query.first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_for_user(self, order_id: int, user_id: int) -> Order:
        """Like get_by_id, but another user's order is reported as missing."""
        order = self.get_by_id(order_id)
        if order.user_id != user_id:
            raise NotFoundError("Order not found")
        return order

    def get_by_payment_intent(self, payment_intent_id: str) -> Order:
        order = (
            self.db.query(Order)
            .filter(Order.stripe_payment_intent_id == payment_intent_id)
            .first()
        )
        if not order:
            raise NotFoundError("Order not found")
        return order

    def list_by_user(self, user_id: int) -> List[Order]:
        return (
            self.db.query(Order)
            .options(joinedload(Order.items))
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def update_status(self, order_id: int, new_status) -> Order:
        order = self.get_by_id(order_id, for_update=True)
        order.status = check_order_transition(order.status, new_status).value
        order.updated_at = datetime.datetime.utcnow()
        self.db.flush()
        return order

    def update_payment_status(self, order_id: int, new_payment_status,
                              payment_intent_id: Optional[str] = None) -> Order:
        order = self.get_by_id(order_id, for_update=True)
        order.payment_status = check_payment_transition(order.payment_status, new_payment_status).value
        if payment_intent_id:
            order.stripe_payment_intent_id = payment_intent_id
        order.updated_at = datetime.datetime.utcnow()
        self.db.flush()
        return order
