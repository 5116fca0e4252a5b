"""
Order and payment lifecycles.

Order status:   pending -> confirmed -> preparing -> out_for_delivery -> delivered,
                with cancelled reachable from any non-terminal state.
Payment status: pending -> paid | failed, failed -> paid | pending.
                A declined attempt can be retried on the same intent or a new one,
                so failed is not terminal; paid is.

Re-writing the current value is allowed so that attaching a payment intent
to a pending order, or confirming the same payment twice, is not an error.
"""
import enum

from fastfeast.errors import InvalidTransitionError, ValidationError


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


ORDER_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

PAYMENT_STATUS_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: set(),
    PaymentStatus.FAILED: {PaymentStatus.PAID, PaymentStatus.PENDING},
}


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {enum_cls.__name__}: {value}")


def check_order_transition(current, new) -> OrderStatus:
    current, new = _coerce(OrderStatus, current), _coerce(OrderStatus, new)
    if current != new and new not in ORDER_STATUS_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Order cannot move from {current.value} to {new.value}"
        )
    return new


def check_payment_transition(current, new) -> PaymentStatus:
    current, new = _coerce(PaymentStatus, current), _coerce(PaymentStatus, new)
    if current != new and new not in PAYMENT_STATUS_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Payment cannot move from {current.value} to {new.value}"
        )
    return new
