from typing import Iterable, NamedTuple, Tuple

from fastfeast import config


class PriceQuote(NamedTuple):
    subtotal: float
    delivery_fee: float
    total: float


def quote(lines: Iterable[Tuple[float, int]]) -> PriceQuote:
    """Price (unit_price, quantity) pairs. Delivery is free above the threshold."""
    subtotal = round(sum(price * quantity for price, quantity in lines), 2)
    delivery_fee = 0.0 if subtotal > config.FREE_DELIVERY_THRESHOLD else config.DELIVERY_FEE
    if subtotal == 0:
        delivery_fee = 0.0
    return PriceQuote(subtotal, delivery_fee, round(subtotal + delivery_fee, 2))


def amounts_match(a: float, b: float) -> bool:
    return round(a, 2) == round(b, 2)


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))
