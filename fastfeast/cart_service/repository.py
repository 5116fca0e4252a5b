from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from fastfeast.cart_service.models import CartItem
from fastfeast.errors import NotFoundError, ValidationError


class CartRepository:
    """Per-user food item -> quantity rows.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, user_id: int, food_item_id: int, quantity: int) -> CartItem:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("Quantity must be a positive integer")

        item = (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.food_item_id == food_item_id)
            .with_for_update()
            .first()
        )
        if item:
            item.quantity = item.quantity + quantity
        else:
            item = CartItem(user_id=user_id, food_item_id=food_item_id, quantity=quantity)
            self.db.add(item)
        self.db.flush()
        return item

    def list(self, user_id: int) -> List[CartItem]:
        return (
            self.db.query(CartItem)
            .options(joinedload(CartItem.food_item))
            .filter(CartItem.user_id == user_id)
            .order_by(CartItem.id)
            .all()
        )

    def update_quantity(self, cart_item_id: int, quantity: int,
                        user_id: Optional[int] = None) -> CartItem:
        # No range check here: the HTTP layer rejects quantity < 1
        query = self.db.query(CartItem).filter(CartItem.id == cart_item_id)
        if user_id is not None:
            query = query.filter(CartItem.user_id == user_id)
        item = query.with_for_update().first()
        if not item:
            raise NotFoundError("Cart item not found")
        item.quantity = quantity
        self.db.flush()
        return item

    def remove(self, cart_item_id: int, user_id: Optional[int] = None) -> None:
        query = self.db.query(CartItem).filter(CartItem.id == cart_item_id)
        if user_id is not None:
            query = query.filter(CartItem.user_id == user_id)
        query.delete(synchronize_session="fetch")
        self.db.flush()

    def clear(self, user_id: int) -> None:
        self.db.query(CartItem).filter(CartItem.user_id == user_id).delete(synchronize_session="fetch")
        self.db.flush()
