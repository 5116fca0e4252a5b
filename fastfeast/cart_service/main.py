from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from fastfeast.cart_service.repository import CartRepository
from fastfeast.database import get_db
from fastfeast.errors import NotFoundError, ValidationError
from fastfeast.order_service import pricing
from fastfeast.restaurant_service.main import FoodItemResponse
from fastfeast.restaurant_service.repository import CatalogRepository
from fastfeast.schemas import CamelModel
from fastfeast.user_service.security import get_current_user_id

router = APIRouter(tags=["cart"])


# --- DTOs ---
class CartItemCreate(CamelModel):
    food_item_id: int
    quantity: int = Field(1, ge=1)


class CartItemUpdate(CamelModel):
    quantity: int = Field(..., ge=1)


class CartItemResponse(CamelModel):
    id: int
    user_id: int
    food_item_id: int
    quantity: int
    created_at: Optional[datetime] = None


class CartItemDetail(CartItemResponse):
    food_item: Optional[FoodItemResponse] = None


class CartSummary(CamelModel):
    item_count: int
    subtotal: float
    delivery_fee: float
    total: float


class Ack(CamelModel):
    message: str


# ==========================================
# CART API
# ==========================================
@router.post("/cart", response_model=CartItemResponse)
def add_to_cart(item: CartItemCreate, user_id: int = Depends(get_current_user_id),
                db: Session = Depends(get_db)):
    try:
        food_item = CatalogRepository(db).get_food_item(item.food_item_id)
    except NotFoundError:
        raise ValidationError("Food item not found")
    if not food_item.is_available:
        raise ValidationError(f"{food_item.name} is currently unavailable")

    cart_item = CartRepository(db).add(user_id, item.food_item_id, item.quantity)
    db.commit()
    db.refresh(cart_item)
    return cart_item


@router.get("/cart", response_model=List[CartItemDetail])
def get_my_cart(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return CartRepository(db).list(user_id)


@router.get("/cart/summary", response_model=CartSummary)
def get_cart_summary(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    items = CartRepository(db).list(user_id)
    price = pricing.quote((i.food_item.price, i.quantity) for i in items if i.food_item)
    return CartSummary(
        item_count=sum(i.quantity for i in items),
        subtotal=price.subtotal,
        delivery_fee=price.delivery_fee,
        total=price.total,
    )


@router.put("/cart/{cart_item_id}", response_model=CartItemResponse)
def update_cart_item(cart_item_id: int, item: CartItemUpdate,
                     user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    cart_item = CartRepository(db).update_quantity(cart_item_id, item.quantity, user_id=user_id)
    db.commit()
    db.refresh(cart_item)
    return cart_item


@router.delete("/cart/{cart_item_id}", response_model=Ack)
def remove_cart_item(cart_item_id: int, user_id: int = Depends(get_current_user_id),
                     db: Session = Depends(get_db)):
    CartRepository(db).remove(cart_item_id, user_id=user_id)
    db.commit()
    return {"message": "Item removed from cart"}


@router.delete("/cart", response_model=Ack)
def clear_cart(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    CartRepository(db).clear(user_id)
    db.commit()
    return {"message": "Cart cleared"}
