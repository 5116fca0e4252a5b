from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from fastfeast import config
from fastfeast.cart_service.repository import CartRepository
from fastfeast.database import get_db
from fastfeast.errors import NotFoundError, ValidationError
from fastfeast.events import events
from fastfeast.order_service import pricing
from fastfeast.order_service.repository import OrderRepository
from fastfeast.restaurant_service.repository import CatalogRepository
from fastfeast.schemas import CamelModel
from fastfeast.user_service.security import get_current_user_id

router = APIRouter(tags=["orders"])


# --- DTOs ---
class LineItem(CamelModel):
    food_item_id: int
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class OrderCreate(CamelModel):
    restaurant_id: int
    items: List[LineItem] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    delivery_address: str = Field(..., min_length=1)
    delivery_fee: float = Field(0, ge=0)
    estimated_delivery_time: str = config.ESTIMATED_DELIVERY_TIME
    special_instructions: Optional[str] = None


class CheckoutRequest(CamelModel):
    delivery_address: str = Field(..., min_length=1)
    special_instructions: Optional[str] = None


class OrderResponse(CamelModel):
    id: int
    user_id: int
    restaurant_id: int
    items: List[LineItem] = []
    total_amount: float
    delivery_address: str
    delivery_fee: float
    status: str
    payment_status: str
    stripe_payment_intent_id: Optional[str] = None
    estimated_delivery_time: str
    special_instructions: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def _check_line_items(catalog: CatalogRepository, restaurant_id: int, items):
    try:
        catalog.get_restaurant(restaurant_id)
    except NotFoundError:
        raise ValidationError("Restaurant not found")
    for item in items:
        try:
            food_item = catalog.get_food_item(item.food_item_id)
        except NotFoundError:
            raise ValidationError(f"Food item {item.food_item_id} not found")
        if food_item.restaurant_id != restaurant_id:
            raise ValidationError(
                f"Food item {item.food_item_id} does not belong to restaurant {restaurant_id}"
            )


def _place_order(db: Session, background_tasks: BackgroundTasks, user_id: int, **fields):
    """Create the order and empty the cart in a single commit."""
    order = OrderRepository(db).create(user_id=user_id, **fields)
    CartRepository(db).clear(user_id)
    db.commit()
    db.refresh(order)

    background_tasks.add_task(
        events.order_placed, order.id, order.restaurant_id, len(order.items), order.total_amount
    )
    return order


# ==========================================
# ORDERS API
# ==========================================
@router.post("/orders", response_model=OrderResponse)
def create_order(payload: OrderCreate, background_tasks: BackgroundTasks,
                 user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    _check_line_items(CatalogRepository(db), payload.restaurant_id, payload.items)

    # total_amount is stored as submitted; payment re-prices the order
    return _place_order(
        db, background_tasks, user_id,
        restaurant_id=payload.restaurant_id,
        line_items=[item.model_dump() for item in payload.items],
        total_amount=payload.total_amount,
        delivery_address=payload.delivery_address,
        delivery_fee=payload.delivery_fee,
        estimated_delivery_time=payload.estimated_delivery_time,
        special_instructions=payload.special_instructions,
    )


@router.post("/checkout", response_model=OrderResponse)
def checkout(payload: CheckoutRequest, background_tasks: BackgroundTasks,
             user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    cart = CartRepository(db).list(user_id)
    if not cart:
        raise ValidationError("Cart is empty")

    # One order per checkout: the restaurant of the first cart row wins
    restaurant_id = cart[0].food_item.restaurant_id
    group = [item for item in cart if item.food_item.restaurant_id == restaurant_id]
    lines = [
        {"food_item_id": item.food_item_id, "quantity": item.quantity, "price": item.food_item.price}
        for item in group
    ]
    price = pricing.quote((line["price"], line["quantity"]) for line in lines)

    return _place_order(
        db, background_tasks, user_id,
        restaurant_id=restaurant_id,
        line_items=lines,
        total_amount=price.total,
        delivery_address=payload.delivery_address,
        delivery_fee=price.delivery_fee,
        estimated_delivery_time=config.ESTIMATED_DELIVERY_TIME,
        special_instructions=payload.special_instructions,
    )


@router.get("/orders", response_model=List[OrderResponse])
def get_orders(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return OrderRepository(db).list_by_user(user_id)


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order_detail(order_id: int, user_id: int = Depends(get_current_user_id),
                     db: Session = Depends(get_db)):
    return OrderRepository(db).get_for_user(order_id, user_id)
