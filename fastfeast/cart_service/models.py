from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from fastfeast.database import Base
from fastfeast.restaurant_service.models import FoodItem
import datetime

class CartItem(Base):
    __tablename__ = "cart_items"
    # One row per (user, food item); adding again bumps the quantity
    __table_args__ = (UniqueConstraint("user_id", "food_item_id", name="uq_cart_user_food"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, index=True)
    food_item_id = Column(Integer, ForeignKey("food_items.id"))
    quantity = Column(Integer, default=1)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    food_item = relationship(FoodItem)
