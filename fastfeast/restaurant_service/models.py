from sqlalchemy import Column, Integer, String, Float, ForeignKey, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from fastfeast.database import Base
import datetime

class Restaurant(Base):
    __tablename__ = "restaurants"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), index=True)
    description = Column(String(500))
    cuisine = Column(String(50), index=True)
    image = Column(String(500), nullable=True)

    rating = Column(Float, default=0)  # 0-5
    delivery_time = Column(String(30))  # "25-30 mins"
    delivery_fee = Column(Float, default=0)
    min_order = Column(Float, default=0)

    is_veg = Column(Boolean, default=False)
    is_open = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    food_items = relationship("FoodItem", back_populates="restaurant")

class FoodItem(Base):
    __tablename__ = "food_items"
    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), index=True)

    name = Column(String(100), index=True)
    description = Column(String(500))
    price = Column(Float)
    image = Column(String(500), nullable=True)
    category = Column(String(50), index=True)  # Appetizers, Main Course, ...

    is_veg = Column(Boolean, default=False)
    is_spicy = Column(Boolean, default=False)
    is_available = Column(Boolean, default=True)
    preparation_time = Column(String(30))  # "15-20 mins"
    ingredients = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    restaurant = relationship("Restaurant", back_populates="food_items")
