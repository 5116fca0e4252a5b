from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from fastfeast.errors import NotFoundError
from fastfeast.restaurant_service.models import FoodItem, Restaurant


class CatalogRepository:
    """Restaurants and their menus. Read-mostly; written only by seeding."""

    def __init__(self, db: Session):
        self.db = db

    # --- restaurants ---
    def create_restaurant(self, **fields) -> Restaurant:
        restaurant = Restaurant(**fields)
        self.db.add(restaurant)
        self.db.flush()
        return restaurant

    def list_restaurants(self, cuisine: Optional[str] = None) -> List[Restaurant]:
        query = self.db.query(Restaurant)
        if cuisine:
            query = query.filter(Restaurant.cuisine.ilike(f"%{cuisine}%"))
        return query.order_by(Restaurant.id).all()

    def get_restaurant(self, restaurant_id: int) -> Restaurant:
        restaurant = self.db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
        if not restaurant:
            raise NotFoundError("Restaurant not found")
        return restaurant

    def count_restaurants(self) -> int:
        return self.db.query(Restaurant).count()

    # --- food items ---
    def create_food_item(self, **fields) -> FoodItem:
        food_item = FoodItem(**fields)
        self.db.add(food_item)
        self.db.flush()
        return food_item

    def get_food_item(self, food_item_id: int) -> FoodItem:
        food_item = self.db.query(FoodItem).filter(FoodItem.id == food_item_id).first()
        if not food_item:
            raise NotFoundError("Food item not found")
        return food_item

    def menu(self, restaurant_id: int) -> List[FoodItem]:
        return (
            self.db.query(FoodItem)
            .filter(FoodItem.restaurant_id == restaurant_id)
            .order_by(FoodItem.id)
            .all()
        )

    def by_category(self, category: str) -> List[FoodItem]:
        return (
            self.db.query(FoodItem)
            .filter(func.lower(FoodItem.category) == category.lower())
            .order_by(FoodItem.id)
            .all()
        )

    def search(self, q: str) -> List[FoodItem]:
        return (
            self.db.query(FoodItem)
            .filter(or_(
                FoodItem.name.ilike(f"%{q}%"),
                FoodItem.description.ilike(f"%{q}%"),
                FoodItem.category.ilike(f"%{q}%"),
            ))
            .order_by(FoodItem.id)
            .all()
        )
