from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fastfeast.database import get_db
from fastfeast.errors import ValidationError
from fastfeast.restaurant_service.repository import CatalogRepository
from fastfeast.schemas import CamelModel

router = APIRouter(tags=["catalog"])


# --- DTOs ---
class RestaurantResponse(CamelModel):
    id: int
    name: str
    description: str
    cuisine: str
    image: Optional[str] = None
    rating: float
    delivery_time: str
    delivery_fee: float
    min_order: float
    is_veg: bool
    is_open: bool
    created_at: Optional[datetime] = None


class FoodItemResponse(CamelModel):
    id: int
    restaurant_id: int
    name: str
    description: str
    price: float
    image: Optional[str] = None
    category: str
    is_veg: bool
    is_spicy: bool
    is_available: bool
    preparation_time: str
    ingredients: Optional[List[str]] = None
    created_at: Optional[datetime] = None


# ==========================================
# RESTAURANTS
# ==========================================
@router.get("/restaurants", response_model=List[RestaurantResponse])
def get_restaurants(cuisine: Optional[str] = None, db: Session = Depends(get_db)):
    return CatalogRepository(db).list_restaurants(cuisine)


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantResponse)
def get_restaurant_detail(restaurant_id: int, db: Session = Depends(get_db)):
    return CatalogRepository(db).get_restaurant(restaurant_id)


@router.get("/restaurants/{restaurant_id}/menu", response_model=List[FoodItemResponse])
def get_restaurant_menu(restaurant_id: int, db: Session = Depends(get_db)):
    return CatalogRepository(db).menu(restaurant_id)


# ==========================================
# FOOD ITEMS
# ==========================================
@router.get("/food-items/search", response_model=List[FoodItemResponse])
def search_food_items(q: Optional[str] = Query(None), db: Session = Depends(get_db)):
    if not q or not q.strip():
        raise ValidationError("Search query required")
    return CatalogRepository(db).search(q.strip())


@router.get("/food-items/category/{category}", response_model=List[FoodItemResponse])
def get_food_items_by_category(category: str, db: Session = Depends(get_db)):
    return CatalogRepository(db).by_category(category)
