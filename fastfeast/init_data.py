"""
Demo catalog and account.

Runs automatically at startup when SEED_DEMO_DATA is true; for a persistent
DATABASE_URL it can also be run once by hand:

    python -m fastfeast.init_data
"""
import logging

from sqlalchemy.orm import Session

from fastfeast.restaurant_service.repository import CatalogRepository
from fastfeast.user_service.repository import UserRepository
from fastfeast.user_service.security import get_password_hash

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@fastfeast.com"
DEMO_PASSWORD = "demo123"

RESTAURANTS = [
    {
        "name": "Sharma Ji Ka Dhaba",
        "description": "Authentic North Indian cuisine with traditional flavors from Punjab",
        "cuisine": "North Indian",
        "image": "https://images.unsplash.com/photo-1555939594-58d7cb561ad1?w=500",
        "rating": 4.5, "delivery_time": "25-30 mins", "delivery_fee": 25, "min_order": 150,
        "is_veg": False, "is_open": True,
        "menu": [
            {
                "name": "Butter Chicken",
                "description": "Creamy tomato-based curry with tender chicken pieces",
                "price": 280, "category": "Main Course",
                "image": "https://images.unsplash.com/photo-1588166524941-3bf61a9c41db?w=400",
                "is_veg": False, "is_spicy": True, "preparation_time": "20-25 mins",
                "ingredients": ["Chicken", "Tomatoes", "Cream", "Spices"],
            },
            {
                "name": "Dal Makhani",
                "description": "Rich and creamy black lentils cooked overnight",
                "price": 220, "category": "Main Course",
                "image": "https://images.unsplash.com/photo-1546833999-b9f581a1996d?w=400",
                "is_veg": True, "is_spicy": False, "preparation_time": "15-20 mins",
                "ingredients": ["Black Lentils", "Butter", "Cream", "Spices"],
            },
        ],
    },
    {
        "name": "South Spice Express",
        "description": "Traditional South Indian delicacies - Dosas, Idlis, and more",
        "cuisine": "South Indian",
        "image": "https://images.unsplash.com/photo-1565557623262-b51c2513a641?w=500",
        "rating": 4.3, "delivery_time": "20-25 mins", "delivery_fee": 20, "min_order": 120,
        "is_veg": True, "is_open": True,
        "menu": [
            {
                "name": "Masala Dosa",
                "description": "Crispy rice crepe filled with spiced potato curry",
                "price": 120, "category": "Main Course",
                "image": "https://images.unsplash.com/photo-1567188040759-fb8a883dc6d8?w=400",
                "is_veg": True, "is_spicy": True, "preparation_time": "15-18 mins",
                "ingredients": ["Rice", "Lentils", "Potatoes", "Spices"],
            },
            {
                "name": "Sambar Vada",
                "description": "Fried lentil donuts soaked in flavorful sambar",
                "price": 80, "category": "Appetizers",
                "image": "https://images.unsplash.com/photo-1596797038530-2c107229654b?w=400",
                "is_veg": True, "is_spicy": True, "preparation_time": "10-12 mins",
                "ingredients": ["Lentils", "Tamarind", "Vegetables", "Spices"],
            },
        ],
    },
    {
        "name": "Mumbai Street Kitchen",
        "description": "Mumbai street food favorites - Vada Pav, Pav Bhaji, Bhel Puri",
        "cuisine": "Street Food",
        "image": "https://images.unsplash.com/photo-1596797038530-2c107229654b?w=500",
        "rating": 4.7, "delivery_time": "15-20 mins", "delivery_fee": 15, "min_order": 80,
        "is_veg": True, "is_open": True,
        "menu": [
            {
                "name": "Vada Pav",
                "description": "Mumbai's famous potato fritter sandwich",
                "price": 40, "category": "Street Food",
                "image": "https://images.unsplash.com/photo-1601050690597-df0568f70950?w=400",
                "is_veg": True, "is_spicy": True, "preparation_time": "8-10 mins",
                "ingredients": ["Potatoes", "Bread", "Chutneys", "Spices"],
            },
            {
                "name": "Pav Bhaji",
                "description": "Spicy vegetable curry served with buttered bread",
                "price": 90, "category": "Main Course",
                "image": "https://images.unsplash.com/photo-1606491956689-2ea866880c84?w=400",
                "is_veg": True, "is_spicy": True, "preparation_time": "12-15 mins",
                "ingredients": ["Mixed Vegetables", "Bread", "Butter", "Spices"],
            },
        ],
    },
]


def seed_catalog(db: Session) -> int:
    """Insert the demo restaurants and menus if the catalog is empty."""
    catalog = CatalogRepository(db)
    if catalog.count_restaurants():
        return 0

    for data in RESTAURANTS:
        fields = dict(data)
        menu = fields.pop("menu")
        restaurant = catalog.create_restaurant(**fields)
        for dish in menu:
            catalog.create_food_item(restaurant_id=restaurant.id, is_available=True, **dish)
    db.commit()
    logger.info("Seeded %d restaurants", len(RESTAURANTS))
    return len(RESTAURANTS)


def seed_demo_user(db: Session) -> bool:
    users = UserRepository(db)
    if users.get_by_email(DEMO_EMAIL):
        return False
    users.create(
        username="demo",
        email=DEMO_EMAIL,
        hashed_password=get_password_hash(DEMO_PASSWORD),
        address="221B MG Road, Bengaluru",
    )
    db.commit()
    logger.info("Demo account: %s / %s", DEMO_EMAIL, DEMO_PASSWORD)
    return True


def seed_all(db: Session):
    seed_catalog(db)
    seed_demo_user(db)


if __name__ == "__main__":
    from fastfeast.database import Base, SessionLocal, engine
    import fastfeast.main  # noqa: F401  registers every model on Base

    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_all(session)
    finally:
        session.close()
