import json
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from fastfeast.database import Base, get_db, make_engine
from fastfeast.errors import ProcessorError, ValidationError
from fastfeast.init_data import seed_catalog
from fastfeast.main import app
from fastfeast.payment_service.processor import PaymentIntent, WebhookEvent, get_payment_processor
from fastfeast.restaurant_service.models import FoodItem
from fastfeast.restaurant_service.repository import CatalogRepository
from fastfeast.user_service.repository import UserRepository
from fastfeast.user_service.security import create_access_token

VALID_SIGNATURE = "t=1,v1=ok"


class FakeProcessor:
    """In-memory stand-in for StripeProcessor."""

    def __init__(self):
        self.intents = {}
        self.customers = []
        self.created = []
        self.fail_with = None
        self.intent_failure = None

    def _maybe_fail(self):
        if self.fail_with:
            raise ProcessorError(self.fail_with)

    def create_customer(self, email, name):
        self._maybe_fail()
        customer_id = f"cus_{len(self.customers) + 1}"
        self.customers.append((customer_id, email))
        return customer_id

    def create_intent(self, amount, metadata, customer=None):
        self._maybe_fail()
        if self.intent_failure:
            raise ProcessorError(self.intent_failure)
        intent_id = f"pi_{len(self.intents) + 1}"
        intent = PaymentIntent(
            id=intent_id,
            status="requires_payment_method",
            amount=amount,
            currency="inr",
            client_secret=f"{intent_id}_secret_abc",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        self.created.append({"amount": amount, "metadata": dict(metadata), "customer": customer})
        return intent

    def retrieve_intent(self, intent_id):
        self._maybe_fail()
        if intent_id not in self.intents:
            raise ProcessorError(f"No such payment_intent: '{intent_id}'")
        return self.intents[intent_id]

    def construct_event(self, payload, signature):
        if signature != VALID_SIGNATURE:
            raise ValidationError("Invalid webhook: bad signature")
        data = json.loads(payload)
        return WebhookEvent(type=data["type"], object_id=data["data"]["object"]["id"])

    def set_status(self, intent_id, status):
        self.intents[intent_id].status = status

    def add_intent(self, intent_id, status="succeeded", metadata=None):
        self.intents[intent_id] = PaymentIntent(
            id=intent_id, status=status, amount=100, currency="inr",
            client_secret=f"{intent_id}_secret", metadata=metadata or {},
        )


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed_catalog(session)
    yield session
    session.close()


@pytest.fixture
def kitchen(db):
    """One restaurant with a 120 and a 90 dish."""
    catalog = CatalogRepository(db)
    restaurant = catalog.create_restaurant(
        name="Test Kitchen", description="Test restaurant", cuisine="Fusion",
        rating=4.0, delivery_time="20-30 mins", delivery_fee=25, min_order=0,
        is_veg=True, is_open=True,
    )
    roll = catalog.create_food_item(
        restaurant_id=restaurant.id, name="Paneer Roll", description="Grilled paneer wrap",
        price=120, category="Rolls", is_veg=True, is_spicy=False, is_available=True,
        preparation_time="10 mins",
    )
    chai = catalog.create_food_item(
        restaurant_id=restaurant.id, name="Chai Combo", description="Tea and snacks",
        price=90, category="Beverages", is_veg=True, is_spicy=False, is_available=True,
        preparation_time="5 mins",
    )
    db.commit()
    return {"restaurant_id": restaurant.id, "roll_id": roll.id, "chai_id": chai.id}


@pytest.fixture
def food_ids(db):
    """Seeded dish ids by name."""
    return {f.name: f.id for f in db.query(FoodItem).all()}


@pytest.fixture
def user(db):
    user = UserRepository(db).create(
        username="asha", email="asha@example.com", hashed_password="x", address="12 Park Street"
    )
    db.commit()
    return user


@pytest.fixture
def processor():
    return FakeProcessor()


@pytest.fixture
def client(session_factory, db, processor):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_processor] = lambda: processor
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email="demo@fastfeast.com", password="demo123", username="demo"):
    res = client.post("/register", json={
        "username": username, "email": email, "password": password,
        "address": "221B MG Road, Bengaluru",
    })
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


def expired_headers(user_id=1):
    token = create_access_token({"sub": "old@example.com", "id": user_id}, timedelta(minutes=-5))
    return {"Authorization": f"Bearer {token}"}
