from sqlalchemy import Column, Integer, String, DateTime
from fastfeast.database import Base
import datetime

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100))
    email = Column(String(100), unique=True, index=True)
    hashed_password = Column(String(200))

    phone = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)

    # Billing identifiers on the payment processor side
    stripe_customer_id = Column(String(100), nullable=True)
    stripe_subscription_id = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.datetime.utcnow)
