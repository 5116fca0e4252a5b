from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from fastfeast.database import Base
from fastfeast.order_service.status import OrderStatus, PaymentStatus
import datetime

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), index=True)

    # Stored exactly as submitted; PaymentCoordinator.expected_total re-prices it
    total_amount = Column(Float)
    delivery_fee = Column(Float, default=0)
    delivery_address = Column(String(255))

    status = Column(String(30), default=OrderStatus.PENDING.value)
    payment_status = Column(String(20), default=PaymentStatus.PENDING.value)
    stripe_payment_intent_id = Column(String(100), nullable=True, index=True)

    estimated_delivery_time = Column(String(30))
    special_instructions = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"))
    position = Column(Integer)

    food_item_id = Column(Integer, ForeignKey("food_items.id"))
    quantity = Column(Integer)
    price = Column(Float)  # unit price snapshot at order time

    order = relationship("Order", back_populates="items")
