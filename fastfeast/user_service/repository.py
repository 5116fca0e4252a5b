from typing import Optional

from sqlalchemy.orm import Session

from fastfeast.errors import NotFoundError
from fastfeast.user_service.models import User


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, username: str, email: str, hashed_password: str,
               phone: Optional[str] = None, address: Optional[str] = None) -> User:
        user = User(
            username=username,
            email=email,
            hashed_password=hashed_password,
            phone=phone,
            address=address,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def get_by_id(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def update_contact(self, user_id: int, phone: Optional[str] = None,
                       address: Optional[str] = None) -> User:
        user = self.get_by_id(user_id)
        if phone is not None:
            user.phone = phone
        if address is not None:
            user.address = address
        self.db.flush()
        return user

    def update_billing_ids(self, user_id: int, stripe_customer_id: str,
                           stripe_subscription_id: Optional[str] = None) -> User:
        user = self.get_by_id(user_id)
        user.stripe_customer_id = stripe_customer_id
        if stripe_subscription_id is not None:
            user.stripe_subscription_id = stripe_subscription_id
        self.db.flush()
        return user
