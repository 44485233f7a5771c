# File: storefront/db/repositories.py

"""
Credential Store and Order Store.

Thin wrappers around a SQLAlchemy session. Services depend on these classes,
never on the session directly, so the persistence technology can change
without touching business logic.
"""

from typing import Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.models.order import Order, OrderStatus
from storefront.models.user import User


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    def get(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == self.normalize_email(email))
        return self.db.scalars(stmt).first()

    def list(self) -> List[User]:
        return list(self.db.scalars(select(User).order_by(User.created_at, User.id)))

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(User))

    def add(self, user: User) -> User:
        user.email = self.normalize_email(user.email)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def save(self, user: User) -> User:
        user.email = self.normalize_email(user.email)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.commit()


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: str) -> Optional[Order]:
        return self.db.get(Order, order_id, populate_existing=True)

    def list(self) -> List[Order]:
        stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        return list(self.db.scalars(stmt))

    def list_for_user(self, user_id: str) -> List[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(self.db.scalars(stmt))

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        expected: Optional[Iterable[OrderStatus]] = None,
    ) -> bool:
        """
        Set an order's status in one UPDATE statement.

        When ``expected`` is given the row only changes if its current status
        is one of them. Returns whether a row matched.
        """
        stmt = update(Order).where(Order.id == order_id)
        if expected is not None:
            stmt = stmt.where(Order.status.in_(list(expected)))
        result = self.db.execute(stmt.values(status=status).execution_options(synchronize_session=False))
        self.db.commit()
        return result.rowcount > 0
