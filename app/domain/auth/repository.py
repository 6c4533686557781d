"""User repository - Database operations for users"""

from typing import Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from ...models import User
from ...schemas import PageParams
from ...shared.pagination import paginate


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.get(User, user_id)

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_by_phone(db: Session, phone: str) -> Optional[User]:
        return db.query(User).filter(User.phone == phone).first()

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        """Create a new user"""
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        """Update a user with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def list_users(
        db: Session, params: PageParams, user_type: Optional[str] = None, search: Optional[str] = None
    ) -> tuple[list[User], int]:
        """Newest first, optionally narrowed by type or a name/email search"""
        query = db.query(User)

        if user_type:
            query = query.filter(User.user_type == user_type)

        if search:
            term = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    User.email.ilike(term),
                    User.first_name.ilike(term),
                    User.last_name.ilike(term),
                )
            )

        query = query.order_by(User.created_at.desc())
        return paginate(query, params)

    @staticmethod
    def get_stats(db: Session) -> dict:
        row = db.query(
            func.count(User.id).label("total"),
            func.count(case((User.user_type == "customer", 1))).label("customers"),
            func.count(case((User.user_type == "provider", 1))).label("providers"),
            func.count(case((User.user_type == "admin", 1))).label("admins"),
            func.count(case((User.is_verified.is_(True), 1))).label("verified"),
        ).one()
        total = row.total or 0
        verified = row.verified or 0
        return {
            "totalUsers": total,
            "customers": row.customers or 0,
            "providers": row.providers or 0,
            "admins": row.admins or 0,
            "verifiedUsers": verified,
            "unverifiedUsers": total - verified,
        }

    @staticmethod
    def delete_user(db: Session, user: User) -> None:
        """Delete a user; owned rows go with it through the foreign keys"""
        db.delete(user)
        db.commit()
