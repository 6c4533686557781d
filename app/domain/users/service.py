"""User management service - Admin views over accounts"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentUser
from ...errors import Conflict, Forbidden, InvalidState, NotFound
from ...models import User
from ...schemas import PageParams
from ..auth.repository import UserRepository
from ..auth.schemas import UpdateProfileRequest
from .schemas import UserStats

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def list_users(
        self, params: PageParams, user_type: Optional[str] = None, search: Optional[str] = None
    ) -> tuple[list[User], int]:
        return self.repo.list_users(self.db, params, user_type=user_type, search=search)

    def get_stats(self) -> UserStats:
        return UserStats(**self.repo.get_stats(self.db))

    def get_user(self, user_id: str, current: CurrentUser) -> User:
        """Admins can read any account, everyone else only their own"""
        if user_id != current.user_id and not current.is_admin:
            raise Forbidden("You can only access your own account")

        user = self.repo.get_by_id(self.db, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def update_user(self, user_id: str, data: UpdateProfileRequest, current: CurrentUser) -> User:
        user = self.get_user(user_id, current)

        if data.phone is not None and data.phone != user.phone:
            if self.repo.get_by_phone(self.db, data.phone):
                raise Conflict("User with this phone number already exists")

        user = self.repo.update_user(self.db, user, **data.model_dump(exclude_none=True))
        logger.info(f"✏️ User {user.id} updated by {current.user_type} {current.user_id}")
        return user

    def verify_user(self, user_id: str, current: CurrentUser) -> User:
        user = self.get_user(user_id, current)
        if user.is_verified:
            raise InvalidState("User is already verified")

        user = self.repo.update_user(self.db, user, is_verified=True)
        logger.info(f"✅ User {user.id} verified by admin {current.user_id}")
        return user

    def delete_user(self, user_id: str, current: CurrentUser) -> None:
        user = self.get_user(user_id, current)
        self.repo.delete_user(self.db, user)
        logger.info(f"🗑️ User {user_id} deleted by admin {current.user_id}")
