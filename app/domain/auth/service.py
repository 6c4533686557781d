"""Auth service - Registration, login and token refresh"""

import logging

from sqlalchemy.orm import Session

from ...auth import CurrentUser
from ...errors import Conflict, NotFound, Unauthorized
from ...models import User
from ...security_utils import (
    REFRESH_TOKEN_TYPE,
    create_token_pair,
    decode_token,
    hash_password,
    verify_password,
)
from .repository import UserRepository
from .schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenPair,
    UpdateProfileRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Service layer for account and token operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def _auth_response(self, user: User) -> AuthResponse:
        tokens = create_token_pair(user.id, user.email, user.user_type)
        return AuthResponse(user=UserResponse.model_validate(user), tokens=TokenPair(**tokens))

    def register(self, data: RegisterRequest) -> AuthResponse:
        """Create an account and issue tokens"""
        if self.repo.get_by_email(self.db, data.email):
            raise Conflict("User with this email already exists")
        if self.repo.get_by_phone(self.db, data.phone):
            raise Conflict("User with this phone number already exists")

        user = self.repo.create_user(
            self.db,
            email=data.email,
            phone=data.phone,
            password_hash=hash_password(data.password),
            user_type=data.user_type,
            first_name=data.first_name,
            last_name=data.last_name,
            is_verified=False,
        )
        logger.info(f"🆕 Registered {user.user_type} {user.id}")
        return self._auth_response(user)

    def login(self, data: LoginRequest) -> AuthResponse:
        user = self.repo.get_by_email(self.db, data.email)
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning("⚠️ Failed login attempt")
            raise Unauthorized("Invalid email or password")

        logger.info(f"✅ User {user.id} logged in")
        return self._auth_response(user)

    def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair"""
        payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        if payload is None:
            raise Unauthorized("Invalid or expired refresh token")

        # The account must still exist
        user = self.repo.get_by_id(self.db, payload["userId"])
        if not user:
            raise Unauthorized("User not found")

        return TokenPair(**create_token_pair(user.id, user.email, user.user_type))

    def get_user(self, current: CurrentUser) -> User:
        user = self.repo.get_by_id(self.db, current.user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def update_profile(self, current: CurrentUser, data: UpdateProfileRequest) -> User:
        user = self.get_user(current)

        if data.phone is not None and data.phone != user.phone:
            if self.repo.get_by_phone(self.db, data.phone):
                raise Conflict("User with this phone number already exists")

        return self.repo.update_user(self.db, user, **data.model_dump(exclude_none=True))

    def change_password(self, current: CurrentUser, data: ChangePasswordRequest) -> None:
        user = self.get_user(current)
        if not verify_password(data.currentPassword, user.password_hash):
            raise Unauthorized("Current password is incorrect")

        self.repo.update_user(self.db, user, password_hash=hash_password(data.newPassword))
        logger.info(f"🔑 Password changed for user {user.id}")
