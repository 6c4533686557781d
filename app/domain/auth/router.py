"""Auth router - FastAPI endpoints for accounts and tokens"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user
from ...database import get_db
from ...rate_limiter import strict_rate_limit
from ...schemas import ApiResponse
from .schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenPair,
    UpdateProfileRequest,
    UserResponse,
)
from .service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db)


@router.post(
    "/register",
    response_model=ApiResponse[AuthResponse],
    status_code=201,
    dependencies=[Depends(strict_rate_limit)],
)
def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    result = service.register(data)
    return ApiResponse(message="User registered successfully", data=result)


@router.post("/login", response_model=ApiResponse[AuthResponse], dependencies=[Depends(strict_rate_limit)])
def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    result = service.login(data)
    return ApiResponse(message="Login successful", data=result)


@router.post("/refresh", response_model=ApiResponse[TokenPair], dependencies=[Depends(strict_rate_limit)])
def refresh(data: RefreshTokenRequest, service: AuthService = Depends(get_auth_service)):
    tokens = service.refresh(data.refreshToken)
    return ApiResponse(message="Token refreshed successfully", data=tokens)


@router.get("/me", response_model=ApiResponse[UserResponse])
def me(
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    user = service.get_user(current_user)
    return ApiResponse(message="Profile retrieved successfully", data=UserResponse.model_validate(user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
def update_profile(
    data: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    user = service.update_profile(current_user, data)
    return ApiResponse(message="Profile updated successfully", data=UserResponse.model_validate(user))


@router.post("/change-password", response_model=ApiResponse[None])
def change_password(
    data: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    service.change_password(current_user, data)
    return ApiResponse(message="Password changed successfully")
