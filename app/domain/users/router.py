"""User management router - FastAPI endpoints for accounts"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_admin
from ...database import get_db
from ...rate_limiter import moderate_rate_limit
from ...schemas import ApiResponse, PageParams, Paginated, Pagination
from ...shared.pagination import page_params
from ..auth.schemas import UpdateProfileRequest, UserResponse
from .schemas import UserStats
from .service import UserService

router = APIRouter(prefix="/api/users", tags=["Users"], dependencies=[Depends(moderate_rate_limit)])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


@router.get("", response_model=ApiResponse[Paginated[UserResponse]])
def list_users(
    user_type: Optional[Literal["customer", "provider", "admin"]] = Query(None),
    search: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    _admin: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    items, total = service.list_users(params, user_type=user_type, search=search)
    return ApiResponse(
        message="Users retrieved successfully",
        data=Paginated(
            data=[UserResponse.model_validate(u) for u in items],
            pagination=Pagination.build(params.page, params.limit, total),
        ),
    )


@router.get("/stats", response_model=ApiResponse[UserStats])
def get_user_stats(
    _admin: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return ApiResponse(message="User statistics retrieved successfully", data=service.get_stats())


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.get_user(user_id, current_user)
    return ApiResponse(message="User retrieved successfully", data=UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: str,
    data: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.update_user(user_id, data, current_user)
    return ApiResponse(message="User updated successfully", data=UserResponse.model_validate(user))


@router.post("/{user_id}/verify", response_model=ApiResponse[UserResponse])
def verify_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    user = service.verify_user(user_id, current_user)
    return ApiResponse(message="User email verified successfully", data=UserResponse.model_validate(user))


@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    service.delete_user(user_id, current_user)
    return ApiResponse(message="User deleted successfully")
