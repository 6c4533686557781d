"""Call router - FastAPI endpoints for calls"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_provider, require_roles
from ...database import get_db
from ...rate_limiter import moderate_rate_limit
from ...schemas import ApiResponse, PageParams, Paginated, Pagination
from ...shared.pagination import page_params
from .schemas import (
    CallCreate,
    CallFilters,
    CallResponse,
    CallStats,
    CallStatsWindow,
    CallStatus,
    CallStatusUpdate,
)
from .service import CallService

router = APIRouter(prefix="/api/calls", tags=["Calls"], dependencies=[Depends(moderate_rate_limit)])


def get_call_service(db: Session = Depends(get_db)) -> CallService:
    """Dependency injection for CallService"""
    return CallService(db)


@router.post("", response_model=ApiResponse[CallResponse], status_code=201)
def initiate_call(
    data: CallCreate,
    current_user: CurrentUser = Depends(require_roles("customer")),
    service: CallService = Depends(get_call_service),
):
    call = service.initiate_call(data, current_user)
    return ApiResponse(message="Call initiated successfully", data=CallResponse.model_validate(call))


@router.get("/my-calls", response_model=ApiResponse[Paginated[CallResponse]])
def list_my_calls(
    status: Optional[CallStatus] = Query(None),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(require_roles("customer", "provider")),
    service: CallService = Depends(get_call_service),
):
    items, total = service.list_calls(current_user, CallFilters(status=status), params)
    return ApiResponse(
        message="Calls retrieved successfully",
        data=Paginated(
            data=[CallResponse.model_validate(c) for c in items],
            pagination=Pagination.build(params.page, params.limit, total),
        ),
    )


@router.get("/recent", response_model=ApiResponse[List[CallResponse]])
def list_recent_calls(
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(require_roles("customer", "provider")),
    service: CallService = Depends(get_call_service),
):
    calls = service.get_recent(current_user, limit)
    return ApiResponse(
        message="Recent calls retrieved successfully",
        data=[CallResponse.model_validate(c) for c in calls],
    )


@router.get("/stats", response_model=ApiResponse[CallStats])
def get_call_stats(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: CurrentUser = Depends(require_provider),
    service: CallService = Depends(get_call_service),
):
    window = CallStatsWindow(start_date=start_date, end_date=end_date)
    return ApiResponse(message="Call statistics retrieved successfully", data=service.get_stats(current_user, window))


@router.get("/{call_id}", response_model=ApiResponse[CallResponse])
def get_call(
    call_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CallService = Depends(get_call_service),
):
    call = service.get_call(call_id, current_user)
    return ApiResponse(message="Call retrieved successfully", data=CallResponse.model_validate(call))


@router.patch("/{call_id}/status", response_model=ApiResponse[CallResponse])
def update_call_status(
    call_id: str,
    data: CallStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: CallService = Depends(get_call_service),
):
    call = service.update_status(call_id, data, current_user)
    return ApiResponse(message="Call status updated successfully", data=CallResponse.model_validate(call))


@router.patch("/{call_id}/end", response_model=ApiResponse[CallResponse])
def end_call(
    call_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CallService = Depends(get_call_service),
):
    call = service.end_call(call_id, current_user)
    return ApiResponse(message="Call ended successfully", data=CallResponse.model_validate(call))
