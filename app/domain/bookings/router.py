"""Booking router - FastAPI endpoints for bookings"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_customer, require_provider, require_roles
from ...database import get_db
from ...rate_limiter import moderate_rate_limit
from ...schemas import ApiResponse, PageParams, Paginated, Pagination
from ...shared.pagination import page_params
from .schemas import (
    BookingCreate,
    BookingFilters,
    BookingResponse,
    BookingStats,
    BookingStatus,
    BookingStatusUpdate,
    BookingUpdate,
)
from .service import BookingService

router = APIRouter(prefix="/api/bookings", tags=["Bookings"], dependencies=[Depends(moderate_rate_limit)])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.get("", response_model=ApiResponse[Paginated[BookingResponse]])
def list_bookings(
    status: Optional[BookingStatus] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    filters = BookingFilters(status=status, start_date=start_date, end_date=end_date)
    items, total = service.list_bookings(current_user, filters, params)
    return ApiResponse(
        message="Bookings retrieved successfully",
        data=Paginated(
            data=[BookingResponse.model_validate(b) for b in items],
            pagination=Pagination.build(params.page, params.limit, total),
        ),
    )


@router.get("/upcoming", response_model=ApiResponse[List[BookingResponse]])
def list_upcoming_bookings(
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: BookingService = Depends(get_booking_service),
):
    bookings = service.get_upcoming(current_user, limit)
    return ApiResponse(
        message="Upcoming bookings retrieved successfully",
        data=[BookingResponse.model_validate(b) for b in bookings],
    )


@router.get("/stats", response_model=ApiResponse[BookingStats])
def get_booking_stats(
    current_user: CurrentUser = Depends(require_provider),
    service: BookingService = Depends(get_booking_service),
):
    return ApiResponse(message="Booking statistics retrieved successfully", data=service.get_stats(current_user))


@router.get("/{booking_id}", response_model=ApiResponse[BookingResponse])
def get_booking(
    booking_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_booking(booking_id, current_user)
    return ApiResponse(message="Booking retrieved successfully", data=BookingResponse.model_validate(booking))


@router.post("", response_model=ApiResponse[BookingResponse], status_code=201)
def create_booking(
    data: BookingCreate,
    current_user: CurrentUser = Depends(require_roles("customer")),
    service: BookingService = Depends(get_booking_service),
):
    """Book an accepted quote"""
    booking = service.create_booking(data, current_user)
    return ApiResponse(message="Booking created successfully", data=BookingResponse.model_validate(booking))


@router.put("/{booking_id}", response_model=ApiResponse[BookingResponse])
def update_booking(
    booking_id: str,
    data: BookingUpdate,
    current_user: CurrentUser = Depends(require_customer),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.update_booking(booking_id, data, current_user)
    return ApiResponse(message="Booking updated successfully", data=BookingResponse.model_validate(booking))


@router.patch("/{booking_id}/status", response_model=ApiResponse[BookingResponse])
def update_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.update_status(booking_id, data.status, current_user)
    return ApiResponse(
        message="Booking status updated successfully",
        data=BookingResponse.model_validate(booking),
    )
