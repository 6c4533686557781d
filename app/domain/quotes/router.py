"""Quote router - FastAPI endpoints for quotes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_admin, require_roles
from ...database import get_db
from ...rate_limiter import moderate_rate_limit
from ...schemas import ApiResponse, PageParams, Paginated, Pagination
from ...shared.pagination import page_params
from .schemas import (
    ExpiryResult,
    QuoteCreate,
    QuoteFilters,
    QuoteResponse,
    QuoteStats,
    QuoteStatus,
    QuoteStatusUpdate,
    QuoteUpdate,
)
from .service import QuoteService

router = APIRouter(prefix="/api/quotes", tags=["Quotes"], dependencies=[Depends(moderate_rate_limit)])


def get_quote_service(db: Session = Depends(get_db)) -> QuoteService:
    """Dependency injection for QuoteService"""
    return QuoteService(db)


def _page(items, params: PageParams, total: int) -> Paginated[QuoteResponse]:
    return Paginated(
        data=[QuoteResponse.model_validate(q) for q in items],
        pagination=Pagination.build(params.page, params.limit, total),
    )


# ============================================================================
# LISTINGS & STATS
# ============================================================================


@router.get("", response_model=ApiResponse[Paginated[QuoteResponse]])
def list_quotes(
    status: Optional[QuoteStatus] = Query(None),
    service_request_id: Optional[str] = Query(None),
    provider_id: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    _user: CurrentUser = Depends(get_current_user),
    service: QuoteService = Depends(get_quote_service),
):
    filters = QuoteFilters(status=status, service_request_id=service_request_id, provider_id=provider_id)
    items, total = service.list_quotes(filters, params)
    return ApiResponse(message="Quotes retrieved successfully", data=_page(items, params, total))


@router.get("/stats", response_model=ApiResponse[QuoteStats])
def get_quote_stats(
    _admin: CurrentUser = Depends(require_admin),
    service: QuoteService = Depends(get_quote_service),
):
    return ApiResponse(message="Quote statistics retrieved successfully", data=service.get_stats())


@router.get("/my-quotes", response_model=ApiResponse[Paginated[QuoteResponse]])
def list_my_quotes(
    status: Optional[QuoteStatus] = Query(None),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: QuoteService = Depends(get_quote_service),
):
    items, total = service.list_own_quotes(current_user, QuoteFilters(status=status), params)
    return ApiResponse(message="Quotes retrieved successfully", data=_page(items, params, total))


@router.get("/my-stats", response_model=ApiResponse[QuoteStats])
def get_my_quote_stats(
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: QuoteService = Depends(get_quote_service),
):
    return ApiResponse(
        message="Quote statistics retrieved successfully",
        data=service.get_provider_stats(current_user),
    )


@router.get("/service-request/{request_id}", response_model=ApiResponse[Paginated[QuoteResponse]])
def list_quotes_for_request(
    request_id: str,
    params: PageParams = Depends(page_params),
    _user: CurrentUser = Depends(get_current_user),
    service: QuoteService = Depends(get_quote_service),
):
    items, total = service.list_for_request(request_id, params)
    return ApiResponse(message="Quotes retrieved successfully", data=_page(items, params, total))


@router.post("/expire", response_model=ApiResponse[ExpiryResult])
def expire_quotes(
    _admin: CurrentUser = Depends(require_admin),
    service: QuoteService = Depends(get_quote_service),
):
    """Run the expiry sweep on demand"""
    result = service.expire_quotes()
    return ApiResponse(message=f"{result['count']} quote(s) marked as expired", data=ExpiryResult(**result))


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/{quote_id}", response_model=ApiResponse[QuoteResponse])
def get_quote(
    quote_id: str,
    _user: CurrentUser = Depends(get_current_user),
    service: QuoteService = Depends(get_quote_service),
):
    quote = service.get_quote(quote_id)
    return ApiResponse(message="Quote retrieved successfully", data=QuoteResponse.model_validate(quote))


@router.post("", response_model=ApiResponse[QuoteResponse], status_code=201)
def create_quote(
    data: QuoteCreate,
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: QuoteService = Depends(get_quote_service),
):
    quote = service.create_quote(data, current_user)
    return ApiResponse(message="Quote created successfully", data=QuoteResponse.model_validate(quote))


@router.put("/{quote_id}", response_model=ApiResponse[QuoteResponse])
def update_quote(
    quote_id: str,
    data: QuoteUpdate,
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: QuoteService = Depends(get_quote_service),
):
    quote = service.update_quote(quote_id, data, current_user)
    return ApiResponse(message="Quote updated successfully", data=QuoteResponse.model_validate(quote))


@router.delete("/{quote_id}", response_model=ApiResponse[None])
def delete_quote(
    quote_id: str,
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: QuoteService = Depends(get_quote_service),
):
    service.delete_quote(quote_id, current_user)
    return ApiResponse(message="Quote deleted successfully")


@router.patch("/{quote_id}/status", response_model=ApiResponse[QuoteResponse])
def update_quote_status(
    quote_id: str,
    data: QuoteStatusUpdate,
    current_user: CurrentUser = Depends(require_roles("customer")),
    service: QuoteService = Depends(get_quote_service),
):
    """Customer accepts or rejects a pending quote"""
    quote = service.update_status(quote_id, data.status, current_user)
    return ApiResponse(message=f"Quote {data.status} successfully", data=QuoteResponse.model_validate(quote))
