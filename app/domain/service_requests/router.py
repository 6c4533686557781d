"""Service request router - FastAPI endpoints for service requests"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_admin, require_customer, require_roles
from ...database import get_db
from ...rate_limiter import moderate_rate_limit
from ...schemas import ApiResponse, PageParams, Paginated, Pagination
from ...shared.pagination import page_params
from .schemas import (
    RequestStatus,
    ServiceRequestCreate,
    ServiceRequestFilters,
    ServiceRequestResponse,
    ServiceRequestStats,
    ServiceRequestUpdate,
    StatusUpdate,
    Urgency,
)
from .service import ServiceRequestService

router = APIRouter(
    prefix="/api/service-requests",
    tags=["Service Requests"],
    dependencies=[Depends(moderate_rate_limit)],
)


def get_service_request_service(db: Session = Depends(get_db)) -> ServiceRequestService:
    """Dependency injection for ServiceRequestService"""
    return ServiceRequestService(db)


def request_filters(
    status: Optional[RequestStatus] = Query(None),
    service_type: Optional[str] = Query(None),
    urgency: Optional[Urgency] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
) -> ServiceRequestFilters:
    return ServiceRequestFilters(
        status=status,
        service_type=service_type,
        urgency=urgency,
        city=city,
        state=state,
        search=search,
    )


def _page(items, params: PageParams, total: int) -> Paginated[ServiceRequestResponse]:
    return Paginated(
        data=[ServiceRequestResponse.model_validate(r) for r in items],
        pagination=Pagination.build(params.page, params.limit, total),
    )


@router.get("", response_model=ApiResponse[Paginated[ServiceRequestResponse]])
def list_service_requests(
    filters: ServiceRequestFilters = Depends(request_filters),
    params: PageParams = Depends(page_params),
    _user: CurrentUser = Depends(get_current_user),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    items, total = service.list_requests(filters, params)
    return ApiResponse(message="Service requests retrieved successfully", data=_page(items, params, total))


@router.get("/my-requests", response_model=ApiResponse[Paginated[ServiceRequestResponse]])
def list_my_service_requests(
    filters: ServiceRequestFilters = Depends(request_filters),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(require_roles("customer")),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    items, total = service.list_own_requests(current_user, filters, params)
    return ApiResponse(message="Service requests retrieved successfully", data=_page(items, params, total))


@router.get("/stats", response_model=ApiResponse[ServiceRequestStats])
def get_service_request_stats(
    _admin: CurrentUser = Depends(require_admin),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    return ApiResponse(message="Service request statistics retrieved successfully", data=service.get_stats())


@router.get("/my-stats", response_model=ApiResponse[ServiceRequestStats])
def get_my_service_request_stats(
    current_user: CurrentUser = Depends(require_roles("customer")),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    return ApiResponse(
        message="Service request statistics retrieved successfully",
        data=service.get_stats(customer_id=current_user.user_id),
    )


@router.get("/{request_id}", response_model=ApiResponse[ServiceRequestResponse])
def get_service_request(
    request_id: str,
    _user: CurrentUser = Depends(get_current_user),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    service_request = service.get_request(request_id)
    return ApiResponse(
        message="Service request retrieved successfully",
        data=ServiceRequestResponse.model_validate(service_request),
    )


@router.post("", response_model=ApiResponse[ServiceRequestResponse], status_code=201)
def create_service_request(
    data: ServiceRequestCreate,
    current_user: CurrentUser = Depends(require_roles("customer")),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    service_request = service.create_request(data, current_user)
    return ApiResponse(
        message="Service request created successfully",
        data=ServiceRequestResponse.model_validate(service_request),
    )


@router.put("/{request_id}", response_model=ApiResponse[ServiceRequestResponse])
def update_service_request(
    request_id: str,
    data: ServiceRequestUpdate,
    current_user: CurrentUser = Depends(require_roles("customer")),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    service_request = service.update_request(request_id, data, current_user)
    return ApiResponse(
        message="Service request updated successfully",
        data=ServiceRequestResponse.model_validate(service_request),
    )


@router.delete("/{request_id}", response_model=ApiResponse[None])
def delete_service_request(
    request_id: str,
    current_user: CurrentUser = Depends(require_customer),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    service.delete_request(request_id, current_user)
    return ApiResponse(message="Service request deleted successfully")


@router.put("/{request_id}/status", response_model=ApiResponse[ServiceRequestResponse])
def update_service_request_status(
    request_id: str,
    data: StatusUpdate,
    _admin: CurrentUser = Depends(require_admin),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    service_request = service.transition(request_id, data.status)
    return ApiResponse(
        message="Service request status updated successfully",
        data=ServiceRequestResponse.model_validate(service_request),
    )


@router.post("/{request_id}/cancel", response_model=ApiResponse[ServiceRequestResponse])
def cancel_service_request(
    request_id: str,
    current_user: CurrentUser = Depends(require_customer),
    service: ServiceRequestService = Depends(get_service_request_service),
):
    service_request = service.cancel_request(request_id, current_user)
    return ApiResponse(
        message="Service request cancelled successfully",
        data=ServiceRequestResponse.model_validate(service_request),
    )
