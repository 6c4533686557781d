"""Provider router - FastAPI endpoints for service provider profiles"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, require_admin, require_provider, require_roles
from ...database import get_db
from ...rate_limiter import moderate_rate_limit
from ...schemas import ApiResponse, PageParams, Paginated, Pagination
from ...shared.pagination import page_params
from .schemas import ProviderCreate, ProviderFilters, ProviderResponse, ProviderUpdate, VerificationUpdate
from .service import ProviderService

router = APIRouter(prefix="/api/providers", tags=["Providers"], dependencies=[Depends(moderate_rate_limit)])


def get_provider_service(db: Session = Depends(get_db)) -> ProviderService:
    """Dependency injection for ProviderService"""
    return ProviderService(db)


@router.get("", response_model=ApiResponse[Paginated[ProviderResponse]])
def list_providers(
    verification_status: Optional[Literal["pending", "verified", "rejected"]] = Query(None),
    service_type: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    service: ProviderService = Depends(get_provider_service),
):
    """Public provider directory"""
    filters = ProviderFilters(
        verification_status=verification_status,
        service_type=service_type,
        location=location,
        search=search,
    )
    providers, total = service.list_providers(filters, params)
    return ApiResponse(
        message="Service providers retrieved successfully",
        data=Paginated(
            data=[ProviderResponse.model_validate(p) for p in providers],
            pagination=Pagination.build(params.page, params.limit, total),
        ),
    )


@router.get("/me", response_model=ApiResponse[ProviderResponse])
def get_my_profile(
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: ProviderService = Depends(get_provider_service),
):
    provider = service.get_own_profile(current_user)
    return ApiResponse(message="Service provider retrieved successfully", data=ProviderResponse.model_validate(provider))


@router.get("/{provider_id}", response_model=ApiResponse[ProviderResponse])
def get_provider(provider_id: str, service: ProviderService = Depends(get_provider_service)):
    provider = service.get_provider(provider_id)
    return ApiResponse(message="Service provider retrieved successfully", data=ProviderResponse.model_validate(provider))


@router.post("", response_model=ApiResponse[ProviderResponse], status_code=201)
def create_provider(
    data: ProviderCreate,
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: ProviderService = Depends(get_provider_service),
):
    provider = service.create_provider(data, current_user)
    return ApiResponse(
        message="Service provider profile created successfully",
        data=ProviderResponse.model_validate(provider),
    )


@router.put("/{provider_id}", response_model=ApiResponse[ProviderResponse])
def update_provider(
    provider_id: str,
    data: ProviderUpdate,
    current_user: CurrentUser = Depends(require_provider),
    service: ProviderService = Depends(get_provider_service),
):
    provider = service.update_provider(provider_id, data, current_user)
    return ApiResponse(message="Service provider updated successfully", data=ProviderResponse.model_validate(provider))


@router.patch("/{provider_id}/verification", response_model=ApiResponse[ProviderResponse])
def update_verification(
    provider_id: str,
    data: VerificationUpdate,
    _admin: CurrentUser = Depends(require_admin),
    service: ProviderService = Depends(get_provider_service),
):
    provider = service.update_verification(provider_id, data)
    return ApiResponse(
        message="Verification status updated successfully",
        data=ProviderResponse.model_validate(provider),
    )
