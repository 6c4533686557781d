"""Catalog routers - FastAPI endpoints for categories and products"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_optional_user, require_admin, require_provider, require_roles
from ...database import get_db
from ...rate_limiter import moderate_rate_limit
from ...schemas import ApiResponse, PageParams, Paginated, Pagination
from ...shared.pagination import page_params
from .schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductFilters,
    ProductResponse,
    ProductUpdate,
)
from .service import CategoryService, ProductService

categories_router = APIRouter(
    prefix="/api/categories", tags=["Categories"], dependencies=[Depends(moderate_rate_limit)]
)
products_router = APIRouter(prefix="/api/products", tags=["Products"], dependencies=[Depends(moderate_rate_limit)])


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


# ============================================================================
# CATEGORIES
# ============================================================================


@categories_router.get("", response_model=ApiResponse[List[CategoryResponse]])
def list_categories(
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    service: CategoryService = Depends(get_category_service),
):
    """Active categories; admins also see inactive ones"""
    categories = service.list_categories(current_user)
    return ApiResponse(
        message="Categories retrieved successfully",
        data=[CategoryResponse.model_validate(c) for c in categories],
    )


@categories_router.get("/{category_id}", response_model=ApiResponse[CategoryResponse])
def get_category(category_id: str, service: CategoryService = Depends(get_category_service)):
    category = service.get_category(category_id)
    return ApiResponse(message="Category retrieved successfully", data=CategoryResponse.model_validate(category))


@categories_router.post("", response_model=ApiResponse[CategoryResponse], status_code=201)
def create_category(
    data: CategoryCreate,
    _admin: CurrentUser = Depends(require_admin),
    service: CategoryService = Depends(get_category_service),
):
    category = service.create_category(data)
    return ApiResponse(message="Category created successfully", data=CategoryResponse.model_validate(category))


@categories_router.put("/{category_id}", response_model=ApiResponse[CategoryResponse])
def update_category(
    category_id: str,
    data: CategoryUpdate,
    _admin: CurrentUser = Depends(require_admin),
    service: CategoryService = Depends(get_category_service),
):
    category = service.update_category(category_id, data)
    return ApiResponse(message="Category updated successfully", data=CategoryResponse.model_validate(category))


@categories_router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(
    category_id: str,
    _admin: CurrentUser = Depends(require_admin),
    service: CategoryService = Depends(get_category_service),
):
    service.delete_category(category_id)
    return ApiResponse(message="Category deleted successfully")


# ============================================================================
# PRODUCTS
# ============================================================================


def product_filters(
    category_id: Optional[str] = Query(None),
    provider_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    is_featured: Optional[bool] = Query(None),
) -> ProductFilters:
    return ProductFilters(
        category_id=category_id,
        provider_id=provider_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        is_featured=is_featured,
    )


@products_router.get("", response_model=ApiResponse[Paginated[ProductResponse]])
def list_products(
    filters: ProductFilters = Depends(product_filters),
    params: PageParams = Depends(page_params),
    service: ProductService = Depends(get_product_service),
):
    items, total = service.list_products(filters, params)
    return ApiResponse(
        message="Products retrieved successfully",
        data=Paginated(
            data=[ProductResponse.model_validate(p) for p in items],
            pagination=Pagination.build(params.page, params.limit, total),
        ),
    )


@products_router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    product = service.get_product(product_id)
    return ApiResponse(message="Product retrieved successfully", data=ProductResponse.model_validate(product))


@products_router.post("", response_model=ApiResponse[ProductResponse], status_code=201)
def create_product(
    data: ProductCreate,
    current_user: CurrentUser = Depends(require_roles("provider")),
    service: ProductService = Depends(get_product_service),
):
    product = service.create_product(data, current_user)
    return ApiResponse(message="Product created successfully", data=ProductResponse.model_validate(product))


@products_router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
def update_product(
    product_id: str,
    data: ProductUpdate,
    current_user: CurrentUser = Depends(require_provider),
    service: ProductService = Depends(get_product_service),
):
    product = service.update_product(product_id, data, current_user)
    return ApiResponse(message="Product updated successfully", data=ProductResponse.model_validate(product))


@products_router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(
    product_id: str,
    current_user: CurrentUser = Depends(require_provider),
    service: ProductService = Depends(get_product_service),
):
    service.delete_product(product_id, current_user)
    return ApiResponse(message="Product deleted successfully")
