"""Catalog schemas - categories and provider products"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    parent_id: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    is_active: bool = True
    sort_order: int = Field(0, ge=0)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    parent_id: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


class Dimensions(BaseModel):
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


def _check_prices(price: Optional[float], original_price: Optional[float]) -> None:
    if price is not None and original_price is not None and original_price < price:
        raise ValueError("original_price must be greater than or equal to price")


class ProductCreate(BaseModel):
    """Schema for listing a product in the catalog"""

    category_id: str
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=5000)
    price: float = Field(..., gt=0)
    original_price: Optional[float] = Field(None, gt=0)
    sku: str = Field(..., min_length=1, max_length=100)
    stock_quantity: int = Field(0, ge=0)
    images: List[str] = Field(default_factory=list)
    specifications: Optional[Dict[str, Any]] = None
    is_active: bool = True
    is_featured: bool = False
    weight: Optional[float] = Field(None, gt=0)
    dimensions: Optional[Dimensions] = None
    tags: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_prices(self):
        _check_prices(self.price, self.original_price)
        return self


class ProductUpdate(BaseModel):
    category_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[float] = Field(None, gt=0)
    original_price: Optional[float] = Field(None, gt=0)
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    stock_quantity: Optional[int] = Field(None, ge=0)
    images: Optional[List[str]] = None
    specifications: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    weight: Optional[float] = Field(None, gt=0)
    dimensions: Optional[Dimensions] = None
    tags: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_prices(self):
        _check_prices(self.price, self.original_price)
        return self


class ProductFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category_id: Optional[str] = None
    provider_id: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    is_featured: Optional[bool] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    provider_id: str
    category_id: str
    name: str
    description: str
    price: float
    original_price: Optional[float] = None
    sku: str
    stock_quantity: int
    images: List[str]
    specifications: Optional[Dict[str, Any]] = None
    is_active: bool
    is_featured: bool
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    tags: List[str]
    created_at: datetime
    updated_at: datetime
