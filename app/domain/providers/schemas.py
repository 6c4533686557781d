"""Provider domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProviderCreate(BaseModel):
    """Schema for creating a provider profile"""

    business_name: str = Field(..., min_length=2, max_length=255)
    business_license: Optional[str] = Field(None, max_length=100)
    services_offered: List[str] = Field(..., min_length=1)
    service_areas: List[str] = Field(..., min_length=1)
    years_experience: int = Field(0, ge=0, le=80)
    bio: Optional[str] = Field(None, max_length=2000)


class ProviderUpdate(BaseModel):
    """Schema for updating profile fields (verification is separate)"""

    business_name: Optional[str] = Field(None, min_length=2, max_length=255)
    business_license: Optional[str] = Field(None, max_length=100)
    services_offered: Optional[List[str]] = Field(None, min_length=1)
    service_areas: Optional[List[str]] = Field(None, min_length=1)
    years_experience: Optional[int] = Field(None, ge=0, le=80)
    bio: Optional[str] = Field(None, max_length=2000)


class VerificationUpdate(BaseModel):
    verification_status: Literal["pending", "verified", "rejected"]


class ProviderFilters(BaseModel):
    """Filters accepted by the provider listing"""

    model_config = ConfigDict(extra="forbid")

    verification_status: Optional[Literal["pending", "verified", "rejected"]] = None
    service_type: Optional[str] = None
    location: Optional[str] = None
    search: Optional[str] = None


class ProviderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    business_name: str
    business_license: Optional[str] = None
    services_offered: List[str]
    service_areas: List[str]
    verification_status: str
    rating: float
    total_reviews: int
    years_experience: int
    bio: Optional[str] = None
    created_at: datetime
    updated_at: datetime
