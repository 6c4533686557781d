"""Service request schemas - Pydantic models for validation"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...shared.validators import to_naive_utc, validate_budget_range

Urgency = Literal["low", "medium", "high", "emergency"]
RequestStatus = Literal["open", "quoted", "booked", "in_progress", "completed", "cancelled"]


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Location(BaseModel):
    """Structured job site address, stored as a JSON column"""

    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    coordinates: Coordinates


class ServiceRequestCreate(BaseModel):
    """Schema for posting a new service request"""

    service_type: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=1, max_length=5000)
    location: Location
    urgency: Urgency = "medium"
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    preferred_date: Optional[datetime] = None
    images: List[str] = Field(default_factory=list)

    @field_validator("preferred_date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_budget(self):
        validate_budget_range(self.budget_min, self.budget_max)
        return self


class ServiceRequestUpdate(BaseModel):
    """Fields a customer may edit while the request is still open"""

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    urgency: Optional[Urgency] = None
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    preferred_date: Optional[datetime] = None
    images: Optional[List[str]] = None

    @field_validator("preferred_date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_budget(self):
        validate_budget_range(self.budget_min, self.budget_max)
        return self


class StatusUpdate(BaseModel):
    status: RequestStatus


class ServiceRequestFilters(BaseModel):
    """Filters accepted by the service request listing; all present fields are AND-combined"""

    model_config = ConfigDict(extra="forbid")

    status: Optional[RequestStatus] = None
    service_type: Optional[str] = None
    urgency: Optional[Urgency] = None
    city: Optional[str] = None
    state: Optional[str] = None
    search: Optional[str] = None
    customer_id: Optional[str] = None


class ServiceRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    service_type: str
    title: str
    description: str
    location: Location
    urgency: str
    status: str
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferred_date: Optional[datetime] = None
    images: List[str]
    created_at: datetime
    updated_at: datetime


class ServiceRequestStats(BaseModel):
    totalRequests: int
    openRequests: int
    quotedRequests: int
    bookedRequests: int
    inProgressRequests: int
    completedRequests: int
    cancelledRequests: int
