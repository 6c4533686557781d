"""Quote domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import to_naive_utc

QuoteStatus = Literal["pending", "accepted", "rejected", "expired"]


class QuoteCreate(BaseModel):
    """Schema for a provider's bid on a service request"""

    service_request_id: str
    amount: float = Field(..., gt=0)
    notes: str = Field("", max_length=2000)
    valid_until: datetime

    @field_validator("valid_until")
    @classmethod
    def normalize_valid_until(cls, v):
        return to_naive_utc(v)


class QuoteUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    notes: Optional[str] = Field(None, max_length=2000)
    valid_until: Optional[datetime] = None

    @field_validator("valid_until")
    @classmethod
    def normalize_valid_until(cls, v):
        return to_naive_utc(v)


class QuoteStatusUpdate(BaseModel):
    """Customer decision on a pending quote"""

    status: Literal["accepted", "rejected"]


class QuoteFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Optional[QuoteStatus] = None
    service_request_id: Optional[str] = None
    provider_id: Optional[str] = None


class QuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    service_request_id: str
    provider_id: str
    amount: float
    notes: str
    status: str
    valid_until: datetime
    created_at: datetime
    updated_at: datetime


class QuoteStats(BaseModel):
    totalQuotes: int
    pendingQuotes: int
    acceptedQuotes: int
    rejectedQuotes: int
    expiredQuotes: int
    averageAmount: float


class ExpiryResult(BaseModel):
    count: int
