"""Call domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import to_naive_utc

CallStatus = Literal["initiated", "ringing", "in_progress", "completed", "failed", "cancelled"]


class CallCreate(BaseModel):
    """Schema for a customer calling a provider"""

    provider_id: str
    service_request_id: Optional[str] = None


class CallStatusUpdate(BaseModel):
    """Status report from the telephony side, with whatever details it has"""

    status: CallStatus
    call_duration: Optional[int] = Field(None, ge=0)
    recording_url: Optional[str] = Field(None, max_length=500)
    external_call_sid: Optional[str] = Field(None, max_length=64)


class CallFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Optional[CallStatus] = None
    customer_id: Optional[str] = None
    provider_id: Optional[str] = None


class CallStatsWindow(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class CallResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    provider_id: str
    service_request_id: Optional[str] = None
    status: str
    call_duration: Optional[int] = None
    recording_url: Optional[str] = None
    external_call_sid: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CallStats(BaseModel):
    totalCalls: int
    completedCalls: int
    failedCalls: int
    cancelledCalls: int
    totalDuration: int
    averageDuration: float
