"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import to_naive_utc

BookingStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]


class BookingCreate(BaseModel):
    """Schema for booking an accepted quote"""

    quote_id: str
    scheduled_time: datetime
    notes: str = Field("", max_length=2000)

    @field_validator("scheduled_time")
    @classmethod
    def normalize_time(cls, v):
        return to_naive_utc(v)


class BookingUpdate(BaseModel):
    """Reschedule or annotate a booking that has not started"""

    scheduled_time: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("scheduled_time")
    @classmethod
    def normalize_time(cls, v):
        return to_naive_utc(v)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Optional[BookingStatus] = None
    customer_id: Optional[str] = None
    provider_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    service_request_id: str
    quote_id: str
    provider_id: str
    customer_id: str
    scheduled_time: datetime
    status: str
    total_amount: float
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BookingStats(BaseModel):
    totalBookings: int
    scheduledBookings: int
    inProgressBookings: int
    completedBookings: int
    cancelledBookings: int
    totalEarnings: float
    averageBookingValue: float
