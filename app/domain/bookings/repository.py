"""Booking repository - Database operations for bookings"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ...models import Booking
from ...schemas import PageParams
from ...services.status_transitions import ACTIVE_BOOKING_STATUSES
from ...shared.pagination import paginate
from .schemas import BookingFilters


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_by_id(db: Session, booking_id: str, lock: bool = False) -> Optional[Booking]:
        """Get a booking by ID, optionally taking a row lock (SELECT ... FOR UPDATE)"""
        query = db.query(Booking).filter(Booking.id == booking_id)
        if lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def get_by_quote_id(db: Session, quote_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.quote_id == quote_id).first()

    @staticmethod
    def list_bookings(db: Session, filters: BookingFilters, params: PageParams) -> tuple[list[Booking], int]:
        """Filtered, paginated listing, soonest first"""
        query = db.query(Booking)

        if filters.customer_id:
            query = query.filter(Booking.customer_id == filters.customer_id)

        if filters.provider_id:
            query = query.filter(Booking.provider_id == filters.provider_id)

        if filters.status:
            query = query.filter(Booking.status == filters.status)

        if filters.start_date:
            query = query.filter(Booking.scheduled_time >= filters.start_date)

        if filters.end_date:
            query = query.filter(Booking.scheduled_time <= filters.end_date)

        query = query.order_by(Booking.scheduled_time.asc())
        return paginate(query, params)

    @staticmethod
    def get_upcoming(db: Session, provider_id: str, now: datetime, limit: int) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.provider_id == provider_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.scheduled_time >= now,
            )
            .order_by(Booking.scheduled_time.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def has_conflict(
        db: Session,
        provider_id: str,
        scheduled_time: datetime,
        duration: timedelta,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """
        True if an active booking of this provider overlaps the candidate slot.

        Every booking occupies [start, start + duration). Two such windows
        overlap iff existing.start < candidate.end and existing.end > candidate.start,
        which with equal durations reduces to |existing.start - candidate.start| < duration.
        """
        query = db.query(Booking.id).filter(
            Booking.provider_id == provider_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.scheduled_time < scheduled_time + duration,
            Booking.scheduled_time > scheduled_time - duration,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.first() is not None

    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        """Stage a new booking inside the caller's transaction (no commit)"""
        booking = Booking(**booking_data)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        for key, value in updates.items():
            if value is not None and hasattr(booking, key):
                setattr(booking, key, value)

        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def set_status(db: Session, booking: Booking, status: str) -> Booking:
        """Stage a status change inside the caller's transaction (no commit)"""
        booking.status = status
        db.flush()
        return booking

    @staticmethod
    def get_stats(db: Session, provider_id: Optional[str] = None) -> dict:
        """Counts per status, completed earnings and the average booking value, platform-wide or per provider"""
        query = db.query(
            func.count(Booking.id).label("total"),
            func.count(case((Booking.status == "scheduled", 1))).label("scheduled"),
            func.count(case((Booking.status == "in_progress", 1))).label("in_progress"),
            func.count(case((Booking.status == "completed", 1))).label("completed"),
            func.count(case((Booking.status == "cancelled", 1))).label("cancelled"),
            func.sum(case((Booking.status == "completed", Booking.total_amount))).label("earnings"),
            func.avg(Booking.total_amount).label("average"),
        )
        if provider_id:
            query = query.filter(Booking.provider_id == provider_id)
        row = query.one()
        return {
            "totalBookings": row.total or 0,
            "scheduledBookings": row.scheduled or 0,
            "inProgressBookings": row.in_progress or 0,
            "completedBookings": row.completed or 0,
            "cancelledBookings": row.cancelled or 0,
            "totalEarnings": float(row.earnings or 0),
            "averageBookingValue": float(row.average or 0),
        }
