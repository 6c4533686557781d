"""Booking service - Scheduling guards and lifecycle cascade onto service requests"""

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ... import config
from ...auth import CurrentUser
from ...errors import Conflict, Forbidden, InvalidState, NotFound, ValidationFailed
from ...models import Booking, ServiceProvider, utcnow
from ...schemas import PageParams
from ...services.status_transitions import BOOKING_TRANSITIONS, ensure_transition, request_path_to
from ..providers.repository import ProviderRepository
from ..quotes.repository import QuoteRepository
from ..service_requests.repository import ServiceRequestRepository
from ..service_requests.service import apply_request_transition
from .repository import BookingRepository
from .schemas import BookingCreate, BookingFilters, BookingStats, BookingUpdate

logger = logging.getLogger(__name__)

# Service request status each booking status drives its parent towards
REQUEST_STATUS_FOR_BOOKING = {
    "in_progress": "in_progress",
    "completed": "completed",
    "cancelled": "cancelled",
}


def booking_duration() -> timedelta:
    return timedelta(minutes=config.BOOKING_DURATION_MINUTES)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.quotes = QuoteRepository()
        self.requests = ServiceRequestRepository()
        self.providers = ProviderRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _provider_for(self, user: CurrentUser) -> ServiceProvider:
        provider = self.providers.get_by_user_id(self.db, user.user_id)
        if not provider:
            raise Forbidden("A service provider profile is required")
        return provider

    def list_bookings(
        self, user: CurrentUser, filters: BookingFilters, params: PageParams
    ) -> tuple[list[Booking], int]:
        """Customers see their own bookings, providers theirs, admins everything"""
        if user.user_type == "customer":
            filters = filters.model_copy(update={"customer_id": user.user_id})
        elif user.user_type == "provider":
            filters = filters.model_copy(update={"provider_id": self._provider_for(user).id})
        return self.repo.list_bookings(self.db, filters, params)

    def get_upcoming(self, user: CurrentUser, limit: int) -> list[Booking]:
        provider = self._provider_for(user)
        return self.repo.get_upcoming(self.db, provider.id, utcnow(), limit)

    def get_stats(self, user: CurrentUser) -> BookingStats:
        """Admins get platform-wide totals, providers their own"""
        if user.is_admin:
            return BookingStats(**self.repo.get_stats(self.db))
        provider = self._provider_for(user)
        return BookingStats(**self.repo.get_stats(self.db, provider.id))

    def _can_access(self, booking: Booking, user: CurrentUser) -> bool:
        if user.is_admin or booking.customer_id == user.user_id:
            return True
        return booking.provider is not None and booking.provider.user_id == user.user_id

    def get_booking(self, booking_id: str, user: CurrentUser) -> Booking:
        booking = self.repo.get_by_id(self.db, booking_id)
        if not booking:
            raise NotFound("Booking not found")
        if not self._can_access(booking, user):
            raise Forbidden("You do not have access to this booking")
        return booking

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_booking(self, data: BookingCreate, user: CurrentUser) -> Booking:
        """
        Book an accepted quote.

        The provider row is locked before the overlap check so two bookings
        for the same provider serialize; the insert and the request moving
        quoted → booked commit together.
        """
        if data.scheduled_time <= utcnow():
            raise ValidationFailed("scheduled_time must be in the future")

        quote = self.quotes.get_by_id(self.db, data.quote_id)
        if not quote:
            raise NotFound("Quote not found")

        try:
            service_request = self.requests.get_by_id(self.db, quote.service_request_id, lock=True)
            if not service_request:
                raise NotFound("Service request not found")

            if service_request.customer_id != user.user_id:
                raise Forbidden("Only the customer who posted the request can book its quote")

            quote = self.quotes.get_by_id(self.db, quote.id, lock=True)

            if quote.status != "accepted":
                raise InvalidState("Quote must be accepted before creating a booking")

            if self.repo.get_by_quote_id(self.db, quote.id):
                raise Conflict("A booking already exists for this quote")

            self.providers.get_by_id(self.db, quote.provider_id, lock=True)

            if self.repo.has_conflict(self.db, quote.provider_id, data.scheduled_time, booking_duration()):
                logger.warning(
                    f"⚠️ Booking conflict for provider {quote.provider_id} at {data.scheduled_time.isoformat()}"
                )
                raise Conflict("Provider has a conflicting booking at this time")

            booking = self.repo.create_booking(
                self.db,
                service_request_id=service_request.id,
                quote_id=quote.id,
                provider_id=quote.provider_id,
                customer_id=user.user_id,
                scheduled_time=data.scheduled_time,
                status="scheduled",
                total_amount=quote.amount,
                notes=data.notes,
            )
            apply_request_transition(self.db, service_request, "booked")
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("A booking already exists for this quote") from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"📅 Booking {booking.id} created for quote {quote.id} at {booking.scheduled_time.isoformat()}")
        return booking

    def update_booking(self, booking_id: str, data: BookingUpdate, user: CurrentUser) -> Booking:
        """Reschedule or edit notes while the booking is still scheduled"""
        booking = self.get_booking(booking_id, user)
        if booking.customer_id != user.user_id and not user.is_admin:
            raise Forbidden("Only the customer can change this booking")

        if booking.status != "scheduled":
            raise InvalidState(f"Cannot update booking in status '{booking.status}'")

        updates = data.model_dump(exclude_none=True)
        if "scheduled_time" in updates:
            if updates["scheduled_time"] <= utcnow():
                raise ValidationFailed("scheduled_time must be in the future")
            try:
                self.providers.get_by_id(self.db, booking.provider_id, lock=True)
                if self.repo.has_conflict(
                    self.db,
                    booking.provider_id,
                    updates["scheduled_time"],
                    booking_duration(),
                    exclude_booking_id=booking.id,
                ):
                    raise Conflict("Provider has a conflicting booking at this time")
            except Exception:
                self.db.rollback()
                raise

        booking = self.repo.update_booking(self.db, booking, **updates)
        logger.info(f"✏️ Booking {booking.id} updated")
        return booking

    def update_status(self, booking_id: str, new_status: str, user: CurrentUser) -> Booking:
        """Move a booking one legal step and cascade the change onto its request"""
        booking = self.get_booking(booking_id, user)

        try:
            service_request = self.requests.get_by_id(self.db, booking.service_request_id, lock=True)
            booking = self.repo.get_by_id(self.db, booking_id, lock=True)

            previous = booking.status
            ensure_transition(BOOKING_TRANSITIONS, previous, new_status, "booking")
            self.repo.set_status(self.db, booking, new_status)

            target = REQUEST_STATUS_FOR_BOOKING.get(new_status)
            if service_request is not None and target and service_request.status != target:
                for step in request_path_to(service_request.status, target):
                    apply_request_transition(self.db, service_request, step)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"🔁 Booking {booking.id}: {previous} → {new_status} by {user.user_type} {user.user_id}")
        return booking
