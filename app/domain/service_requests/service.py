"""Service request service - Lifecycle guard for customer job postings"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentUser
from ...errors import Forbidden, InvalidState, NotFound, ValidationFailed
from ...models import ServiceRequest
from ...schemas import PageParams
from ...services.status_transitions import (
    BOOKING_TRANSITIONS,
    SERVICE_REQUEST_TRANSITIONS,
    ensure_transition,
)
from .repository import ServiceRequestRepository
from .schemas import (
    ServiceRequestCreate,
    ServiceRequestFilters,
    ServiceRequestStats,
    ServiceRequestUpdate,
)

logger = logging.getLogger(__name__)

# Requests can only be removed before any work was committed to
DELETABLE_STATUSES = ("open", "cancelled")


def apply_request_transition(db: Session, service_request: ServiceRequest, new_status: str) -> ServiceRequest:
    """
    Move a request one legal step, staged in the caller's transaction.

    Quote acceptance and booking changes call this so the request status
    commits together with the change that caused it.
    """
    previous = service_request.status
    ensure_transition(SERVICE_REQUEST_TRANSITIONS, previous, new_status, "service request")
    ServiceRequestRepository.set_status(db, service_request, new_status)
    logger.info(f"🔁 Service request {service_request.id}: {previous} → {new_status}")
    return service_request


class ServiceRequestService:
    """Service layer for service request business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRequestRepository()

    def list_requests(
        self, filters: ServiceRequestFilters, params: PageParams
    ) -> tuple[list[ServiceRequest], int]:
        return self.repo.list_requests(self.db, filters, params)

    def list_own_requests(
        self, user: CurrentUser, filters: ServiceRequestFilters, params: PageParams
    ) -> tuple[list[ServiceRequest], int]:
        filters = filters.model_copy(update={"customer_id": user.user_id})
        return self.repo.list_requests(self.db, filters, params)

    def get_request(self, request_id: str) -> ServiceRequest:
        service_request = self.repo.get_by_id(self.db, request_id)
        if not service_request:
            raise NotFound("Service request not found")
        return service_request

    def _get_owned(self, request_id: str, user: CurrentUser, allow_admin: bool = False) -> ServiceRequest:
        service_request = self.get_request(request_id)
        if service_request.customer_id != user.user_id and not (allow_admin and user.is_admin):
            raise Forbidden("You can only modify your own service requests")
        return service_request

    def create_request(self, data: ServiceRequestCreate, user: CurrentUser) -> ServiceRequest:
        """Post a new request; every request starts open"""
        if user.user_type != "customer":
            raise Forbidden("Only customers can create service requests")

        service_request = self.repo.create_request(
            self.db,
            user.user_id,
            service_type=data.service_type,
            title=data.title,
            description=data.description,
            location=data.location.model_dump(),
            urgency=data.urgency,
            budget_min=data.budget_min,
            budget_max=data.budget_max,
            preferred_date=data.preferred_date,
            images=data.images,
            status="open",
        )
        logger.info(f"📝 Service request {service_request.id} created by customer {user.user_id}")
        return service_request

    def update_request(self, request_id: str, data: ServiceRequestUpdate, user: CurrentUser) -> ServiceRequest:
        """Edit an open request owned by the caller"""
        service_request = self._get_owned(request_id, user)

        if service_request.status != "open":
            raise InvalidState(
                f"Cannot update service request in status '{service_request.status}'"
            )

        updates = data.model_dump(exclude_none=True)

        # The budget invariant holds over the merged record, not just the patch
        budget_min = updates.get("budget_min", service_request.budget_min)
        budget_max = updates.get("budget_max", service_request.budget_max)
        if budget_min is not None and budget_max is not None and budget_min > budget_max:
            raise ValidationFailed("budget_min must be less than or equal to budget_max")

        return self.repo.update_request(self.db, service_request, **updates)

    def delete_request(self, request_id: str, user: CurrentUser) -> None:
        service_request = self._get_owned(request_id, user, allow_admin=True)

        if service_request.status not in DELETABLE_STATUSES:
            raise InvalidState(
                f"Cannot delete service request in status '{service_request.status}'"
            )

        self.repo.delete_request(self.db, service_request)
        logger.info(f"🗑️ Service request {request_id} deleted by {user.user_id}")

    def get_stats(self, customer_id: Optional[str] = None) -> ServiceRequestStats:
        return ServiceRequestStats(**self.repo.get_stats(self.db, customer_id))

    def _cancel_active_bookings(self, service_request: ServiceRequest) -> None:
        # A cancelled request must not keep holding the provider's slot
        for booking in self.repo.get_active_bookings(self.db, service_request.id):
            previous = booking.status
            ensure_transition(BOOKING_TRANSITIONS, previous, "cancelled", "booking")
            booking.status = "cancelled"
            logger.info(f"🔁 Booking {booking.id}: {previous} → cancelled with request {service_request.id}")
        self.db.flush()

    def transition(self, request_id: str, new_status: str) -> ServiceRequest:
        """
        Legal single-step status change, under a row lock.

        Cancelling also cancels the request's scheduled or in-progress
        bookings in the same transaction.
        """
        try:
            service_request = self.repo.get_by_id(self.db, request_id, lock=True)
            if not service_request:
                raise NotFound("Service request not found")

            apply_request_transition(self.db, service_request, new_status)
            if new_status == "cancelled":
                self._cancel_active_bookings(service_request)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(service_request)
        return service_request

    def cancel_request(self, request_id: str, user: CurrentUser) -> ServiceRequest:
        self._get_owned(request_id, user, allow_admin=True)
        return self.transition(request_id, "cancelled")
