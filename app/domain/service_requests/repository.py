"""Service request repository - Database operations for service requests"""

from typing import Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from ...models import Booking, ServiceRequest
from ...schemas import PageParams
from ...services.status_transitions import ACTIVE_BOOKING_STATUSES
from ...shared.pagination import paginate
from .schemas import ServiceRequestFilters


class ServiceRequestRepository:
    """Repository for service request database operations"""

    @staticmethod
    def get_by_id(db: Session, request_id: str, lock: bool = False) -> Optional[ServiceRequest]:
        """Get a service request by ID, optionally taking a row lock (SELECT ... FOR UPDATE)"""
        query = db.query(ServiceRequest).filter(ServiceRequest.id == request_id)
        if lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def list_requests(
        db: Session, filters: ServiceRequestFilters, params: PageParams
    ) -> tuple[list[ServiceRequest], int]:
        """Filtered, paginated listing, newest first"""
        query = db.query(ServiceRequest)

        if filters.customer_id:
            query = query.filter(ServiceRequest.customer_id == filters.customer_id)

        if filters.status:
            query = query.filter(ServiceRequest.status == filters.status)

        if filters.service_type:
            query = query.filter(ServiceRequest.service_type == filters.service_type)

        if filters.urgency:
            query = query.filter(ServiceRequest.urgency == filters.urgency)

        if filters.city:
            query = query.filter(
                func.lower(ServiceRequest.location["city"].as_string()) == filters.city.lower()
            )

        if filters.state:
            query = query.filter(
                func.lower(ServiceRequest.location["state"].as_string()) == filters.state.lower()
            )

        if filters.search:
            term = f"%{filters.search.lower()}%"
            query = query.filter(
                or_(
                    ServiceRequest.title.ilike(term),
                    ServiceRequest.description.ilike(term),
                )
            )

        query = query.order_by(ServiceRequest.created_at.desc())
        return paginate(query, params)

    @staticmethod
    def create_request(db: Session, customer_id: str, **request_data) -> ServiceRequest:
        """Create a new service request"""
        service_request = ServiceRequest(customer_id=customer_id, **request_data)
        db.add(service_request)
        db.commit()
        db.refresh(service_request)
        return service_request

    @staticmethod
    def update_request(db: Session, service_request: ServiceRequest, **updates) -> ServiceRequest:
        """Update a service request with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(service_request, key):
                setattr(service_request, key, value)

        db.commit()
        db.refresh(service_request)
        return service_request

    @staticmethod
    def set_status(db: Session, service_request: ServiceRequest, status: str) -> ServiceRequest:
        """Stage a status change inside the caller's transaction (no commit)"""
        service_request.status = status
        db.flush()
        return service_request

    @staticmethod
    def get_active_bookings(db: Session, request_id: str) -> list[Booking]:
        """Locked scheduled/in-progress bookings of a request"""
        return (
            db.query(Booking)
            .filter(
                Booking.service_request_id == request_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
            .with_for_update()
            .populate_existing()
            .all()
        )

    @staticmethod
    def get_stats(db: Session, customer_id: Optional[str] = None) -> dict:
        """Counts per status, platform-wide or for one customer"""
        query = db.query(
            func.count(ServiceRequest.id).label("total"),
            func.count(case((ServiceRequest.status == "open", 1))).label("open"),
            func.count(case((ServiceRequest.status == "quoted", 1))).label("quoted"),
            func.count(case((ServiceRequest.status == "booked", 1))).label("booked"),
            func.count(case((ServiceRequest.status == "in_progress", 1))).label("in_progress"),
            func.count(case((ServiceRequest.status == "completed", 1))).label("completed"),
            func.count(case((ServiceRequest.status == "cancelled", 1))).label("cancelled"),
        )
        if customer_id:
            query = query.filter(ServiceRequest.customer_id == customer_id)
        row = query.one()
        return {
            "totalRequests": row.total or 0,
            "openRequests": row.open or 0,
            "quotedRequests": row.quoted or 0,
            "bookedRequests": row.booked or 0,
            "inProgressRequests": row.in_progress or 0,
            "completedRequests": row.completed or 0,
            "cancelledRequests": row.cancelled or 0,
        }

    @staticmethod
    def delete_request(db: Session, service_request: ServiceRequest) -> None:
        """Delete a service request"""
        db.delete(service_request)
        db.commit()
