"""Call service - Call records between customers and providers"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentUser
from ...errors import Conflict, Forbidden, InvalidState, NotFound
from ...models import Call, ServiceProvider, utcnow
from ...schemas import PageParams
from ...services.status_transitions import ACTIVE_CALL_STATUSES, CALL_TRANSITIONS, ensure_transition
from ..providers.repository import ProviderRepository
from ..service_requests.repository import ServiceRequestRepository
from .repository import CallRepository
from .schemas import CallCreate, CallFilters, CallStats, CallStatsWindow, CallStatusUpdate

logger = logging.getLogger(__name__)


class CallService:
    """Service layer for call business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CallRepository()
        self.providers = ProviderRepository()
        self.requests = ServiceRequestRepository()

    def _provider_for(self, user: CurrentUser) -> ServiceProvider:
        provider = self.providers.get_by_user_id(self.db, user.user_id)
        if not provider:
            raise Forbidden("A service provider profile is required")
        return provider

    def _scope(self, user: CurrentUser, filters: CallFilters) -> CallFilters:
        if user.user_type == "customer":
            return filters.model_copy(update={"customer_id": user.user_id})
        if user.user_type == "provider":
            return filters.model_copy(update={"provider_id": self._provider_for(user).id})
        return filters

    def _can_access(self, call: Call, user: CurrentUser) -> bool:
        if user.is_admin or call.customer_id == user.user_id:
            return True
        return call.provider is not None and call.provider.user_id == user.user_id

    def initiate_call(self, data: CallCreate, user: CurrentUser) -> Call:
        """Record a customer's call to a verified provider"""
        provider = self.providers.get_by_id(self.db, data.provider_id)
        if not provider:
            raise NotFound("Service provider not found")
        if not provider.is_verified:
            raise InvalidState("Provider is not verified")

        if data.service_request_id:
            service_request = self.requests.get_by_id(self.db, data.service_request_id)
            if not service_request:
                raise NotFound("Service request not found")
            if service_request.customer_id != user.user_id:
                raise Forbidden("You can only call about your own service requests")

        call = self.repo.create_call(
            self.db,
            customer_id=user.user_id,
            provider_id=provider.id,
            service_request_id=data.service_request_id,
            status="initiated",
        )
        logger.info(f"📞 Call {call.id} initiated by customer {user.user_id} to provider {provider.id}")
        return call

    def list_calls(self, user: CurrentUser, filters: CallFilters, params: PageParams) -> tuple[list[Call], int]:
        return self.repo.list_calls(self.db, self._scope(user, filters), params)

    def get_recent(self, user: CurrentUser, limit: int) -> list[Call]:
        return self.repo.get_recent(self.db, self._scope(user, CallFilters()), limit)

    def get_stats(self, user: CurrentUser, window: CallStatsWindow) -> CallStats:
        """Admins get platform-wide totals, providers their own"""
        provider_id: Optional[str] = None
        if not user.is_admin:
            provider_id = self._provider_for(user).id
        return CallStats(**self.repo.get_stats(self.db, provider_id, window.start_date, window.end_date))

    def get_call(self, call_id: str, user: CurrentUser) -> Call:
        call = self.repo.get_by_id(self.db, call_id)
        if not call:
            raise NotFound("Call not found")
        if not self._can_access(call, user):
            raise Forbidden("You do not have access to this call")
        return call

    def update_status(self, call_id: str, data: CallStatusUpdate, user: CurrentUser) -> Call:
        """Move a call one legal step and record the telephony details"""
        self.get_call(call_id, user)

        try:
            call = self.repo.get_by_id(self.db, call_id, lock=True)
            previous = call.status
            ensure_transition(CALL_TRANSITIONS, previous, data.status, "call")

            if data.external_call_sid and data.external_call_sid != call.external_call_sid:
                if self.repo.get_by_external_sid(self.db, data.external_call_sid):
                    raise Conflict("Another call already uses this call SID")

            self.repo.update_call(self.db, call, **data.model_dump(exclude_none=True))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(call)
        logger.info(f"🔁 Call {call.id}: {previous} → {call.status}")
        return call

    def end_call(self, call_id: str, user: CurrentUser) -> Call:
        """Hang up a live call; the duration defaults to the time since it was placed"""
        self.get_call(call_id, user)

        try:
            call = self.repo.get_by_id(self.db, call_id, lock=True)
            if call.status not in ACTIVE_CALL_STATUSES:
                raise InvalidState(f"Call cannot be ended in status '{call.status}'")

            duration = call.call_duration
            if duration is None:
                duration = max(0, int((utcnow() - call.created_at).total_seconds()))

            self.repo.update_call(self.db, call, status="completed", call_duration=duration)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(call)
        logger.info(f"📴 Call {call.id} ended after {call.call_duration}s")
        return call
