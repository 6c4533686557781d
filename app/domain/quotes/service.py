"""Quote service - Submission and acceptance guards for provider bids"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import CurrentUser
from ...errors import Conflict, Expired, Forbidden, InvalidState, NotFound, ValidationFailed
from ...models import Quote, ServiceProvider, ServiceRequest, utcnow
from ...schemas import PageParams
from ...services import quote_expiry
from ...services.status_transitions import QUOTE_TRANSITIONS, ensure_transition
from ..providers.repository import ProviderRepository
from ..service_requests.repository import ServiceRequestRepository
from ..service_requests.service import apply_request_transition
from .repository import QuoteRepository
from .schemas import QuoteCreate, QuoteFilters, QuoteStats, QuoteUpdate

logger = logging.getLogger(__name__)


def check_amount_within_budget(amount: float, service_request: ServiceRequest) -> None:
    """A quote must respect whichever budget bounds the request sets"""
    if service_request.budget_min is not None and amount < service_request.budget_min:
        raise ValidationFailed(
            f"Quote amount {amount} is below the request budget minimum {service_request.budget_min}"
        )
    if service_request.budget_max is not None and amount > service_request.budget_max:
        raise ValidationFailed(
            f"Quote amount {amount} is above the request budget maximum {service_request.budget_max}"
        )


class QuoteService:
    """Service layer for quote business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = QuoteRepository()
        self.requests = ServiceRequestRepository()
        self.providers = ProviderRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_quotes(self, filters: QuoteFilters, params: PageParams) -> tuple[list[Quote], int]:
        return self.repo.list_quotes(self.db, filters, params)

    def list_for_request(self, request_id: str, params: PageParams) -> tuple[list[Quote], int]:
        if not self.requests.get_by_id(self.db, request_id):
            raise NotFound("Service request not found")
        return self.repo.list_quotes(self.db, QuoteFilters(service_request_id=request_id), params)

    def list_own_quotes(self, user: CurrentUser, filters: QuoteFilters, params: PageParams) -> tuple[list[Quote], int]:
        provider = self._provider_for(user)
        filters = filters.model_copy(update={"provider_id": provider.id})
        return self.repo.list_quotes(self.db, filters, params)

    def get_quote(self, quote_id: str) -> Quote:
        quote = self.repo.get_by_id(self.db, quote_id)
        if not quote:
            raise NotFound("Quote not found")
        return quote

    def get_stats(self) -> QuoteStats:
        return QuoteStats(**self.repo.get_stats(self.db))

    def get_provider_stats(self, user: CurrentUser) -> QuoteStats:
        provider = self._provider_for(user)
        return QuoteStats(**self.repo.get_stats(self.db, provider.id))

    # ------------------------------------------------------------------
    # Provider operations
    # ------------------------------------------------------------------

    def _provider_for(self, user: CurrentUser) -> ServiceProvider:
        provider = self.providers.get_by_user_id(self.db, user.user_id)
        if not provider:
            raise Forbidden("A service provider profile is required")
        return provider

    def _get_owned(self, quote_id: str, user: CurrentUser) -> Quote:
        quote = self.get_quote(quote_id)
        provider = self._provider_for(user)
        if quote.provider_id != provider.id:
            raise Forbidden("You can only modify your own quotes")
        return quote

    def create_quote(self, data: QuoteCreate, user: CurrentUser) -> Quote:
        """Submit a bid; requires a verified provider and an open request"""
        provider = self._provider_for(user)
        if not provider.is_verified:
            logger.warning(f"⚠️ Unverified provider {provider.id} attempted to quote")
            raise Forbidden("Only verified providers can submit quotes")

        service_request = self.requests.get_by_id(self.db, data.service_request_id)
        if not service_request:
            raise NotFound("Service request not found")

        if service_request.status != "open":
            raise InvalidState(
                f"Quotes can only be submitted on open requests (status is '{service_request.status}')"
            )

        if data.valid_until <= utcnow():
            raise ValidationFailed("valid_until must be in the future")

        check_amount_within_budget(data.amount, service_request)

        if self.repo.get_by_request_and_provider(self.db, service_request.id, provider.id):
            raise Conflict("You have already submitted a quote for this service request")

        try:
            quote = self.repo.create_quote(
                self.db,
                provider.id,
                service_request_id=service_request.id,
                amount=data.amount,
                notes=data.notes,
                valid_until=data.valid_until,
                status="pending",
            )
        except IntegrityError as e:
            # Lost a race against a concurrent submission from the same provider
            self.db.rollback()
            raise Conflict("You have already submitted a quote for this service request") from e

        logger.info(f"💬 Quote {quote.id} submitted by provider {provider.id} on request {service_request.id}")
        return quote

    def update_quote(self, quote_id: str, data: QuoteUpdate, user: CurrentUser) -> Quote:
        """Revise a pending quote"""
        quote = self._get_owned(quote_id, user)

        if quote.status != "pending":
            raise InvalidState(f"Cannot update quote in status '{quote.status}'")

        updates = data.model_dump(exclude_none=True)

        if "valid_until" in updates and updates["valid_until"] <= utcnow():
            raise ValidationFailed("valid_until must be in the future")

        if "amount" in updates:
            check_amount_within_budget(updates["amount"], quote.service_request)

        return self.repo.update_quote(self.db, quote, **updates)

    def delete_quote(self, quote_id: str, user: CurrentUser) -> None:
        quote = self._get_owned(quote_id, user)

        if quote.status != "pending":
            raise InvalidState(f"Cannot delete quote in status '{quote.status}'")

        self.repo.delete_quote(self.db, quote)
        logger.info(f"🗑️ Quote {quote_id} withdrawn")

    # ------------------------------------------------------------------
    # Customer decision
    # ------------------------------------------------------------------

    def update_status(self, quote_id: str, new_status: str, user: CurrentUser) -> Quote:
        """
        Accept or reject a pending quote.

        Acceptance runs as one transaction holding a row lock on the parent
        request: the quote becomes accepted, every other pending quote on the
        request becomes rejected and the request moves open → quoted. Either
        all three changes commit or none do.
        """
        quote = self.get_quote(quote_id)

        expired = False
        try:
            # Lock order: request first, then quotes, for every writer
            service_request = self.requests.get_by_id(self.db, quote.service_request_id, lock=True)
            if not service_request:
                raise NotFound("Service request not found")

            if service_request.customer_id != user.user_id:
                raise Forbidden("Only the customer who posted the request can decide on its quotes")

            quote = self.repo.get_by_id(self.db, quote_id, lock=True)
            if quote.status != "pending":
                raise InvalidState(f"Cannot update quote in status '{quote.status}'")

            if utcnow() > quote.valid_until:
                # Record the expiry even though the sweep has not run yet
                self.repo.set_status(self.db, quote, "expired")
                self.db.commit()
                expired = True
            elif new_status == "accepted":
                self._accept(quote, service_request)
                self.db.commit()
            else:
                ensure_transition(QUOTE_TRANSITIONS, quote.status, "rejected", "quote")
                self.repo.set_status(self.db, quote, "rejected")
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if expired:
            logger.warning(f"⚠️ Quote {quote_id} was past valid_until; marked expired")
            raise Expired("Quote has expired")

        self.db.refresh(quote)
        logger.info(f"✅ Quote {quote.id} {new_status} by customer {user.user_id}")
        return quote

    def _accept(self, quote: Quote, service_request: ServiceRequest) -> None:
        siblings = self.repo.get_siblings(self.db, service_request.id, quote.id, lock=True)
        if any(s.status == "accepted" for s in siblings):
            raise Conflict("Another quote has already been accepted for this service request")

        ensure_transition(QUOTE_TRANSITIONS, quote.status, "accepted", "quote")
        self.repo.set_status(self.db, quote, "accepted")

        rejected = 0
        for sibling in siblings:
            if sibling.status == "pending":
                self.repo.set_status(self.db, sibling, "rejected")
                rejected += 1

        apply_request_transition(self.db, service_request, "quoted")
        logger.info(f"🤝 Quote {quote.id} accepted; {rejected} competing quote(s) rejected")

    def expire_quotes(self) -> dict:
        return quote_expiry.mark_expired_quotes(self.db)
