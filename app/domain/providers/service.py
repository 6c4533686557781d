"""Provider service - Business logic for provider profiles and verification"""

import logging

from sqlalchemy.orm import Session

from ...auth import CurrentUser
from ...errors import Conflict, Forbidden, NotFound
from ...models import ServiceProvider
from ...schemas import PageParams
from .repository import ProviderRepository
from .schemas import ProviderCreate, ProviderFilters, ProviderUpdate, VerificationUpdate

logger = logging.getLogger(__name__)


class ProviderService:
    """Service layer for provider business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProviderRepository()

    def list_providers(self, filters: ProviderFilters, params: PageParams) -> tuple[list[ServiceProvider], int]:
        return self.repo.list_providers(self.db, filters, params)

    def get_provider(self, provider_id: str) -> ServiceProvider:
        provider = self.repo.get_by_id(self.db, provider_id)
        if not provider:
            raise NotFound("Service provider not found")
        return provider

    def get_own_profile(self, user: CurrentUser) -> ServiceProvider:
        provider = self.repo.get_by_user_id(self.db, user.user_id)
        if not provider:
            raise NotFound("Service provider profile not found")
        return provider

    def create_provider(self, data: ProviderCreate, user: CurrentUser) -> ServiceProvider:
        """Create the caller's provider profile; starts unverified"""
        if self.repo.get_by_user_id(self.db, user.user_id):
            raise Conflict("Service provider profile already exists for this user")

        provider = self.repo.create_provider(
            self.db,
            user.user_id,
            **data.model_dump(),
            verification_status="pending",
            rating=0,
            total_reviews=0,
        )
        logger.info(f"📝 Provider profile {provider.id} created for user {user.user_id}")
        return provider

    def update_provider(self, provider_id: str, data: ProviderUpdate, user: CurrentUser) -> ServiceProvider:
        provider = self.get_provider(provider_id)
        if provider.user_id != user.user_id and not user.is_admin:
            raise Forbidden("You can only update your own provider profile")

        return self.repo.update_provider(self.db, provider, **data.model_dump(exclude_none=True))

    def update_verification(self, provider_id: str, data: VerificationUpdate) -> ServiceProvider:
        """Admin decision on a provider's verification"""
        provider = self.get_provider(provider_id)
        previous = provider.verification_status
        provider = self.repo.update_provider(
            self.db, provider, verification_status=data.verification_status
        )
        logger.info(
            f"✅ Provider {provider.id} verification: {previous} → {provider.verification_status}"
        )
        return provider
