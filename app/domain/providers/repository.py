"""Provider repository - Database operations for service providers"""

from typing import Optional

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session

from ...models import ServiceProvider
from ...schemas import PageParams
from ...shared.pagination import paginate
from .schemas import ProviderFilters


class ProviderRepository:
    """Repository for service provider database operations"""

    @staticmethod
    def get_by_id(db: Session, provider_id: str, lock: bool = False) -> Optional[ServiceProvider]:
        """Get a provider by ID, optionally taking a row lock (SELECT ... FOR UPDATE)"""
        query = db.query(ServiceProvider).filter(ServiceProvider.id == provider_id)
        if lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def get_by_user_id(db: Session, user_id: str) -> Optional[ServiceProvider]:
        return db.query(ServiceProvider).filter(ServiceProvider.user_id == user_id).first()

    @staticmethod
    def list_providers(
        db: Session, filters: ProviderFilters, params: PageParams
    ) -> tuple[list[ServiceProvider], int]:
        """Filtered, paginated provider listing; filters are AND-combined"""
        query = db.query(ServiceProvider)

        if filters.verification_status:
            query = query.filter(ServiceProvider.verification_status == filters.verification_status)

        # services_offered / service_areas are JSON arrays; match on their text form
        if filters.service_type:
            query = query.filter(
                cast(ServiceProvider.services_offered, String).ilike(f'%"{filters.service_type}"%')
            )

        if filters.location:
            query = query.filter(
                cast(ServiceProvider.service_areas, String).ilike(f"%{filters.location}%")
            )

        if filters.search:
            term = f"%{filters.search.lower()}%"
            query = query.filter(
                or_(
                    ServiceProvider.business_name.ilike(term),
                    ServiceProvider.bio.ilike(term),
                )
            )

        query = query.order_by(ServiceProvider.rating.desc(), ServiceProvider.created_at.desc())
        return paginate(query, params)

    @staticmethod
    def create_provider(db: Session, user_id: str, **provider_data) -> ServiceProvider:
        """Create a new provider profile"""
        provider = ServiceProvider(user_id=user_id, **provider_data)
        db.add(provider)
        db.commit()
        db.refresh(provider)
        return provider

    @staticmethod
    def update_provider(db: Session, provider: ServiceProvider, **updates) -> ServiceProvider:
        """Update a provider with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(provider, key):
                setattr(provider, key, value)

        db.commit()
        db.refresh(provider)
        return provider
