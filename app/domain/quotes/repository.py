"""Quote repository - Database operations for quotes"""

from datetime import datetime
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ...models import Quote
from ...schemas import PageParams
from ...shared.pagination import paginate
from .schemas import QuoteFilters


class QuoteRepository:
    """Repository for quote database operations"""

    @staticmethod
    def get_by_id(db: Session, quote_id: str, lock: bool = False) -> Optional[Quote]:
        """Get a quote by ID, optionally taking a row lock (SELECT ... FOR UPDATE)"""
        query = db.query(Quote).filter(Quote.id == quote_id)
        if lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def get_by_request_and_provider(db: Session, request_id: str, provider_id: str) -> Optional[Quote]:
        return (
            db.query(Quote)
            .filter(Quote.service_request_id == request_id, Quote.provider_id == provider_id)
            .first()
        )

    @staticmethod
    def list_quotes(db: Session, filters: QuoteFilters, params: PageParams) -> tuple[list[Quote], int]:
        """Filtered, paginated listing, newest first"""
        query = db.query(Quote)

        if filters.status:
            query = query.filter(Quote.status == filters.status)

        if filters.service_request_id:
            query = query.filter(Quote.service_request_id == filters.service_request_id)

        if filters.provider_id:
            query = query.filter(Quote.provider_id == filters.provider_id)

        query = query.order_by(Quote.created_at.desc())
        return paginate(query, params)

    @staticmethod
    def get_siblings(db: Session, request_id: str, exclude_quote_id: str, lock: bool = False) -> list[Quote]:
        """All other quotes on the same service request"""
        query = db.query(Quote).filter(
            Quote.service_request_id == request_id,
            Quote.id != exclude_quote_id,
        )
        if lock:
            query = query.with_for_update().populate_existing()
        return query.all()

    @staticmethod
    def create_quote(db: Session, provider_id: str, **quote_data) -> Quote:
        """Create a new quote"""
        quote = Quote(provider_id=provider_id, **quote_data)
        db.add(quote)
        db.commit()
        db.refresh(quote)
        return quote

    @staticmethod
    def update_quote(db: Session, quote: Quote, **updates) -> Quote:
        """Update a quote with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(quote, key):
                setattr(quote, key, value)

        db.commit()
        db.refresh(quote)
        return quote

    @staticmethod
    def set_status(db: Session, quote: Quote, status: str) -> Quote:
        """Stage a status change inside the caller's transaction (no commit)"""
        quote.status = status
        db.flush()
        return quote

    @staticmethod
    def delete_quote(db: Session, quote: Quote) -> None:
        """Delete a quote"""
        db.delete(quote)
        db.commit()

    @staticmethod
    def find_expired_ids(db: Session, now: datetime) -> list[str]:
        """Pending quotes whose valid_until has passed"""
        rows = db.query(Quote.id).filter(Quote.status == "pending", Quote.valid_until < now).all()
        return [row.id for row in rows]

    @staticmethod
    def mark_as_expired(db: Session, quote_ids: list[str], now: datetime) -> int:
        """Flip still-pending quotes to expired; returns the number of rows changed"""
        if not quote_ids:
            return 0
        count = (
            db.query(Quote)
            .filter(Quote.id.in_(quote_ids), Quote.status == "pending")
            .update({Quote.status: "expired", Quote.updated_at: now}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def get_stats(db: Session, provider_id: Optional[str] = None) -> dict:
        """Counts per status and the average accepted amount"""
        query = db.query(
            func.count(Quote.id).label("total"),
            func.count(case((Quote.status == "pending", 1))).label("pending"),
            func.count(case((Quote.status == "accepted", 1))).label("accepted"),
            func.count(case((Quote.status == "rejected", 1))).label("rejected"),
            func.count(case((Quote.status == "expired", 1))).label("expired"),
            func.avg(case((Quote.status == "accepted", Quote.amount))).label("avg_accepted"),
        )
        if provider_id:
            query = query.filter(Quote.provider_id == provider_id)

        row = query.one()
        return {
            "totalQuotes": row.total or 0,
            "pendingQuotes": row.pending or 0,
            "acceptedQuotes": row.accepted or 0,
            "rejectedQuotes": row.rejected or 0,
            "expiredQuotes": row.expired or 0,
            "averageAmount": float(row.avg_accepted or 0),
        }
