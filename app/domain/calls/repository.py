"""Call repository - Database operations for calls"""

from datetime import datetime
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ...models import Call
from ...schemas import PageParams
from ...shared.pagination import paginate
from .schemas import CallFilters


class CallRepository:
    """Repository for call database operations"""

    @staticmethod
    def get_by_id(db: Session, call_id: str, lock: bool = False) -> Optional[Call]:
        query = db.query(Call).filter(Call.id == call_id)
        if lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def get_by_external_sid(db: Session, external_call_sid: str) -> Optional[Call]:
        return db.query(Call).filter(Call.external_call_sid == external_call_sid).first()

    @staticmethod
    def list_calls(db: Session, filters: CallFilters, params: PageParams) -> tuple[list[Call], int]:
        """Filtered, paginated listing, newest first"""
        query = db.query(Call)

        if filters.customer_id:
            query = query.filter(Call.customer_id == filters.customer_id)

        if filters.provider_id:
            query = query.filter(Call.provider_id == filters.provider_id)

        if filters.status:
            query = query.filter(Call.status == filters.status)

        query = query.order_by(Call.created_at.desc())
        return paginate(query, params)

    @staticmethod
    def get_recent(db: Session, filters: CallFilters, limit: int) -> list[Call]:
        query = db.query(Call)
        if filters.customer_id:
            query = query.filter(Call.customer_id == filters.customer_id)
        if filters.provider_id:
            query = query.filter(Call.provider_id == filters.provider_id)
        return query.order_by(Call.created_at.desc()).limit(limit).all()

    @staticmethod
    def create_call(db: Session, **call_data) -> Call:
        call = Call(**call_data)
        db.add(call)
        db.commit()
        db.refresh(call)
        return call

    @staticmethod
    def update_call(db: Session, call: Call, **updates) -> Call:
        """Stage field changes inside the caller's transaction (no commit)"""
        for key, value in updates.items():
            if value is not None and hasattr(call, key):
                setattr(call, key, value)
        db.flush()
        return call

    @staticmethod
    def get_stats(
        db: Session,
        provider_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> dict:
        """Counts per outcome and talk time in seconds"""
        query = db.query(
            func.count(Call.id).label("total"),
            func.count(case((Call.status == "completed", 1))).label("completed"),
            func.count(case((Call.status == "failed", 1))).label("failed"),
            func.count(case((Call.status == "cancelled", 1))).label("cancelled"),
            func.sum(Call.call_duration).label("duration"),
            func.avg(Call.call_duration).label("average"),
        )
        if provider_id:
            query = query.filter(Call.provider_id == provider_id)
        if start_date:
            query = query.filter(Call.created_at >= start_date)
        if end_date:
            query = query.filter(Call.created_at <= end_date)

        row = query.one()
        return {
            "totalCalls": row.total or 0,
            "completedCalls": row.completed or 0,
            "failedCalls": row.failed or 0,
            "cancelledCalls": row.cancelled or 0,
            "totalDuration": int(row.duration or 0),
            "averageDuration": float(row.average or 0),
        }
