"""Pagination helpers shared by every repository and router"""

from fastapi import Query
from sqlalchemy.orm import Query as OrmQuery

from ..config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..schemas import PageParams


def page_params(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def paginate(query: OrmQuery, params: PageParams) -> tuple[list, int]:
    """Run COUNT and OFFSET/LIMIT for an ordered query. Returns (rows, total)."""
    total = query.order_by(None).count()
    rows = query.offset(params.offset).limit(params.limit).all()
    return rows, total
