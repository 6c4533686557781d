import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every endpoint"""

    success: bool = True
    message: str = ""
    data: Optional[T] = None
    error: Optional[str] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, totalPages=math.ceil(total / limit) if limit else 0)


class Paginated(BaseModel, Generic[T]):
    data: List[T]
    pagination: Pagination


class PageParams(BaseModel):
    """page/limit query parameters, converted to OFFSET/LIMIT by the repositories"""

    model_config = ConfigDict(extra="forbid")

    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
