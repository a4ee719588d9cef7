"""
Pagination request/response shapes shared by every list endpoint.

Response:
    {
        "data": [...],
        "pagination": {page, limit, total, total_pages, has_next, has_prev}
    }
"""
import math
from typing import Any, Callable, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    pagination: PaginationMeta

    @classmethod
    def build(cls, data: List[T], total: int, params: Optional[PaginationParams] = None) -> "PaginatedResponse[T]":
        params = params or PaginationParams()
        total_pages = math.ceil(total / params.limit) if total else 0
        return cls(
            data=data,
            pagination=PaginationMeta(
                page=params.page,
                limit=params.limit,
                total=total,
                total_pages=total_pages,
                has_next=params.page < total_pages,
                has_prev=params.page > 1,
            ),
        )

    def map(self, fn: Callable[[T], Any]) -> "PaginatedResponse[Any]":
        return PaginatedResponse(data=[fn(item) for item in self.data], pagination=self.pagination)

    def to_dict(self) -> dict:
        return {
            "data": [item.to_dict() if hasattr(item, "to_dict") else item for item in self.data],
            "pagination": self.pagination.model_dump(),
        }
