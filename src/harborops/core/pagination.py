import math
from typing import Any

from pydantic import Field

from harborops.core.db import CamelModel



class Pagination(CamelModel):
    """Page position of a list response."""

    page: int = Field(..., description="Current page, starting at 1", ge=1)
    limit: int = Field(..., description="Maximum items per page", ge=1)
    total: int = Field(..., description="Total number of items across all pages", ge=0)
    total_pages: int = Field(..., description="Number of pages", ge=0)

    @classmethod
    def create(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))

    @property
    def has_more(self) -> bool:
        """Whether there are more pages after the current one."""
        return self.page < self.total_pages


class PaginatedList[T](CamelModel):
    """List endpoint response wrapper."""

    data: list[T] = Field(..., description="Items of the current page")
    pagination: Pagination = Field(..., description="Page position")
    groups: list[Any] | None = Field(None, description="Nested groups when groupBy was requested")
