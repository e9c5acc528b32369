from math import ceil
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")


class PaginationResult(BaseModel, Generic[T]):
    """Page-numbered result wrapper for list endpoints."""

    items: list[T] = Field(..., description="List of items in current page")
    total: int = Field(..., description="Total number of items across all pages", ge=0)
    page: int = Field(..., description="Current page number, starting at 1", ge=1)
    limit: int = Field(..., description="Maximum items per page", ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        """Number of pages needed to show all items."""
        return ceil(self.total / self.limit)


def page_offset(page: int, limit: int) -> int:
    """Number of items to skip for a 1-based page."""
    return (page - 1) * limit
