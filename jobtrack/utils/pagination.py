"""
Pagination utilities for consistent offset-based pagination across the API.
"""

from pydantic import BaseModel
import math


def calculate_offset(page: int, limit: int) -> int:
    """
    Calculate database offset from page number and limit.

    Args:
        page: Page number (1-indexed)
        limit: Number of items per page

    Returns:
        Database offset (0-indexed)

    Example:
        >>> calculate_offset(1, 20)
        0
        >>> calculate_offset(3, 10)
        20
    """
    if page < 1:
        raise ValueError("Page must be >= 1")
    if limit < 1:
        raise ValueError("Limit must be >= 1")

    return (page - 1) * limit


def calculate_total_pages(total: int, limit: int) -> int:
    """
    Calculate total number of pages given total items and page size.

    Example:
        >>> calculate_total_pages(95, 20)
        5
        >>> calculate_total_pages(0, 20)
        0
    """
    if total < 0:
        raise ValueError("Total must be >= 0")
    if limit < 1:
        raise ValueError("Limit must be >= 1")

    if total == 0:
        return 0

    return math.ceil(total / limit)


class PaginationMeta(BaseModel):
    """
    Metadata for paginated responses.

    Attributes:
        page: Current page number
        limit: Items per page
        total: Total number of items
        total_pages: Total number of pages
        has_next: Whether there is a next page
        has_previous: Whether there is a previous page
    """
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        """Create pagination metadata from the request page/limit and total count."""
        total_pages = calculate_total_pages(total, limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1
        )
